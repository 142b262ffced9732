"""Users app package.

Staff accounts of the booking manager. Every user has one of three roles
ordered viewer < manager < admin; permissions compare against that order.
Use ``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout
the project.
"""
