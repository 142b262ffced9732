"""Bookings app: the scheduling core and its HTTP surface.

``domain/`` holds the pure scheduling logic (availability, auto-assignment,
best dates); ``application/`` wraps it in transactional use cases.
"""
