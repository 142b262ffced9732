"""Role based permission classes.

The hierarchy is viewer < manager < admin; a permission requiring a role
lets every higher role through as well.
"""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def user_has_role(user, role: str) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "has_role") and user.has_role(role)


class HasRole(permissions.BasePermission):
    """Require at least ``required_role`` for every request."""

    required_role = "viewer"
    message = "Insufficient privileges."

    def has_permission(self, request, view) -> bool:  # type: ignore
        return user_has_role(request.user, self.required_role)


class IsManager(HasRole):
    required_role = "manager"


class IsAdmin(HasRole):
    required_role = "admin"


class IsManagerOrReadOnly(permissions.BasePermission):
    """Any signed-in user reads; writes need the manager role."""

    message = "Insufficient privileges."

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return user_has_role(request.user, "viewer")
        return user_has_role(request.user, "manager")
