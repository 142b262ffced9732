"""User domain models for the booking manager.

Three staff roles exist: viewers read, managers maintain apartments and
bookings, admins additionally manage users, the audit log and backups.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CustomUserManager(BaseUserManager):
    """Manager creating users by username with a staff role."""

    use_in_migrations = True

    def _create_user(self, username: str, email: str, password: str | None, **extra_fields: Any):
        if not username:
            raise ValueError("Username is required.")
        if not email:
            raise ValueError("Email is required.")
        email = self.normalize_email(email)
        username = self.model.normalize_username(username)

        user = self.model(username=username, email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, username: str, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.RoleChoices.VIEWER)
        return self._create_user(username, email, password, **extra_fields)

    def create_superuser(self, username: str, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.RoleChoices.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(username, email, password, **extra_fields)


class CustomUser(AbstractUser):
    """Staff member with a role in the viewer < manager < admin hierarchy."""

    class RoleChoices(models.TextChoices):
        VIEWER = "viewer", _("Viewer")
        MANAGER = "manager", _("Manager")
        ADMIN = "admin", _("Admin")

    ROLE_LEVELS = {
        RoleChoices.VIEWER: 1,
        RoleChoices.MANAGER: 2,
        RoleChoices.ADMIN: 3,
    }

    email = models.EmailField(_("email"), unique=True)
    role = models.CharField(
        _("role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.VIEWER,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = ["email"]

    class Meta:
        verbose_name = _("user")
        verbose_name_plural = _("users")
        ordering = ["username"]

    def __str__(self) -> str:
        return f"{self.username} ({self.get_role_display()})"

    @classmethod
    def role_level(cls, role: str | None) -> int:
        return cls.ROLE_LEVELS.get(role, 0)

    def has_role(self, required: str) -> bool:
        """True when the user's role is at least ``required``."""
        if self.is_superuser:
            return True
        return self.role_level(self.role) >= self.role_level(required)

    def is_admin(self) -> bool:
        return self.has_role(self.RoleChoices.ADMIN)


# Alias used by tests and imports that do not go through get_user_model()
User = CustomUser
