"""Serializers for authentication flows (login, logout, password change)."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .serializers import MIN_PASSWORD_LENGTH

User = get_user_model()


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        username = attrs.get("username", "")
        password = attrs.get("password", "")

        # Only active accounts may sign in
        try:
            user = User.objects.get(username=username, is_active=True)
        except User.DoesNotExist:
            raise serializers.ValidationError({"non_field_errors": ["Invalid username or password."]})

        if not user.check_password(password):
            raise serializers.ValidationError({"non_field_errors": ["Invalid username or password."]})

        attrs["user"] = user
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(min_length=MIN_PASSWORD_LENGTH, write_only=True)

    def validate_current_password(self, value: str) -> str:
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError("Current password is incorrect.")
        return value
