"""Serializers for the audit log API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "user",
            "username",
            "action",
            "table_name",
            "record_id",
            "old_values",
            "new_values",
            "timestamp",
        ]
        read_only_fields = fields
