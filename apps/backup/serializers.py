"""Serializers for backup endpoints."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import BackupMetadata


class BackupMetadataSerializer(serializers.ModelSerializer):
    created_by_username = serializers.CharField(source="created_by.username", read_only=True, default=None)

    class Meta:
        model = BackupMetadata
        fields = ["id", "filename", "kind", "file_size", "created_by", "created_by_username", "created_at"]
        read_only_fields = fields


class BackupImportSerializer(serializers.Serializer):
    backup = serializers.FileField()
    replace = serializers.BooleanField(required=False, default=False)

    def validate_backup(self, value):
        content_type = getattr(value, "content_type", "") or ""
        if content_type != "application/json" and not value.name.lower().endswith(".json"):
            raise serializers.ValidationError("Only JSON files are allowed.")
        return value
