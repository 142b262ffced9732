"""Serializers for the apartments API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.domain.entities import normalize_properties

from .models import Apartment


class ApartmentSerializer(serializers.ModelSerializer):
    properties = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=list,
    )
    booking_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Apartment
        fields = [
            "id",
            "name",
            "properties",
            "is_favorite",
            "booking_count",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name cannot be empty.")
        return value

    def validate_properties(self, value):
        return list(normalize_properties(value))
