"""Serializers for the booking domain."""

from __future__ import annotations

from typing import Any

from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from shared.domain.exceptions import InvalidInterval
from shared.domain.value_objects import StayPeriod

from .models import Booking
from .services import ensure_apartment_is_available


class BookingSerializer(serializers.ModelSerializer):
    """Бронь в ответах API."""

    apartment_id = serializers.CharField(read_only=True, allow_null=True)
    apartment_name = serializers.CharField(source="apartment.name", read_only=True, default=None)
    is_unassigned = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "guest_name",
            "check_in",
            "check_out",
            "apartment_id",
            "apartment_name",
            "temporary_apartment",
            "is_unassigned",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_is_unassigned(self, obj: Booking) -> bool:
        return not obj.apartment_id and not obj.temporary_apartment


class BookingWriteSerializer(serializers.ModelSerializer):
    """Создание и изменение брони.

    A booking placed in an apartment goes through the same overlap check
    as a manual assignment, under the apartment row lock. ``NotFound`` and
    ``AssignmentConflict`` propagate to the view.
    """

    apartment_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    temporary_apartment = serializers.CharField(
        required=False, allow_null=True, allow_blank=True, max_length=200
    )

    class Meta:
        model = Booking
        fields = ["guest_name", "check_in", "check_out", "apartment_id", "temporary_apartment"]

    def validate_guest_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Guest name is required.")
        return value

    def validate_apartment_id(self, value: str | None) -> str | None:
        return value or None

    def validate_temporary_apartment(self, value: str | None) -> str | None:
        value = (value or "").strip()
        return value or None

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        instance = self.instance
        check_in = attrs.get("check_in", getattr(instance, "check_in", None))
        check_out = attrs.get("check_out", getattr(instance, "check_out", None))
        try:
            StayPeriod(check_in, check_out)
        except InvalidInterval:
            raise serializers.ValidationError({"check_out": "Check-out must be after check-in."})

        apartment_id = attrs.get("apartment_id", getattr(instance, "apartment_id", None))
        temporary = attrs.get("temporary_apartment", getattr(instance, "temporary_apartment", None))
        # Setting one side on update clears the other
        if "apartment_id" in attrs and attrs["apartment_id"] and "temporary_apartment" not in attrs:
            temporary = None
        if "temporary_apartment" in attrs and attrs["temporary_apartment"] and "apartment_id" not in attrs:
            apartment_id = None
        if apartment_id and temporary:
            raise serializers.ValidationError(
                {"non_field_errors": ["A booking cannot have both an apartment and a temporary apartment."]}
            )
        attrs["apartment_id"] = apartment_id
        attrs["temporary_apartment"] = temporary
        attrs["check_in"] = check_in
        attrs["check_out"] = check_out
        return attrs

    def create(self, validated_data: dict[str, Any]) -> Booking:  # type: ignore
        with transaction.atomic():
            if validated_data.get("apartment_id"):
                ensure_apartment_is_available(
                    validated_data["apartment_id"],
                    validated_data["check_in"],
                    validated_data["check_out"],
                )
            return Booking.objects.create(**validated_data)

    def update(self, instance: Booking, validated_data: dict[str, Any]) -> Booking:  # type: ignore
        with transaction.atomic():
            if validated_data.get("apartment_id"):
                ensure_apartment_is_available(
                    validated_data["apartment_id"],
                    validated_data["check_in"],
                    validated_data["check_out"],
                    exclude_booking_id=instance.pk,
                )
            for field, value in validated_data.items():
                setattr(instance, field, value)
            instance.save()
        return instance


class StayQuerySerializer(serializers.Serializer):
    check_in = serializers.DateTimeField()
    check_out = serializers.DateTimeField()


class BatchBookingSerializer(serializers.Serializer):
    bookings = serializers.ListField(child=serializers.DictField(), allow_empty=False)


class AssignSerializer(serializers.Serializer):
    apartment_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    temporary_apartment = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        apartment_id = attrs.get("apartment_id") or None
        temporary = (attrs.get("temporary_apartment") or "").strip() or None
        if bool(apartment_id) == bool(temporary):
            raise serializers.ValidationError(
                {"non_field_errors": ["Provide either apartment_id or temporary_apartment."]}
            )
        return {"apartment_id": apartment_id, "temporary_apartment": temporary}


class AutoAssignSerializer(serializers.Serializer):
    booking_ids = serializers.ListField(child=serializers.CharField(), required=False, allow_null=True)
    run_async = serializers.BooleanField(required=False, default=False)


class MonthQuerySerializer(serializers.Serializer):
    month = serializers.RegexField(r"^\d{4}-(0[1-9]|1[0-2])$")

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        year, month = attrs["month"].split("-")
        attrs["year"] = int(year)
        attrs["month_number"] = int(month)
        return attrs


class BestDatesQuerySerializer(MonthQuerySerializer):
    stay_days = serializers.IntegerField(required=False, default=3)


