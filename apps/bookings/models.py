"""Booking models for the apartment scheduler."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import StayPeriod
from shared.infrastructure.identifiers import new_identifier

from .domain.entities import Assignment, Booking as BookingEntity, ToApartment, ToTemporary, assignment_from_fields


class Booking(models.Model):
    """Бронирование гостя; может быть не распределено по квартирам."""

    id = models.CharField(primary_key=True, max_length=64, default=new_identifier, editable=False)
    guest_name = models.CharField(_("guest name"), max_length=200)
    check_in = models.DateTimeField(_("check-in"))
    check_out = models.DateTimeField(_("check-out"))
    apartment = models.ForeignKey(
        "apartments.Apartment",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    temporary_apartment = models.CharField(
        _("temporary apartment"),
        max_length=200,
        null=True,
        blank=True,
        help_text=_("External accommodation outside the scheduler."),
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("booking")
        verbose_name_plural = _("bookings")
        ordering = ["-check_in", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out__gt=models.F("check_in")),
                name="booking_valid_stay",
            ),
            models.CheckConstraint(
                condition=models.Q(apartment__isnull=True) | models.Q(temporary_apartment__isnull=True),
                name="booking_single_assignment",
            ),
        ]
        indexes = [
            models.Index(fields=["apartment", "check_in", "check_out"], name="booking_apartment_stay_idx"),
            models.Index(fields=["check_in"], name="booking_check_in_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.guest_name} {self.check_in:%Y-%m-%d} - {self.check_out:%Y-%m-%d}"

    def clean(self) -> None:
        if self.check_in and self.check_out and self.check_out <= self.check_in:
            raise ValidationError(_("Check-out must be after check-in."))
        if self.apartment_id and self.temporary_apartment:
            raise ValidationError(_("A booking cannot have both an apartment and a temporary apartment."))

    @property
    def assignment(self) -> Assignment:
        return assignment_from_fields(self.apartment_id, self.temporary_apartment)

    def apply_assignment(self, assignment: Assignment) -> None:
        """Copy a domain assignment into the two storage columns."""
        self.apartment_id = assignment.apartment_id if isinstance(assignment, ToApartment) else None
        self.temporary_apartment = assignment.label if isinstance(assignment, ToTemporary) else None

    def to_domain(self) -> BookingEntity:
        return BookingEntity(
            id=self.pk,
            guest_name=self.guest_name,
            stay=StayPeriod(self.check_in, self.check_out),
            assignment=self.assignment,
        )

    def snapshot(self) -> dict:
        return {
            "guest_name": self.guest_name,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "apartment_id": self.apartment_id,
            "temporary_apartment": self.temporary_apartment,
        }
