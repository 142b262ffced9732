"""Django-backed repositories for the scheduling domain.

They translate between ORM rows and the domain entities and take the row
locks (SELECT ... FOR UPDATE) the assignment use cases rely on.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.apartments.models import Apartment as ApartmentModel
from shared.domain.exceptions import NotFound

from .domain.entities import Apartment, Booking
from .models import Booking as BookingModel

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class DjangoApartmentRepository:
    def list(self, *, lock: bool = False) -> List[Apartment]:
        """All apartments in display order; ``lock`` holds every row until commit."""
        queryset = ApartmentModel.objects.order_by("name", "created_at")
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        return [row.to_domain() for row in queryset]

    def get(self, apartment_id: str, *, lock: bool = False) -> Apartment:
        queryset = ApartmentModel.objects.filter(pk=apartment_id)
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        row = queryset.first()
        if row is None:
            raise NotFound("Apartment", apartment_id)
        return row.to_domain()


class DjangoBookingRepository:
    def list(self, *, apartment_id: str | None = None, ids: Iterable[str] | None = None) -> List[Booking]:
        queryset = BookingModel.objects.order_by("check_in", "created_at")
        if apartment_id is not None:
            queryset = queryset.filter(apartment_id=apartment_id)
        if ids is not None:
            queryset = queryset.filter(pk__in=list(ids))
        return [row.to_domain() for row in queryset]

    def get(self, booking_id: str, *, lock: bool = False) -> Booking:
        queryset = BookingModel.objects.filter(pk=booking_id)
        if lock:
            queryset = _lock_queryset_if_possible(queryset)
        row = queryset.first()
        if row is None:
            raise NotFound("Booking", booking_id)
        return row.to_domain()

    def save_assignment(self, booking: Booking) -> None:
        """Persist the assignment columns of an existing booking."""
        row = BookingModel(pk=booking.id)
        row.apply_assignment(booking.assignment)
        updated = BookingModel.objects.filter(pk=booking.id).update(
            apartment_id=row.apartment_id,
            temporary_apartment=row.temporary_apartment,
        )
        if not updated:
            raise NotFound("Booking", booking.id)
        logger.debug("Saved assignment of booking %s: %s", booking.id, booking.assignment)
