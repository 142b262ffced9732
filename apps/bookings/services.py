"""Domain services for booking workflows."""

from __future__ import annotations

from datetime import datetime

from shared.domain.value_objects import StayPeriod

from .domain.availability import AvailabilityIndex
from .domain.entities import Booking
from .repositories import DjangoApartmentRepository, DjangoBookingRepository


def ensure_apartment_is_available(
    apartment_id: str,
    check_in: datetime,
    check_out: datetime,
    *,
    exclude_booking_id: str | None = None,
) -> None:
    """Ensure the apartment is free for [check_in, check_out).

    Must run inside ``transaction.atomic()``: the apartment row is locked
    for the rest of the transaction so a concurrent writer to the same
    apartment waits until this one commits.

    Raises InvalidInterval, NotFound or AssignmentConflict.
    """
    stay = StayPeriod(check_in, check_out)
    apartment = DjangoApartmentRepository().get(apartment_id, lock=True)
    bookings = DjangoBookingRepository().list(apartment_id=apartment.id)

    candidate = Booking(guest_name="candidate", stay=stay)
    if exclude_booking_id is not None:
        candidate.id = exclude_booking_id
    AvailabilityIndex([apartment], bookings).ensure_assignable(candidate, apartment.id)
