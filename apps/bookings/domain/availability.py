"""
Availability Index

Read-only projection over a snapshot of apartments and bookings. It is the
single place where the no-overlap invariant is checked:

    for any apartment, no two bookings assigned to it have overlapping
    [check_in, check_out) periods

Manual assignment, booking create/update and the batch auto-assigner all
ask this index before writing. Bookings without an apartment, or housed in
a temporary apartment, never block anything.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from shared.domain.value_objects import StayPeriod

from apps.bookings.domain.entities import Apartment, Booking, ToApartment
from apps.bookings.domain.errors import AssignmentConflict, NotFound


def favorites_first(apartments: Iterable[Apartment]) -> List[Apartment]:
    """Stable partition: favourites, then the rest, each in input order"""
    apartments = list(apartments)
    return (
        [a for a in apartments if a.is_favorite]
        + [a for a in apartments if not a.is_favorite]
    )


class AvailabilityIndex:
    """
    Availability over one snapshot

    Usage:
        index = AvailabilityIndex(apartments, bookings)
        free = index.available_apartments(check_in, check_out)
        index.ensure_assignable(booking, apartment_id)   # raises on conflict

    The index never writes anywhere. record_assignment() only updates the
    snapshot so that later questions in the same batch see earlier answers.
    """

    def __init__(self, apartments: Sequence[Apartment], bookings: Iterable[Booking]):
        self._apartments: List[Apartment] = list(apartments)
        self._apartments_by_id: Dict[str, Apartment] = {a.id: a for a in self._apartments}
        self._bookings: Dict[str, Booking] = {b.id: b for b in bookings}

    @property
    def apartments(self) -> List[Apartment]:
        return list(self._apartments)

    @property
    def bookings(self) -> List[Booking]:
        return list(self._bookings.values())

    def get_apartment(self, apartment_id: str) -> Apartment:
        try:
            return self._apartments_by_id[apartment_id]
        except KeyError:
            raise NotFound("Apartment", apartment_id) from None

    def bookings_for_apartment(self, apartment_id: str) -> List[Booking]:
        return [b for b in self._bookings.values() if b.apartment_id == apartment_id]

    def conflicts(
        self,
        apartment_id: str,
        stay: StayPeriod,
        exclude_booking_id: str | None = None,
    ) -> List[Booking]:
        """Bookings on the apartment whose stay overlaps the given one"""
        return [
            b for b in self.bookings_for_apartment(apartment_id)
            if b.id != exclude_booking_id and b.stay.overlaps_with(stay)
        ]

    def available_apartments(self, start: datetime, end: datetime) -> List[Apartment]:
        """
        Apartments free for [start, end), favourites first

        Raises InvalidInterval when end <= start.
        """
        requested = StayPeriod(start, end)
        busy = {
            b.apartment_id for b in self._bookings.values()
            if b.apartment_id is not None and b.stay.overlaps_with(requested)
        }
        return favorites_first(a for a in self._apartments if a.id not in busy)

    def occupancy_for_day(self, day: datetime, apartment_id: str | None = None) -> int:
        """
        Number of bookings whose stay contains the instant `day`

        A check-out day is not occupied (check_in <= day < check_out).
        Every booking counts unless an apartment is given.
        """
        return sum(
            1 for b in self._bookings.values()
            if (apartment_id is None or b.apartment_id == apartment_id) and b.stay.contains(day)
        )

    def ensure_assignable(self, booking: Booking, apartment_id: str) -> Apartment:
        """
        Check that the booking may move into the apartment

        Raises:
            NotFound: the apartment is not in the snapshot
            AssignmentConflict: another booking on the apartment overlaps
        """
        apartment = self.get_apartment(apartment_id)
        clashes = self.conflicts(apartment_id, booking.stay, exclude_booking_id=booking.id)
        if clashes:
            raise AssignmentConflict(booking.id, apartment_id, clashes[0])
        return apartment

    def record_assignment(self, booking: Booking, apartment_id: str) -> Booking:
        """Reflect an accepted assignment in the snapshot and return the copy stored"""
        assigned = replace(booking, assignment=ToApartment(apartment_id))
        self._bookings[booking.id] = assigned
        return assigned


def available_apartments(
    apartments: Sequence[Apartment],
    bookings: Iterable[Booking],
    start: datetime,
    end: datetime,
) -> List[Apartment]:
    """Apartments free for [start, end), favourites first"""
    return AvailabilityIndex(apartments, bookings).available_apartments(start, end)


def occupancy_for_day(
    bookings: Iterable[Booking],
    day: datetime,
    apartment_id: str | None = None,
) -> int:
    """Bookings whose stay contains `day` (optionally on one apartment)"""
    return AvailabilityIndex((), bookings).occupancy_for_day(day, apartment_id)
