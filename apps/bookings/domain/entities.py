"""
Scheduling Domain Entities

Core entities of the booking scheduler:
- Apartment: a managed unit that bookings can be assigned to
- Booking: aggregate root carrying a stay period and an assignment
- Assignment: tagged variant Unassigned | ToApartment | ToTemporary
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Tuple, Union

from shared.domain.base import Aggregate, Entity
from shared.domain.value_objects import StayPeriod


# ===== Assignment variant =====

@dataclass(frozen=True)
class Unassigned:
    """Booking waits for an apartment"""

    def __str__(self):
        return "unassigned"


@dataclass(frozen=True)
class ToApartment:
    """Booking occupies a managed apartment and takes part in overlap checks"""
    apartment_id: str

    def __post_init__(self):
        if not self.apartment_id:
            raise ValueError("Apartment id is required")

    def __str__(self):
        return f"apartment {self.apartment_id}"


@dataclass(frozen=True)
class ToTemporary:
    """Booking is housed in an external accommodation outside the scheduler"""
    label: str

    def __post_init__(self):
        if not self.label or not self.label.strip():
            raise ValueError("Temporary apartment label cannot be empty")
        object.__setattr__(self, 'label', self.label.strip())

    def __str__(self):
        return f"temporary '{self.label}'"


Assignment = Union[Unassigned, ToApartment, ToTemporary]

UNASSIGNED = Unassigned()


def assignment_from_fields(apartment_id: str | None, temporary_apartment: str | None) -> Assignment:
    """
    Build an assignment from the two storage columns

    Raises ValueError when both are set: a booking can never be in an
    apartment and a temporary accommodation at once.
    """
    if apartment_id and temporary_apartment:
        raise ValueError("A booking cannot have both an apartment and a temporary apartment")
    if apartment_id:
        return ToApartment(apartment_id)
    if temporary_apartment:
        return ToTemporary(temporary_apartment)
    return UNASSIGNED


# ===== Entities =====

def normalize_properties(properties: Iterable[str]) -> Tuple[str, ...]:
    """Strip tags and drop blanks and duplicates, keeping first-seen order

    A bare string is a single tag.
    """
    if isinstance(properties, str):
        properties = [properties]
    seen = []
    for tag in properties or ():
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


@dataclass(kw_only=True, eq=False)
class Apartment(Entity):
    """
    Apartment entity

    Only the attributes the scheduler needs: identity, a display name,
    amenity tags and the favourite flag used for ordering.
    """
    name: str
    properties: Tuple[str, ...] = ()
    is_favorite: bool = False

    def __post_init__(self):
        self.properties = normalize_properties(self.properties)

    def __str__(self):
        star = " *" if self.is_favorite else ""
        return f"{self.name}{star}"


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - Stay period is valid (check_in < check_out), enforced by StayPeriod
    - Guest name is not blank
    - apartment_id and temporary_apartment are never both set; the
      assignment is a single tagged value

    State transitions:
    - Unassigned -> ToApartment | ToTemporary
    - ToApartment | ToTemporary -> Unassigned (explicit unassign)
    - ToApartment <-> ToTemporary (the new state replaces the old one)
    """
    guest_name: str
    stay: StayPeriod
    assignment: Assignment = UNASSIGNED

    def __post_init__(self):
        if not self.guest_name or not self.guest_name.strip():
            raise ValueError("Guest name is required")
        self.guest_name = self.guest_name.strip()

    @property
    def check_in(self) -> datetime:
        return self.stay.check_in

    @property
    def check_out(self) -> datetime:
        return self.stay.check_out

    @property
    def apartment_id(self) -> str | None:
        if isinstance(self.assignment, ToApartment):
            return self.assignment.apartment_id
        return None

    @property
    def temporary_apartment(self) -> str | None:
        if isinstance(self.assignment, ToTemporary):
            return self.assignment.label
        return None

    @property
    def is_unassigned(self) -> bool:
        return isinstance(self.assignment, Unassigned)

    def assign_to_apartment(self, apartment_id: str, actor_id: int | None = None):
        """
        Assign to a managed apartment

        The caller must have run the overlap check (AvailabilityIndex)
        against a snapshot taken under the apartment lock.
        Events: BookingAssigned
        """
        self._transition(ToApartment(apartment_id), actor_id)

    def assign_temporary(self, label: str, actor_id: int | None = None):
        """
        Assign to an external accommodation

        Clears any apartment assignment; no overlap check applies.
        Events: BookingAssigned
        """
        self._transition(ToTemporary(label), actor_id)

    def unassign(self, actor_id: int | None = None):
        """
        Return the booking to the unassigned queue

        Events: BookingUnassigned
        """
        if self.is_unassigned:
            raise ValueError(f"Booking {self.id} is already unassigned")

        from apps.bookings.domain.events import BookingUnassigned

        previous = self.assignment
        self.assignment = UNASSIGNED
        self.add_event(BookingUnassigned(
            aggregate_id=self.id,
            actor_id=actor_id,
            booking_id=self.id,
            previous_apartment_id=getattr(previous, 'apartment_id', None),
            previous_temporary_apartment=getattr(previous, 'label', None),
        ))

    def _transition(self, target: Assignment, actor_id: int | None):
        if target == self.assignment:
            return

        from apps.bookings.domain.events import BookingAssigned

        previous = self.assignment
        self.assignment = target
        self.add_event(BookingAssigned(
            aggregate_id=self.id,
            actor_id=actor_id,
            booking_id=self.id,
            apartment_id=self.apartment_id,
            temporary_apartment=self.temporary_apartment,
            previous_apartment_id=getattr(previous, 'apartment_id', None),
            previous_temporary_apartment=getattr(previous, 'label', None),
        ))

    def __str__(self):
        return f"Booking {self.guest_name} {self.stay} ({self.assignment})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, guest_name={self.guest_name!r}, "
            f"stay={self.stay!r}, assignment={self.assignment!r})"
        )
