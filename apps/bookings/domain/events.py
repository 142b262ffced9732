"""
Booking Domain Events

Events that represent changes of a booking's assignment. They are
published after the transaction commits; the audit app records them.
"""

from dataclasses import dataclass, field
from typing import List

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingAssigned(DomainEvent):
    """
    Event: A booking was put into an apartment or a temporary accommodation

    Exactly one of apartment_id / temporary_apartment is set.
    """
    booking_id: str
    apartment_id: str | None = None
    temporary_apartment: str | None = None
    previous_apartment_id: str | None = None
    previous_temporary_apartment: str | None = None


@dataclass(kw_only=True)
class BookingUnassigned(DomainEvent):
    """Event: A booking went back to the unassigned queue"""
    booking_id: str
    previous_apartment_id: str | None = None
    previous_temporary_apartment: str | None = None


@dataclass(kw_only=True)
class AutoAssignmentCompleted(DomainEvent):
    """
    Event: A batch auto-assignment run was committed

    Individual assignments also raise BookingAssigned; this event carries
    the batch summary.
    """
    assigned_count: int
    failed_count: int
    failed_booking_ids: List[str] = field(default_factory=list)
    cancelled: bool = False
