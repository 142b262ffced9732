"""
Auto Assignment

Greedy batch assignment of unassigned bookings to apartments.

Algorithm:
1. Queue the unassigned bookings by check-in (stable: ties keep input order)
2. For each booking ask the AvailabilityIndex for free apartments, using a
   snapshot that already contains the assignments decided earlier in the
   same batch
3. Take the first apartment (favourites come first) or record a failure

The assigner only produces a plan; committing it is the job of the
application layer. A booking that cannot be placed is a normal outcome,
never an error, and earlier decisions are kept.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence
import logging

from apps.bookings.domain.availability import AvailabilityIndex
from apps.bookings.domain.entities import Apartment, Booking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentDecision:
    booking_id: str
    apartment_id: str


@dataclass
class AssignmentPlan:
    """Result of one auto-assignment run"""
    assignments: List[AssignmentDecision] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def assigned_count(self) -> int:
        return len(self.assignments)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def apartment_for(self, booking_id: str) -> str | None:
        return next(
            (d.apartment_id for d in self.assignments if d.booking_id == booking_id),
            None,
        )

    def to_dict(self) -> dict:
        return {
            'assigned_count': self.assigned_count,
            'failed_count': self.failed_count,
            'assignments': [
                {'booking_id': d.booking_id, 'apartment_id': d.apartment_id}
                for d in self.assignments
            ],
            'failed': list(self.failed),
            'cancelled': self.cancelled,
        }


class AutoAssigner:
    """
    Greedy auto-assigner

    Usage:
        plan = AutoAssigner(apartments, bookings).plan()
        for decision in plan.assignments:
            ...  # persist decision.booking_id -> decision.apartment_id
    """

    def __init__(self, apartments: Sequence[Apartment], bookings: Iterable[Booking]):
        self.index = AvailabilityIndex(apartments, bookings)

    def queue(self, bookings: Iterable[Booking] | None = None) -> List[Booking]:
        """Unassigned bookings ordered by check-in; sorted() is stable

        A booking listed more than once is queued once, at its first position.
        """
        candidates = self.index.bookings if bookings is None else list(bookings)
        pending = []
        seen = set()
        for booking in candidates:
            if booking.id in seen:
                continue
            seen.add(booking.id)
            if booking.is_unassigned:
                pending.append(booking)
            else:
                logger.debug("Skipping booking %s: already %s", booking.id, booking.assignment)
        return sorted(pending, key=lambda b: b.check_in)

    def plan(
        self,
        bookings: Iterable[Booking] | None = None,
        should_continue: Callable[[], bool] | None = None,
    ) -> AssignmentPlan:
        """
        Decide an apartment for every queued booking

        `bookings` narrows the queue (default: every unassigned booking in
        the snapshot). `should_continue` is polled before each booking;
        returning False stops the run and keeps the decisions made so far.
        """
        plan = AssignmentPlan()
        queue = self.queue(bookings)

        for booking in queue:
            if should_continue is not None and not should_continue():
                plan.cancelled = True
                logger.info(
                    "Auto-assignment stopped after %d of %d bookings",
                    plan.assigned_count + plan.failed_count, len(queue),
                )
                break

            free = self.index.available_apartments(booking.check_in, booking.check_out)
            if not free:
                plan.failed.append(booking.id)
                logger.debug("No apartment free for booking %s (%s)", booking.id, booking.stay)
                continue

            target = free[0]
            self.index.record_assignment(booking, target.id)
            plan.assignments.append(AssignmentDecision(booking.id, target.id))

        logger.info(
            "Auto-assignment planned: %d assigned, %d failed",
            plan.assigned_count, plan.failed_count,
        )
        return plan


def plan_auto_assignment(
    apartments: Sequence[Apartment],
    bookings: Iterable[Booking],
    queue: Iterable[Booking] | None = None,
) -> AssignmentPlan:
    """Convenience wrapper around AutoAssigner(...).plan()"""
    return AutoAssigner(apartments, bookings).plan(queue)


def check_manual_assignment(
    apartments: Sequence[Apartment],
    bookings: Iterable[Booking],
    booking: Booking,
    apartment_id: str,
) -> Apartment:
    """
    Gate for a single, user-chosen assignment

    Runs the same overlap check as the batch path. Raises NotFound or
    AssignmentConflict; the booking is left untouched either way.
    """
    return AvailabilityIndex(apartments, bookings).ensure_assignable(booking, apartment_id)
