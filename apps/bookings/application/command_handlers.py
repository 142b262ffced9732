"""
Booking Command Handlers

These are the assignment use cases of the scheduler.
They orchestrate domain operations within transactions.

Commands:
- AssignBookingCommand: Put a booking into an apartment or a temporary accommodation
- UnassignBookingCommand: Send a booking back to the unassigned queue
- AutoAssignCommand: Greedily place every unassigned booking
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import NotFound
from apps.bookings.domain.assignment import AssignmentPlan, AutoAssigner, check_manual_assignment
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.events import AutoAssignmentCompleted
from apps.bookings.repositories import DjangoApartmentRepository, DjangoBookingRepository

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class AssignBookingCommand:
    """
    Command to assign a booking

    Exactly one of apartment_id / temporary_apartment must be given.
    """
    booking_id: str
    apartment_id: Optional[str] = None
    temporary_apartment: Optional[str] = None
    actor_id: Optional[int] = None

    def __post_init__(self):
        if bool(self.apartment_id) == bool(self.temporary_apartment and self.temporary_apartment.strip()):
            raise ValueError("Provide either an apartment or a temporary apartment")


@dataclass
class UnassignBookingCommand:
    """Command to clear a booking's assignment"""
    booking_id: str
    actor_id: Optional[int] = None


@dataclass
class AutoAssignCommand:
    """
    Command to run the auto-assigner

    booking_ids narrows the queue to the given bookings (default: all
    unassigned). should_continue is polled before each booking.
    """
    actor_id: Optional[int] = None
    booking_ids: Optional[List[str]] = None
    should_continue: Optional[Callable[[], bool]] = None


# ===== Command Handlers =====

class AssignBookingHandler:
    """
    Handler for AssignBooking command

    Strategy:
    1. Start database transaction (atomic)
    2. Lock the target apartment row (SELECT FOR UPDATE)
    3. Snapshot the apartment's bookings and run the overlap check
    4. Change the booking's assignment and save it
    5. Publish BookingAssigned after commit
    """

    def __init__(self, booking_repo, apartment_repo):
        self.booking_repo = booking_repo
        self.apartment_repo = apartment_repo

    def handle(self, command: AssignBookingCommand) -> Booking:
        """
        Raises:
            NotFound: unknown booking or apartment
            AssignmentConflict: the apartment is taken for the stay
        """
        with DjangoUnitOfWork() as uow:
            if command.apartment_id:
                apartment = self.apartment_repo.get(command.apartment_id, lock=True)
                booking = self.booking_repo.get(command.booking_id, lock=True)
                existing = self.booking_repo.list(apartment_id=apartment.id)
                check_manual_assignment([apartment], existing, booking, apartment.id)
                booking.assign_to_apartment(apartment.id, actor_id=command.actor_id)
            else:
                booking = self.booking_repo.get(command.booking_id, lock=True)
                booking.assign_temporary(command.temporary_apartment, actor_id=command.actor_id)

            uow.collect_events(booking)
            self.booking_repo.save_assignment(booking)

        logger.info("Booking %s assigned: %s", booking.id, booking.assignment)
        return booking


class UnassignBookingHandler:
    """Handler for UnassignBooking command"""

    def __init__(self, booking_repo):
        self.booking_repo = booking_repo

    def handle(self, command: UnassignBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = self.booking_repo.get(command.booking_id, lock=True)
            # ValueError when already unassigned
            booking.unassign(actor_id=command.actor_id)
            uow.collect_events(booking)
            self.booking_repo.save_assignment(booking)

        logger.info("Booking %s unassigned", booking.id)
        return booking


class AutoAssignHandler:
    """
    Handler for AutoAssign command

    Every apartment row is locked for the whole run, so no manual
    assignment or booking write can interleave with the batch. Failed
    bookings are part of the result, nothing is rolled back for them.
    """

    def __init__(self, booking_repo, apartment_repo):
        self.booking_repo = booking_repo
        self.apartment_repo = apartment_repo

    def handle(self, command: AutoAssignCommand) -> AssignmentPlan:
        with DjangoUnitOfWork() as uow:
            apartments = self.apartment_repo.list(lock=True)
            bookings = self.booking_repo.list()
            by_id = {b.id: b for b in bookings}

            queue = None
            if command.booking_ids is not None:
                missing = [i for i in command.booking_ids if i not in by_id]
                if missing:
                    raise NotFound("Booking", missing[0])
                queue = [by_id[i] for i in command.booking_ids]

            plan = AutoAssigner(apartments, bookings).plan(queue, should_continue=command.should_continue)

            for decision in plan.assignments:
                booking = by_id[decision.booking_id]
                booking.assign_to_apartment(decision.apartment_id, actor_id=command.actor_id)
                uow.collect_events(booking)
                self.booking_repo.save_assignment(booking)

            uow.record_event(AutoAssignmentCompleted(
                actor_id=command.actor_id,
                assigned_count=plan.assigned_count,
                failed_count=plan.failed_count,
                failed_booking_ids=list(plan.failed),
                cancelled=plan.cancelled,
            ))

        logger.info(
            "Auto-assignment committed: %d assigned, %d failed",
            plan.assigned_count, plan.failed_count,
        )
        return plan


# ===== Message bus entry points =====

def handle_assign_booking(command: AssignBookingCommand) -> Booking:
    return AssignBookingHandler(DjangoBookingRepository(), DjangoApartmentRepository()).handle(command)


def handle_unassign_booking(command: UnassignBookingCommand) -> Booking:
    return UnassignBookingHandler(DjangoBookingRepository()).handle(command)


def handle_auto_assign(command: AutoAssignCommand) -> AssignmentPlan:
    return AutoAssignHandler(DjangoBookingRepository(), DjangoApartmentRepository()).handle(command)


def register_handlers(bus) -> None:
    bus.register_command_handler(AssignBookingCommand, handle_assign_booking)
    bus.register_command_handler(UnassignBookingCommand, handle_unassign_booking)
    bus.register_command_handler(AutoAssignCommand, handle_auto_assign)
