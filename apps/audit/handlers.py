"""Domain event subscribers that write the audit trail."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import (
    AutoAssignmentCompleted,
    BookingAssigned,
    BookingUnassigned,
)
from shared.application.message_bus import message_bus

from .models import AuditLog
from .services import record_audit

logger = logging.getLogger(__name__)


def on_booking_assigned(event: BookingAssigned) -> None:
    record_audit(
        user_id=event.actor_id,
        action=AuditLog.ActionChoices.ASSIGN,
        table_name="bookings",
        record_id=event.booking_id,
        old_values={
            "apartment_id": event.previous_apartment_id,
            "temporary_apartment": event.previous_temporary_apartment,
        },
        new_values={
            "apartment_id": event.apartment_id,
            "temporary_apartment": event.temporary_apartment,
        },
    )


def on_booking_unassigned(event: BookingUnassigned) -> None:
    record_audit(
        user_id=event.actor_id,
        action=AuditLog.ActionChoices.UNASSIGN,
        table_name="bookings",
        record_id=event.booking_id,
        old_values={
            "apartment_id": event.previous_apartment_id,
            "temporary_apartment": event.previous_temporary_apartment,
        },
    )


def on_auto_assignment_completed(event: AutoAssignmentCompleted) -> None:
    record_audit(
        user_id=event.actor_id,
        action=AuditLog.ActionChoices.AUTO_ASSIGN,
        table_name="bookings",
        new_values={
            "assigned": event.assigned_count,
            "failed": event.failed_count,
            "failed_booking_ids": list(event.failed_booking_ids),
            "cancelled": event.cancelled,
        },
    )


def register() -> None:
    message_bus.register_event_handler(BookingAssigned, on_booking_assigned)
    message_bus.register_event_handler(BookingUnassigned, on_booking_unassigned)
    message_bus.register_event_handler(AutoAssignmentCompleted, on_auto_assignment_completed)
    logger.debug("Audit event handlers registered")
