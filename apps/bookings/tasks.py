"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from shared.application.message_bus import message_bus

from .application.command_handlers import AutoAssignCommand

logger = logging.getLogger(__name__)


@shared_task(name="bookings.auto_assign_unassigned_bookings")
def auto_assign_unassigned_bookings(actor_id: int | None = None, booking_ids: list[str] | None = None) -> dict:
    """
    Распределяет нераспределённые брони по свободным квартирам.

    Same use case as POST /bookings/auto-assign/, for runs that should not
    block a request.

    Returns:
        dict: сводка AssignmentPlan.to_dict()
    """
    plan = message_bus.handle_command(AutoAssignCommand(actor_id=actor_id, booking_ids=booking_ids))
    logger.info(
        "Background auto-assignment done: %d assigned, %d failed",
        plan.assigned_count, plan.failed_count,
    )
    return plan.to_dict()
