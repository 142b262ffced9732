"""Writing and pruning audit entries."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Mapping

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .models import AuditLog

logger = logging.getLogger(__name__)


def record_audit(
    *,
    action: str,
    table_name: str,
    record_id: Any = None,
    user=None,
    user_id: int | None = None,
    old_values: Mapping[str, Any] | None = None,
    new_values: Mapping[str, Any] | None = None,
) -> AuditLog:
    """Persist a single audit entry.

    Pass either ``user`` (a model instance, anonymous users are ignored)
    or a raw ``user_id`` taken from a domain event.
    """
    if user is not None and getattr(user, "is_authenticated", False):
        user_id = user.pk
    entry = AuditLog.objects.create(
        user_id=user_id,
        action=action,
        table_name=table_name,
        record_id=str(record_id) if record_id is not None else None,
        old_values=dict(old_values) if old_values is not None else None,
        new_values=dict(new_values) if new_values is not None else None,
    )
    logger.debug("Audit %s on %s#%s by user %s", action, table_name, record_id, user_id)
    return entry


def cleanup_audit_logs(days: int | None = None, *, user=None) -> int:
    """Delete entries older than ``days`` days; returns the number removed.

    The cleanup itself is logged afterwards so it survives the purge.
    """
    if days is None:
        days = getattr(settings, "AUDIT_LOG_RETENTION_DAYS", 90)
    if days < 0:
        raise ValueError("days must not be negative")
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = AuditLog.objects.filter(timestamp__lt=cutoff).delete()
    logger.info("Removed %d audit entries older than %d days", deleted, days)
    record_audit(
        user=user,
        action=AuditLog.ActionChoices.CLEANUP,
        table_name="audit_logs",
        new_values={"days_old": days, "deleted_count": deleted},
    )
    return deleted
