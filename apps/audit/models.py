"""Audit log model."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class AuditLog(models.Model):
    """Одна запись журнала: кто, что и над какой записью сделал."""

    class ActionChoices(models.TextChoices):
        CREATE = "CREATE", _("Create")
        UPDATE = "UPDATE", _("Update")
        DELETE = "DELETE", _("Delete")
        DELETE_ALL = "DELETE_ALL", _("Delete all")
        BATCH_CREATE = "BATCH_CREATE", _("Batch create")
        ASSIGN = "ASSIGN", _("Assign")
        UNASSIGN = "UNASSIGN", _("Unassign")
        AUTO_ASSIGN = "AUTO_ASSIGN", _("Auto assign")
        RESET_PASSWORD = "RESET_PASSWORD", _("Reset password")
        CHANGE_PASSWORD = "CHANGE_PASSWORD", _("Change password")
        EXPORT = "EXPORT", _("Export")
        IMPORT = "IMPORT", _("Import")
        CLEANUP = "CLEANUP", _("Cleanup")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    action = models.CharField(max_length=32, choices=ActionChoices.choices)
    table_name = models.CharField(max_length=64)
    record_id = models.CharField(max_length=64, null=True, blank=True)
    old_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    new_values = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["user", "timestamp"], name="audit_user_ts_idx"),
            models.Index(fields=["table_name", "action"], name="audit_table_action_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.table_name}#{self.record_id or '-'}"
