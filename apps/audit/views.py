"""Audit log API (admin only)."""

from __future__ import annotations

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin

from .models import AuditLog
from .serializers import AuditLogSerializer
from .services import cleanup_audit_logs


class AuditLogViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Журнал аудита: просмотр с фильтрами и очистка старых записей."""

    serializer_class = AuditLogSerializer
    permission_classes = [IsAdmin]
    filterset_fields = ["action", "table_name", "user", "record_id"]

    def get_queryset(self):  # type: ignore
        return AuditLog.objects.select_related("user").all()

    @action(detail=False, methods=["delete"])
    def cleanup(self, request):
        raw_days = request.query_params.get("days")
        try:
            days = int(raw_days) if raw_days is not None else None
            deleted = cleanup_audit_logs(days, user=request.user)
        except ValueError:
            return Response(
                {"detail": "days must be a non-negative integer."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response({"deleted_count": deleted})
