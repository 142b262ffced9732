"""User management API views (admin only)."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Count  # type: ignore
from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.audit.models import AuditLog
from apps.audit.services import record_audit

from .auth_views import blacklist_user_tokens
from .permissions import IsAdmin
from .serializers import (
    ResetPasswordSerializer,
    UserCreateSerializer,
    UserSerializer,
    UserUpdateSerializer,
)

User = get_user_model()

logger = logging.getLogger(__name__)

AUDITED_FIELDS = ("username", "email", "first_name", "last_name", "role", "is_active")


def _snapshot(user) -> dict:
    return {field: getattr(user, field) for field in AUDITED_FIELDS}


class UserViewSet(viewsets.ModelViewSet):
    """Управление пользователями.

    - список, создание, изменение и удаление доступны только администраторам
    - `reset_password` задаёт новый пароль и отзывает refresh-токены
    - `stats` возвращает сводку по ролям и самых активных пользователей
    """

    queryset = User.objects.all()
    permission_classes = [IsAdmin]
    filterset_fields = ["role", "is_active"]
    search_fields = ["username", "email", "first_name", "last_name"]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return UserCreateSerializer
        if self.action in {"update", "partial_update"}:
            return UserUpdateSerializer
        if self.action == "reset_password":
            return ResetPasswordSerializer
        return UserSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            user = serializer.save()
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.CREATE,
                table_name="users",
                record_id=user.pk,
                new_values=_snapshot(user),
            )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        user = self.get_object()
        before = _snapshot(user)
        serializer = self.get_serializer(user, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            user = serializer.save()
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.UPDATE,
                table_name="users",
                record_id=user.pk,
                old_values=before,
                new_values=_snapshot(user),
            )
        return Response(UserSerializer(user).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response(
                {"detail": "You cannot delete your own account."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        apartments = user.apartments_created.count()
        bookings = user.bookings_created.count()
        if apartments or bookings:
            return Response(
                {
                    "detail": "User has created data and cannot be deleted. Deactivate the account instead.",
                    "apartment_count": apartments,
                    "booking_count": bookings,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        with transaction.atomic():
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.DELETE,
                table_name="users",
                record_id=user.pk,
                old_values=_snapshot(user),
            )
            user.delete()
        logger.info("User %s deleted by %s", user.username, request.user.username)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="reset-password")
    def reset_password(self, request, pk=None):
        user = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            user.set_password(serializer.validated_data["new_password"])
            user.save(update_fields=["password", "updated_at"])
            blacklist_user_tokens(user)
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.RESET_PASSWORD,
                table_name="users",
                record_id=user.pk,
            )
        return Response({"detail": "Password has been reset."})

    @action(detail=False, methods=["get"])
    def stats(self, request):
        total = User.objects.count()
        active = User.objects.filter(is_active=True).count()
        by_role = {role: 0 for role in User.RoleChoices.values}
        for row in User.objects.values("role").annotate(count=Count("id")):
            by_role[row["role"]] = row["count"]
        most_active = (
            User.objects.annotate(activity_count=Count("audit_logs"))
            .filter(activity_count__gt=0)
            .order_by("-activity_count", "username")[:5]
        )
        return Response(
            {
                "total": total,
                "active": active,
                "inactive": total - active,
                "by_role": by_role,
                "most_active": [
                    {"id": user.pk, "username": user.username, "activity_count": user.activity_count}
                    for user in most_active
                ],
            }
        )
