"""Apartment API views."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.db.models import Count  # type: ignore
from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.audit.models import AuditLog
from apps.audit.services import record_audit
from apps.users.permissions import IsAdmin, IsManager, IsManagerOrReadOnly

from .models import Apartment
from .serializers import ApartmentSerializer

logger = logging.getLogger(__name__)


class ApartmentViewSet(viewsets.ModelViewSet):
    """Viewset для управления квартирами.

    Чтение доступно всем сотрудникам, изменение менеджерам,
    удаление только администраторам и только без бронирований.
    """

    serializer_class = ApartmentSerializer
    filterset_fields = ["is_favorite"]
    search_fields = ["name"]
    ordering_fields = ["name", "created_at", "is_favorite"]

    def get_queryset(self):  # type: ignore
        return Apartment.objects.annotate(booking_count=Count("bookings")).order_by("name", "created_at")

    def get_permissions(self):  # type: ignore
        if self.action == "destroy":
            return [IsAdmin()]
        if self.action == "favorite":
            return [IsManager()]
        return [IsManagerOrReadOnly()]

    def perform_create(self, serializer):  # type: ignore
        with transaction.atomic():
            apartment = serializer.save(created_by=self.request.user)
            record_audit(
                user=self.request.user,
                action=AuditLog.ActionChoices.CREATE,
                table_name="apartments",
                record_id=apartment.pk,
                new_values=apartment.snapshot(),
            )

    def perform_update(self, serializer):  # type: ignore
        before = serializer.instance.snapshot()
        with transaction.atomic():
            apartment = serializer.save()
            record_audit(
                user=self.request.user,
                action=AuditLog.ActionChoices.UPDATE,
                table_name="apartments",
                record_id=apartment.pk,
                old_values=before,
                new_values=apartment.snapshot(),
            )

    def destroy(self, request, *args, **kwargs):  # type: ignore
        apartment = self.get_object()
        with transaction.atomic():
            # Lock the row so no booking can be assigned between count and delete
            apartment = Apartment.objects.select_for_update().get(pk=apartment.pk)
            booking_count = apartment.bookings.count()
            if booking_count:
                return Response(
                    {
                        "detail": "Cannot delete an apartment that has bookings.",
                        "booking_count": booking_count,
                    },
                    status=status.HTTP_400_BAD_REQUEST,
                )
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.DELETE,
                table_name="apartments",
                record_id=apartment.pk,
                old_values=apartment.snapshot(),
            )
            apartment.delete()
        logger.info("Apartment %s deleted by %s", apartment.pk, request.user.username)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"])
    def favorite(self, request, pk=None):
        """Переключает отметку «избранная»."""
        apartment = self.get_object()
        before = apartment.snapshot()
        with transaction.atomic():
            apartment.is_favorite = not apartment.is_favorite
            apartment.save(update_fields=["is_favorite", "updated_at"])
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.UPDATE,
                table_name="apartments",
                record_id=apartment.pk,
                old_values=before,
                new_values=apartment.snapshot(),
            )
        apartment.booking_count = apartment.bookings.count()
        return Response(self.get_serializer(apartment).data)
