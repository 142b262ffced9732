"""API views for the booking domain."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import serializers, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.apartments.models import Apartment
from apps.apartments.serializers import ApartmentSerializer
from apps.audit.models import AuditLog
from apps.audit.services import record_audit
from apps.users.permissions import HasRole, IsAdmin, IsManager, IsManagerOrReadOnly
from shared.application.message_bus import message_bus
from shared.domain.exceptions import DomainError, InvalidInterval, NotFound

from .application.command_handlers import (
    AssignBookingCommand,
    AutoAssignCommand,
    UnassignBookingCommand,
)
from .domain.availability import AvailabilityIndex
from .domain.errors import AssignmentConflict
from .domain.recommendations import BestDatesWeights, daily_occupancy, recommend_best_dates
from .filters import BookingFilterSet
from .models import Booking
from .repositories import DjangoApartmentRepository, DjangoBookingRepository
from .serializers import (
    AssignSerializer,
    AutoAssignSerializer,
    BatchBookingSerializer,
    BestDatesQuerySerializer,
    BookingSerializer,
    BookingWriteSerializer,
    MonthQuerySerializer,
    StayQuerySerializer,
)
from .tasks import auto_assign_unassigned_bookings

logger = logging.getLogger(__name__)


def domain_error_response(exc: DomainError) -> Response:
    """Translate a scheduling error into an HTTP response."""
    if isinstance(exc, InvalidInterval):
        return Response(
            {"detail": "Check-out must be after check-in.", "code": "invalid_interval"},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, NotFound):
        return Response(
            {"detail": f"{exc.kind} not found.", "code": "not_found", "id": exc.identifier},
            status=status.HTTP_404_NOT_FOUND,
        )
    if isinstance(exc, AssignmentConflict):
        conflicting = exc.conflicting_booking
        return Response(
            {
                "detail": "Apartment is not available for the selected dates.",
                "code": "assignment_conflict",
                "conflicting_booking": {
                    "id": conflicting.id,
                    "guest_name": conflicting.guest_name,
                    "check_in": conflicting.check_in,
                    "check_out": conflicting.check_out,
                },
            },
            status=status.HTTP_409_CONFLICT,
        )
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


class BookingViewSet(viewsets.ModelViewSet):
    """Viewset для создания, распределения и анализа бронирований."""

    queryset = Booking.objects.select_related("apartment").all()
    filterset_class = BookingFilterSet
    ordering_fields = ["check_in", "check_out", "guest_name", "created_at"]
    ordering = ["-check_in", "-created_at"]

    def get_permissions(self):  # type: ignore
        if self.action == "destroy_all":
            return [IsAdmin()]
        if self.action in {"assign", "unassign", "auto_assign", "batch"}:
            return [IsManager()]
        # POST, but only reads
        if self.action == "available_apartments":
            return [HasRole()]
        return [IsManagerOrReadOnly()]

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return BookingWriteSerializer
        return BookingSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                booking = serializer.save(created_by=request.user)
                record_audit(
                    user=request.user,
                    action=AuditLog.ActionChoices.CREATE,
                    table_name="bookings",
                    record_id=booking.pk,
                    new_values=booking.snapshot(),
                )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        booking = self.get_object()
        before = booking.snapshot()
        serializer = self.get_serializer(booking, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            with transaction.atomic():
                booking = serializer.save()
                record_audit(
                    user=request.user,
                    action=AuditLog.ActionChoices.UPDATE,
                    table_name="bookings",
                    record_id=booking.pk,
                    old_values=before,
                    new_values=booking.snapshot(),
                )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(BookingSerializer(booking).data)

    def perform_destroy(self, instance):  # type: ignore
        with transaction.atomic():
            record_audit(
                user=self.request.user,
                action=AuditLog.ActionChoices.DELETE,
                table_name="bookings",
                record_id=instance.pk,
                old_values=instance.snapshot(),
            )
            instance.delete()

    def destroy_all(self, request):
        """Удаляет все бронирования (только администратор)."""
        with transaction.atomic():
            deleted, _ = Booking.objects.all().delete()
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.DELETE_ALL,
                table_name="bookings",
                new_values={"deleted_count": deleted},
            )
        logger.warning("All bookings deleted by %s (%d rows)", request.user.username, deleted)
        return Response({"deleted_count": deleted})

    @action(detail=False, methods=["post"], url_path="available-apartments")
    def available_apartments(self, request):
        query = StayQuerySerializer(data=request.data)
        query.is_valid(raise_exception=True)
        index = AvailabilityIndex(
            DjangoApartmentRepository().list(),
            DjangoBookingRepository().list(),
        )
        try:
            free = index.available_apartments(
                query.validated_data["check_in"], query.validated_data["check_out"]
            )
        except InvalidInterval as exc:
            return domain_error_response(exc)
        rows = Apartment.objects.in_bulk([a.id for a in free])
        return Response(ApartmentSerializer([rows[a.id] for a in free], many=True).data)

    @action(detail=False, methods=["post"])
    def batch(self, request):
        """Массовое создание броней; некорректные строки пропускаются."""
        payload = BatchBookingSerializer(data=request.data)
        payload.is_valid(raise_exception=True)

        created, skipped = [], []
        with transaction.atomic():
            for position, row in enumerate(payload.validated_data["bookings"]):
                serializer = BookingWriteSerializer(data=row)
                if not serializer.is_valid():
                    skipped.append({"index": position, "errors": serializer.errors})
                    continue
                try:
                    with transaction.atomic():
                        booking = serializer.save(created_by=request.user)
                except DomainError as exc:
                    skipped.append({"index": position, "errors": {"detail": [str(exc)]}})
                    continue
                record_audit(
                    user=request.user,
                    action=AuditLog.ActionChoices.CREATE,
                    table_name="bookings",
                    record_id=booking.pk,
                    new_values=booking.snapshot(),
                )
                created.append(booking.pk)
            record_audit(
                user=request.user,
                action=AuditLog.ActionChoices.BATCH_CREATE,
                table_name="bookings",
                new_values={"created_count": len(created), "skipped_count": len(skipped)},
            )

        return Response(
            {
                "created_count": len(created),
                "skipped_count": len(skipped),
                "booking_ids": created,
                "skipped": skipped,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        payload = AssignSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        command = AssignBookingCommand(
            booking_id=pk,
            apartment_id=payload.validated_data["apartment_id"],
            temporary_apartment=payload.validated_data["temporary_apartment"],
            actor_id=request.user.pk,
        )
        try:
            message_bus.handle_command(command)
        except DomainError as exc:
            return domain_error_response(exc)
        booking = Booking.objects.select_related("apartment").get(pk=pk)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def unassign(self, request, pk=None):
        try:
            message_bus.handle_command(UnassignBookingCommand(booking_id=pk, actor_id=request.user.pk))
        except DomainError as exc:
            return domain_error_response(exc)
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        booking = Booking.objects.get(pk=pk)
        return Response(BookingSerializer(booking).data)

    @action(detail=False, methods=["post"], url_path="auto-assign")
    def auto_assign(self, request):
        payload = AutoAssignSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        booking_ids = payload.validated_data.get("booking_ids")

        if payload.validated_data["run_async"]:
            result = auto_assign_unassigned_bookings.delay(actor_id=request.user.pk, booking_ids=booking_ids)
            return Response({"task_id": result.id}, status=status.HTTP_202_ACCEPTED)

        try:
            plan = message_bus.handle_command(
                AutoAssignCommand(actor_id=request.user.pk, booking_ids=booking_ids)
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(plan.to_dict())

    @action(detail=False, methods=["get"], url_path="best-dates")
    def best_dates(self, request):
        query = BestDatesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        weights = BestDatesWeights.from_mapping(getattr(settings, "BOOKINGS_BEST_DATES", None))
        stay_days = query.validated_data["stay_days"]
        if not 1 <= stay_days <= weights.max_stay_days:
            raise serializers.ValidationError(
                {"stay_days": f"Must be between 1 and {weights.max_stay_days}."}
            )
        recommendations = recommend_best_dates(
            DjangoApartmentRepository().list(),
            DjangoBookingRepository().list(),
            query.validated_data["year"],
            query.validated_data["month_number"],
            stay_days=stay_days,
            weights=weights,
            tz=timezone.get_current_timezone(),
        )
        return Response(
            {
                "month": query.validated_data["month"],
                "stay_days": stay_days,
                "recommendations": [r.to_dict() for r in recommendations],
            }
        )

    @action(detail=False, methods=["get"])
    def occupancy(self, request):
        query = MonthQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        apartment_count = Apartment.objects.count()
        days = daily_occupancy(
            DjangoBookingRepository().list(),
            query.validated_data["year"],
            query.validated_data["month_number"],
            tz=timezone.get_current_timezone(),
        )
        return Response(
            {
                "month": query.validated_data["month"],
                "apartment_count": apartment_count,
                "days": [
                    {
                        "date": day.isoformat(),
                        "occupied": count,
                        "available": max(apartment_count - count, 0),
                    }
                    for day, count in days
                ],
            }
        )
