"""Export and import of backup documents.

Document layout (version 1.0)::

    {
        "version": "1.0",
        "exported_at": "...",
        "exported_by": "admin",
        "data": {"apartments": [...], "bookings": [...], "users": [...], "audit_logs": [...]},
        "statistics": {"apartment_count": 0, ...}
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.dateparse import parse_datetime  # type: ignore

from apps.apartments.models import Apartment
from apps.audit.models import AuditLog
from apps.audit.services import record_audit
from apps.bookings.domain.entities import normalize_properties
from apps.bookings.models import Booking
from apps.bookings.services import ensure_apartment_is_available
from shared.domain.exceptions import DomainError, InvalidInterval

from .models import BackupMetadata

logger = logging.getLogger(__name__)

User = get_user_model()

BACKUP_VERSION = "1.0"


class InvalidBackup(ValueError):
    """Uploaded document is not a usable backup."""


@dataclass
class ImportCounts:
    apartments: int = 0
    bookings: int = 0
    users: int = 0
    skipped_bookings: int = 0
    skipped_users: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _apartment_row(apartment: Apartment) -> dict[str, Any]:
    return {
        "id": apartment.pk,
        "name": apartment.name,
        "properties": list(apartment.properties or []),
        "is_favorite": apartment.is_favorite,
        "created_by": apartment.created_by_id,
        "created_at": apartment.created_at,
        "updated_at": apartment.updated_at,
    }


def _booking_row(booking: Booking) -> dict[str, Any]:
    return {
        "id": booking.pk,
        "guest_name": booking.guest_name,
        "check_in": booking.check_in,
        "check_out": booking.check_out,
        "apartment_id": booking.apartment_id,
        "temporary_apartment": booking.temporary_apartment,
        "created_by": booking.created_by_id,
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
    }


def _user_row(user) -> dict[str, Any]:
    return {
        "id": user.pk,
        "username": user.username,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
        "is_active": user.is_active,
        "created_at": user.created_at,
        "last_login": user.last_login,
    }


def _audit_row(entry: AuditLog) -> dict[str, Any]:
    return {
        "id": entry.pk,
        "user_id": entry.user_id,
        "action": entry.action,
        "table_name": entry.table_name,
        "record_id": entry.record_id,
        "old_values": entry.old_values,
        "new_values": entry.new_values,
        "timestamp": entry.timestamp,
    }


def build_export(user) -> tuple[str, dict[str, Any]]:
    """Collect the database into a backup document.

    Returns ``(filename, document)``; the document is JSON-ready (dates
    are ISO strings). Records a BackupMetadata row and an EXPORT audit entry.
    """
    audit_limit = getattr(settings, "BACKUP_EXPORT_AUDIT_LIMIT", 1000)
    now = timezone.now()

    apartments = [_apartment_row(a) for a in Apartment.objects.order_by("created_at")]
    bookings = [_booking_row(b) for b in Booking.objects.order_by("created_at")]
    users = [_user_row(u) for u in User.objects.order_by("created_at")]
    audit_logs = [_audit_row(e) for e in AuditLog.objects.order_by("-timestamp", "-id")[:audit_limit]]

    statistics = {
        "apartment_count": len(apartments),
        "booking_count": len(bookings),
        "user_count": len(users),
        "audit_log_count": len(audit_logs),
    }
    document = {
        "version": BACKUP_VERSION,
        "exported_at": now,
        "exported_by": user.username,
        "data": {
            "apartments": apartments,
            "bookings": bookings,
            "users": users,
            "audit_logs": audit_logs,
        },
        "statistics": statistics,
    }
    encoded = json.dumps(document, cls=DjangoJSONEncoder)
    filename = f"booking-backup-{now.strftime('%Y-%m-%dT%H-%M-%S')}.json"

    with transaction.atomic():
        metadata = BackupMetadata.objects.create(
            filename=filename,
            kind=BackupMetadata.Kind.EXPORT,
            file_size=len(encoded.encode("utf-8")),
            created_by=user,
        )
        record_audit(
            user=user,
            action=AuditLog.ActionChoices.EXPORT,
            table_name="backup",
            record_id=metadata.pk,
            new_values={"filename": filename, "statistics": statistics},
        )

    logger.info("Backup %s exported by %s", filename, user.username)
    return filename, json.loads(encoded)


def parse_backup(raw: bytes | str) -> dict[str, Any]:
    """Decode an uploaded file and check its envelope."""
    try:
        document = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidBackup("Invalid JSON file.") from exc
    if not isinstance(document, dict) or not document.get("version") or not isinstance(document.get("data"), dict):
        raise InvalidBackup("Invalid backup file format.")
    return document


def _parse_instant(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = parse_datetime(value)
    else:
        return None
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _pick(row: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return default


def _restore_timestamps(model, pk: str, row: dict[str, Any]) -> None:
    """Write the backed-up created_at/updated_at over the fresh ones."""
    stamps = {}
    for field, alias in (("created_at", "createdAt"), ("updated_at", "updatedAt")):
        value = _parse_instant(_pick(row, field, alias))
        if value is not None:
            stamps[field] = value
    if stamps:
        # save() always overwrites auto_now fields, update() does not
        model.objects.filter(pk=pk).update(**stamps)


def _import_apartment(row: dict[str, Any], user) -> bool:
    apartment_id = row.get("id")
    name = str(row.get("name") or "").strip()
    if not apartment_id or not name:
        return False
    Apartment.objects.update_or_create(
        pk=str(apartment_id),
        defaults={
            "name": name,
            "properties": list(normalize_properties(row.get("properties") or [])),
            "is_favorite": bool(_pick(row, "is_favorite", "isFavorite", default=False)),
        },
        create_defaults={
            "name": name,
            "properties": list(normalize_properties(row.get("properties") or [])),
            "is_favorite": bool(_pick(row, "is_favorite", "isFavorite", default=False)),
            "created_by": user,
        },
    )
    _restore_timestamps(Apartment, str(apartment_id), row)
    return True


def _import_booking(row: dict[str, Any], user) -> bool:
    """Upsert one booking; False when it is invalid or would double-book."""
    booking_id = row.get("id")
    guest_name = str(row.get("guest_name") or "").strip()
    check_in = _parse_instant(_pick(row, "check_in", "checkIn"))
    check_out = _parse_instant(_pick(row, "check_out", "checkOut"))
    apartment_id = row.get("apartment_id") or None
    temporary = (row.get("temporary_apartment") or "").strip() or None
    if not booking_id or not guest_name or check_in is None or check_out is None:
        return False
    if apartment_id and temporary:
        return False

    try:
        with transaction.atomic():
            if apartment_id:
                ensure_apartment_is_available(
                    str(apartment_id), check_in, check_out, exclude_booking_id=str(booking_id)
                )
            elif check_out <= check_in:
                raise InvalidInterval(check_in, check_out)
            values = {
                "guest_name": guest_name,
                "check_in": check_in,
                "check_out": check_out,
                "apartment_id": apartment_id,
                "temporary_apartment": temporary,
            }
            Booking.objects.update_or_create(
                pk=str(booking_id),
                defaults=values,
                create_defaults={**values, "created_by": user},
            )
            _restore_timestamps(Booking, str(booking_id), row)
    except DomainError as exc:
        logger.warning("Skipping booking %s from backup: %s", booking_id, exc)
        return False
    return True


def _import_user(row: dict[str, Any], current_user) -> bool:
    username = str(row.get("username") or "").strip()
    email = str(row.get("email") or "").strip()
    if not username or not email:
        return False
    if username == current_user.username:
        return False
    if User.objects.filter(username=username).exists() or User.objects.filter(email__iexact=email).exists():
        return False
    role = row.get("role")
    if role not in User.RoleChoices.values:
        role = User.RoleChoices.VIEWER
    # Passwords are never exported; imported users must get a reset
    User.objects.create_user(
        username=username,
        email=email,
        password=None,
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        role=role,
        is_active=bool(_pick(row, "is_active", "active", default=True)),
    )
    return True


def import_backup(
    document: dict[str, Any],
    user,
    *,
    replace: bool = False,
    filename: str = "backup.json",
    file_size: int = 0,
) -> ImportCounts:
    """Load a backup document in one transaction.

    Apartments and bookings are upserted by id. Users are only created
    when neither their username nor their email exists. ``replace`` first
    removes every booking, apartment and user except ``user``.
    """
    data = document.get("data") or {}
    counts = ImportCounts()

    with transaction.atomic():
        if replace:
            Booking.objects.all().delete()
            Apartment.objects.all().delete()
            User.objects.exclude(pk=user.pk).delete()
            logger.warning("Backup import in replace mode by %s", user.username)

        for row in data.get("apartments") or []:
            if isinstance(row, dict) and _import_apartment(row, user):
                counts.apartments += 1

        for row in data.get("bookings") or []:
            if isinstance(row, dict) and _import_booking(row, user):
                counts.bookings += 1
            else:
                counts.skipped_bookings += 1

        for row in data.get("users") or []:
            if isinstance(row, dict) and _import_user(row, user):
                counts.users += 1
            else:
                counts.skipped_users += 1

        metadata = BackupMetadata.objects.create(
            filename=f"import-{filename}",
            kind=BackupMetadata.Kind.IMPORT,
            file_size=file_size,
            created_by=user,
        )
        record_audit(
            user=user,
            action=AuditLog.ActionChoices.IMPORT,
            table_name="backup",
            record_id=metadata.pk,
            new_values={"filename": filename, "imported": counts.to_dict(), "replace": replace},
        )

    logger.info("Backup %s imported by %s: %s", filename, user.username, counts.to_dict())
    return counts


def database_statistics() -> dict[str, Any]:
    recent = AuditLog.objects.select_related("user").order_by("-timestamp", "-id")[:10]
    last_backup = BackupMetadata.objects.filter(kind=BackupMetadata.Kind.EXPORT).first()
    return {
        "statistics": {
            "apartments": Apartment.objects.count(),
            "bookings": Booking.objects.count(),
            "unassigned_bookings": Booking.objects.filter(
                apartment__isnull=True, temporary_apartment__isnull=True
            ).count(),
            "users": User.objects.filter(is_active=True).count(),
            "audit_logs": AuditLog.objects.count(),
            "backups": BackupMetadata.objects.count(),
            "last_backup_at": last_backup.created_at if last_backup else None,
        },
        "recent_activity": [
            {
                "id": entry.pk,
                "action": entry.action,
                "table_name": entry.table_name,
                "record_id": entry.record_id,
                "username": entry.user.username if entry.user else None,
                "timestamp": entry.timestamp,
            }
            for entry in recent
        ],
    }
