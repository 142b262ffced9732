"""API tests for backup export and import."""

from __future__ import annotations

import json
from datetime import datetime, timezone as dt_timezone

from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.apartments.models import Apartment
from apps.audit.models import AuditLog
from apps.backup.models import BackupMetadata
from apps.bookings.models import Booking
from apps.users.models import User


def upload(document, name: str = "backup.json") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, json.dumps(document).encode("utf-8"), content_type="application/json")


class BackupAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin", email="admin@example.com", password="AdminPass1", role=User.RoleChoices.ADMIN
        )
        self.client.force_authenticate(self.admin)
        self.apartment = Apartment.objects.create(name="Loft", properties=["wifi"], is_favorite=True)
        Booking.objects.create(
            guest_name="Alice",
            check_in="2024-01-01T00:00:00Z",
            check_out="2024-01-03T00:00:00Z",
            apartment=self.apartment,
        )

    def test_export_document(self) -> None:
        response = self.client.get(reverse("backup-export"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("attachment;", response["Content-Disposition"])
        document = response.data
        self.assertEqual(document["version"], "1.0")
        self.assertEqual(document["exported_by"], "admin")
        self.assertEqual(document["statistics"]["apartment_count"], 1)
        self.assertEqual(document["statistics"]["booking_count"], 1)
        self.assertEqual(document["data"]["apartments"][0]["properties"], ["wifi"])
        self.assertNotIn("password", document["data"]["users"][0])
        self.assertTrue(BackupMetadata.objects.filter(kind="export").exists())
        self.assertTrue(AuditLog.objects.filter(action="EXPORT").exists())

    def test_export_then_import_replace_restores_data(self) -> None:
        document = self.client.get(reverse("backup-export")).data
        Booking.objects.all().delete()
        Apartment.objects.all().delete()

        response = self.client.post(
            reverse("backup-import"),
            {"backup": upload(document), "replace": "true"},
            format="multipart",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["imported"]["apartments"], 1)
        self.assertEqual(response.data["imported"]["bookings"], 1)
        self.assertTrue(Apartment.objects.filter(pk=self.apartment.pk, is_favorite=True).exists())
        self.assertEqual(Booking.objects.get().apartment_id, self.apartment.pk)

    def test_import_skips_overlapping_and_invalid_bookings(self) -> None:
        document = {
            "version": "1.0",
            "data": {
                "apartments": [{"id": "apt-2", "name": "Studio", "properties": ["tv", "tv"]}],
                "bookings": [
                    {
                        "id": "clash",
                        "guest_name": "Bob",
                        "check_in": "2024-01-02T00:00:00Z",
                        "check_out": "2024-01-04T00:00:00Z",
                        "apartment_id": self.apartment.pk,
                    },
                    {
                        "id": "reversed",
                        "guest_name": "Carol",
                        "check_in": "2024-01-05T00:00:00Z",
                        "check_out": "2024-01-04T00:00:00Z",
                    },
                    {
                        "id": "ok",
                        "guest_name": "Dan",
                        "checkIn": "2024-01-02T00:00:00Z",
                        "checkOut": "2024-01-04T00:00:00Z",
                        "apartment_id": "apt-2",
                    },
                ],
                "users": [
                    {"username": "admin", "email": "other@example.com"},
                    {"username": "fresh", "email": "fresh@example.com", "role": "manager"},
                    {"username": "dup", "email": "ADMIN@example.com"},
                ],
            },
        }
        response = self.client.post(reverse("backup-import"), {"backup": upload(document)}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        imported = response.data["imported"]
        self.assertEqual(imported["apartments"], 1)
        self.assertEqual(imported["bookings"], 1)
        self.assertEqual(imported["skipped_bookings"], 2)
        self.assertEqual(imported["users"], 1)
        self.assertEqual(Apartment.objects.get(pk="apt-2").properties, ["tv"])
        fresh = User.objects.get(username="fresh")
        self.assertEqual(fresh.role, "manager")
        self.assertFalse(fresh.has_usable_password())

    def test_import_keeps_timestamps_and_single_string_property(self) -> None:
        document = {
            "version": "1.0",
            "data": {
                "apartments": [
                    {
                        "id": "apt-old",
                        "name": "Cottage",
                        "properties": "sea view",
                        "created_at": "2020-05-01T10:00:00Z",
                        "updated_at": "2020-06-01T10:00:00Z",
                    }
                ],
                "bookings": [
                    {
                        "id": "bk-old",
                        "guest_name": "Eve",
                        "check_in": "2020-07-01T00:00:00Z",
                        "check_out": "2020-07-03T00:00:00Z",
                        "apartment_id": "apt-old",
                        "createdAt": "2020-05-02T09:30:00Z",
                        "updatedAt": "2020-05-03T09:30:00Z",
                    }
                ],
            },
        }
        response = self.client.post(reverse("backup-import"), {"backup": upload(document)}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        apartment = Apartment.objects.get(pk="apt-old")
        self.assertEqual(apartment.properties, ["sea view"])
        self.assertEqual(apartment.created_at, datetime(2020, 5, 1, 10, 0, tzinfo=dt_timezone.utc))
        self.assertEqual(apartment.updated_at, datetime(2020, 6, 1, 10, 0, tzinfo=dt_timezone.utc))
        booking = Booking.objects.get(pk="bk-old")
        self.assertEqual(booking.created_at, datetime(2020, 5, 2, 9, 30, tzinfo=dt_timezone.utc))
        self.assertEqual(booking.updated_at, datetime(2020, 5, 3, 9, 30, tzinfo=dt_timezone.utc))

    def test_import_rejects_bad_files(self) -> None:
        url = reverse("backup-import")
        bad_json = SimpleUploadedFile("backup.json", b"{not json", content_type="application/json")
        self.assertEqual(
            self.client.post(url, {"backup": bad_json}, format="multipart").status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        no_version = upload({"data": {}})
        self.assertEqual(
            self.client.post(url, {"backup": no_version}, format="multipart").status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        not_json = SimpleUploadedFile("backup.txt", b"{}", content_type="text/plain")
        self.assertEqual(
            self.client.post(url, {"backup": not_json}, format="multipart").status_code,
            status.HTTP_400_BAD_REQUEST,
        )

    def test_history_and_stats(self) -> None:
        self.client.get(reverse("backup-export"))
        history = self.client.get(reverse("backup-history"))
        self.assertEqual(history.status_code, status.HTTP_200_OK)
        self.assertEqual(history.data[0]["created_by_username"], "admin")

        stats = self.client.get(reverse("backup-stats"))
        self.assertEqual(stats.status_code, status.HTTP_200_OK)
        self.assertEqual(stats.data["statistics"]["apartments"], 1)
        self.assertEqual(stats.data["statistics"]["backups"], 1)
        self.assertEqual(stats.data["recent_activity"][0]["action"], "EXPORT")

    def test_backup_is_admin_only(self) -> None:
        manager = User.objects.create_user(
            username="manager", email="manager@example.com", password="ManagerPass1", role=User.RoleChoices.MANAGER
        )
        self.client.force_authenticate(manager)
        self.assertEqual(self.client.get(reverse("backup-export")).status_code, status.HTTP_403_FORBIDDEN)
