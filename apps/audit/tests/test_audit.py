"""Tests for the audit trail."""

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.audit.models import AuditLog
from apps.audit.services import cleanup_audit_logs, record_audit
from apps.bookings.domain.events import AutoAssignmentCompleted, BookingAssigned
from apps.users.models import User
from shared.application.message_bus import message_bus


class AuditHandlerTests(TestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(username="m", email="m@example.com", password="Secret1")

    def test_booking_assigned_event_is_recorded(self) -> None:
        message_bus.publish_events([
            BookingAssigned(
                actor_id=self.user.pk,
                booking_id="b-1",
                apartment_id="a-1",
                previous_temporary_apartment="Hotel",
            )
        ])
        entry = AuditLog.objects.get(action=AuditLog.ActionChoices.ASSIGN)
        self.assertEqual(entry.user, self.user)
        self.assertEqual(entry.record_id, "b-1")
        self.assertEqual(entry.old_values["temporary_apartment"], "Hotel")
        self.assertEqual(entry.new_values["apartment_id"], "a-1")

    def test_auto_assignment_summary_is_recorded(self) -> None:
        message_bus.publish_events([
            AutoAssignmentCompleted(assigned_count=2, failed_count=1, failed_booking_ids=["b-9"])
        ])
        entry = AuditLog.objects.get(action=AuditLog.ActionChoices.AUTO_ASSIGN)
        self.assertIsNone(entry.user)
        self.assertEqual(entry.new_values["failed_booking_ids"], ["b-9"])

    def test_cleanup_removes_old_entries_and_logs_itself(self) -> None:
        old = record_audit(action="CREATE", table_name="bookings", record_id="old")
        AuditLog.objects.filter(pk=old.pk).update(timestamp=timezone.now() - timedelta(days=120))
        record_audit(action="CREATE", table_name="bookings", record_id="new")

        deleted = cleanup_audit_logs(90, user=self.user)

        self.assertEqual(deleted, 1)
        self.assertFalse(AuditLog.objects.filter(record_id="old").exists())
        cleanup = AuditLog.objects.get(action=AuditLog.ActionChoices.CLEANUP)
        self.assertEqual(cleanup.new_values, {"days_old": 90, "deleted_count": 1})


class AuditAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin", email="admin@example.com", password="AdminPass1", role=User.RoleChoices.ADMIN
        )
        self.manager = User.objects.create_user(
            username="manager", email="manager@example.com", password="ManagerPass1", role=User.RoleChoices.MANAGER
        )
        record_audit(user=self.admin, action="CREATE", table_name="apartments", record_id="a-1")
        record_audit(user=self.admin, action="DELETE", table_name="bookings", record_id="b-1")

    def test_list_is_admin_only_and_filterable(self) -> None:
        url = reverse("audit-log-list")
        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get(url, {"table_name": "bookings"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["record_id"] for row in response.data["results"]], ["b-1"])
        self.assertEqual(response.data["results"][0]["username"], "admin")

    def test_cleanup_endpoint(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("audit-log-cleanup")
        response = self.client.delete(f"{url}?days=0")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["deleted_count"], 2)

        response = self.client.delete(f"{url}?days=abc")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
