"""API tests for user management."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.apartments.models import Apartment
from apps.audit.models import AuditLog
from apps.users.models import User


class UserManagementAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            username="admin",
            email="admin@example.com",
            password="AdminPass1",
            role=User.RoleChoices.ADMIN,
        )
        self.manager = User.objects.create_user(
            username="manager",
            email="manager@example.com",
            password="ManagerPass1",
            role=User.RoleChoices.MANAGER,
        )
        self.client.force_authenticate(self.admin)
        self.list_url = reverse("user-list")

    def test_only_admin_can_list_users(self) -> None:
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_200_OK)
        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_403_FORBIDDEN)

    def test_create_user(self) -> None:
        payload = {"username": "newbie", "email": "newbie@example.com", "password": "Secret1", "role": "viewer"}
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertNotIn("password", response.data)
        user = User.objects.get(username="newbie")
        self.assertTrue(user.check_password("Secret1"))
        self.assertTrue(AuditLog.objects.filter(action="CREATE", table_name="users", record_id=str(user.pk)).exists())

    def test_duplicate_email_is_rejected(self) -> None:
        payload = {"username": "other", "email": "MANAGER@example.com", "password": "Secret1"}
        response = self.client.post(self.list_url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_delete_self(self) -> None:
        response = self.client.delete(reverse("user-detail", args=[self.admin.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_user_with_created_data_cannot_be_deleted(self) -> None:
        Apartment.objects.create(name="Loft", created_by=self.manager)
        response = self.client.delete(reverse("user-detail", args=[self.manager.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["apartment_count"], 1)
        self.assertTrue(User.objects.filter(pk=self.manager.pk).exists())

    def test_delete_user(self) -> None:
        response = self.client.delete(reverse("user-detail", args=[self.manager.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.manager.pk).exists())

    def test_reset_password(self) -> None:
        url = reverse("user-reset-password", args=[self.manager.pk])
        response = self.client.post(url, {"new_password": "Fresh12"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.manager.refresh_from_db()
        self.assertTrue(self.manager.check_password("Fresh12"))

    def test_update_role(self) -> None:
        url = reverse("user-detail", args=[self.manager.pk])
        response = self.client.patch(url, {"role": "admin"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.manager.refresh_from_db()
        self.assertEqual(self.manager.role, "admin")

    def test_stats(self) -> None:
        self.manager.is_active = False
        self.manager.save(update_fields=["is_active"])
        AuditLog.objects.create(user=self.admin, action="CREATE", table_name="apartments")

        response = self.client.get(reverse("user-stats"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total"], 2)
        self.assertEqual(response.data["active"], 1)
        self.assertEqual(response.data["inactive"], 1)
        self.assertEqual(response.data["by_role"], {"viewer": 0, "manager": 1, "admin": 1})
        self.assertEqual(response.data["most_active"][0]["username"], "admin")
