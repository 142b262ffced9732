"""API tests for authentication endpoints."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken

from apps.users.models import User


class AuthAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            username="manager",
            email="manager@example.com",
            password="CorrectPassword1",
            role=User.RoleChoices.MANAGER,
        )

    def _login(self, username: str = "manager", password: str = "CorrectPassword1"):
        return self.client.post(reverse("auth:login"), {"username": username, "password": password}, format="json")

    def test_login_returns_tokens_and_updates_last_login(self) -> None:
        response = self._login()
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data["tokens"])
        self.assertIn("refresh", response.data["tokens"])
        self.assertEqual(response.data["user"]["role"], "manager")
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_login_rejects_wrong_password(self) -> None:
        response = self._login(password="wrong")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_user_cannot_login(self) -> None:
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])
        response = self._login()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_profile_with_access_token(self) -> None:
        tokens = self._login().data["tokens"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = self.client.get(reverse("auth:profile"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["username"], "manager")

    def test_refresh_token(self) -> None:
        tokens = self._login().data["tokens"]
        response = self.client.post(reverse("auth:token_refresh"), {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)

    def test_logout_blacklists_refresh_token(self) -> None:
        tokens = self._login().data["tokens"]
        self.client.force_authenticate(self.user)
        response = self.client.post(reverse("auth:logout"), {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(reverse("auth:token_refresh"), {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_all_revokes_every_session(self) -> None:
        self._login()
        self._login()
        self.client.force_authenticate(self.user)
        response = self.client.post(reverse("auth:logout-all"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["revoked"], 2)
        self.assertEqual(BlacklistedToken.objects.filter(token__user=self.user).count(), 2)

    def test_change_password(self) -> None:
        self.client.force_authenticate(self.user)
        url = reverse("auth:change-password")

        response = self.client.post(url, {"current_password": "nope", "new_password": "NewPass1"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {"current_password": "CorrectPassword1", "new_password": "short"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(
            url, {"current_password": "CorrectPassword1", "new_password": "NewPass1"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("NewPass1"))


class RoleHierarchyTests(APITestCase):
    def test_roles_are_ordered(self) -> None:
        viewer = User(username="v", email="v@example.com", role=User.RoleChoices.VIEWER)
        manager = User(username="m", email="m@example.com", role=User.RoleChoices.MANAGER)
        admin = User(username="a", email="a@example.com", role=User.RoleChoices.ADMIN)
        self.assertFalse(viewer.has_role("manager"))
        self.assertTrue(manager.has_role("viewer"))
        self.assertFalse(manager.has_role("admin"))
        self.assertTrue(admin.has_role("manager"))

    def test_superuser_is_admin(self) -> None:
        user = User.objects.create_superuser(username="root", email="root@example.com", password="RootPass1")
        self.assertEqual(user.role, User.RoleChoices.ADMIN)
        self.assertTrue(user.is_admin())
