"""Views for authentication flows (login, token refresh, logout, password change)."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.permissions import AllowAny, IsAuthenticated  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore
from rest_framework_simplejwt.exceptions import TokenError  # type: ignore
from rest_framework_simplejwt.token_blacklist.models import (  # type: ignore
    BlacklistedToken,
    OutstandingToken,
)
from rest_framework_simplejwt.tokens import RefreshToken  # type: ignore

from apps.audit.models import AuditLog
from apps.audit.services import record_audit

from .auth_serializers import ChangePasswordSerializer, LoginSerializer, LogoutSerializer
from .serializers import UserSerializer

logger = logging.getLogger(__name__)


def _tokens_for_user(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def blacklist_user_tokens(user) -> int:
    """Blacklist every outstanding refresh token of ``user``."""
    count = 0
    for token in OutstandingToken.objects.filter(user=user):
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        count += int(created)
    return count


class LoginView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):  # type: ignore
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        logger.info("User %s logged in", user.username)
        data = {
            "user": UserSerializer(user).data,
            "tokens": _tokens_for_user(user),
        }
        return Response(data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            RefreshToken(serializer.validated_data["refresh"]).blacklist()
        except TokenError:
            return Response({"detail": "Invalid or expired refresh token."}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"detail": "Logged out."}, status=status.HTTP_200_OK)


class LogoutAllView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):  # type: ignore
        revoked = blacklist_user_tokens(request.user)
        logger.info("User %s logged out from all devices (%d tokens)", request.user.username, revoked)
        return Response({"detail": "Logged out from all devices.", "revoked": revoked})


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):  # type: ignore
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = request.user
        with transaction.atomic():
            user.set_password(serializer.validated_data["new_password"])
            user.save(update_fields=["password", "updated_at"])
            blacklist_user_tokens(user)
            record_audit(
                user=user,
                action=AuditLog.ActionChoices.CHANGE_PASSWORD,
                table_name="users",
                record_id=user.pk,
            )
        return Response({"detail": "Password changed. Please sign in again."})


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):  # type: ignore
        return Response(UserSerializer(request.user).data)
