"""URL declarations for the audit app."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import AuditLogViewSet

router = SimpleRouter()
router.register(r"", AuditLogViewSet, basename="audit-log")

urlpatterns = [
    path("", include(router.urls)),
]
