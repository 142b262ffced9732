"""URL declarations for the apartments app."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import ApartmentViewSet

router = SimpleRouter()
router.register(r"", ApartmentViewSet, basename="apartment")

urlpatterns = [
    path("", include(router.urls)),
]
