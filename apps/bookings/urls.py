"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import BookingViewSet

router = SimpleRouter()
router.register(r"", BookingViewSet, basename="booking")

# DELETE on the collection wipes every booking
booking_collection = BookingViewSet.as_view({"get": "list", "post": "create", "delete": "destroy_all"})

urlpatterns = [
    path("", booking_collection, name="booking-collection"),
    path("", include(router.urls)),
]
