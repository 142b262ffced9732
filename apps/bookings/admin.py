"""Admin configuration for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("guest_name", "check_in", "check_out", "apartment", "temporary_apartment", "created_by")
    list_filter = ("apartment",)
    search_fields = ("guest_name", "temporary_apartment", "apartment__name")
    date_hierarchy = "check_in"
    readonly_fields = ("id", "created_at", "updated_at")
    list_select_related = ("apartment", "created_by")
