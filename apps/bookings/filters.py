"""FilterSet definitions for booking listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    apartment_id = django_filters.CharFilter(field_name="apartment_id", lookup_expr="exact")
    guest_name = django_filters.CharFilter(field_name="guest_name", lookup_expr="icontains")
    unassigned = django_filters.BooleanFilter(method="filter_unassigned")
    check_in_after = django_filters.IsoDateTimeFilter(field_name="check_out", lookup_expr="gt")
    check_out_before = django_filters.IsoDateTimeFilter(field_name="check_in", lookup_expr="lt")

    class Meta:
        model = Booking
        fields = ["apartment_id", "guest_name"]

    def filter_unassigned(self, queryset, name, value):  # type: ignore
        if value is None:
            return queryset
        if value:
            return queryset.filter(apartment__isnull=True, temporary_apartment__isnull=True)
        return queryset.exclude(apartment__isnull=True, temporary_apartment__isnull=True)
