from django.contrib import admin  # type: ignore

from .models import Apartment


@admin.register(Apartment)
class ApartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "is_favorite", "created_by", "created_at")
    list_filter = ("is_favorite",)
    search_fields = ("name",)
    readonly_fields = ("id", "created_at", "updated_at")
