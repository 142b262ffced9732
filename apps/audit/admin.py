from django.contrib import admin  # type: ignore

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "action", "table_name", "record_id", "user")
    list_filter = ("action", "table_name")
    search_fields = ("record_id", "user__username")
    readonly_fields = ("timestamp",)
