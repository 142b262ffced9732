from django.contrib import admin  # type: ignore

from .models import BackupMetadata


@admin.register(BackupMetadata)
class BackupMetadataAdmin(admin.ModelAdmin):
    list_display = ("filename", "kind", "file_size", "created_by", "created_at")
    list_filter = ("kind",)
    readonly_fields = ("created_at",)
