"""URL declarations for the backup app."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import BackupExportView, BackupHistoryView, BackupImportView, BackupStatsView

urlpatterns = [
    path("export/", BackupExportView.as_view(), name="backup-export"),
    path("import/", BackupImportView.as_view(), name="backup-import"),
    path("history/", BackupHistoryView.as_view(), name="backup-history"),
    path("stats/", BackupStatsView.as_view(), name="backup-stats"),
]
