"""Backup API views (admin only)."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.parsers import FormParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsAdmin

from .models import BackupMetadata
from .serializers import BackupImportSerializer, BackupMetadataSerializer
from .services import InvalidBackup, build_export, database_statistics, import_backup, parse_backup

HISTORY_LIMIT = 50


class BackupExportView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):  # type: ignore
        filename, document = build_export(request.user)
        response = Response(document)
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response


class BackupImportView(APIView):
    permission_classes = [IsAdmin]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):  # type: ignore
        serializer = BackupImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data["backup"]
        replace = serializer.validated_data["replace"]
        try:
            document = parse_backup(upload.read())
        except InvalidBackup as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        counts = import_backup(
            document,
            request.user,
            replace=replace,
            filename=upload.name,
            file_size=upload.size or 0,
        )
        return Response(
            {"detail": "Data imported successfully.", "imported": counts.to_dict(), "replace": replace}
        )


class BackupHistoryView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):  # type: ignore
        backups = BackupMetadata.objects.select_related("created_by")[:HISTORY_LIMIT]
        return Response(BackupMetadataSerializer(backups, many=True).data)


class BackupStatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):  # type: ignore
        return Response(database_statistics())
