import django.core.serializers.json
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("CREATE", "Create"),
                            ("UPDATE", "Update"),
                            ("DELETE", "Delete"),
                            ("DELETE_ALL", "Delete all"),
                            ("BATCH_CREATE", "Batch create"),
                            ("ASSIGN", "Assign"),
                            ("UNASSIGN", "Unassign"),
                            ("AUTO_ASSIGN", "Auto assign"),
                            ("RESET_PASSWORD", "Reset password"),
                            ("CHANGE_PASSWORD", "Change password"),
                            ("EXPORT", "Export"),
                            ("IMPORT", "Import"),
                            ("CLEANUP", "Cleanup"),
                        ],
                        max_length=32,
                    ),
                ),
                ("table_name", models.CharField(max_length=64)),
                ("record_id", models.CharField(blank=True, max_length=64, null=True)),
                ("old_values", models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ("new_values", models.JSONField(blank=True, encoder=django.core.serializers.json.DjangoJSONEncoder, null=True)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_logs",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [
                    models.Index(fields=["user", "timestamp"], name="audit_user_ts_idx"),
                    models.Index(fields=["table_name", "action"], name="audit_table_action_idx"),
                ],
            },
        ),
    ]
