import django.db.models.deletion
import shared.infrastructure.identifiers
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Apartment",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=shared.infrastructure.identifiers.new_identifier,
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                (
                    "properties",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Amenity tags; order is irrelevant, duplicates are dropped.",
                        verbose_name="properties",
                    ),
                ),
                ("is_favorite", models.BooleanField(db_index=True, default=False, verbose_name="favourite")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="apartments_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "apartment",
                "verbose_name_plural": "apartments",
                "ordering": ["name", "created_at"],
            },
        ),
    ]
