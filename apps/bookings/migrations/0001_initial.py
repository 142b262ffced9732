import django.db.models.deletion
import shared.infrastructure.identifiers
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("apartments", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
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
                ("guest_name", models.CharField(max_length=200, verbose_name="guest name")),
                ("check_in", models.DateTimeField(verbose_name="check-in")),
                ("check_out", models.DateTimeField(verbose_name="check-out")),
                (
                    "temporary_apartment",
                    models.CharField(
                        blank=True,
                        help_text="External accommodation outside the scheduler.",
                        max_length=200,
                        null=True,
                        verbose_name="temporary apartment",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "apartment",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="apartments.apartment",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "booking",
                "verbose_name_plural": "bookings",
                "ordering": ["-check_in", "-created_at"],
                "indexes": [
                    models.Index(fields=["apartment", "check_in", "check_out"], name="booking_apartment_stay_idx"),
                    models.Index(fields=["check_in"], name="booking_check_in_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("check_out__gt", models.F("check_in"))),
                        name="booking_valid_stay",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("apartment__isnull", True), ("temporary_apartment__isnull", True), _connector="OR"),
                        name="booking_single_assignment",
                    ),
                ],
            },
        ),
    ]
