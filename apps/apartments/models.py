"""Apartment model."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import Apartment as ApartmentEntity, normalize_properties
from shared.infrastructure.identifiers import new_identifier


class Apartment(models.Model):
    """Квартира, в которую распределяются бронирования."""

    id = models.CharField(primary_key=True, max_length=64, default=new_identifier, editable=False)
    name = models.CharField(_("name"), max_length=200)
    properties = models.JSONField(
        _("properties"),
        default=list,
        blank=True,
        help_text=_("Amenity tags; order is irrelevant, duplicates are dropped."),
    )
    is_favorite = models.BooleanField(_("favourite"), default=False, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="apartments_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name", "created_at"]
        verbose_name = _("apartment")
        verbose_name_plural = _("apartments")

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        self.properties = list(normalize_properties(self.properties or []))
        super().save(*args, **kwargs)

    def to_domain(self) -> ApartmentEntity:
        return ApartmentEntity(
            id=self.pk,
            name=self.name,
            properties=tuple(self.properties or ()),
            is_favorite=self.is_favorite,
        )

    def snapshot(self) -> dict:
        return {
            "name": self.name,
            "properties": list(self.properties or []),
            "is_favorite": self.is_favorite,
        }
