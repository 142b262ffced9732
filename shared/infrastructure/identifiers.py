"""Opaque identifiers for apartments and bookings."""

from __future__ import annotations

from uuid import uuid4


def new_identifier() -> str:
    """Return a fresh opaque id (a UUID4 rendered as text)."""
    return str(uuid4())
