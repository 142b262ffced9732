"""Apartments managed by the booking scheduler."""
