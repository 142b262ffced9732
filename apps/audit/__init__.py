"""Audit trail of every write made through the API."""
