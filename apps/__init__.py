"""Domain apps of the booking manager."""
