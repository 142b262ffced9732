"""Scheduling errors raised by the booking domain."""

from shared.domain.exceptions import DomainError, InvalidInterval, NotFound

__all__ = ["AssignmentConflict", "DomainError", "InvalidInterval", "NotFound"]


class AssignmentConflict(DomainError):
    """Raised when an assignment would double-book an apartment.

    ``conflicting_booking`` is the existing booking the caller can show.
    """

    def __init__(self, booking_id: str | None, apartment_id: str, conflicting_booking):
        self.booking_id = booking_id
        self.apartment_id = apartment_id
        self.conflicting_booking = conflicting_booking
        super().__init__(
            f"Apartment {apartment_id} is not available for the selected dates: "
            f"overlaps booking {conflicting_booking.id} ({conflicting_booking.stay})"
        )
