"""
Common Value Objects

Value objects used across the apartment and booking contexts:
- overlaps: half-open interval intersection predicate
- StayPeriod: a stay from check-in (inclusive) to check-out (exclusive)
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import ValueObject
from shared.domain.exceptions import InvalidInterval


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """
    Check whether two half-open intervals intersect

    Both pairs must satisfy end > start. A shared boundary instant is not
    an overlap: a check-out at T leaves room for a check-in at T.
    """
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class StayPeriod(ValueObject):
    """
    Stay period value object

    Represents the range [check_in, check_out). Used for bookings and
    availability queries.
    """
    check_in: datetime
    check_out: datetime

    def __post_init__(self):
        if self.check_out <= self.check_in:
            raise InvalidInterval(self.check_in, self.check_out)

    def overlaps_with(self, other: 'StayPeriod') -> bool:
        """
        Check if this stay overlaps with another

        Examples:
            - [10th, 15th) overlaps with [12th, 14th) -> True
            - [10th, 15th) overlaps with [15th, 18th) -> False (turnover)
        """
        if not isinstance(other, StayPeriod):
            raise TypeError("Can only check overlap with another StayPeriod")
        return overlaps(self.check_in, self.check_out, other.check_in, other.check_out)

    def contains(self, instant: datetime) -> bool:
        """
        Check if an instant falls within this stay

        Note: check_in is inclusive, check_out is exclusive
        """
        return self.check_in <= instant < self.check_out

    def __str__(self):
        return f"{self.check_in:%d.%m.%Y %H:%M} - {self.check_out:%d.%m.%Y %H:%M}"

    def __repr__(self):
        return f"StayPeriod({self.check_in.isoformat()}, {self.check_out.isoformat()})"
