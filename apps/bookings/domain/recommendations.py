"""
Best Dates

Ranks candidate stay windows inside a month by how empty the portfolio is.
This is a reporting aid, not a scheduling decision: nothing here is
written back.

Score of a window:
    1 - occupancy_rate
    + favorite_bonus          if a favourite apartment is free for the window
    - sunday_penalty          if any day of the stay is a Sunday
    - saturday_start_penalty  if the stay starts on a Saturday
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, List, Sequence

from apps.bookings.domain.availability import AvailabilityIndex
from apps.bookings.domain.entities import Apartment, Booking

SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class BestDatesWeights:
    favorite_bonus: float = 0.1
    sunday_penalty: float = 0.3
    saturday_start_penalty: float = 0.2
    limit: int = 5
    max_stay_days: int = 14

    @classmethod
    def from_mapping(cls, values: dict | None) -> 'BestDatesWeights':
        values = values or {}
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class DateRecommendation:
    start: date
    end: date                     # last night of the stay
    occupancy_rate: float
    score: float
    has_sunday: bool
    has_weekend_start: bool
    has_favorite_available: bool

    @property
    def availability_percent(self) -> int:
        return round((1 - self.occupancy_rate) * 100)

    def to_dict(self) -> dict:
        return {
            'start_date': self.start.isoformat(),
            'end_date': self.end.isoformat(),
            'occupancy_rate': round(self.occupancy_rate, 4),
            'availability_percent': self.availability_percent,
            'score': round(self.score, 4),
            'has_sunday': self.has_sunday,
            'has_weekend_start': self.has_weekend_start,
            'has_favorite_available': self.has_favorite_available,
        }


def month_days(year: int, month: int) -> List[date]:
    return [date(year, month, d) for d in range(1, monthrange(year, month)[1] + 1)]


def _midnight(day: date, tz: tzinfo | None) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def daily_occupancy(
    bookings: Iterable[Booking],
    year: int,
    month: int,
    tz: tzinfo | None = None,
) -> List[tuple]:
    """(day, bookings occupying the start of that day) for every day of the month"""
    index = AvailabilityIndex((), bookings)
    return [(day, index.occupancy_for_day(_midnight(day, tz))) for day in month_days(year, month)]


def recommend_best_dates(
    apartments: Sequence[Apartment],
    bookings: Iterable[Booking],
    year: int,
    month: int,
    stay_days: int = 3,
    weights: BestDatesWeights | None = None,
    tz: tzinfo | None = None,
) -> List[DateRecommendation]:
    """
    Best `weights.limit` windows of `stay_days` days that fit in the month

    A window starting on day D covers the nights D .. D+stay_days-1 and is
    checked for availability as [D 00:00, D+stay_days 00:00).
    """
    weights = weights or BestDatesWeights()
    stay_days = max(1, min(weights.max_stay_days, stay_days))
    index = AvailabilityIndex(apartments, bookings)
    days = month_days(year, month)
    apartment_count = len(apartments)

    occupancy = {day: index.occupancy_for_day(_midnight(day, tz)) for day in days}

    candidates = []
    for offset in range(len(days) - stay_days + 1):
        stay = days[offset:offset + stay_days]
        start, last = stay[0], stay[-1]

        free = index.available_apartments(
            _midnight(start, tz), _midnight(last + timedelta(days=1), tz)
        )
        has_favorite = any(a.is_favorite for a in free)
        has_sunday = any(day.weekday() == SUNDAY for day in stay)
        saturday_start = start.weekday() == SATURDAY

        average = sum(occupancy[day] for day in stay) / len(stay)
        rate = average / apartment_count if apartment_count else 0.0

        score = 1 - rate
        if has_favorite:
            score += weights.favorite_bonus
        if has_sunday:
            score -= weights.sunday_penalty
        if saturday_start:
            score -= weights.saturday_start_penalty

        candidates.append(DateRecommendation(
            start=start,
            end=last,
            occupancy_rate=rate,
            score=score,
            has_sunday=has_sunday,
            has_weekend_start=saturday_start,
            has_favorite_available=has_favorite,
        ))

    candidates.sort(key=lambda c: -c.score)
    return candidates[:weights.limit]
