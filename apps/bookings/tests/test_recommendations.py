"""Tests for the best-dates ranking."""

from __future__ import annotations

from datetime import date, datetime, timezone

from django.test import SimpleTestCase

from apps.bookings.domain.entities import Apartment, Booking, ToApartment
from apps.bookings.domain.recommendations import BestDatesWeights, daily_occupancy, recommend_best_dates
from shared.domain.value_objects import StayPeriod

# February 2021 starts on a Monday and has exactly four weeks
YEAR, MONTH = 2021, 2


def utc(day: int) -> datetime:
    return datetime(YEAR, MONTH, day, tzinfo=timezone.utc)


class BestDatesTests(SimpleTestCase):
    def test_empty_month_prefers_weekdays(self) -> None:
        apartment = Apartment(id="A", name="A")
        result = recommend_best_dates([apartment], [], YEAR, MONTH, stay_days=1, tz=timezone.utc)
        self.assertEqual([r.start for r in result], [date(2021, 2, d) for d in range(1, 6)])
        self.assertTrue(all(r.score == 1.0 for r in result))

    def test_favourite_bonus_applies_when_favourite_is_free(self) -> None:
        apartment = Apartment(id="A", name="A", is_favorite=True)
        [best] = recommend_best_dates(
            [apartment], [], YEAR, MONTH, stay_days=1, weights=BestDatesWeights(limit=1), tz=timezone.utc
        )
        self.assertTrue(best.has_favorite_available)
        self.assertAlmostEqual(best.score, 1.1)

    def test_weekend_penalties(self) -> None:
        apartment = Apartment(id="A", name="A")
        result = recommend_best_dates(
            [apartment], [], YEAR, MONTH, stay_days=1, weights=BestDatesWeights(limit=28), tz=timezone.utc
        )
        by_start = {r.start: r for r in result}
        saturday, sunday = by_start[date(2021, 2, 6)], by_start[date(2021, 2, 7)]
        self.assertTrue(saturday.has_weekend_start)
        self.assertAlmostEqual(saturday.score, 0.8)
        self.assertTrue(sunday.has_sunday)
        self.assertAlmostEqual(sunday.score, 0.7)

    def test_occupied_days_rank_lower(self) -> None:
        apartment = Apartment(id="A", name="A")
        existing = Booking(
            id="X",
            guest_name="Guest",
            stay=StayPeriod(utc(1), utc(3)),
            assignment=ToApartment("A"),
        )
        result = recommend_best_dates([apartment], [existing], YEAR, MONTH, stay_days=1, tz=timezone.utc)
        self.assertEqual(
            [r.start for r in result],
            [date(2021, 2, 3), date(2021, 2, 4), date(2021, 2, 5), date(2021, 2, 8), date(2021, 2, 9)],
        )

    def test_stay_length_is_clamped(self) -> None:
        apartment = Apartment(id="A", name="A")
        result = recommend_best_dates([apartment], [], YEAR, MONTH, stay_days=30, tz=timezone.utc)
        self.assertEqual((result[0].end - result[0].start).days, 13)

    def test_custom_weights_from_settings_mapping(self) -> None:
        weights = BestDatesWeights.from_mapping({"sunday_penalty": 0.0, "unknown": 1})
        self.assertEqual(weights.sunday_penalty, 0.0)
        self.assertEqual(weights.limit, 5)

    def test_daily_occupancy_covers_whole_month(self) -> None:
        existing = Booking(id="X", guest_name="Guest", stay=StayPeriod(utc(1), utc(3)))
        days = daily_occupancy([existing], YEAR, MONTH, tz=timezone.utc)
        self.assertEqual(len(days), 28)
        self.assertEqual([count for _, count in days[:4]], [1, 1, 0, 0])
