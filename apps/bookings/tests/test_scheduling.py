"""Unit tests for the scheduling core (no database)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from django.test import SimpleTestCase

from apps.bookings.domain.assignment import AutoAssigner, check_manual_assignment, plan_auto_assignment
from apps.bookings.domain.availability import available_apartments, occupancy_for_day
from apps.bookings.domain.entities import (
    UNASSIGNED,
    Apartment,
    Booking,
    ToApartment,
    ToTemporary,
    assignment_from_fields,
    normalize_properties,
)
from apps.bookings.domain.errors import AssignmentConflict, InvalidInterval, NotFound
from apps.bookings.domain.events import BookingAssigned, BookingUnassigned
from shared.domain.value_objects import StayPeriod, overlaps


def at(day: str, hour: int = 0) -> datetime:
    return datetime.fromisoformat(day).replace(hour=hour, tzinfo=timezone.utc)


def booking(booking_id: str, check_in: datetime, check_out: datetime, apartment_id: str | None = None) -> Booking:
    return Booking(
        id=booking_id,
        guest_name=f"Guest {booking_id}",
        stay=StayPeriod(check_in, check_out),
        assignment=ToApartment(apartment_id) if apartment_id else UNASSIGNED,
    )


class OverlapTests(SimpleTestCase):
    def test_overlap_is_symmetric(self) -> None:
        t = [at("2024-01-01") + timedelta(days=i) for i in range(6)]
        intervals = [(t[0], t[2]), (t[1], t[3]), (t[2], t[4]), (t[0], t[5]), (t[4], t[5])]
        for a in intervals:
            for b in intervals:
                self.assertEqual(overlaps(*a, *b), overlaps(*b, *a), (a, b))

    def test_shared_boundary_is_not_an_overlap(self) -> None:
        t0, t1, t2 = at("2024-01-01"), at("2024-01-02"), at("2024-01-03")
        self.assertFalse(overlaps(t0, t1, t1, t2))
        self.assertFalse(overlaps(t1, t2, t0, t1))
        self.assertTrue(overlaps(t0, t2, t1, t2))

    def test_stay_period_rejects_empty_or_reversed_interval(self) -> None:
        with self.assertRaises(InvalidInterval):
            StayPeriod(at("2024-01-02"), at("2024-01-02"))
        with self.assertRaises(InvalidInterval):
            StayPeriod(at("2024-01-03"), at("2024-01-02"))


class AssignmentVariantTests(SimpleTestCase):
    def test_both_fields_set_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            assignment_from_fields("A1", "Hotel")

    def test_fields_map_to_variants(self) -> None:
        self.assertEqual(assignment_from_fields(None, None), UNASSIGNED)
        self.assertEqual(assignment_from_fields("A1", None), ToApartment("A1"))
        self.assertEqual(assignment_from_fields(None, " Hotel "), ToTemporary("Hotel"))

    def test_properties_are_deduplicated_in_order(self) -> None:
        self.assertEqual(normalize_properties(["wifi", " parking", "wifi", "", "parking"]), ("wifi", "parking"))

    def test_bare_string_property_is_one_tag(self) -> None:
        self.assertEqual(normalize_properties(" sea view "), ("sea view",))

    def test_moving_to_temporary_clears_apartment_and_emits_event(self) -> None:
        b = booking("B1", at("2024-01-01"), at("2024-01-03"), apartment_id="A1")
        b.assign_temporary("Hotel Central", actor_id=7)
        self.assertIsNone(b.apartment_id)
        self.assertEqual(b.temporary_apartment, "Hotel Central")
        [event] = b.events
        self.assertIsInstance(event, BookingAssigned)
        self.assertEqual(event.previous_apartment_id, "A1")
        self.assertEqual(event.actor_id, 7)

    def test_unassign_requires_an_assignment(self) -> None:
        b = booking("B1", at("2024-01-01"), at("2024-01-03"))
        with self.assertRaises(ValueError):
            b.unassign()
        b.assign_to_apartment("A1")
        b.clear_events()
        b.unassign()
        self.assertTrue(b.is_unassigned)
        self.assertIsInstance(b.events[0], BookingUnassigned)

    def test_reassigning_same_apartment_emits_nothing(self) -> None:
        b = booking("B1", at("2024-01-01"), at("2024-01-03"), apartment_id="A1")
        b.assign_to_apartment("A1")
        self.assertEqual(b.events, [])


class AvailabilityTests(SimpleTestCase):
    def setUp(self) -> None:
        self.a1 = Apartment(id="A1", name="One", is_favorite=False)
        self.a2 = Apartment(id="A2", name="Two", is_favorite=True)

    def test_overlapping_apartment_is_excluded(self) -> None:
        existing = [booking("X", at("2024-01-10"), at("2024-01-15"), apartment_id="A1")]
        result = available_apartments([self.a1, self.a2], existing, at("2024-01-12"), at("2024-01-14"))
        self.assertEqual([a.id for a in result], ["A2"])

    def test_favourites_come_first(self) -> None:
        result = available_apartments([self.a1, self.a2], [], at("2024-01-01"), at("2024-01-05"))
        self.assertEqual([a.id for a in result], ["A2", "A1"])

    def test_favourites_first_keeps_input_order_within_groups(self) -> None:
        apartments = [
            Apartment(id="n1", name="n1"),
            Apartment(id="f1", name="f1", is_favorite=True),
            Apartment(id="n2", name="n2"),
            Apartment(id="f2", name="f2", is_favorite=True),
        ]
        result = available_apartments(apartments, [], at("2024-01-01"), at("2024-01-02"))
        self.assertEqual([a.id for a in result], ["f1", "f2", "n1", "n2"])

    def test_checkin_at_previous_checkout_is_available(self) -> None:
        existing = [booking("X", at("2024-01-25"), at("2024-02-01", 11), apartment_id="A1")]
        result = available_apartments([self.a1], existing, at("2024-02-01", 11), at("2024-02-04", 11))
        self.assertEqual([a.id for a in result], ["A1"])

    def test_query_is_idempotent(self) -> None:
        existing = [booking("X", at("2024-01-10"), at("2024-01-15"), apartment_id="A2")]
        first = available_apartments([self.a1, self.a2], existing, at("2024-01-01"), at("2024-01-20"))
        second = available_apartments([self.a1, self.a2], existing, at("2024-01-01"), at("2024-01-20"))
        self.assertEqual([a.id for a in first], [a.id for a in second])

    def test_invalid_interval_raises(self) -> None:
        with self.assertRaises(InvalidInterval):
            available_apartments([self.a1], [], at("2024-01-05"), at("2024-01-05"))

    def test_temporary_and_unassigned_bookings_do_not_block(self) -> None:
        temporary = booking("T", at("2024-01-01"), at("2024-01-10"))
        temporary.assign_temporary("Hotel")
        pending = booking("U", at("2024-01-01"), at("2024-01-10"))
        result = available_apartments([self.a1], [temporary, pending], at("2024-01-02"), at("2024-01-03"))
        self.assertEqual([a.id for a in result], ["A1"])

    def test_occupancy_counts_checkin_but_not_checkout_day(self) -> None:
        bookings = [
            booking("X", at("2024-01-10"), at("2024-01-12"), apartment_id="A1"),
            booking("Y", at("2024-01-11"), at("2024-01-13"), apartment_id="A2"),
        ]
        self.assertEqual(occupancy_for_day(bookings, at("2024-01-10")), 1)
        self.assertEqual(occupancy_for_day(bookings, at("2024-01-11")), 2)
        self.assertEqual(occupancy_for_day(bookings, at("2024-01-12")), 1)
        self.assertEqual(occupancy_for_day(bookings, at("2024-01-12"), apartment_id="A1"), 0)


class AutoAssignerTests(SimpleTestCase):
    def test_earlier_checkin_wins_and_overlapping_booking_fails(self) -> None:
        a3 = Apartment(id="A3", name="Three")
        p = booking("P", at("2024-03-01"), at("2024-03-05"))
        q = booking("Q", at("2024-03-02"), at("2024-03-04"))
        plan = plan_auto_assignment([a3], [q, p])
        self.assertEqual(plan.apartment_for("P"), "A3")
        self.assertEqual(plan.failed, ["Q"])
        self.assertEqual((plan.assigned_count, plan.failed_count), (1, 1))

    def test_identical_windows_are_never_both_assigned(self) -> None:
        a = Apartment(id="A", name="Only")
        first = booking("B1", at("2024-04-01"), at("2024-04-03"))
        second = booking("B2", at("2024-04-01"), at("2024-04-03"))
        plan = plan_auto_assignment([a], [first, second])
        self.assertEqual(plan.assigned_count, 1)
        self.assertEqual(plan.failed_count, 1)
        # stable sort keeps input order on equal check-in
        self.assertEqual(plan.apartment_for("B1"), "A")

    def test_favourite_is_preferred(self) -> None:
        plain = Apartment(id="plain", name="Plain")
        fav = Apartment(id="fav", name="Fav", is_favorite=True)
        plan = plan_auto_assignment([plain, fav], [booking("B", at("2024-05-01"), at("2024-05-02"))])
        self.assertEqual(plan.apartment_for("B"), "fav")

    def test_repeated_booking_is_planned_once(self) -> None:
        a = Apartment(id="A", name="A")
        b = Apartment(id="B", name="B")
        x = booking("X", at("2024-06-10"), at("2024-06-12"))
        plan = AutoAssigner([a, b], [x]).plan([x, x])
        self.assertEqual(plan.assigned_count, 1)
        self.assertEqual(plan.to_dict()["assignments"], [{"booking_id": "X", "apartment_id": "A"}])

    def test_already_assigned_bookings_are_not_queued(self) -> None:
        a = Apartment(id="A", name="A")
        assigned = booking("X", at("2024-06-01"), at("2024-06-05"), apartment_id="A")
        temporary = booking("T", at("2024-06-01"), at("2024-06-05"))
        temporary.assign_temporary("Hotel")
        plan = plan_auto_assignment([a], [assigned, temporary])
        self.assertEqual(plan.assignments, [])
        self.assertEqual(plan.failed, [])

    def test_plan_never_double_books(self) -> None:
        apartments = [Apartment(id=f"A{i}", name=f"A{i}", is_favorite=i == 1) for i in range(3)]
        start = at("2024-07-01")
        bookings = [
            booking(f"B{i}", start + timedelta(days=i % 5), start + timedelta(days=(i % 5) + 1 + i % 3))
            for i in range(15)
        ]
        assigner = AutoAssigner(apartments, bookings)
        assigner.plan()
        by_apartment: dict[str, list[Booking]] = {}
        for b in assigner.index.bookings:
            if b.apartment_id:
                by_apartment.setdefault(b.apartment_id, []).append(b)
        for assigned in by_apartment.values():
            for i, left in enumerate(assigned):
                for right in assigned[i + 1:]:
                    self.assertFalse(left.stay.overlaps_with(right.stay), (left, right))

    def test_should_continue_stops_the_run(self) -> None:
        a = Apartment(id="A", name="A")
        bookings = [booking(f"B{i}", at("2024-08-01") + timedelta(days=2 * i), at("2024-08-02") + timedelta(days=2 * i)) for i in range(3)]
        calls = []

        def should_continue() -> bool:
            calls.append(1)
            return len(calls) <= 1

        plan = AutoAssigner([a], bookings).plan(should_continue=should_continue)
        self.assertTrue(plan.cancelled)
        self.assertEqual(plan.assigned_count, 1)


class ManualAssignmentTests(SimpleTestCase):
    def test_conflict_is_rejected_and_booking_untouched(self) -> None:
        a = Apartment(id="A", name="A")
        existing = booking("X", at("2024-01-10"), at("2024-01-15"), apartment_id="A")
        incoming = booking("Y", at("2024-01-12"), at("2024-01-20"))
        with self.assertRaises(AssignmentConflict) as ctx:
            check_manual_assignment([a], [existing, incoming], incoming, "A")
        self.assertEqual(ctx.exception.conflicting_booking.id, "X")
        self.assertIsNone(incoming.apartment_id)

    def test_unknown_apartment_is_not_found(self) -> None:
        incoming = booking("Y", at("2024-01-12"), at("2024-01-20"))
        with self.assertRaises(NotFound):
            check_manual_assignment([], [incoming], incoming, "missing")

    def test_booking_does_not_conflict_with_itself(self) -> None:
        a = Apartment(id="A", name="A")
        current = booking("X", at("2024-01-10"), at("2024-01-15"), apartment_id="A")
        self.assertEqual(check_manual_assignment([a], [current], current, "A"), a)
