"""
Tests for the availability resolver.
"""

import pendulum
import pytest
from datetime import time

from clinicdash.domain.availability import AvailabilityResolver
from clinicdash.domain.models import DoctorAvailability


def _availability(from_day, to_day, from_time=time(8, 0), to_time=time(17, 0)):
    return DoctorAvailability(
        from_week_day=from_day,
        to_week_day=to_day,
        from_time=from_time,
        to_time=to_time,
    )


class TestWeekdayMatching:
    """Circular weekday range semantics."""

    @pytest.mark.parametrize("from_day", range(7))
    @pytest.mark.parametrize("to_day", range(7))
    def test_all_weekday_pairs(self, from_day, to_day):
        """Every (from, to) pair follows the ordered or wrapping rule."""
        availability = _availability(from_day, to_day)

        for weekday in range(7):
            if from_day <= to_day:
                expected = from_day <= weekday <= to_day
            else:
                expected = weekday >= from_day or weekday <= to_day

            assert AvailabilityResolver.weekday_matches(availability, weekday) is expected

    def test_friday_to_monday_wraps(self):
        """from=5, to=1 covers Fri, Sat, Sun, Mon only."""
        availability = _availability(5, 1)

        matching = {
            weekday for weekday in range(7)
            if AvailabilityResolver.weekday_matches(availability, weekday)
        }

        assert matching == {5, 6, 0, 1}

    def test_single_day(self):
        availability = _availability(3, 3)

        assert AvailabilityResolver.weekday_matches(availability, 3)
        assert not AvailabilityResolver.weekday_matches(availability, 2)
        assert not AvailabilityResolver.weekday_matches(availability, 4)


class TestIsWithin:
    """Weekday and time-of-day combined."""

    def test_time_bounds_are_inclusive(self):
        resolver = AvailabilityResolver()
        availability = _availability(1, 5)

        assert resolver.is_within(availability, 2, time(8, 0))
        assert resolver.is_within(availability, 2, time(17, 0))
        assert resolver.is_within(availability, 2, time(12, 30))
        assert not resolver.is_within(availability, 2, time(7, 59, 59))
        assert not resolver.is_within(availability, 2, time(17, 0, 1))

    def test_matching_weekday_but_outside_hours(self):
        resolver = AvailabilityResolver()
        availability = _availability(5, 1, time(9, 0), time(13, 30))

        assert resolver.is_within(availability, 6, time(10, 0))
        assert not resolver.is_within(availability, 6, time(14, 0))

    def test_matching_hours_but_wrong_weekday(self):
        resolver = AvailabilityResolver()
        availability = _availability(5, 1, time(9, 0), time(13, 30))

        assert not resolver.is_within(availability, 3, time(10, 0))

    def test_is_available_at_instant(self):
        """Concrete instants are read in the resolver's timezone."""
        resolver = AvailabilityResolver(timezone="America/Sao_Paulo")
        availability = _availability(1, 5, time(8, 0), time(17, 0))

        # Friday 2024-01-12 10:00 in Sao Paulo (UTC-3)
        friday_morning = pendulum.datetime(2024, 1, 12, 13, 0, tz="UTC")
        # Saturday 2024-01-13 01:00 UTC is still Friday 22:00 in Sao Paulo
        friday_night = pendulum.datetime(2024, 1, 13, 1, 0, tz="UTC")
        # Saturday 2024-01-13 10:00 in Sao Paulo
        saturday_morning = pendulum.datetime(2024, 1, 13, 13, 0, tz="UTC")

        assert resolver.is_available_at(availability, friday_morning)
        assert not resolver.is_available_at(availability, friday_night)
        assert not resolver.is_available_at(availability, saturday_morning)


class TestResolve:
    """Anchoring the weekly window to concrete instants."""

    def test_resolve_within_current_week(self):
        resolver = AvailabilityResolver()
        availability = _availability(1, 5)
        # Wednesday
        now = pendulum.datetime(2024, 1, 10, 15, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start == pendulum.datetime(2024, 1, 8, 8, 0, tz="UTC")
        assert window.end == pendulum.datetime(2024, 1, 12, 17, 0, tz="UTC")
        assert window.format_days() == "Segunda a Sexta"
        assert window.format_hours() == "08:00 às 17:00"

    def test_resolve_wrapping_range_ends_next_week(self):
        resolver = AvailabilityResolver()
        availability = _availability(5, 1, time(9, 0), time(13, 30))
        now = pendulum.datetime(2024, 1, 10, 15, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start == pendulum.datetime(2024, 1, 12, 9, 0, tz="UTC")
        assert window.end == pendulum.datetime(2024, 1, 15, 13, 30, tz="UTC")
        assert window.start < window.end

    def test_resolve_keeps_seconds(self):
        resolver = AvailabilityResolver()
        availability = _availability(3, 3, time(8, 15, 30), time(9, 45, 10))
        now = pendulum.datetime(2024, 1, 10, 7, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start == pendulum.datetime(2024, 1, 10, 8, 15, 30, tz="UTC")
        assert window.end == pendulum.datetime(2024, 1, 10, 9, 45, 10, tz="UTC")

    def test_resolve_on_sunday_uses_that_week(self):
        """Weeks start on Sunday, so a Sunday 'now' anchors to the week ahead."""
        resolver = AvailabilityResolver()
        availability = _availability(1, 5)
        now = pendulum.datetime(2024, 1, 7, 10, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start.date().isoformat() == "2024-01-08"
        assert window.end.date().isoformat() == "2024-01-12"

    def test_resolve_after_window_closed_moves_to_next_week(self):
        """On a Saturday a Mon-Fri window has ended, so next week's is returned."""
        resolver = AvailabilityResolver()
        availability = _availability(1, 5)
        now = pendulum.datetime(2024, 1, 13, 12, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start == pendulum.datetime(2024, 1, 15, 8, 0, tz="UTC")
        assert window.end == pendulum.datetime(2024, 1, 19, 17, 0, tz="UTC")
        assert window.end >= now

    def test_resolve_after_hours_on_last_day(self):
        resolver = AvailabilityResolver()
        availability = _availability(1, 5)
        now = pendulum.datetime(2024, 1, 12, 17, 0, 1, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start == pendulum.datetime(2024, 1, 15, 8, 0, tz="UTC")

    def test_resolve_on_last_instant_keeps_current_window(self):
        resolver = AvailabilityResolver()
        availability = _availability(1, 5)
        now = pendulum.datetime(2024, 1, 12, 17, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.end == now

    @pytest.mark.parametrize("now", [
        # Sunday inside Fri-Mon
        pendulum.datetime(2024, 1, 14, 12, 0, tz="UTC"),
        # Monday morning, before 13:30
        pendulum.datetime(2024, 1, 15, 10, 0, tz="UTC"),
        # Saturday
        pendulum.datetime(2024, 1, 13, 20, 0, tz="UTC"),
    ])
    def test_resolve_inside_wrapping_window_returns_running_occurrence(self, now):
        resolver = AvailabilityResolver()
        availability = _availability(5, 1, time(9, 0), time(13, 30))

        window = resolver.resolve(availability, now=now)

        assert window.start == pendulum.datetime(2024, 1, 12, 9, 0, tz="UTC")
        assert window.end == pendulum.datetime(2024, 1, 15, 13, 30, tz="UTC")

    def test_resolve_after_wrapping_window_ends(self):
        resolver = AvailabilityResolver()
        availability = _availability(5, 1, time(9, 0), time(13, 30))
        now = pendulum.datetime(2024, 1, 15, 14, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start == pendulum.datetime(2024, 1, 19, 9, 0, tz="UTC")
        assert window.end == pendulum.datetime(2024, 1, 22, 13, 30, tz="UTC")

    @pytest.mark.parametrize("day", range(7))
    @pytest.mark.parametrize("from_day", range(7))
    @pytest.mark.parametrize("to_day", range(7))
    def test_resolved_window_never_ended_before_now(self, day, from_day, to_day):
        resolver = AvailabilityResolver()
        availability = _availability(from_day, to_day)
        # 2024-01-07 is a Sunday
        now = pendulum.datetime(2024, 1, 7 + day, 18, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.end >= now
        assert window.start.subtract(weeks=1) < now

    @pytest.mark.parametrize("from_day", range(7))
    @pytest.mark.parametrize("to_day", range(7))
    def test_resolved_weekdays_match_configuration(self, from_day, to_day):
        resolver = AvailabilityResolver()
        availability = _availability(from_day, to_day)
        now = pendulum.datetime(2024, 1, 10, 15, 0, tz="UTC")

        window = resolver.resolve(availability, now=now)

        assert window.start.isoweekday() % 7 == from_day
        assert window.end.isoweekday() % 7 == to_day
        assert window.start < window.end
        assert (window.end - window.start).total_seconds() < 7 * 24 * 3600
