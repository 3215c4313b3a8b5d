"""
Resolution of a doctor's weekly availability into concrete instants.

Pure domain logic: no I/O, no state. Safe to share between threads.
"""

from datetime import time
from typing import Optional

import pendulum
from pendulum import DateTime

from .models import AvailabilityWindow, DoctorAvailability, sunday_based_weekday


class AvailabilityResolver:
    """
    Answers availability questions for a DoctorAvailability.

    Weekdays are 0=Sunday .. 6=Saturday. The weekday range is circular:
    when from_week_day > to_week_day the range wraps across the end of the
    week. The time range is a closed interval and never wraps.
    """

    def __init__(self, timezone: str = "UTC"):
        self.timezone = timezone

    @staticmethod
    def weekday_matches(availability: DoctorAvailability, weekday: int) -> bool:
        """Check if a weekday falls within the (possibly wrapping) weekday range."""
        start = availability.from_week_day
        end = availability.to_week_day

        if start <= end:
            return start <= weekday <= end

        # Wraps, e.g. Friday (5) to Monday (1)
        return weekday >= start or weekday <= end

    @staticmethod
    def time_matches(availability: DoctorAvailability, at: time) -> bool:
        """Check if a time of day falls within the window, bounds included."""
        return availability.from_time <= at <= availability.to_time

    def is_within(self, availability: DoctorAvailability, weekday: int, at: time) -> bool:
        """Check if weekday and time of day both fall within the availability."""
        return self.weekday_matches(availability, weekday) and self.time_matches(
            availability, at
        )

    def is_available_at(self, availability: DoctorAvailability, instant: DateTime) -> bool:
        """Check a concrete instant, read in the resolver's timezone."""
        local = instant.in_timezone(self.timezone)
        return self.is_within(availability, sunday_based_weekday(local), local.time())

    def resolve(
        self,
        availability: DoctorAvailability,
        now: Optional[DateTime] = None
    ) -> AvailabilityWindow:
        """
        Anchor the weekly window to its nearest concrete occurrence.

        Returns the occurrence in progress at ``now`` if there is one,
        otherwise the next one to start. The start lands on from_week_day
        at from_time; the end lands on the first to_week_day on or after the
        start date, so a wrapping range ends in the following week.

        Example (now = Wednesday 2024-01-10):
        Availability: Friday 08:00 - Monday 17:00
        Result: Fri 2024-01-12 08:00 - Mon 2024-01-15 17:00

        Example (now = Saturday 2024-01-13):
        Availability: Monday 08:00 - Friday 17:00
        Result: Mon 2024-01-15 08:00 - Fri 2024-01-19 17:00
        """
        now = (now or pendulum.now(self.timezone)).in_timezone(self.timezone)

        week_start = now.start_of("day").subtract(days=sunday_based_weekday(now))
        # Last week's occurrence may still be running when the range wraps
        start_day = week_start.add(days=availability.from_week_day).subtract(weeks=1)
        span = (availability.to_week_day - availability.from_week_day) % 7

        while True:
            start, end = self._occurrence(availability, start_day, span)
            if end >= now:
                return AvailabilityWindow(start=start, end=end)
            start_day = start_day.add(weeks=1)

    @staticmethod
    def _occurrence(availability: DoctorAvailability, start_day: DateTime, span: int):
        start = start_day.set(
            hour=availability.from_time.hour,
            minute=availability.from_time.minute,
            second=availability.from_time.second,
        )
        end = start_day.add(days=span).set(
            hour=availability.to_time.hour,
            minute=availability.to_time.minute,
            second=availability.to_time.second,
        )
        return start, end
