"""
Domain models for doctor availability and dashboard analytics.
"""

from dataclasses import dataclass, field
from datetime import time
from typing import Iterator, List, Optional

from pendulum import Date, DateTime

from .exceptions import ValidationError


# 0=Sunday, 6=Saturday
WEEKDAY_NAMES = {
    0: "Domingo",
    1: "Segunda",
    2: "Terça",
    3: "Quarta",
    4: "Quinta",
    5: "Sexta",
    6: "Sábado",
}


def sunday_based_weekday(value: Date) -> int:
    """Return the weekday of a date or datetime with 0=Sunday, 6=Saturday."""
    return value.isoweekday() % 7


def format_currency(amount_in_cents: int) -> str:
    """
    Format an amount in cents as Brazilian Real.

    Example: 123456 -> "R$ 1.234,56"
    """
    sign = "-" if amount_in_cents < 0 else ""
    reais, cents = divmod(abs(amount_in_cents), 100)
    grouped = f"{reais:,}".replace(",", ".")
    return f"{sign}R$ {grouped},{cents:02d}"


@dataclass(frozen=True)
class DateRange:
    """
    Represents an immutable date range, inclusive on both ends.

    Invariant: start must not be after end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start {self.start} must not be after end {self.end}")

    def contains(self, instant: DateTime) -> bool:
        """Check if an instant falls within the range (bounds included)."""
        return self.start <= instant <= self.end

    def days(self) -> Iterator[Date]:
        """Yield every calendar date covered by the range, in order."""
        current = self.start.date()
        last = self.end.date()
        while current <= last:
            yield current
            current = current.add(days=1)

    def __str__(self) -> str:
        return f"{self.start.format('DD/MM/YYYY')} - {self.end.format('DD/MM/YYYY')}"


@dataclass(frozen=True)
class DoctorAvailability:
    """
    A doctor's recurring weekly availability.

    The weekday range is circular and may wrap across the week boundary
    (from=5, to=1 covers Friday through Monday). The time-of-day range
    never wraps: from_time must be before to_time.
    """
    from_week_day: int
    to_week_day: int
    from_time: time
    to_time: time

    def __post_init__(self):
        for day in (self.from_week_day, self.to_week_day):
            if day not in WEEKDAY_NAMES:
                raise ValueError(f"Week day must be between 0 and 6, got {day}")
        if self.from_time >= self.to_time:
            raise ValueError(
                f"Start time {self.from_time} must be before end time {self.to_time}"
            )


@dataclass
class Doctor:
    """A doctor on a clinic's roster."""
    id: str
    clinic_id: str
    name: str
    specialty: str
    appointment_price_in_cents: int
    availability: DoctorAvailability
    avatar_image_url: Optional[str] = None

    def format_price(self) -> str:
        return format_currency(self.appointment_price_in_cents)

    def initials(self) -> str:
        """Up to two uppercase initials taken from the doctor's name."""
        return "".join(part[0] for part in self.name.split())[:2].upper()


@dataclass(frozen=True)
class AppointmentRecord:
    """
    An appointment as read from the appointment store.

    Read-only: the analytics pipeline never mutates appointments.
    """
    id: str
    clinic_id: str
    doctor_id: str
    patient_id: str
    appointment_date: DateTime
    appointment_price_in_cents: int


@dataclass(frozen=True)
class AnalyticsQuery:
    """
    Parameters of one dashboard computation.

    date_from and date_to bound the reporting window (inclusive). Choosing a
    default window when the user gave none is up to the caller.
    """
    clinic_id: str
    date_from: DateTime
    date_to: DateTime

    def __post_init__(self):
        if self.date_from > self.date_to:
            raise ValidationError(
                f"Invalid reporting window: {self.date_from} is after {self.date_to}",
                errors={"date_to": ["End date must not be before start date"]},
            )

    @property
    def reporting_window(self) -> DateRange:
        return DateRange(start=self.date_from, end=self.date_to)


@dataclass
class AvailabilityWindow:
    """
    A concrete occurrence of a doctor's availability, for display.
    """
    start: DateTime
    end: DateTime

    def format_days(self) -> str:
        """Format: Segunda a Sexta"""
        start_day = WEEKDAY_NAMES[sunday_based_weekday(self.start)]
        end_day = WEEKDAY_NAMES[sunday_based_weekday(self.end)]
        return f"{start_day} a {end_day}"

    def format_hours(self) -> str:
        """Format: 08:00 às 17:00"""
        return f"{self.start.format('HH:mm')} às {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class DailyPoint:
    """Appointment volume and revenue for one calendar date."""
    date: Date
    appointment_count: int
    revenue_in_cents: int


@dataclass(frozen=True)
class DoctorRanking:
    doctor_id: str
    name: str
    specialty: str
    appointment_count: int
    avatar_image_url: Optional[str] = None


@dataclass(frozen=True)
class SpecialtyRanking:
    specialty: str
    appointment_count: int


@dataclass
class DashboardSnapshot:
    """
    The composed result of one dashboard computation.

    Totals and rankings follow the reporting window; the daily series
    follows the rolling window. Patient and doctor totals are roster sizes.
    """
    clinic_id: str
    reporting_window: DateRange
    rolling_window: DateRange
    total_revenue_in_cents: int
    total_appointments: int
    total_patients: int
    total_doctors: int
    top_doctors: List[DoctorRanking] = field(default_factory=list)
    top_specialties: List[SpecialtyRanking] = field(default_factory=list)
    daily_series: List[DailyPoint] = field(default_factory=list)

    def format_total_revenue(self) -> str:
        return format_currency(self.total_revenue_in_cents)
