"""
Core reductions behind the clinic dashboard.

Every method here is a pure function over records already fetched from the
stores: no API calls, no database, no I/O. Each step is usable on its own.
"""

from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Sequence

from pendulum import Date, DateTime

from .models import (
    AppointmentRecord,
    DailyPoint,
    DateRange,
    Doctor,
    DoctorRanking,
    SpecialtyRanking,
)

DEFAULT_TOP_DOCTORS_LIMIT = 10
DEFAULT_ROLLING_WINDOW_DAYS = 10


def rolling_window(now: DateTime, days: int = DEFAULT_ROLLING_WINDOW_DAYS) -> DateRange:
    """
    The fixed window used by the daily series.

    Spans from the start of the day `days` days ago through the end of the
    day `days` days ahead, regardless of the reporting window.
    """
    return DateRange(
        start=now.subtract(days=days).start_of("day"),
        end=now.add(days=days).end_of("day"),
    )


class DashboardAggregator:
    """
    Reduces appointment, doctor and roster data into dashboard statistics.

    Algorithm:
    1. Scalar totals over the reporting window (revenue, appointment count)
    2. Doctor ranking by appointment count (left join over the roster)
    3. Specialty ranking by appointment count
    4. Daily series over the rolling window, zero-filled
    """

    def __init__(self, top_doctors_limit: int = DEFAULT_TOP_DOCTORS_LIMIT):
        self.top_doctors_limit = top_doctors_limit

    @staticmethod
    def matching_appointments(
        appointments: Iterable[AppointmentRecord],
        clinic_id: str,
        window: DateRange
    ) -> List[AppointmentRecord]:
        """Keep only appointments of the clinic that fall within the window."""
        return [
            appointment for appointment in appointments
            if appointment.clinic_id == clinic_id
            and window.contains(appointment.appointment_date)
        ]

    def total_revenue(
        self,
        appointments: Iterable[AppointmentRecord],
        clinic_id: str,
        window: DateRange
    ) -> int:
        """Sum of appointment prices in cents."""
        return sum(
            appointment.appointment_price_in_cents
            for appointment in self.matching_appointments(appointments, clinic_id, window)
        )

    def total_appointments(
        self,
        appointments: Iterable[AppointmentRecord],
        clinic_id: str,
        window: DateRange
    ) -> int:
        return len(self.matching_appointments(appointments, clinic_id, window))

    def top_doctors(
        self,
        doctors: Iterable[Doctor],
        appointments: Iterable[AppointmentRecord],
        clinic_id: str,
        window: DateRange,
        limit: int | None = None
    ) -> List[DoctorRanking]:
        """
        Rank the clinic's doctors by appointment count.

        Every doctor on the roster takes part, idle ones with a count of 0.
        Ties are broken by doctor id so the order never depends on how the
        store happened to return rows.
        """
        limit = self.top_doctors_limit if limit is None else limit
        roster = [doctor for doctor in doctors if doctor.clinic_id == clinic_id]

        counts = Counter(
            appointment.doctor_id
            for appointment in self.matching_appointments(appointments, clinic_id, window)
        )

        rankings = [
            DoctorRanking(
                doctor_id=doctor.id,
                name=doctor.name,
                specialty=doctor.specialty,
                appointment_count=counts.get(doctor.id, 0),
                avatar_image_url=doctor.avatar_image_url,
            )
            for doctor in roster
        ]
        rankings.sort(key=lambda r: (-r.appointment_count, r.doctor_id))

        return rankings[:limit]

    def top_specialties(
        self,
        doctors: Iterable[Doctor],
        appointments: Iterable[AppointmentRecord],
        clinic_id: str,
        window: DateRange
    ) -> List[SpecialtyRanking]:
        """
        Rank specialties by appointment count.

        Appointments are joined to their doctor's specialty; appointments
        whose doctor is not on the clinic roster are left out. Ties are
        broken by specialty name.
        """
        specialty_by_doctor = {
            doctor.id: doctor.specialty
            for doctor in doctors
            if doctor.clinic_id == clinic_id
        }

        counts: Counter = Counter()
        for appointment in self.matching_appointments(appointments, clinic_id, window):
            specialty = specialty_by_doctor.get(appointment.doctor_id)
            if specialty is not None:
                counts[specialty] += 1

        rankings = [
            SpecialtyRanking(specialty=specialty, appointment_count=count)
            for specialty, count in counts.items()
        ]
        rankings.sort(key=lambda r: (-r.appointment_count, r.specialty))

        return rankings

    def group_by_day(
        self,
        appointments: Iterable[AppointmentRecord],
        clinic_id: str,
        window: DateRange
    ) -> List[DailyPoint]:
        """
        Group appointments by calendar date, discarding the time of day.

        Dates are read in the window's timezone. Only dates with at least one
        appointment are returned, in date order.
        """
        counts: Dict[Date, int] = defaultdict(int)
        revenue: Dict[Date, int] = defaultdict(int)
        tz = window.start.timezone

        for appointment in self.matching_appointments(appointments, clinic_id, window):
            day = appointment.appointment_date.in_timezone(tz).date()
            counts[day] += 1
            revenue[day] += appointment.appointment_price_in_cents

        return [
            DailyPoint(date=day, appointment_count=counts[day], revenue_in_cents=revenue[day])
            for day in sorted(counts)
        ]

    def daily_series(
        self,
        points: Sequence[DailyPoint],
        window: DateRange
    ) -> List[DailyPoint]:
        """
        Expand grouped points into one point per date of the window.

        Dates without appointments get zero values so the series is
        continuous. Points outside the window are dropped.
        """
        by_date = {point.date: point for point in points}

        return [
            by_date.get(day, DailyPoint(date=day, appointment_count=0, revenue_in_cents=0))
            for day in window.days()
        ]
