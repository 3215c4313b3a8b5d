"""
Domain layer - Pure business logic without external dependencies.
"""

from .aggregation import DashboardAggregator, rolling_window
from .availability import AvailabilityResolver
from .exceptions import ClinicDashError, NotFoundError, StoreUnavailableError, ValidationError
from .models import (
    AnalyticsQuery,
    AppointmentRecord,
    AvailabilityWindow,
    DailyPoint,
    DashboardSnapshot,
    DateRange,
    Doctor,
    DoctorAvailability,
    DoctorRanking,
    SpecialtyRanking,
)
from .validation import UpsertDoctorInput, validate_upsert_doctor

__all__ = [
    "AnalyticsQuery",
    "AppointmentRecord",
    "AvailabilityResolver",
    "AvailabilityWindow",
    "ClinicDashError",
    "DailyPoint",
    "DashboardAggregator",
    "DashboardSnapshot",
    "DateRange",
    "Doctor",
    "DoctorAvailability",
    "DoctorRanking",
    "NotFoundError",
    "SpecialtyRanking",
    "StoreUnavailableError",
    "UpsertDoctorInput",
    "ValidationError",
    "rolling_window",
    "validate_upsert_doctor",
]
