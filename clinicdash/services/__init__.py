"""
Service layer helpers that orchestrate stores and domain logic.
"""

from .dashboard import DashboardService
from .doctors import DoctorService
from .protocols import AppointmentStoreProtocol, DoctorStoreProtocol, PatientStoreProtocol

__all__ = [
    "AppointmentStoreProtocol",
    "DashboardService",
    "DoctorService",
    "DoctorStoreProtocol",
    "PatientStoreProtocol",
]
