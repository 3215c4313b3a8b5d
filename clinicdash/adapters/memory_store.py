"""
In-memory clinic store for tests and local runs without a database.
"""

import json
import logging
from datetime import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.aggregation import DashboardAggregator
from ..domain.models import AppointmentRecord, DailyPoint, DateRange, Doctor, DoctorAvailability

logger = logging.getLogger(__name__)


class InMemoryClinicStore:
    """
    Store holding doctors, appointments and patients in plain lists.

    Implements DoctorStoreProtocol, AppointmentStoreProtocol and
    PatientStoreProtocol. Data can be seeded from a JSON fixture using the
    same camelCase keys as the web application's records.
    """

    def __init__(
        self,
        doctors: Optional[List[Doctor]] = None,
        appointments: Optional[List[AppointmentRecord]] = None,
        patients: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the store.

        Args:
            doctors: Initial doctor roster
            appointments: Initial appointments
            patients: Mapping of patient id -> clinic id
        """
        self._doctors: Dict[str, Doctor] = {doctor.id: doctor for doctor in doctors or []}
        self._appointments: List[AppointmentRecord] = list(appointments or [])
        self._patients: Dict[str, str] = dict(patients or {})

    @classmethod
    def load_from_json(cls, data_file: Path, timezone: str = "UTC") -> "InMemoryClinicStore":
        """
        Load store contents from a JSON fixture.

        Entries that cannot be parsed are skipped with a warning.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not valid JSON
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Data file must contain an object at the root level.")

        doctors: List[Doctor] = []
        for entry in data.get("doctors", []):
            try:
                doctors.append(_parse_doctor(entry))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping invalid doctor entry %r: %s", entry.get("id"), e)

        appointments: List[AppointmentRecord] = []
        for entry in data.get("appointments", []):
            try:
                appointments.append(_parse_appointment(entry, timezone))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping invalid appointment entry %r: %s", entry.get("id"), e)

        patients = {
            entry["id"]: entry["clinicId"]
            for entry in data.get("patients", [])
            if "id" in entry and "clinicId" in entry
        }

        return cls(doctors=doctors, appointments=appointments, patients=patients)

    # Doctors

    async def upsert(self, doctor: Doctor) -> str:
        self._doctors[doctor.id] = doctor
        return doctor.id

    async def delete(self, doctor_id: str) -> None:
        """Delete a doctor and cascade to its appointments."""
        self._doctors.pop(doctor_id, None)
        self._appointments = [
            appointment for appointment in self._appointments
            if appointment.doctor_id != doctor_id
        ]

    async def find_by_id(self, doctor_id: str) -> Optional[Doctor]:
        return self._doctors.get(doctor_id)

    async def list_by_clinic(self, clinic_id: str) -> List[Doctor]:
        return [doctor for doctor in self._doctors.values() if doctor.clinic_id == clinic_id]

    # Appointments

    async def query(
        self,
        clinic_id: str,
        date_from: DateTime,
        date_to: DateTime,
    ) -> List[AppointmentRecord]:
        window = DateRange(start=date_from, end=date_to)
        return DashboardAggregator.matching_appointments(self._appointments, clinic_id, window)

    async def query_daily(
        self,
        clinic_id: str,
        date_from: DateTime,
        date_to: DateTime,
    ) -> List[DailyPoint]:
        window = DateRange(start=date_from, end=date_to)
        return DashboardAggregator().group_by_day(self._appointments, clinic_id, window)

    def add_appointment(self, appointment: AppointmentRecord) -> None:
        self._appointments.append(appointment)

    # Patients

    async def count_by_clinic(self, clinic_id: str) -> int:
        return sum(1 for patient_clinic in self._patients.values() if patient_clinic == clinic_id)

    def add_patient(self, patient_id: str, clinic_id: str) -> None:
        self._patients[patient_id] = clinic_id


def _parse_doctor(entry: Dict[str, Any]) -> Doctor:
    availability = DoctorAvailability(
        from_week_day=int(entry["availableFromWeekDay"]),
        to_week_day=int(entry["availableToWeekDay"]),
        from_time=time.fromisoformat(entry["availableFromTime"]),
        to_time=time.fromisoformat(entry["availableToTime"]),
    )
    return Doctor(
        id=entry["id"],
        clinic_id=entry["clinicId"],
        name=entry["name"],
        specialty=entry["specialty"],
        appointment_price_in_cents=int(entry["appointmentPriceInCents"]),
        availability=availability,
        avatar_image_url=entry.get("avatarImageUrl"),
    )


def _parse_appointment(entry: Dict[str, Any], timezone: str) -> AppointmentRecord:
    appointment_date = pendulum.parse(entry["appointmentDate"], tz=timezone)
    if not isinstance(appointment_date, DateTime):
        raise ValueError(f"Could not parse datetime: {entry['appointmentDate']}")

    return AppointmentRecord(
        id=entry["id"],
        clinic_id=entry["clinicId"],
        doctor_id=entry["doctorId"],
        patient_id=entry["patientId"],
        appointment_date=appointment_date,
        appointment_price_in_cents=int(entry["appointmentPriceInCents"]),
    )
