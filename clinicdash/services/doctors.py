"""
Application service for managing a clinic's doctors.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, List, Mapping, Optional

from pendulum import DateTime

from ..domain.availability import AvailabilityResolver
from ..domain.exceptions import NotFoundError
from ..domain.models import AvailabilityWindow, Doctor
from ..domain.validation import UpsertDoctorInput, validate_upsert_doctor
from .protocols import DoctorStoreProtocol

logger = logging.getLogger(__name__)


class DoctorService:
    """
    Validates and persists doctors, scoped to one clinic per call.

    A doctor that belongs to another clinic is reported as not found, so
    ids from one clinic never reach another clinic's data.
    """

    def __init__(
        self,
        doctor_store: DoctorStoreProtocol,
        resolver: Optional[AvailabilityResolver] = None,
    ) -> None:
        self._doctor_store = doctor_store
        self._resolver = resolver or AvailabilityResolver()

    async def upsert(self, clinic_id: str, payload: Mapping[str, Any] | UpsertDoctorInput) -> str:
        """
        Create a doctor (no id) or replace an existing one (id given).

        Raises:
            ValidationError: If the payload breaks the upsert contract
            NotFoundError: If the id does not name a doctor of this clinic
        """
        data = payload if isinstance(payload, UpsertDoctorInput) else validate_upsert_doctor(payload)

        if data.id is not None:
            await self.get(clinic_id, data.id)
            doctor_id = data.id
        else:
            doctor_id = str(uuid.uuid4())

        doctor = Doctor(
            id=doctor_id,
            clinic_id=clinic_id,
            name=data.name,
            specialty=data.specialty,
            appointment_price_in_cents=data.appointment_price_in_cents,
            availability=data.to_availability(),
            avatar_image_url=data.avatar_image_url,
        )

        stored_id = await self._doctor_store.upsert(doctor)
        logger.info(
            "%s doctor %s for clinic %s",
            "Updated" if data.id is not None else "Created", stored_id, clinic_id,
        )
        return stored_id

    async def delete(self, clinic_id: str, doctor_id: str) -> None:
        """Delete a doctor of this clinic; the store drops its appointments."""
        await self.get(clinic_id, doctor_id)
        await self._doctor_store.delete(doctor_id)
        logger.info("Deleted doctor %s from clinic %s", doctor_id, clinic_id)

    async def get(self, clinic_id: str, doctor_id: str) -> Doctor:
        doctor = await self._doctor_store.find_by_id(doctor_id)
        if doctor is None or doctor.clinic_id != clinic_id:
            raise NotFoundError(f"Doctor '{doctor_id}' not found in clinic '{clinic_id}'")
        return doctor

    async def list_by_clinic(self, clinic_id: str) -> List[Doctor]:
        doctors = await self._doctor_store.list_by_clinic(clinic_id)
        return [doctor for doctor in doctors if doctor.clinic_id == clinic_id]

    async def availability(
        self,
        clinic_id: str,
        doctor_id: str,
        now: Optional[DateTime] = None,
    ) -> AvailabilityWindow:
        """Resolve a doctor's weekly availability into display instants."""
        doctor = await self.get(clinic_id, doctor_id)
        return self._resolver.resolve(doctor.availability, now=now)
