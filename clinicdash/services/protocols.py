"""
Protocols describing the stores the services read from and write to.

Any persistence layer (SQL, document store, the in-memory adapter) plugs in
by implementing these methods.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from pendulum import DateTime

from ..domain.models import AppointmentRecord, DailyPoint, Doctor


class DoctorStoreProtocol(Protocol):
    """Read/write access to doctor records."""

    async def upsert(self, doctor: Doctor) -> str:
        """Create or replace a doctor and return its id."""

    async def delete(self, doctor_id: str) -> None:
        """Delete a doctor together with its appointments."""

    async def find_by_id(self, doctor_id: str) -> Optional[Doctor]:
        """Return the doctor, or None when absent."""

    async def list_by_clinic(self, clinic_id: str) -> List[Doctor]:
        """Return the clinic's doctor roster."""


class AppointmentStoreProtocol(Protocol):
    """Range-filtered read access to appointment records."""

    async def query(
        self,
        clinic_id: str,
        date_from: DateTime,
        date_to: DateTime,
    ) -> List[AppointmentRecord]:
        """Return the clinic's appointments dated within [date_from, date_to]."""

    async def query_daily(
        self,
        clinic_id: str,
        date_from: DateTime,
        date_to: DateTime,
    ) -> List[DailyPoint]:
        """
        Same filter as query(), grouped by calendar date.

        Points carry no clinic id, so the store alone is responsible for
        clinic scoping of this read.
        """


class PatientStoreProtocol(Protocol):
    """Roster counts for patients."""

    async def count_by_clinic(self, clinic_id: str) -> int:
        """Return how many patients the clinic has."""
