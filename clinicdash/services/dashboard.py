"""
Application service computing the clinic dashboard.

The service fans out the independent store reads concurrently and delegates
every reduction to the domain-level ``DashboardAggregator``. Stores are
reached through protocols so tests can plug in simple stubs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.aggregation import DEFAULT_ROLLING_WINDOW_DAYS, DashboardAggregator, rolling_window
from ..domain.exceptions import StoreUnavailableError
from ..domain.models import AnalyticsQuery, DashboardSnapshot
from .protocols import AppointmentStoreProtocol, DoctorStoreProtocol, PatientStoreProtocol

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Orchestrates dashboard reads and aggregation.

    All reads run against the same clinic id passed in the query; nothing is
    taken from ambient state.
    """

    def __init__(
        self,
        appointment_store: AppointmentStoreProtocol,
        doctor_store: DoctorStoreProtocol,
        patient_store: PatientStoreProtocol,
        aggregator: Optional[DashboardAggregator] = None,
        timezone: str = "UTC",
        rolling_window_days: int = DEFAULT_ROLLING_WINDOW_DAYS,
    ) -> None:
        self._appointment_store = appointment_store
        self._doctor_store = doctor_store
        self._patient_store = patient_store
        self._aggregator = aggregator or DashboardAggregator()
        self._timezone = timezone
        self._rolling_window_days = rolling_window_days

    async def compute_dashboard(
        self,
        query: AnalyticsQuery,
        now: Optional[DateTime] = None,
    ) -> DashboardSnapshot:
        """
        Read everything the dashboard needs and reduce it to a snapshot.

        Appointments and the roster are filtered by clinic again after the
        reads. The grouped daily read is trusted for clinic scoping and only
        clipped to the rolling window.

        Raises:
            StoreUnavailableError: If any store read fails. No partial
                snapshot is ever returned.
        """
        now = (now or pendulum.now(self._timezone)).in_timezone(self._timezone)
        clinic_id = query.clinic_id
        reporting = query.reporting_window
        rolling = rolling_window(now, days=self._rolling_window_days)

        logger.debug(
            "Computing dashboard for clinic %s (reporting %s, rolling %s)",
            clinic_id, reporting, rolling,
        )

        appointments, doctors, total_patients, daily_points = await self._gather_all(
            self._read(
                "appointments",
                self._appointment_store.query(clinic_id, reporting.start, reporting.end),
            ),
            self._read("doctors", self._doctor_store.list_by_clinic(clinic_id)),
            self._read("patients", self._patient_store.count_by_clinic(clinic_id)),
            self._read(
                "daily appointments",
                self._appointment_store.query_daily(clinic_id, rolling.start, rolling.end),
            ),
        )

        aggregator = self._aggregator
        roster = [doctor for doctor in doctors if doctor.clinic_id == clinic_id]

        snapshot = DashboardSnapshot(
            clinic_id=clinic_id,
            reporting_window=reporting,
            rolling_window=rolling,
            total_revenue_in_cents=aggregator.total_revenue(appointments, clinic_id, reporting),
            total_appointments=aggregator.total_appointments(appointments, clinic_id, reporting),
            total_patients=total_patients,
            total_doctors=len(roster),
            top_doctors=aggregator.top_doctors(roster, appointments, clinic_id, reporting),
            top_specialties=aggregator.top_specialties(roster, appointments, clinic_id, reporting),
            daily_series=aggregator.daily_series(daily_points, rolling),
        )

        logger.debug(
            "Dashboard for clinic %s: %d appointments, %d doctors, %d patients",
            clinic_id, snapshot.total_appointments, snapshot.total_doctors, snapshot.total_patients,
        )
        return snapshot

    @staticmethod
    async def _read(name: str, awaitable: Awaitable[Any]) -> Any:
        """Await one store read, normalising I/O failures."""
        try:
            return await awaitable
        except StoreUnavailableError as exc:
            logger.warning("Store read '%s' failed: %s", name, exc)
            raise
        except OSError as exc:
            logger.warning("Store read '%s' failed: %s", name, exc)
            raise StoreUnavailableError(f"Could not read {name}: {exc}") from exc

    @staticmethod
    async def _gather_all(*awaitables: Awaitable[Any]) -> List[Any]:
        """
        Run reads concurrently and wait for all of them.

        If one read fails the others are cancelled before the error
        propagates.
        """
        tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
        try:
            return await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
