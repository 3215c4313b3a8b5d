"""
Tests for the DoctorService.
"""

import asyncio
from datetime import time

import pendulum
import pytest

from clinicdash.adapters.memory_store import InMemoryClinicStore
from clinicdash.domain.exceptions import NotFoundError, ValidationError
from clinicdash.domain.models import AppointmentRecord, Doctor, DoctorAvailability
from clinicdash.services.doctors import DoctorService

PAYLOAD = {
    "name": "Ana Souza",
    "specialty": "Cardiologia",
    "appointmentPriceInCents": 10000,
    "availableFromWeekDay": 1,
    "availableToWeekDay": 5,
    "availableFromTime": "08:00:00",
    "availableToTime": "17:00:00",
}


def _existing_doctor(doctor_id="doc-1", clinic_id="clinic-a"):
    return Doctor(
        id=doctor_id,
        clinic_id=clinic_id,
        name="Bruno Lima",
        specialty="Dermatologia",
        appointment_price_in_cents=18000,
        availability=DoctorAvailability(5, 1, time(9, 0), time(13, 30)),
    )


def _build(*doctors):
    store = InMemoryClinicStore(doctors=list(doctors))
    return store, DoctorService(store)


def test_upsert_without_id_creates_doctor():
    store, service = _build()

    doctor_id = asyncio.run(service.upsert("clinic-a", PAYLOAD))

    doctor = asyncio.run(store.find_by_id(doctor_id))
    assert doctor is not None
    assert doctor.clinic_id == "clinic-a"
    assert doctor.name == "Ana Souza"
    assert doctor.availability.from_time == time(8, 0)
    assert doctor.availability.to_week_day == 5


def test_upsert_with_id_replaces_doctor():
    store, service = _build(_existing_doctor())

    doctor_id = asyncio.run(
        service.upsert("clinic-a", {**PAYLOAD, "id": "doc-1", "name": "Bruno Lima Filho"})
    )

    assert doctor_id == "doc-1"
    roster = asyncio.run(service.list_by_clinic("clinic-a"))
    assert [d.name for d in roster] == ["Bruno Lima Filho"]
    assert roster[0].appointment_price_in_cents == 10000


def test_upsert_unknown_id_raises_not_found():
    _, service = _build()

    with pytest.raises(NotFoundError):
        asyncio.run(service.upsert("clinic-a", {**PAYLOAD, "id": "missing"}))


def test_upsert_cannot_replace_other_clinics_doctor():
    store, service = _build(_existing_doctor(clinic_id="clinic-b"))

    with pytest.raises(NotFoundError):
        asyncio.run(service.upsert("clinic-a", {**PAYLOAD, "id": "doc-1"}))

    assert asyncio.run(store.find_by_id("doc-1")).clinic_id == "clinic-b"


def test_upsert_invalid_payload_leaves_store_untouched():
    store, service = _build()

    with pytest.raises(ValidationError):
        asyncio.run(service.upsert(
            "clinic-a",
            {**PAYLOAD, "availableFromTime": "10:00:00", "availableToTime": "09:00:00"},
        ))

    assert asyncio.run(store.list_by_clinic("clinic-a")) == []


def test_delete_cascades_to_appointments():
    store, service = _build(_existing_doctor(), _existing_doctor("doc-2"))
    for doctor_id in ("doc-1", "doc-2"):
        store.add_appointment(AppointmentRecord(
            id=f"apt-{doctor_id}",
            clinic_id="clinic-a",
            doctor_id=doctor_id,
            patient_id="p1",
            appointment_date=pendulum.datetime(2024, 1, 10, 9, tz="UTC"),
            appointment_price_in_cents=18000,
        ))

    asyncio.run(service.delete("clinic-a", "doc-1"))

    assert asyncio.run(store.find_by_id("doc-1")) is None
    remaining = asyncio.run(store.query(
        "clinic-a",
        pendulum.datetime(2024, 1, 1, tz="UTC"),
        pendulum.datetime(2024, 1, 31, tz="UTC"),
    ))
    assert [a.id for a in remaining] == ["apt-doc-2"]


def test_delete_other_clinics_doctor_raises_not_found():
    store, service = _build(_existing_doctor(clinic_id="clinic-b"))

    with pytest.raises(NotFoundError):
        asyncio.run(service.delete("clinic-a", "doc-1"))

    assert asyncio.run(store.find_by_id("doc-1")) is not None


def test_availability_resolves_doctor_window():
    _, service = _build(_existing_doctor())
    now = pendulum.datetime(2024, 1, 10, 15, 0, tz="UTC")

    window = asyncio.run(service.availability("clinic-a", "doc-1", now=now))

    assert window.start == pendulum.datetime(2024, 1, 12, 9, 0, tz="UTC")
    assert window.end == pendulum.datetime(2024, 1, 15, 13, 30, tz="UTC")
    assert window.format_days() == "Sexta a Segunda"


def test_availability_unknown_doctor():
    _, service = _build()

    with pytest.raises(NotFoundError):
        asyncio.run(service.availability("clinic-a", "missing"))
