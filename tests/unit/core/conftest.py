"""Shared fixtures for core tests: a deterministic clock and a seeded service."""

from datetime import UTC, datetime
from itertools import count

import pytest

from core.domain.models import HealthcareProvider
from core.domain.timestamps import NANOS_PER_MILLI, to_nanos
from core.services.maternal_health import MaternalHealthService
from core.services.record_store import RecordStore

START = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)


class FakeClock:
    """Advances one millisecond per reading so ordering is observable."""

    def __init__(self, start: datetime = START) -> None:
        self.now = to_nanos(start)

    def __call__(self) -> int:
        self.now += NANOS_PER_MILLI
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> RecordStore:
    return RecordStore()


@pytest.fixture
def service(store: RecordStore, clock: FakeClock) -> MaternalHealthService:
    ids = count(1)
    return MaternalHealthService(store=store, clock=clock, id_factory=lambda: f"id-{next(ids):04d}")


@pytest.fixture
def provider(service: MaternalHealthService) -> HealthcareProvider:
    return service.register_provider(
        {
            "name": "Dr. Amara Osei",
            "specialization": "Obstetrics",
            "license_number": "OB-20931",
        }
    ).unwrap()


@pytest.fixture
def profile_input(provider: HealthcareProvider) -> dict:
    return {
        "name": "Jane Doe",
        "age": 28,
        "blood_type": "O+",
        "due_date": "2025-09-01",
        "emergency_contact": "John Doe +1-555-0100",
        "primary_care_provider_id": provider.id,
    }


def metrics_input(profile_id: str, provider_id: str, **overrides: float) -> dict:
    data = {
        "maternal_profile_id": profile_id,
        "recorded_by_id": provider_id,
        "weight": 68.5,
        "blood_pressure_systolic": 120,
        "blood_pressure_diastolic": 80,
        "blood_sugar": 95,
        "hemoglobin_levels": 12.0,
        "fetal_heart_rate": 140,
        "notes": "routine check",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_metrics():
    return metrics_input
