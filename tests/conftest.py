"""Pytest configuration and fixtures."""

from datetime import date, datetime, timezone

import pytest

from medicore.access import Role
from medicore.config import Settings
from medicore.core.users import Operator
from medicore.encounter import EncounterSession, InMemoryEncounterSink
from medicore.models import Patient, VisitType, VitalSigns

FIXED_NOW = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    """Deterministic clock for audit fields and snapshots."""
    return lambda: FIXED_NOW


@pytest.fixture
def test_settings():
    return Settings(
        environment="development",
        jwt_secret="test-secret",
        cookie_secure=False,
        demo_accounts_enabled=True,
        demo_password="123456",
        attachment_upload_url="",
    )


@pytest.fixture
def doctor():
    return Operator(id="D001", name="张医生", role=Role.DOCTOR, department="内科")


@pytest.fixture
def cashier():
    return Operator(id="C001", name="赵收费员", role=Role.CASHIER)


@pytest.fixture
def sample_patient():
    return Patient(
        id="P2024001",
        name="王小明",
        age=45,
        gender="male",
        phone="13800138000",
        visit_type=VisitType.RETURN,
        queue_number="A012",
        chief_complaint="头痛三天",
        allergies=["青霉素"],
        chronic_conditions=["高血压"],
        last_visit=date(2023, 12, 1),
        vital_signs=VitalSigns(temperature=36.8, blood_pressure="135/85", heart_rate=78, respiratory_rate=16),
    )


@pytest.fixture
def second_patient():
    return Patient(id="P2024002", name="李华", age=30, gender="female")


@pytest.fixture
def sink():
    return InMemoryEncounterSink()


@pytest.fixture
def session(sink, doctor, clock):
    return EncounterSession(sink, doctor, clock=clock)


@pytest.fixture
def active_session(session, sample_patient):
    session.start(sample_patient)
    return session
