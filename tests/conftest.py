import os

# Settings are read at import time; point the app at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["TWILIO_ENABLED"] = "false"
os.environ.pop("SCHEDULER_TOKEN", None)

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import Base, get_db
from app.core.exceptions import GatewayError
from app.main import app
from app.models import Appointment, AppointmentStatus, PetOwnerProfile, Profile, UserRole
from app.services.notification_gateway import NotificationGateway, get_notification_gateway
from app.services.sms_service import SMSService

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


class FakeSMSService:
    """Records sends; raises GatewayError for destinations listed in failing."""

    def __init__(self):
        self.sent = []
        self.failing = set()

    def send_sms(self, to, body):
        if not to:
            raise GatewayError("No phone number provided", channel="sms")
        if to in self.failing:
            raise GatewayError(f"Twilio rejected {to}", channel="sms")
        self.sent.append((to, body))
        return f"SM{len(self.sent):04d}"


class FakeEmailService:
    def __init__(self):
        self.sent = []
        self.failing = set()

    def send_email(self, to, subject, html):
        if not to:
            raise GatewayError("No email address provided", channel="email")
        if to in self.failing:
            raise GatewayError(f"Recipient refused: {to}", channel="email")
        self.sent.append((to, subject, html))
        return f"<{len(self.sent)}@test>"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sms():
    return FakeSMSService()


@pytest.fixture
def email():
    return FakeEmailService()


@pytest.fixture
def gateway(sms, email):
    return NotificationGateway(sms, email)


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role=UserRole.PET_OWNER, full_name=None, email="default", phone="default", preference=None):
        counter["n"] += 1
        n = counter["n"]
        profile = Profile(
            full_name=full_name or f"{role.value} {n}",
            email=f"{role.value}{n}@example.com" if email == "default" else email,
            phone=f"+1555000{n:04d}" if phone == "default" else phone,
            role=role,
        )
        db.add(profile)
        db.flush()
        if preference is not None:
            db.add(PetOwnerProfile(id=profile.id, preferred_contact_method=preference))
        db.commit()
        return profile

    return _make


@pytest.fixture
def owner(make_profile):
    return make_profile(UserRole.PET_OWNER, full_name="Sam Carter", preference="both")


@pytest.fixture
def vet(make_profile):
    return make_profile(UserRole.VET, full_name="Jane Harlow")


@pytest.fixture
def make_appointment(db):
    def _make(owner, vet, starts_at=None, status=AppointmentStatus.CONFIRMED,
              consultation_type=None, reminders_sent=0, pet_name="Rex"):
        starts_at = starts_at or NOW + timedelta(hours=2)
        appointment = Appointment(
            pet_owner_id=owner.id,
            vet_id=vet.id,
            pet_name=pet_name,
            pet_type="dog",
            reason="Annual checkup",
            consultation_type=consultation_type,
            appointment_date=starts_at.date(),
            appointment_time=starts_at.time().replace(tzinfo=None),
            timezone="UTC",
            starts_at=starts_at,
            duration_minutes=30,
            status=status,
            reminders_sent=reminders_sent,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def client(db, gateway):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notification_gateway] = lambda: gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def unreachable_sms():
    """A real SMSService whose Twilio client cannot reach the API."""
    client = MagicMock()
    client.messages.create.side_effect = requests.exceptions.ConnectionError("connection reset")
    sms_settings = settings.model_copy(update={
        "twilio_enabled": True,
        "twilio_sms_enabled": True,
        "twilio_phone_number": "+15550001111",
        "twilio_messaging_service_sid": None,
        "twilio_custom_sender_id": None,
        "twilio_custom_phone_number": None,
    })
    return SMSService(sms_settings, client=client)
