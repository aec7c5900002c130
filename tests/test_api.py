from datetime import timedelta

from sqlalchemy.exc import OperationalError

from app.core.clock import utcnow
from app.core.config import settings
from app.models import AppointmentStatus, UserRole
from app.services.reminder_scanner import ReminderWindowScanner


def booking(owner, vet, **overrides):
    payload = {
        "pet_owner_id": owner.id,
        "vet_id": vet.id,
        "pet_name": "Biscuit",
        "pet_type": "dog",
        "appointment_date": "2026-08-14",
        "appointment_time": "10:30",
        "reason": "Limping on front leg",
        "timezone": "Europe/London",
    }
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_and_fetch_appointment(client, owner, vet):
    response = client.post("/api/appointments", json=booking(owner, vet))

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["reminder_windows"] == []
    assert body["starts_at"].startswith("2026-08-14T09:30:00")

    fetched = client.get(f"/api/appointments/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["pet_name"] == "Biscuit"


def test_create_with_unknown_vet_is_404(client, owner):
    response = client.post("/api/appointments", json=booking(owner, owner))
    assert response.status_code == 404


def test_create_with_unknown_timezone_is_422(client, owner, vet):
    response = client.post("/api/appointments", json=booking(owner, vet, timezone="Mars/Olympus"))
    assert response.status_code == 422


def test_unknown_appointment_is_404(client):
    assert client.get("/api/appointments/nope").status_code == 404


def test_status_transition(client, sms, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet, status=AppointmentStatus.PENDING)

    response = client.patch(
        f"/api/appointments/{appointment.id}/status",
        json={"status": "confirmed", "actor_role": "vet"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["previous_status"] == "pending"
    assert body["appointment"]["status"] == "confirmed"
    assert len(body["notifications"]) == 4
    assert all(n["delivered"] for n in body["notifications"])
    assert len(sms.sent) == 2


def test_invalid_transition_is_409(client, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet, status=AppointmentStatus.PENDING)

    response = client.patch(
        f"/api/appointments/{appointment.id}/status",
        json={"status": "completed", "actor_role": "pet_owner"},
    )

    assert response.status_code == 409
    assert response.json()["current_status"] == "pending"
    assert response.json()["requested_status"] == "completed"


def test_list_appointments_by_status(client, owner, vet, make_appointment):
    make_appointment(owner, vet, status=AppointmentStatus.PENDING)
    make_appointment(owner, vet, status=AppointmentStatus.CONFIRMED)

    response = client.get("/api/appointments", params={"owner_id": owner.id, "status": "confirmed"})

    assert response.status_code == 200
    assert [a["status"] for a in response.json()] == ["confirmed"]


def test_contact_preference_round_trip(client, make_profile):
    owner = make_profile(UserRole.PET_OWNER)

    default = client.get(f"/api/owners/{owner.id}/contact-preference")
    assert default.json() == {"owner_id": owner.id, "preferred_contact_method": "sms", "sms": True, "email": False}

    updated = client.put(f"/api/owners/{owner.id}/contact-preference", json={"preferred_contact_method": "email"})
    assert updated.status_code == 200
    assert updated.json()["sms"] is False
    assert updated.json()["email"] is True


def test_contact_preference_validation(client, owner):
    assert client.get("/api/owners/missing/contact-preference").status_code == 404
    response = client.put(f"/api/owners/{owner.id}/contact-preference", json={"preferred_contact_method": "fax"})
    assert response.status_code == 422


def test_test_notification_endpoint(client, owner):
    response = client.post(f"/api/owners/{owner.id}/test-notification")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Test SMS and email sent successfully!",
        "sms_sent": True,
        "email_sent": True,
    }


def test_day_ahead_endpoint(client, owner, vet, make_appointment):
    make_appointment(owner, vet, starts_at=utcnow() + timedelta(hours=2))

    first = client.post("/api/reminders/day-ahead")
    second = client.post("/api/reminders/day-ahead")

    assert first.status_code == 200
    assert first.json()["window"] == "day_ahead"
    assert first.json()["reminders_sent"] == 1
    assert second.json()["skipped"] == 1


def test_hour_ahead_endpoint_ignores_later_appointments(client, owner, vet, make_appointment):
    make_appointment(owner, vet, starts_at=utcnow() + timedelta(hours=2))

    response = client.post("/api/reminders/hour-ahead")

    assert response.json()["candidates_scanned"] == 0


def test_scheduler_token(client, monkeypatch):
    monkeypatch.setattr(settings, "scheduler_token", "s3cret")

    assert client.post("/api/reminders/hour-ahead").status_code == 401
    assert client.post("/api/reminders/hour-ahead", headers={"X-Scheduler-Token": "wrong"}).status_code == 401
    assert client.post("/api/reminders/hour-ahead", headers={"X-Scheduler-Token": "s3cret"}).status_code == 200


def test_scan_store_failure_is_503(client, monkeypatch):
    def broken(self, now):
        raise OperationalError("SELECT", {}, Exception("database is down"))

    monkeypatch.setattr(ReminderWindowScanner, "find_candidates", broken)

    assert client.post("/api/reminders/day-ahead").status_code == 503


def test_vaccination_endpoints(client, email, owner):
    due = (utcnow().date() + timedelta(days=3)).isoformat()
    created = client.post("/api/vaccinations", json={
        "pet_owner_id": owner.id,
        "pet_name": "Biscuit",
        "vaccine_name": "Leptospirosis",
        "due_date": due,
    })
    assert created.status_code == 201
    record_id = created.json()["id"]

    listed = client.get("/api/vaccinations", params={"owner_id": owner.id})
    assert [r["id"] for r in listed.json()] == [record_id]

    scan = client.post("/api/reminders/vaccinations")
    assert scan.json()["reminders_sent"] == 1
    assert email.sent[0][0] == owner.email

    completed = client.post(f"/api/vaccinations/{record_id}/complete")
    assert completed.json()["status"] == "completed"
