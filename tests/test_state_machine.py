from datetime import date, datetime, time, timezone

import pytest

from app.core.clock import ensure_utc
from app.core.exceptions import InvalidTransition, NotFound
from app.models import AppointmentStatus, UserRole
from app.services.appointment_service import AppointmentService, can_transition, is_terminal
from app.services.notification_gateway import Channel, NotificationGateway

S = AppointmentStatus

ALLOWED = {
    (S.PENDING, S.CONFIRMED),
    (S.PENDING, S.CANCELLED),
    (S.CONFIRMED, S.COMPLETED),
    (S.CONFIRMED, S.CANCELLED),
}


@pytest.mark.parametrize("current", list(S))
@pytest.mark.parametrize("requested", list(S))
def test_transition_table(db, gateway, owner, vet, make_appointment, current, requested):
    appointment = make_appointment(owner, vet, status=current)
    service = AppointmentService(db, gateway)

    if (current, requested) in ALLOWED:
        result = service.transition(appointment.id, requested, UserRole.VET)
        assert result.previous_status == current
        assert result.appointment.status == requested
    else:
        with pytest.raises(InvalidTransition) as exc_info:
            service.transition(appointment.id, requested, UserRole.VET)
        assert exc_info.value.current == current.value
        assert exc_info.value.requested == requested.value
        db.refresh(appointment)
        assert appointment.status == current


def test_terminal_states():
    assert is_terminal(S.COMPLETED)
    assert is_terminal(S.CANCELLED)
    assert not is_terminal(S.PENDING)
    assert not can_transition(S.COMPLETED, S.CONFIRMED)


def test_confirm_notifies_owner_and_vet(db, gateway, sms, email, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet, status=S.PENDING)

    result = AppointmentService(db, gateway).transition(appointment.id, S.CONFIRMED, UserRole.VET)

    roles = {(i.recipient_role, i.channel) for i in result.intents}
    assert roles == {
        ("pet_owner", Channel.SMS),
        ("pet_owner", Channel.EMAIL),
        ("vet", Channel.SMS),
        ("vet", Channel.EMAIL),
    }
    assert all(o.delivered for o in result.outcomes)
    assert any("CONFIRMED" in body for _, body in sms.sent)
    assert {to for to, _, _ in email.sent} == {owner.email, vet.email}


def test_gateway_failure_does_not_roll_back(db, gateway, sms, email, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet, status=S.PENDING)
    sms.failing.update({owner.phone, vet.phone})
    email.failing.update({owner.email, vet.email})

    result = AppointmentService(db, gateway).transition(appointment.id, S.CONFIRMED, UserRole.PET_OWNER)

    assert result.outcomes
    assert not any(o.delivered for o in result.outcomes)
    db.refresh(appointment)
    assert appointment.status == S.CONFIRMED


def test_sports_training_confirmation_copy(db, gateway, sms, email, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet, status=S.PENDING, consultation_type="sports_training")

    AppointmentService(db, gateway).transition(appointment.id, S.CONFIRMED, UserRole.VET)

    owner_sms = [body for to, body in sms.sent if to == owner.phone]
    assert "training equipment" in owner_sms[0]
    owner_email = [html for to, _, html in email.sent if to == owner.email]
    assert "Sports Training Tips" in owner_email[0]


def test_transition_unknown_appointment(db, gateway):
    with pytest.raises(NotFound):
        AppointmentService(db, gateway).transition("missing", S.CONFIRMED, UserRole.VET)


def test_create_stores_utc_instant(db, gateway, owner, vet):
    appointment = AppointmentService(db, gateway).create(
        owner_id=owner.id,
        vet_id=vet.id,
        pet_name="Milo",
        pet_type="cat",
        appointment_date=date(2026, 7, 1),
        appointment_time=time(9, 0),
        reason="Vaccination",
        timezone="America/New_York",
    )

    assert appointment.status == S.PENDING
    assert appointment.reminders_sent == 0
    assert appointment.duration_minutes == 30
    assert ensure_utc(appointment.starts_at) == datetime(2026, 7, 1, 13, 0, tzinfo=timezone.utc)


def test_create_rejects_wrong_party_role(db, gateway, owner):
    with pytest.raises(NotFound):
        AppointmentService(db, gateway).create(
            owner_id=owner.id,
            vet_id=owner.id,
            pet_name="Milo",
            pet_type="cat",
            appointment_date=date(2026, 7, 1),
            appointment_time=time(9, 0),
            reason="Vaccination",
        )


def test_list_filters_by_status(db, gateway, owner, vet, make_appointment):
    make_appointment(owner, vet, status=S.PENDING)
    confirmed = make_appointment(owner, vet, status=S.CONFIRMED)

    results = AppointmentService(db, gateway).list_appointments(owner_id=owner.id, status=S.CONFIRMED)

    assert [a.id for a in results] == [confirmed.id]


def test_sms_transport_error_is_reported_not_raised(db, email, unreachable_sms, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet, status=S.PENDING)
    gateway = NotificationGateway(unreachable_sms, email)

    result = AppointmentService(db, gateway).transition(appointment.id, S.CONFIRMED, UserRole.VET)

    sms_outcomes = [o for o in result.outcomes if o.intent.channel == Channel.SMS]
    assert sms_outcomes and not any(o.delivered for o in sms_outcomes)
    assert all("connection reset" in o.error for o in sms_outcomes)
    assert {to for to, _, _ in email.sent} == {owner.email, vet.email}
    db.refresh(appointment)
    assert appointment.status == S.CONFIRMED
