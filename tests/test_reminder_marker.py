from app.models import ReminderWindow
from app.services.reminder_marker import MarkResult, ReminderMarker


def test_mark_then_already_fired(db, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet)
    marker = ReminderMarker(db)

    assert not marker.has_fired(appointment.id, ReminderWindow.DAY_AHEAD)
    assert marker.mark_fired(appointment.id, ReminderWindow.DAY_AHEAD) == MarkResult.MARKED
    assert marker.mark_fired(appointment.id, ReminderWindow.DAY_AHEAD) == MarkResult.ALREADY_FIRED
    assert marker.has_fired(appointment.id, ReminderWindow.DAY_AHEAD)
    assert not marker.has_fired(appointment.id, ReminderWindow.HOUR_AHEAD)


def test_mark_missing_appointment_fails(db):
    assert ReminderMarker(db).mark_fired("no-such-id", ReminderWindow.HOUR_AHEAD) == MarkResult.FAILED


def test_release_clears_only_its_window(db, owner, vet, make_appointment):
    appointment = make_appointment(owner, vet, reminders_sent=ReminderWindow.DAY_AHEAD.bit)
    marker = ReminderMarker(db)
    marker.mark_fired(appointment.id, ReminderWindow.HOUR_AHEAD)

    assert marker.release(appointment.id, ReminderWindow.HOUR_AHEAD) is True
    assert marker.release(appointment.id, ReminderWindow.HOUR_AHEAD) is False
    assert marker.has_fired(appointment.id, ReminderWindow.DAY_AHEAD)
    assert not marker.has_fired(appointment.id, ReminderWindow.HOUR_AHEAD)
