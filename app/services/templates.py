"""
Notification copy for status changes, reminders and diagnostics.
Every builder returns a RenderedMessage carrying the SMS text plus the
email subject and HTML body.
"""
from html import escape

from app.core.config import settings
from app.models.appointment import Appointment, AppointmentStatus
from app.models.profile import Profile, ContactMethod
from app.models.vaccination import VaccinationRecord
from app.services.notification_gateway import RenderedMessage

SPORTS_TRAINING = "sports_training"

_STATUS_STYLE = {
    AppointmentStatus.CONFIRMED: ("#22c55e", "✅"),
    AppointmentStatus.CANCELLED: ("#ef4444", "❌"),
    AppointmentStatus.COMPLETED: ("#3b82f6", "✔️"),
    AppointmentStatus.PENDING: ("#f59e0b", "🕐"),
}


def _is_sports(appointment: Appointment) -> bool:
    return appointment.consultation_type == SPORTS_TRAINING


def _consultation_label(appointment: Appointment) -> str:
    if _is_sports(appointment):
        return "Sports Training"
    return appointment.consultation_type or "general"


def _time(appointment: Appointment) -> str:
    return appointment.appointment_time.strftime("%H:%M")


def _date(appointment: Appointment) -> str:
    return appointment.appointment_date.isoformat()


def _wrap(body: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #333;">
        {body}
        <p>Best regards,<br>{escape(settings.clinic_name)} Team</p>
        <p style="margin-top: 30px; color: #666; font-size: 12px;">
            This is an automated message. Manage your notification preferences at {escape(settings.frontend_url)}.
        </p>
    </div>
    """


def _details_block(appointment: Appointment, vet: Profile, background: str = "#f5f5f5", extra: str = "") -> str:
    consultation = ""
    if appointment.consultation_type:
        consultation = f"<p><strong>Type:</strong> {escape(_consultation_label(appointment))}</p>"
    return f"""
        <div style="background-color: {background}; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <p><strong>Pet:</strong> {escape(appointment.pet_name)}</p>
            <p><strong>Veterinarian:</strong> Dr. {escape(vet.full_name)}</p>
            <p><strong>Date:</strong> {_date(appointment)}</p>
            <p><strong>Time:</strong> {_time(appointment)}</p>
            {consultation}
            {extra}
        </div>
    """


# ============================================================================
# Status changes
# ============================================================================

def status_text(appointment: Appointment, vet: Profile, status: AppointmentStatus) -> str:
    pet, doctor, day, at = appointment.pet_name, vet.full_name, _date(appointment), _time(appointment)
    if status == AppointmentStatus.CONFIRMED:
        tail = ("Please bring any relevant training equipment." if _is_sports(appointment)
                else "Please arrive 10 minutes early.")
        return f"Great news! Your appointment for {pet} with Dr. {doctor} on {day} at {at} has been CONFIRMED. {tail}"
    if status == AppointmentStatus.CANCELLED:
        return (f"Your appointment for {pet} with Dr. {doctor} on {day} at {at} has been CANCELLED. "
                "Please contact us to reschedule if needed.")
    if status == AppointmentStatus.COMPLETED:
        return (f"Your appointment for {pet} with Dr. {doctor} has been marked as COMPLETED. "
                "Thank you for visiting! Please follow any prescribed care instructions.")
    return f"Your appointment status has been updated to: {status.value}"


def owner_status_change(appointment: Appointment, owner: Profile, vet: Profile,
                        status: AppointmentStatus) -> RenderedMessage:
    text = status_text(appointment, vet, status)
    color, icon = _STATUS_STYLE[status]
    title = status.value.capitalize()

    tips = ""
    if status == AppointmentStatus.CONFIRMED and _is_sports(appointment):
        tips = """
        <div style="background-color: #dbeafe; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <h4 style="margin: 0 0 10px 0; color: #1e40af;">🏃 Sports Training Tips</h4>
            <ul style="margin: 0; padding-left: 20px; color: #1e40af;">
                <li>Ensure your pet has had a light meal 2-3 hours before training</li>
                <li>Bring plenty of water and treats for motivation</li>
                <li>Wear comfortable clothing as you may need to participate</li>
                <li>Arrive 15 minutes early for warm-up exercises</li>
            </ul>
        </div>
        """

    status_line = (f'<p><strong>Status:</strong> <span style="color: {color}; font-weight: bold;">'
                   f'{status.value.upper()}</span></p>')
    html = _wrap(f"""
        <h2 style="color: {color};">{icon} Appointment {title}</h2>
        <p>Hello {escape(owner.full_name)},</p>
        <p>{escape(text)}</p>
        {_details_block(appointment, vet, extra=status_line)}
        {tips}
    """)
    return RenderedMessage(text=text, subject=f"Appointment {title} - {appointment.pet_name}", html=html)


def vet_status_change(appointment: Appointment, owner: Profile, vet: Profile,
                      status: AppointmentStatus, actor_role: str) -> RenderedMessage:
    text = (f"Appointment {status.value.upper()} by {actor_role.replace('_', ' ')}: {owner.full_name}'s pet "
            f"{appointment.pet_name} on {_date(appointment)} at {_time(appointment)}. "
            f"Type: {appointment.consultation_type or 'general'}")
    html = _wrap(f"""
        <h2>Appointment {status.value.capitalize()}</h2>
        <p>Hello Dr. {escape(vet.full_name)},</p>
        <p>{escape(text)}</p>
        {_details_block(appointment, vet)}
    """)
    return RenderedMessage(text=text, subject=f"Appointment {status.value.capitalize()} - {appointment.pet_name}",
                           html=html)


# ============================================================================
# Reminders
# ============================================================================

def day_ahead_owner(appointment: Appointment, owner: Profile, vet: Profile) -> RenderedMessage:
    text = (f"Reminder: You have an appointment with Dr. {vet.full_name} tomorrow at {_time(appointment)} "
            f"for {appointment.pet_name}. Reason: {appointment.reason}")
    reason = f"<p><strong>Reason:</strong> {escape(appointment.reason)}</p>"
    html = _wrap(f"""
        <h2 style="color: #2563eb;">📅 Appointment Reminder</h2>
        <p>Hello {escape(owner.full_name)},</p>
        <p>This is a reminder of your upcoming appointment.</p>
        {_details_block(appointment, vet, extra=reason)}
    """)
    return RenderedMessage(text=text, subject=f"Appointment Reminder - {appointment.pet_name}", html=html)


def day_ahead_vet(appointment: Appointment, owner: Profile, vet: Profile) -> RenderedMessage:
    text = (f"Reminder: You have an appointment tomorrow at {_time(appointment)} with {owner.full_name}'s pet "
            f"{appointment.pet_name}. Consultation type: {appointment.consultation_type or 'general'}")
    html = _wrap(f"""
        <h2 style="color: #2563eb;">📅 Appointment Reminder</h2>
        <p>Hello Dr. {escape(vet.full_name)},</p>
        <p>{escape(text)}</p>
    """)
    return RenderedMessage(text=text, subject=f"Appointment Reminder - {appointment.pet_name}", html=html)


def hour_ahead_owner(appointment: Appointment, owner: Profile, vet: Profile) -> RenderedMessage:
    tail = ("Remember to bring training equipment!" if _is_sports(appointment)
            else "Please arrive 10 minutes early.")
    text = (f"⏰ REMINDER: Your appointment with Dr. {vet.full_name} for {appointment.pet_name} starts in "
            f"about 1 hour at {_time(appointment)}. {tail}")

    if _is_sports(appointment):
        checklist = """
        <div style="background-color: #dbeafe; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <p style="margin: 0; color: #1e40af;"><strong>🏃 Sports Training Checklist:</strong></p>
            <ul style="margin: 10px 0 0 0; padding-left: 20px; color: #1e40af;">
                <li>Training equipment ready</li>
                <li>Water bottle for your pet</li>
                <li>Treats for motivation</li>
                <li>Comfortable shoes for you</li>
            </ul>
        </div>
        """
    else:
        checklist = """
        <div style="background-color: #f0fdf4; padding: 15px; border-radius: 8px; margin: 20px 0;">
            <p style="margin: 0; color: #166534;"><strong>✅ Quick Checklist:</strong></p>
            <ul style="margin: 10px 0 0 0; padding-left: 20px; color: #166534;">
                <li>Arrive 10 minutes early</li>
                <li>Bring any previous medical records</li>
                <li>Have your questions ready</li>
                <li>Keep your pet secure during travel</li>
            </ul>
        </div>
        """

    reason = f"<p><strong>Reason:</strong> {escape(appointment.reason)}</p>"
    html = _wrap(f"""
        <h2 style="color: #f59e0b;">⏰ Your Appointment Starts Soon!</h2>
        <p>Hello {escape(owner.full_name)},</p>
        <p>This is a friendly reminder that your appointment is starting in about <strong>1 hour</strong>!</p>
        {_details_block(appointment, vet, background="#fef3c7", extra=reason)}
        {checklist}
        <p>See you soon!</p>
    """)
    return RenderedMessage(text=text, subject=f"⏰ 1 Hour Reminder - Appointment for {appointment.pet_name}",
                           html=html)


def hour_ahead_vet(appointment: Appointment, owner: Profile, vet: Profile) -> RenderedMessage:
    text = (f"⏰ REMINDER: Appointment in 1 hour at {_time(appointment)} with {owner.full_name}'s pet "
            f"{appointment.pet_name}. Type: {appointment.consultation_type or 'general'}")
    html = _wrap(f"""
        <h2 style="color: #f59e0b;">⏰ Appointment in 1 Hour</h2>
        <p>Hello Dr. {escape(vet.full_name)},</p>
        <p>{escape(text)}</p>
    """)
    return RenderedMessage(text=text, subject=f"⏰ 1 Hour Reminder - {appointment.pet_name}", html=html)


def vaccination_reminder(record: VaccinationRecord, owner: Profile) -> RenderedMessage:
    due = record.due_date.strftime("%B %d, %Y")
    text = (f"Vaccination reminder: {record.pet_name} is due for {record.vaccine_name} on {due}. "
            "Please schedule an appointment with your veterinarian.")
    html = _wrap(f"""
        <h2>Vaccination Reminder</h2>
        <p>Dear {escape(owner.full_name)},</p>
        <p>This is a reminder that your pet <strong>{escape(record.pet_name)}</strong> is due for vaccination:</p>
        <ul>
            <li><strong>Vaccine:</strong> {escape(record.vaccine_name)}</li>
            <li><strong>Due Date:</strong> {due}</li>
        </ul>
        <p>Please schedule an appointment with your veterinarian.</p>
    """)
    return RenderedMessage(text=text, subject=f"Vaccination Reminder - {record.pet_name}", html=html)


# ============================================================================
# Diagnostics
# ============================================================================

_METHOD_DESCRIPTION = {
    ContactMethod.SMS: "SMS only",
    ContactMethod.EMAIL: "Email only",
    ContactMethod.BOTH: "both SMS and Email",
}


def diagnostic_notification(owner: Profile, method: ContactMethod) -> RenderedMessage:
    text = (f"Hello {owner.full_name}! This is a test notification from {settings.clinic_name}. "
            "Your SMS notifications are working correctly. 🎉")
    html = _wrap(f"""
        <h2 style="color: #333;">Test Notification Successful! 🎉</h2>
        <p>Hello {escape(owner.full_name)},</p>
        <p>This is a test notification from {escape(settings.clinic_name)}. Your email notifications are working correctly!</p>
        <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <p style="margin: 0;"><strong>Notification Settings:</strong></p>
            <p style="margin: 10px 0 0 0;">You will receive appointment reminders and confirmations via {_METHOD_DESCRIPTION[method]}.</p>
        </div>
        <p>You can update your notification preferences anytime in your dashboard.</p>
    """)
    return RenderedMessage(text=text, subject=f"Test Notification - {settings.clinic_name}", html=html)
