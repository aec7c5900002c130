"""
Appointment Model
Stores vet appointments booked by pet owners
"""
from sqlalchemy import Column, Integer, String, Text, Date, Time, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
import enum
import uuid


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReminderWindow(str, enum.Enum):
    """Reminder windows tracked in Appointment.reminders_sent"""
    DAY_AHEAD = "day_ahead"
    HOUR_AHEAD = "hour_ahead"

    @property
    def bit(self) -> int:
        return _WINDOW_BITS[self]


_WINDOW_BITS = {
    ReminderWindow.DAY_AHEAD: 1,
    ReminderWindow.HOUR_AHEAD: 2,
}


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Parties
    pet_owner_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    vet_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)

    # Pet / visit details
    pet_name = Column(String(255), nullable=False)
    pet_type = Column(String(100), nullable=False)
    reason = Column(Text, nullable=False)
    consultation_type = Column(String(50), nullable=True)  # general, sports_training, ...

    # Scheduling: local wall clock plus the UTC instant the scans compare against
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(Time, nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    starts_at = Column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=30)

    status = Column(
        SQLEnum(AppointmentStatus, name="appointment_status", values_callable=lambda e: [m.value for m in e]),
        default=AppointmentStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Bitmask of ReminderWindow.bit values already fired
    reminders_sent = Column(Integer, nullable=False, default=0, server_default="0")

    notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    pet_owner = relationship("Profile", foreign_keys=[pet_owner_id])
    vet = relationship("Profile", foreign_keys=[vet_id])

    def has_reminder(self, window: ReminderWindow) -> bool:
        return bool((self.reminders_sent or 0) & window.bit)

    @property
    def reminder_windows(self) -> list:
        return [w for w in ReminderWindow if self.has_reminder(w)]

    def __repr__(self):
        return f"<Appointment(id={self.id}, pet='{self.pet_name}', status='{self.status}', starts_at={self.starts_at})>"
