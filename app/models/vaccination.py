from datetime import date
from sqlalchemy import Column, String, Text, Date, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
import enum
import uuid


class VaccinationStatus(str, enum.Enum):
    """Stored vaccination status. OVERDUE is derived, never persisted."""
    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class VaccinationRecord(Base):
    """
    Vaccination due-date entry for an owner's pet.
    reminder_sent goes from False to True once a reminder has been delivered.
    """
    __tablename__ = "vaccination_schedule"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    pet_owner_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    pet_name = Column(String(255), nullable=False)
    vaccine_name = Column(String(255), nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(
        SQLEnum(VaccinationStatus, name="vaccination_status", values_callable=lambda e: [m.value for m in e]),
        default=VaccinationStatus.PENDING,
        nullable=False,
    )
    reminder_sent = Column(Boolean, default=False, server_default="0", nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    pet_owner = relationship("Profile")

    def effective_status(self, today: date) -> VaccinationStatus:
        if self.status == VaccinationStatus.PENDING and self.due_date < today:
            return VaccinationStatus.OVERDUE
        return self.status

    def __repr__(self):
        return f"<VaccinationRecord(id={self.id}, pet='{self.pet_name}', vaccine='{self.vaccine_name}', due={self.due_date})>"
