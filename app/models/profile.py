from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
import enum
import uuid


class UserRole(str, enum.Enum):
    """Enum for the two kinds of party on an appointment"""
    VET = "vet"
    PET_OWNER = "pet_owner"


class ContactMethod(str, enum.Enum):
    """Owner's preferred notification channel(s)"""
    SMS = "sms"
    EMAIL = "email"
    BOTH = "both"


def _uuid() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    """
    Party model shared by vets and pet owners.
    Single source of contact information for every notification.
    """
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    role = Column(
        SQLEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner_profile = relationship("PetOwnerProfile", uselist=False, back_populates="profile")

    def __repr__(self):
        return f"<Profile(id={self.id}, name='{self.full_name}', role='{self.role}')>"


class PetOwnerProfile(Base):
    """
    Owner-only extension of a profile.
    preferred_contact_method is kept as plain text so legacy or malformed
    values can be read back and handled by the resolver.
    """
    __tablename__ = "pet_owner_profiles"

    id = Column(String(36), ForeignKey("profiles.id"), primary_key=True)
    preferred_contact_method = Column(String(20), nullable=True)
    address = Column(String(500), nullable=True)
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact_phone = Column(String(20), nullable=True)

    profile = relationship("Profile", back_populates="owner_profile")

    def __repr__(self):
        return f"<PetOwnerProfile(id={self.id}, preferred='{self.preferred_contact_method}')>"
