from pydantic import BaseModel, Field
from app.models.profile import ContactMethod


class ContactPreferenceUpdate(BaseModel):
    """Schema for setting an owner's preferred notification channel"""
    preferred_contact_method: ContactMethod = Field(..., description="sms, email or both")


class ContactPreferenceResponse(BaseModel):
    owner_id: str
    preferred_contact_method: ContactMethod
    sms: bool
    email: bool


class NotificationCheckResponse(BaseModel):
    """Schema for the diagnostic send result"""
    success: bool
    message: str
    sms_sent: bool
    email_sent: bool
