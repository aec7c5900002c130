"""
Contact Preference Router
Owner notification channel settings and the diagnostic test send
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.contact_preference import (
    ContactPreferenceUpdate,
    ContactPreferenceResponse,
    NotificationCheckResponse,
)
from app.services.contact_preferences import ChannelSelection, ContactPreferenceResolver
from app.services.notification_gateway import NotificationGateway, get_notification_gateway

router = APIRouter(prefix="/api/owners", tags=["Contact Preferences"])


def _response(owner_id: str, resolver: ContactPreferenceResolver) -> ContactPreferenceResponse:
    method = resolver.stored_method(owner_id)
    selection = ChannelSelection.for_method(method)
    return ContactPreferenceResponse(
        owner_id=owner_id,
        preferred_contact_method=method,
        sms=selection.sms,
        email=selection.email,
    )


@router.get("/{owner_id}/contact-preference", response_model=ContactPreferenceResponse)
def get_contact_preference(owner_id: str, db: Session = Depends(get_db)):
    """Effective preference; owners who never chose one get SMS."""
    resolver = ContactPreferenceResolver(db)
    resolver.get_owner(owner_id)
    return _response(owner_id, resolver)


@router.put("/{owner_id}/contact-preference", response_model=ContactPreferenceResponse)
def set_contact_preference(
    owner_id: str,
    data: ContactPreferenceUpdate,
    db: Session = Depends(get_db),
):
    resolver = ContactPreferenceResolver(db)
    resolver.set_preference(owner_id, data.preferred_contact_method)
    return _response(owner_id, resolver)


@router.post("/{owner_id}/test-notification", response_model=NotificationCheckResponse,
             status_code=status.HTTP_200_OK)
def send_test_notification(
    owner_id: str,
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
):
    """Send a test message on the owner's configured channel(s)."""
    result = ContactPreferenceResolver(db).send_test_notification(owner_id, gateway)
    return NotificationCheckResponse(
        success=result.sms_sent or result.email_sent,
        message=result.message,
        sms_sent=result.sms_sent,
        email_sent=result.email_sent,
    )
