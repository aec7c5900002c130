"""
Domain errors raised by the appointment and notification services.
Routers translate them into HTTP responses in app.main.
"""
from typing import Optional


class NotFound(Exception):
    """A referenced appointment, profile or vaccination record does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class InvalidTransition(Exception):
    """Requested appointment status is not a direct successor of the current one."""

    def __init__(self, current: str, requested: str, appointment_id: Optional[str] = None):
        self.current = current
        self.requested = requested
        self.appointment_id = appointment_id
        super().__init__(f"Cannot change appointment status from '{current}' to '{requested}'")


class GatewayError(Exception):
    """An SMS or email provider refused or failed to send a message."""

    def __init__(self, reason: str, channel: Optional[str] = None):
        self.reason = reason
        self.channel = channel
        super().__init__(reason)


class PreferenceResolutionError(Exception):
    """Stored contact preference is missing or malformed."""
