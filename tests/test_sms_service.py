from unittest.mock import MagicMock

import pytest
import requests
from twilio.base.exceptions import TwilioException

from app.core.config import settings
from app.core.exceptions import GatewayError
from app.services.sms_service import SMSService


def sms_settings(**overrides):
    values = {
        "twilio_enabled": True,
        "twilio_sms_enabled": True,
        "twilio_phone_number": "+15550001111",
        "twilio_messaging_service_sid": None,
        "twilio_custom_sender_id": None,
        "twilio_custom_phone_number": None,
        "sms_default_country_code": "1",
    }
    values.update(overrides)
    return settings.model_copy(update=values)


def twilio_client(status="queued", error_code=None, sid="SM123"):
    client = MagicMock()
    client.messages.create.return_value = MagicMock(
        status=status, error_code=error_code, error_message=None, sid=sid
    )
    return client


@pytest.mark.parametrize("raw, expected", [
    ("(555) 123-4567", "+15551234567"),
    ("+44 20 7946 0958", "+442079460958"),
    ("05551234567", "+15551234567"),
    ("", ""),
])
def test_format_phone_number(raw, expected):
    assert SMSService(sms_settings(), client=twilio_client()).format_phone_number(raw) == expected


def test_send_sms_returns_sid():
    client = twilio_client()
    service = SMSService(sms_settings(), client=client)

    assert service.send_sms("555-123-4567", "Hello") == "SM123"
    client.messages.create.assert_called_once_with(body="Hello", to="+15551234567", from_="+15550001111")


def test_messaging_service_takes_priority():
    client = twilio_client()
    service = SMSService(sms_settings(twilio_messaging_service_sid="MG999"), client=client)

    service.send_sms("+15551234567", "Hello")

    assert client.messages.create.call_args.kwargs["messaging_service_sid"] == "MG999"


def test_failed_status_raises():
    service = SMSService(sms_settings(), client=twilio_client(status="failed", error_code=30003))

    with pytest.raises(GatewayError) as exc_info:
        service.send_sms("+15551234567", "Hello")
    assert exc_info.value.channel == "sms"


def test_twilio_exception_raises_gateway_error():
    client = twilio_client()
    client.messages.create.side_effect = TwilioException("unreachable")

    with pytest.raises(GatewayError):
        SMSService(sms_settings(), client=client).send_sms("+15551234567", "Hello")


def test_disabled_service_raises():
    client = twilio_client()

    with pytest.raises(GatewayError):
        SMSService(sms_settings(twilio_enabled=False), client=client).send_sms("+15551234567", "Hello")
    client.messages.create.assert_not_called()


def test_missing_destination_or_sender_raises():
    with pytest.raises(GatewayError):
        SMSService(sms_settings(), client=twilio_client()).send_sms("", "Hello")
    with pytest.raises(GatewayError):
        SMSService(sms_settings(twilio_phone_number=None), client=twilio_client()).send_sms("+15551234567", "Hello")


def test_transport_error_raises_gateway_error():
    client = twilio_client()
    client.messages.create.side_effect = requests.exceptions.ConnectionError("connection reset")

    with pytest.raises(GatewayError) as exc_info:
        SMSService(sms_settings(), client=client).send_sms("+15551234567", "Hello")
    assert exc_info.value.channel == "sms"
    assert "connection reset" in exc_info.value.reason
