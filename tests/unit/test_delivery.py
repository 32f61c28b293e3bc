"""
Code delivery providers
"""
import logging
from unittest.mock import MagicMock, patch

import pytest

from otpauth.core.config import Settings, settings
from otpauth.services.auth import delivery as delivery_module
from otpauth.services.auth.delivery import (
    ConsoleCodeDelivery,
    TwilioSMSCodeDelivery,
    get_code_delivery,
    mask_phone,
)


def _twilio_settings(**overrides) -> Settings:
    values = {
        "ENV": "test",
        "OTP_PROVIDER": "twilio_sms",
        "TWILIO_ACCOUNT_SID": "AC123",
        "TWILIO_AUTH_TOKEN": "secret",
        "OTP_FROM_NUMBER": "+15550000000",
    }
    values.update(overrides)
    return Settings(**values)


def test_mask_phone():
    assert mask_phone("+15551234567") == "***4567"
    assert mask_phone("") == ""


def test_console_delivery_logs_code(caplog):
    with caplog.at_level(logging.INFO, logger="otpauth.services.auth.delivery"):
        ConsoleCodeDelivery(Settings(ENV="test")).send_code("+15551234567", "123456")

    assert "123456" in caplog.text
    assert "+15551234567" not in caplog.text
    assert "***4567" in caplog.text


def test_console_delivery_warns_outside_local(caplog):
    with caplog.at_level(logging.WARNING, logger="otpauth.services.auth.delivery"):
        ConsoleCodeDelivery(Settings(ENV="prod"))

    assert "outside a local environment" in caplog.text


def test_twilio_sends_sms():
    with patch("twilio.rest.Client") as client_cls:
        client = client_cls.return_value
        client.messages.create.return_value = MagicMock(sid="SM123")

        TwilioSMSCodeDelivery(_twilio_settings()).send_code("+15551234567", "042517")

    client_cls.assert_called_once_with("AC123", "secret")
    client.messages.create.assert_called_once_with(
        body="Your verification code is: 042517",
        from_="+15550000000",
        to="+15551234567",
    )


def test_twilio_requires_configuration():
    with patch("twilio.rest.Client"):
        with pytest.raises(ValueError, match="credentials"):
            TwilioSMSCodeDelivery(_twilio_settings(TWILIO_AUTH_TOKEN=""))
        with pytest.raises(ValueError, match="OTP_FROM_NUMBER"):
            TwilioSMSCodeDelivery(_twilio_settings(OTP_FROM_NUMBER=""))


def test_twilio_errors_propagate_to_caller():
    with patch("twilio.rest.Client") as client_cls:
        client_cls.return_value.messages.create.side_effect = RuntimeError("rejected")
        provider = TwilioSMSCodeDelivery(_twilio_settings())

        with pytest.raises(RuntimeError):
            provider.send_code("+15551234567", "123456")


def test_get_code_delivery_is_singleton(monkeypatch):
    monkeypatch.setattr(delivery_module, "_delivery", None)
    monkeypatch.setattr(settings, "OTP_PROVIDER", "console")

    first = get_code_delivery()

    assert isinstance(first, ConsoleCodeDelivery)
    assert get_code_delivery() is first


def test_get_code_delivery_rejects_unknown_provider(monkeypatch):
    monkeypatch.setattr(delivery_module, "_delivery", None)
    monkeypatch.setattr(settings, "OTP_PROVIDER", "fax")

    with pytest.raises(ValueError, match="Unknown OTP_PROVIDER"):
        get_code_delivery()
