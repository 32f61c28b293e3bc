"""
OTP code delivery providers.

Delivery is best effort: the challenge is already committed when a provider
runs, and a provider failure never reaches the caller.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

from ...core.config import settings, Settings

logger = logging.getLogger(__name__)


def mask_phone(phone_number: str) -> str:
    """Keep only the last four digits for logs"""
    if not phone_number:
        return ""
    return f"***{phone_number[-4:]}"


class CodeDelivery(ABC):
    """Abstract base class for code delivery channels"""

    @abstractmethod
    def send_code(self, phone_number: str, code: str) -> None:
        """
        Deliver ``code`` to ``phone_number``.

        Args:
            phone_number: Normalized phone number in E.164 format
            code: 6-digit OTP code
        """


class ConsoleCodeDelivery(CodeDelivery):
    """
    Console provider for development and tests.

    Logs the code instead of sending it.
    """

    def __init__(self, config: Optional[Settings] = None):
        config = config or settings
        if not config.is_local:
            logger.warning("[OTP][Console] WARNING: Console provider enabled outside a local environment!")

    def send_code(self, phone_number: str, code: str) -> None:
        logger.info(f"[OTP][Console] Code for {mask_phone(phone_number)}: {code}")


class TwilioSMSCodeDelivery(CodeDelivery):
    """
    Twilio direct SMS provider.

    Requires TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and OTP_FROM_NUMBER.
    """

    MESSAGE_TEMPLATE = "Your verification code is: {code}"

    def __init__(self, config: Optional[Settings] = None):
        from twilio.rest import Client

        config = config or settings
        if not config.TWILIO_ACCOUNT_SID or not config.TWILIO_AUTH_TOKEN:
            raise ValueError("Twilio credentials not configured")
        if not config.OTP_FROM_NUMBER:
            raise ValueError("OTP_FROM_NUMBER not configured for SMS provider")

        self.client = Client(config.TWILIO_ACCOUNT_SID, config.TWILIO_AUTH_TOKEN)
        self.from_number = config.OTP_FROM_NUMBER

    def send_code(self, phone_number: str, code: str) -> None:
        message = self.client.messages.create(
            body=self.MESSAGE_TEMPLATE.format(code=code),
            from_=self.from_number,
            to=phone_number,
        )
        logger.info(f"[OTP][TwilioSMS] SMS sent to {mask_phone(phone_number)}, SID: {message.sid}")


_delivery: Optional[CodeDelivery] = None


def get_code_delivery() -> CodeDelivery:
    """Get or create the configured delivery provider singleton"""
    global _delivery
    if _delivery is None:
        provider = settings.OTP_PROVIDER.lower()
        if provider == "twilio_sms":
            _delivery = TwilioSMSCodeDelivery()
        elif provider == "console":
            _delivery = ConsoleCodeDelivery()
        else:
            raise ValueError(f"Unknown OTP_PROVIDER: {settings.OTP_PROVIDER}")
        logger.info(f"[OTP] Using delivery provider: {provider}")
    return _delivery
