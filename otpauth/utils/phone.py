"""
Phone number normalization utilities
"""
import re
import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

E164_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")


def normalize_phone(phone: str) -> str:
    """
    Normalize phone number to E.164 format.

    Numbers without a leading ``+`` are read as international digits
    (country code first), matching the accepted input pattern.

    Args:
        phone: Phone number string, e.g. ``+15551234567`` or ``15551234567``

    Returns:
        Normalized phone number in E.164 format (e.g., +15551234567)

    Raises:
        ValueError: If phone number is malformed or not a possible number
    """
    phone = (phone or "").strip()
    if not E164_PATTERN.match(phone):
        raise ValueError("Phone number must be in valid format (e.g., +1234567890)")

    if not phone.startswith("+"):
        phone = f"+{phone}"

    try:
        parsed = phonenumbers.parse(phone, None)
    except NumberParseException as e:
        raise ValueError(f"Invalid phone number format: {str(e)}")

    if not phonenumbers.is_possible_number(parsed):
        raise ValueError("Invalid phone number")

    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)
