import pytest

from otpauth.utils.phone import normalize_phone


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+15551234567", "+15551234567"),
        ("15551234567", "+15551234567"),
        ("  +447911123456 ", "+447911123456"),
        ("+12125550100", "+12125550100"),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        None,
        "+0123456789",
        "555-123-4567",
        "+1 (555) 123-4567",
        "+1234567890123456",
        "phone",
        "+1555",
    ],
)
def test_normalize_phone_rejects(raw):
    with pytest.raises(ValueError):
        normalize_phone(raw)
