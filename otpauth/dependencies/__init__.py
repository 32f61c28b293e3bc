from .auth import extract_credential, get_current_principal, get_otp_service

__all__ = [
    "extract_credential",
    "get_current_principal",
    "get_otp_service",
]
