"""
Auth services package: store, token policy, session validation and code delivery
"""
from .errors import (
    AuthError,
    ChallengeNotFound,
    AttemptsExceeded,
    InvalidCode,
    InvalidRefreshToken,
    Unauthenticated,
    IssuanceFailed,
)
from .store import CredentialStore
from .tokens import DeviceType, IssuedTokens, TokenIssuer
from .session import Principal, resolve_principal
from .delivery import CodeDelivery, ConsoleCodeDelivery, TwilioSMSCodeDelivery, get_code_delivery

__all__ = [
    "AuthError",
    "ChallengeNotFound",
    "AttemptsExceeded",
    "InvalidCode",
    "InvalidRefreshToken",
    "Unauthenticated",
    "IssuanceFailed",
    "CredentialStore",
    "DeviceType",
    "IssuedTokens",
    "TokenIssuer",
    "Principal",
    "resolve_principal",
    "CodeDelivery",
    "ConsoleCodeDelivery",
    "TwilioSMSCodeDelivery",
    "get_code_delivery",
]
