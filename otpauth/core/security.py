from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from jose import jwt
from .config import settings


def create_token(claims: Dict[str, Any], secret: str, expires_delta: timedelta,
                 algorithm: str = None) -> str:
    """
    Sign ``claims`` with ``secret``, adding ``iat`` and ``exp``.

    Raises:
        jose.JWSError: if the algorithm or key cannot be used for signing
    """
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = dict(claims)
    payload["iat"] = now
    payload["exp"] = now + expires_delta
    return jwt.encode(payload, secret, algorithm=algorithm or settings.JWT_ALGORITHM)


def decode_token(token: str, secret: str, algorithm: str = None) -> Dict[str, Any]:
    """
    Verify signature and expiry and return the claims.

    Raises:
        jose.JWTError: (or its ExpiredSignatureError subclass) on any failure
    """
    return jwt.decode(token, secret, algorithms=[algorithm or settings.JWT_ALGORITHM])
