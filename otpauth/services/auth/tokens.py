"""
Token issuance policy.

Which secret, which lifetime and which claims each device class gets:

- web: one token signed with the primary secret, long lifetime (no refresh flow)
- mobile: a short-lived access token signed with the primary secret plus a
  long-lived refresh token signed with the separate refresh secret
"""
import enum
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError
from jose.exceptions import JOSEError

from ...core.config import settings, Settings
from ...core.security import create_token, decode_token
from .errors import InvalidRefreshToken, IssuanceFailed
from .store import CredentialStore

logger = logging.getLogger(__name__)

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


class DeviceType(str, enum.Enum):
    WEB = "web"
    MOBILE = "mobile"


@dataclass
class IssuedTokens:
    access_token: str
    refresh_token: Optional[str] = None


class TokenIssuer:
    """Signs tokens according to the device-class policy"""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    @staticmethod
    def build_payload(user_id: str, phone_number: str) -> Dict[str, Any]:
        return {"sub": str(user_id), "phoneNumber": phone_number}

    def _sign(self, payload: Dict[str, Any], token_type: str, secret: str, expires_delta: timedelta) -> str:
        claims = dict(payload, typ=token_type)
        try:
            return create_token(claims, secret, expires_delta, algorithm=self.config.JWT_ALGORITHM)
        except JOSEError as e:
            logger.error(f"[Auth] Failed to sign {token_type} token for user {payload.get('sub')}: {e}")
            raise IssuanceFailed()

    def create_access_token(self, user_id: str, phone_number: str,
                            expires_delta: Optional[timedelta] = None) -> str:
        payload = self.build_payload(user_id, phone_number)
        return self._sign(
            payload,
            TOKEN_TYPE_ACCESS,
            self.config.JWT_SECRET,
            expires_delta or self.config.access_token_expire,
        )

    def create_refresh_token(self, user_id: str, phone_number: str) -> str:
        payload = self.build_payload(user_id, phone_number)
        return self._sign(
            payload,
            TOKEN_TYPE_REFRESH,
            self.config.JWT_REFRESH_SECRET,
            self.config.refresh_token_expire,
        )

    def issue_tokens(self, user_id: str, phone_number: str, device_type: DeviceType) -> IssuedTokens:
        """
        Issue credentials for a freshly verified user.

        Args:
            user_id: User id (JWT sub claim)
            phone_number: E.164 phone number
            device_type: web or mobile

        Returns:
            IssuedTokens; ``refresh_token`` is None for web
        """
        device_type = DeviceType(device_type)
        if device_type is DeviceType.WEB:
            return IssuedTokens(
                access_token=self.create_access_token(
                    user_id, phone_number, expires_delta=self.config.web_token_expire
                ),
            )

        return IssuedTokens(
            access_token=self.create_access_token(user_id, phone_number),
            refresh_token=self.create_refresh_token(user_id, phone_number),
        )

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        """Verify a web or access token. Raises JWTError on failure."""
        payload = decode_token(token, self.config.JWT_SECRET, algorithm=self.config.JWT_ALGORITHM)
        if payload.get("typ") != TOKEN_TYPE_ACCESS:
            raise JWTError("Unexpected token type")
        return payload

    def decode_refresh_token(self, token: str) -> Dict[str, Any]:
        """Verify a refresh token. Raises JWTError on failure."""
        payload = decode_token(token, self.config.JWT_REFRESH_SECRET, algorithm=self.config.JWT_ALGORITHM)
        if payload.get("typ") != TOKEN_TYPE_REFRESH:
            raise JWTError("Unexpected token type")
        return payload

    def refresh_access_token(self, store: CredentialStore, refresh_token: str) -> str:
        """
        Mint a new access token from a refresh token.

        The refresh token itself is not rotated; it stays valid until it
        expires. Every failure reports the same InvalidRefreshToken.
        """
        try:
            payload = self.decode_refresh_token(refresh_token)
        except JWTError as e:
            logger.info(f"[Auth] Refresh token rejected: {e}")
            raise InvalidRefreshToken()

        user = store.find_user_by_id(payload.get("sub"))
        if not user or not user.is_active:
            logger.info(f"[Auth] Refresh token rejected: user {payload.get('sub')} missing or inactive")
            raise InvalidRefreshToken()

        return self.create_access_token(user.id, user.phone_number)
