"""
Session validation: bearer credential -> principal.

The user row is re-read on every call, so deactivation applies to the very
next request even while the credential itself is still unexpired.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Optional

from jose import JWTError

from .errors import Unauthenticated
from .store import CredentialStore
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    id: str
    phone_number: str
    name: Optional[str]
    email: Optional[str]
    is_verified: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "id": data["id"],
            "phoneNumber": data["phone_number"],
            "name": data["name"],
            "email": data["email"],
            "isVerified": data["is_verified"],
        }


def resolve_principal(store: CredentialStore, credential: Optional[str],
                      issuer: Optional[TokenIssuer] = None) -> Principal:
    """
    Verify ``credential`` against the primary secret and load its user.

    Raises:
        Unauthenticated: missing/invalid/expired credential, or the user is
            gone or inactive
    """
    if not credential:
        raise Unauthenticated()

    issuer = issuer or TokenIssuer()
    try:
        payload = issuer.decode_access_token(credential)
    except JWTError:
        raise Unauthenticated()

    user = store.find_user_by_id(payload.get("sub"))
    if not user or not user.is_active:
        logger.info(f"[Auth] Credential rejected: user {payload.get('sub')} missing or inactive")
        raise Unauthenticated()

    return Principal(
        id=user.id,
        phone_number=user.phone_number,
        name=user.name,
        email=user.email,
        is_verified=bool(user.is_verified),
    )
