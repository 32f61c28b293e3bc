"""
Authentication dependencies
"""
from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.config import settings
from ..db import get_db
from ..services.auth.session import Principal, resolve_principal
from ..services.auth.store import CredentialStore
from ..services.otp_service import OTPService


def get_otp_service(db: Session = Depends(get_db)) -> OTPService:
    return OTPService(db)


def extract_credential(request: Request) -> Optional[str]:
    """
    Pull the bearer credential from the request.

    The web session cookie is checked first, then the Authorization header
    used by mobile clients.
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header:
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() == "bearer":
            return token.strip() or None

    return None


def get_current_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    """Resolve the authenticated principal, raising Unauthenticated otherwise"""
    return resolve_principal(CredentialStore(db), extract_credential(request))
