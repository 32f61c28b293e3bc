"""
Phone OTP auth router
"""
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Response

from ..core.config import settings
from ..dependencies.auth import get_current_principal, get_otp_service
from ..schemas.auth import (
    AccessTokenResponse,
    MessageResponse,
    PrincipalResponse,
    RefreshTokenRequest,
    RequestOTPRequest,
    VerifyOTPRequest,
    VerifyOTPResponse,
)
from ..services.auth.session import Principal
from ..services.auth.tokens import DeviceType
from ..services.otp_service import OTPService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _should_use_secure_cookie() -> bool:
    """Secure, same-site strict cookies everywhere except local environments"""
    return not settings.is_local


def set_session_cookie(response: Response, token: str) -> None:
    secure = _should_use_secure_cookie()
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=secure,
        samesite="strict" if secure else "lax",
        max_age=settings.JWT_WEB_EXPIRE_MINUTES * 60,
    )


@router.post("/request-otp", response_model=MessageResponse)
def request_otp(
    payload: RequestOTPRequest,
    background_tasks: BackgroundTasks,
    service: OTPService = Depends(get_otp_service),
):
    """Issue a new OTP challenge; the code is delivered after the response"""
    service.request_challenge(payload.phoneNumber, dispatch=background_tasks.add_task)
    return MessageResponse(message="OTP sent successfully")


@router.post("/verify-otp", response_model=VerifyOTPResponse, response_model_exclude_none=True)
def verify_otp(
    payload: VerifyOTPRequest,
    response: Response,
    service: OTPService = Depends(get_otp_service),
):
    """
    Verify an OTP and log in.

    web: the token is set as an HTTP-only cookie and left out of the body.
    mobile: access and refresh tokens are returned in the body.
    """
    result = service.verify_challenge(payload.phoneNumber, payload.otp, payload.deviceType)

    body = {"message": "Login successful", "user": result.user}
    if result.device_type is DeviceType.WEB:
        set_session_cookie(response, result.tokens.access_token)
    else:
        body["tokens"] = {
            "accessToken": result.tokens.access_token,
            "refreshToken": result.tokens.refresh_token,
        }
    return body


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(
    payload: RefreshTokenRequest,
    service: OTPService = Depends(get_otp_service),
):
    """Mint a new access token from a mobile refresh token"""
    return AccessTokenResponse(accessToken=service.refresh_access_token(payload.refreshToken))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, principal: Principal = Depends(get_current_principal)):
    """Logout user (clear cookie)"""
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME)
    logger.info(f"[Auth] User {principal.id} logged out")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=PrincipalResponse)
@router.post("/me", response_model=PrincipalResponse)
def me(principal: Principal = Depends(get_current_principal)):
    return principal.to_dict()
