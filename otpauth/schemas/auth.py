"""
Request/response models for the auth endpoints
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..services.auth.tokens import DeviceType
from ..utils.phone import normalize_phone


class RequestOTPRequest(BaseModel):
    phoneNumber: str

    @field_validator("phoneNumber")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return normalize_phone(value)


class VerifyOTPRequest(BaseModel):
    phoneNumber: str
    otp: str = Field(..., pattern=r"^\d{6}$", description="OTP must be exactly 6 digits")
    deviceType: DeviceType

    @field_validator("phoneNumber")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return normalize_phone(value)


class RefreshTokenRequest(BaseModel):
    refreshToken: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str


class UserSummary(BaseModel):
    id: str
    phoneNumber: str
    name: Optional[str] = None
    email: Optional[str] = None


class TokenPair(BaseModel):
    accessToken: str
    refreshToken: str


class VerifyOTPResponse(BaseModel):
    message: str
    user: UserSummary
    tokens: Optional[TokenPair] = None


class AccessTokenResponse(BaseModel):
    accessToken: str


class PrincipalResponse(BaseModel):
    id: str
    phoneNumber: str
    name: Optional[str] = None
    email: Optional[str] = None
    isVerified: bool
