"""
Models package
"""
from .user import User
from .otp_challenge import OTPChallenge

__all__ = [
    "User",
    "OTPChallenge",
]
