"""
Authentication error taxonomy.

Every failure the auth core can report is an ``AuthError`` subclass carrying
the HTTP status and a stable machine-readable code. The core raises them;
``otpauth.exception_handlers`` turns them into responses.
"""


class AuthError(Exception):
    """Base exception for all authentication failures."""

    status_code = 401
    code = "auth_error"
    message = "Authentication failed"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class ChallengeNotFound(AuthError):
    """No live challenge for the phone number (never requested, expired or already used)."""
    code = "otp_not_found"
    message = "Invalid or expired OTP"


class AttemptsExceeded(AuthError):
    """The challenge used up its attempt budget."""
    code = "otp_attempts_exceeded"
    message = "Maximum OTP attempts exceeded"


class InvalidCode(AuthError):
    code = "otp_invalid"
    message = "Invalid OTP"


class InvalidRefreshToken(AuthError):
    code = "invalid_refresh_token"
    message = "Invalid refresh token"


class Unauthenticated(AuthError):
    code = "unauthenticated"
    message = "Not authenticated"


class IssuanceFailed(AuthError):
    """Token signing failed after the challenge and user were persisted."""
    status_code = 500
    code = "issuance_failed"
    message = "Token issuance failed"
