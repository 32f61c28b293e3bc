"""
Phone OTP (One-Time Password) service

DB-backed OTP challenges: issue, invalidate, verify with attempt accounting,
then find-or-create the user and hand off to the token issuer.
"""
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.clock import Clock, utcnow
from ..core.config import settings, Settings
from .auth.delivery import CodeDelivery, get_code_delivery, mask_phone
from .auth.errors import AttemptsExceeded, ChallengeNotFound, InvalidCode
from .auth.store import CredentialStore
from .auth.tokens import DeviceType, IssuedTokens, TokenIssuer

logger = logging.getLogger(__name__)

# Schedules ``send(phone_number, code)`` to run; returns immediately or runs inline
Dispatcher = Callable[..., None]


@dataclass
class VerificationResult:
    user: dict
    device_type: DeviceType
    tokens: IssuedTokens


class OTPService:
    """Service for generating, delivering and verifying OTP codes"""

    OTP_LENGTH = 6

    def __init__(
        self,
        db: Session,
        delivery: Optional[CodeDelivery] = None,
        issuer: Optional[TokenIssuer] = None,
        config: Optional[Settings] = None,
        clock: Clock = utcnow,
    ):
        self.store = CredentialStore(db)
        self.config = config or settings
        self.delivery = delivery
        self.issuer = issuer or TokenIssuer(self.config)
        self.clock = clock

    @property
    def max_attempts(self) -> int:
        return self.config.OTP_MAX_ATTEMPTS

    @staticmethod
    def generate_otp_code() -> str:
        """Generate a random 6-digit OTP code (100000-999999)"""
        low = 10 ** (OTPService.OTP_LENGTH - 1)
        return str(low + secrets.randbelow(9 * low))

    def _deliver(self, phone_number: str, code: str) -> None:
        try:
            delivery = self.delivery or get_code_delivery()
            delivery.send_code(phone_number, code)
        except Exception as e:
            # Challenge is already stored; the user can request a new code
            logger.error(f"[OTP] Failed to deliver code to {mask_phone(phone_number)}: {e}")

    def request_challenge(self, phone_number: str, dispatch: Optional[Dispatcher] = None) -> None:
        """
        Invalidate any live challenge for the phone number and issue a new one.

        Args:
            phone_number: Phone number already normalized to E.164
            dispatch: Optional scheduler for the delivery call, e.g.
                ``BackgroundTasks.add_task``. Delivery runs inline when omitted.
        """
        now = self.clock()
        code = self.generate_otp_code()

        invalidated = self.store.invalidate_live_challenges(phone_number)
        challenge = self.store.create_challenge(
            phone_number=phone_number,
            code=code,
            expires_at=now + self.config.otp_expire,
            now=now,
        )
        self.store.commit()

        logger.info(
            f"[OTP] Challenge {challenge.id} issued for {mask_phone(phone_number)} "
            f"(invalidated {invalidated} previous)"
        )

        if dispatch is not None:
            dispatch(self._deliver, phone_number, code)
        else:
            self._deliver(phone_number, code)

    def verify_challenge(self, phone_number: str, submitted_code: str, device_type: DeviceType) -> VerificationResult:
        """
        Verify a submitted code and issue credentials.

        Raises:
            ChallengeNotFound: no live challenge (never requested, expired or used)
            AttemptsExceeded: the challenge has used its attempt budget
            InvalidCode: code mismatch; the failed attempt is committed first
            IssuanceFailed: signing failed after the user was persisted
        """
        device_type = DeviceType(device_type)
        now = self.clock()

        challenge = self.store.find_live_challenge(phone_number, now)
        if not challenge:
            raise ChallengeNotFound()

        if challenge.attempts >= self.max_attempts:
            raise AttemptsExceeded()

        if not hmac.compare_digest(challenge.code.encode(), (submitted_code or "").encode()):
            counted = self.store.record_failed_attempt(challenge.id, self.max_attempts)
            self.store.commit()
            if not counted:
                raise AttemptsExceeded()
            logger.warning(f"[OTP] Invalid code for {mask_phone(phone_number)} (challenge {challenge.id})")
            raise InvalidCode()

        if not self.store.consume_challenge(challenge.id, self.max_attempts):
            # A concurrent request consumed or exhausted the challenge first
            self.store.commit()
            raise ChallengeNotFound()
        self.store.commit()

        user = self.store.find_user_by_phone(phone_number)
        if user is None:
            user = self.store.create_user(
                phone_number,
                is_verified=True,
                is_active=True,
                last_login_at=now,
            )
            logger.info(f"[Auth] Created or recovered user {user.id} for {mask_phone(phone_number)}")

        # Also covers a user that a concurrent login created first
        self.store.update_user(user, is_verified=True, last_login_at=now)
        self.store.commit()

        tokens = self.issuer.issue_tokens(user.id, user.phone_number, device_type)
        logger.info(f"[Auth] Login successful for user {user.id} ({device_type.value})")

        return VerificationResult(
            user=user.to_summary(),
            device_type=device_type,
            tokens=tokens,
        )

    def refresh_access_token(self, refresh_token: str) -> str:
        """Mint a new access token from a mobile refresh token"""
        return self.issuer.refresh_access_token(self.store, refresh_token)

    def purge_expired_challenges(self) -> int:
        deleted = self.store.purge_expired_challenges(self.clock())
        self.store.commit()
        return deleted
