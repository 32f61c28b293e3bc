"""
Credential store: persistence of users and OTP challenges.

Every mutation that can race between concurrent requests is a single
conditional UPDATE whose rowcount decides the outcome, so the database
serializes competing callers without in-process locks. Mutators only flush
and callers commit at their step boundaries, except `create_user`, which
commits so a unique-constraint race can be resolved on the spot.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import OTPChallenge, User

logger = logging.getLogger(__name__)


class CredentialStore:
    """SQLAlchemy-backed store for ``User`` and ``OTPChallenge`` records"""

    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    # Users

    def find_user_by_phone(self, phone_number: str) -> Optional[User]:
        return self.db.query(User).filter(User.phone_number == phone_number).first()

    def find_user_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        return self.db.query(User).filter(User.id == str(user_id)).first()

    def create_user(self, phone_number: str, **fields) -> User:
        """
        Insert a new user and commit.

        A concurrent first login for the same phone number trips the unique
        constraint; the row written by the winner is returned instead.
        """
        user = User(phone_number=phone_number, **fields)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.find_user_by_phone(phone_number)
            if existing is None:
                raise
            logger.info("[Auth] Concurrent user creation detected, using existing user %s", existing.id)
            return existing
        self.db.refresh(user)
        return user

    def update_user(self, user: User, **fields) -> User:
        for key, value in fields.items():
            setattr(user, key, value)
        self.db.flush()
        return user

    # Challenges

    def find_live_challenge(self, phone_number: str, now: datetime) -> Optional[OTPChallenge]:
        """Most recent unused, unexpired challenge for the phone number"""
        return self.db.query(OTPChallenge).filter(
            and_(
                OTPChallenge.phone_number == phone_number,
                OTPChallenge.is_used == False,  # noqa: E712
                OTPChallenge.expires_at > now,
            )
        ).order_by(OTPChallenge.created_at.desc()).first()

    def invalidate_live_challenges(self, phone_number: str) -> int:
        """Mark every unused challenge for the phone number as used"""
        return self.db.query(OTPChallenge).filter(
            and_(
                OTPChallenge.phone_number == phone_number,
                OTPChallenge.is_used == False,  # noqa: E712
            )
        ).update({OTPChallenge.is_used: True})

    def create_challenge(self, phone_number: str, code: str, expires_at: datetime, now: datetime) -> OTPChallenge:
        challenge = OTPChallenge(
            phone_number=phone_number,
            code=code,
            expires_at=expires_at,
            is_used=False,
            attempts=0,
            created_at=now,
        )
        self.db.add(challenge)
        self.db.flush()
        return challenge

    def record_failed_attempt(self, challenge_id: str, max_attempts: int) -> bool:
        """
        Increment ``attempts`` unless the cap is already reached.

        Returns:
            False if the challenge was already at the cap (another caller
            used the last attempt first)
        """
        updated = self.db.query(OTPChallenge).filter(
            and_(
                OTPChallenge.id == challenge_id,
                OTPChallenge.attempts < max_attempts,
            )
        ).update({OTPChallenge.attempts: OTPChallenge.attempts + 1})
        return updated == 1

    def consume_challenge(self, challenge_id: str, max_attempts: int) -> bool:
        """
        Mark a challenge used if it is still unused and under the cap.

        Returns:
            False if another caller consumed or exhausted it first
        """
        updated = self.db.query(OTPChallenge).filter(
            and_(
                OTPChallenge.id == challenge_id,
                OTPChallenge.is_used == False,  # noqa: E712
                OTPChallenge.attempts < max_attempts,
            )
        ).update({OTPChallenge.is_used: True})
        return updated == 1

    def purge_expired_challenges(self, now: datetime) -> int:
        """Delete challenges past their expiry, used or not"""
        return self.db.query(OTPChallenge).filter(
            OTPChallenge.expires_at <= now
        ).delete(synchronize_session=False)
