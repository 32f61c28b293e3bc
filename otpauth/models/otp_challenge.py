import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime
from ..db import Base
from ..core.clock import utcnow


class OTPChallenge(Base):
    __tablename__ = "otp_challenges"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    phone_number = Column(String(20), nullable=False, index=True)  # E.164 format
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    is_used = Column(Boolean, nullable=False, default=False, index=True)
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def is_live(self, now) -> bool:
        return not self.is_used and self.expires_at > now

    def __repr__(self):
        return f"<OTPChallenge {self.id} used={self.is_used} attempts={self.attempts}>"
