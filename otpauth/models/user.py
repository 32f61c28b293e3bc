import uuid
from sqlalchemy import Column, String, Boolean, DateTime
from ..db import Base
from ..core.clock import utcnow


def generate_public_id():
    """Generate a UUID string used as the user id and JWT sub claim"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    phone_number = Column(String(20), unique=True, nullable=False, index=True)  # E.164 format
    email = Column(String, nullable=True)
    name = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=True)

    def to_summary(self) -> dict:
        """Lightweight user summary returned after a successful login"""
        return {
            "id": self.id,
            "phoneNumber": self.phone_number,
            "name": self.name,
            "email": self.email,
        }

    def __repr__(self):
        return f"<User {self.id}>"
