"""
Credential store behaviour that needs real commits and rollbacks.

These tests run on their own in-memory engine instead of the shared
rollback-per-test session, because the unique-constraint recovery in
``create_user`` rolls the session back.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from otpauth.db import Base
from otpauth.models import User
from otpauth.services.auth.store import CredentialStore
from otpauth.services.auth.tokens import DeviceType
from otpauth.services.otp_service import OTPService

PHONE = "+15551234567"


@pytest.fixture
def committing_db():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def test_create_user_returns_row_written_by_concurrent_login(committing_db):
    store = CredentialStore(committing_db)
    winner = store.create_user(PHONE, is_verified=True, is_active=True)

    # A second request that looked the phone up before the winner committed
    loser = store.create_user(PHONE, is_verified=True, is_active=True)

    assert loser.id == winner.id
    assert committing_db.query(User).filter(User.phone_number == PHONE).count() == 1


def test_create_user_reraises_unrelated_integrity_errors(committing_db, monkeypatch):
    from sqlalchemy.exc import IntegrityError

    store = CredentialStore(committing_db)
    store.create_user(PHONE)
    monkeypatch.setattr(store, "find_user_by_phone", lambda phone_number: None)

    with pytest.raises(IntegrityError):
        store.create_user(PHONE)


def test_verify_recovers_when_user_appears_after_lookup(committing_db, monkeypatch):
    sent = []

    class Delivery:
        def send_code(self, phone_number, code):
            sent.append(code)

    service = OTPService(committing_db, delivery=Delivery())
    service.request_challenge(PHONE)
    existing = service.store.create_user(PHONE, is_verified=False, is_active=True)

    # First lookup misses, as if the other login had not committed yet
    real_find = service.store.find_user_by_phone
    lookups = []

    def stale_find(phone_number):
        lookups.append(phone_number)
        if len(lookups) == 1:
            return None
        return real_find(phone_number)

    monkeypatch.setattr(service.store, "find_user_by_phone", stale_find)

    result = service.verify_challenge(PHONE, sent[-1], DeviceType.WEB)

    assert result.user["id"] == existing.id
    assert len(lookups) == 2
    committing_db.refresh(existing)
    assert existing.is_verified is True
    assert existing.last_login_at is not None
    assert committing_db.query(User).filter(User.phone_number == PHONE).count() == 1
