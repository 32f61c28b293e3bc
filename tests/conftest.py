"""
Pytest configuration and fixtures for the OTP auth service tests.

Provides test database isolation and common test utilities.
"""
import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("OTP_PROVIDER", "console")

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

# Use in-memory SQLite for tests to ensure complete isolation
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")

if "sqlite" in TEST_DATABASE_URL:
    # One shared connection so the in-memory database survives across sessions
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    test_engine = create_engine(TEST_DATABASE_URL)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class RecordingDelivery:
    """Code delivery fake that remembers every code it was asked to send"""

    def __init__(self):
        self.sent = []

    def send_code(self, phone_number, code):
        self.sent.append((phone_number, code))

    def last_code_for(self, phone_number):
        for phone, code in reversed(self.sent):
            if phone == phone_number:
                return code
        return None


class FakeClock:
    """Controllable naive-UTC clock"""

    def __init__(self, now=None):
        self.now = now or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create the schema once per test session"""
    from otpauth.db import Base
    from otpauth import models  # noqa: F401  (registers models with Base)

    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def db():
    """
    Provide a clean database session for each test.

    Everything runs inside an outer transaction that is rolled back after
    the test, so service-level commits never leak between tests.
    """
    connection = test_engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def delivery():
    return RecordingDelivery()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def otp_service(db, delivery, clock):
    from otpauth.services.otp_service import OTPService
    return OTPService(db, delivery=delivery, clock=clock)


def override_get_db(db_session):
    """Dependency override that hands routes the test session"""
    def _override():
        yield db_session
    return _override


@pytest.fixture(scope="function")
def client(db, delivery):
    """
    FastAPI TestClient bound to the test session and recording delivery.

    The app is built without its lifespan so no purge task or config gate
    runs during tests.
    """
    from fastapi.testclient import TestClient
    from otpauth.db import get_db
    from otpauth.dependencies.auth import get_otp_service
    from otpauth.main import create_app
    from otpauth.services.otp_service import OTPService

    app = create_app(use_lifespan=False)
    app.dependency_overrides[get_db] = override_get_db(db)
    app.dependency_overrides[get_otp_service] = lambda: OTPService(db, delivery=delivery)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory for persisted users"""
    from otpauth.models import User

    def _make_user(phone_number="+15550001111", **fields):
        fields.setdefault("is_active", True)
        fields.setdefault("is_verified", True)
        user = User(phone_number=phone_number, **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user
