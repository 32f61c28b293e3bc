from pydantic import BaseModel
import os
import logging
from datetime import timedelta

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev-secret-change-me"
DEV_JWT_REFRESH_SECRET = "dev-refresh-secret-change-me"


class Settings(BaseModel):
    # Environment: local, dev, test count as local; everything else is a deployment
    ENV: str = os.getenv("ENV", "dev")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./otpauth.db")

    # Signing secrets. The primary secret signs web and access tokens,
    # the refresh secret signs mobile refresh tokens only.
    JWT_SECRET: str = os.getenv("JWT_SECRET", DEV_JWT_SECRET)
    JWT_REFRESH_SECRET: str = os.getenv("JWT_REFRESH_SECRET", DEV_JWT_REFRESH_SECRET)
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Token lifetimes (minutes)
    JWT_WEB_EXPIRE_MINUTES: int = int(os.getenv("JWT_WEB_EXPIRE_MINUTES", str(7 * 24 * 60)))
    JWT_ACCESS_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_EXPIRE_MINUTES", "15"))
    JWT_REFRESH_EXPIRE_MINUTES: int = int(os.getenv("JWT_REFRESH_EXPIRE_MINUTES", str(7 * 24 * 60)))

    # OTP challenge policy
    OTP_EXPIRE_MINUTES: int = int(os.getenv("OTP_EXPIRE_MINUTES", "10"))
    OTP_MAX_ATTEMPTS: int = int(os.getenv("OTP_MAX_ATTEMPTS", "3"))
    OTP_PURGE_INTERVAL_SECONDS: int = int(os.getenv("OTP_PURGE_INTERVAL_SECONDS", "60"))

    # Code delivery (console, twilio_sms)
    OTP_PROVIDER: str = os.getenv("OTP_PROVIDER", "console")
    TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str = os.getenv("TWILIO_AUTH_TOKEN", "")
    OTP_FROM_NUMBER: str = os.getenv("OTP_FROM_NUMBER", "")

    # Web session cookie
    AUTH_COOKIE_NAME: str = os.getenv("AUTH_COOKIE_NAME", "accessToken")

    @property
    def is_local(self) -> bool:
        return self.ENV.lower() in {"local", "dev", "test"}

    @property
    def web_token_expire(self) -> timedelta:
        return timedelta(minutes=self.JWT_WEB_EXPIRE_MINUTES)

    @property
    def access_token_expire(self) -> timedelta:
        return timedelta(minutes=self.JWT_ACCESS_EXPIRE_MINUTES)

    @property
    def refresh_token_expire(self) -> timedelta:
        return timedelta(minutes=self.JWT_REFRESH_EXPIRE_MINUTES)

    @property
    def otp_expire(self) -> timedelta:
        return timedelta(minutes=self.OTP_EXPIRE_MINUTES)


settings = Settings()


def validate_config(config: Settings = None):
    """
    Validate configuration at startup. Raises ValueError if invalid.

    Local environments may run on the built-in dev secrets and the console
    delivery provider; deployed environments must configure everything
    explicitly.
    """
    config = config or settings

    if config.OTP_PROVIDER not in ("console", "twilio_sms"):
        error_msg = f"Unknown OTP_PROVIDER: {config.OTP_PROVIDER}"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if config.OTP_MAX_ATTEMPTS < 1:
        error_msg = "OTP_MAX_ATTEMPTS must be at least 1"
        logger.error(error_msg)
        raise ValueError(error_msg)

    if config.OTP_PROVIDER == "twilio_sms":
        missing = []
        if not config.TWILIO_ACCOUNT_SID:
            missing.append("TWILIO_ACCOUNT_SID")
        if not config.TWILIO_AUTH_TOKEN:
            missing.append("TWILIO_AUTH_TOKEN")
        if not config.OTP_FROM_NUMBER:
            missing.append("OTP_FROM_NUMBER")
        if missing:
            error_msg = f"OTP_PROVIDER=twilio_sms but missing required configuration: {', '.join(missing)}"
            logger.error(error_msg)
            raise ValueError(error_msg)

    if not config.is_local:
        if not config.JWT_SECRET or config.JWT_SECRET == DEV_JWT_SECRET:
            error_msg = (
                "CRITICAL SECURITY ERROR: JWT_SECRET must be set and not use default value in production."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        if not config.JWT_REFRESH_SECRET or config.JWT_REFRESH_SECRET == DEV_JWT_REFRESH_SECRET:
            error_msg = (
                "CRITICAL SECURITY ERROR: JWT_REFRESH_SECRET must be set and not use default value in production."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        if config.JWT_SECRET == config.JWT_REFRESH_SECRET:
            error_msg = "CRITICAL SECURITY ERROR: JWT_REFRESH_SECRET must differ from JWT_SECRET"
            logger.error(error_msg)
            raise ValueError(error_msg)

        if config.OTP_PROVIDER == "console":
            error_msg = "OTP_PROVIDER=console is not allowed in production"
            logger.error(error_msg)
            raise ValueError(error_msg)

        if config.DATABASE_URL.startswith("sqlite"):
            error_msg = (
                "CRITICAL: SQLite database is not supported in production. "
                "Please use PostgreSQL (e.g., RDS, managed Postgres)."
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.info("Production safety gates validated")

    logger.info("Configuration validation complete")
    logger.info(f"Environment: {config.ENV}")
    logger.info(f"OTP Provider: {config.OTP_PROVIDER}")
    if config.TWILIO_ACCOUNT_SID:
        logger.info(f"Twilio Account SID: {config.TWILIO_ACCOUNT_SID[:8]}...")
