"""
Expired OTP challenge purge

Deletes challenges past their expiry, used or not.

Run once:
    python -m otpauth.jobs.purge_challenges

The API process also runs it periodically (see otpauth.main lifespan).
"""
import asyncio
import logging

from sqlalchemy.orm import Session

from ..core.config import settings
from ..db import get_session_local
from ..services.otp_service import OTPService

logger = logging.getLogger(__name__)


def purge_expired_challenges(db: Session) -> int:
    deleted = OTPService(db).purge_expired_challenges()
    if deleted:
        logger.info(f"[OTP] Purged {deleted} expired challenges")
    return deleted


def run_once() -> int:
    db = get_session_local()()
    try:
        return purge_expired_challenges(db)
    finally:
        db.close()


async def purge_loop(interval_seconds: int = None):
    """Purge expired challenges every ``interval_seconds`` until cancelled"""
    interval_seconds = interval_seconds or settings.OTP_PURGE_INTERVAL_SECONDS
    while True:
        try:
            await asyncio.to_thread(run_once)
        except Exception as e:
            logger.error(f"[OTP] Challenge purge failed: {e}", exc_info=True)
        await asyncio.sleep(interval_seconds)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    count = run_once()
    print(f"Deleted {count} expired challenges")
