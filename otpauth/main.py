"""
FastAPI application entry point

Run locally:
    uvicorn otpauth.main:app --reload
"""
import asyncio
import logging
import sys
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

# Load environment variables from .env file before settings are read
load_dotenv()

from .core.config import settings, validate_config  # noqa: E402
from .db import init_db  # noqa: E402
from .exception_handlers import register_exception_handlers  # noqa: E402
from .jobs.purge_challenges import purge_loop  # noqa: E402
from .middleware.request_id import RequestIDLogFilter, RequestIDMiddleware  # noqa: E402
from .routers import auth  # noqa: E402

_log_handler = logging.StreamHandler(sys.stdout)
_log_handler.addFilter(RequestIDLogFilter())

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s",
    handlers=[_log_handler],
)

logger = logging.getLogger("otpauth")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate config, create tables and run the expiry purge"""
    logger.info(f"Starting OTP auth service (env={settings.ENV})...")
    validate_config()
    init_db()

    purge_task = asyncio.create_task(purge_loop())
    try:
        yield
    finally:
        purge_task.cancel()
        try:
            await purge_task
        except asyncio.CancelledError:
            pass
        logger.info("OTP auth service stopped")


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="OTP Auth API",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(auth.router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    return app


app = create_app()
