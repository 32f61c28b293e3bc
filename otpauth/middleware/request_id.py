"""
Request ID middleware for correlation tracking

Reuses an inbound X-Request-ID (or generates one), exposes it to every log
record emitted while the request is handled, echoes it in the response
header and logs one summary line per request.
"""
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    return _request_id.get()


class RequestIDLogFilter(logging.Filter):
    """Stamps ``record.request_id`` ("-" outside a request)"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        reset_token = _request_id.set(request_id)

        start_time = time.time()
        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "%s %s -> %s in %sms",
                request.method,
                request.url.path,
                response.status_code,
                round(duration_ms, 2),
            )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            _request_id.reset(reset_token)
