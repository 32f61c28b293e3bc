"""
Exception handlers.

Register these on a FastAPI app instance via `register_exception_handlers(app)`.
"""
import logging
import traceback

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core.config import settings
from .services.auth.errors import AuthError

logger = logging.getLogger(__name__)


async def auth_error_handler(request: Request, exc: AuthError):
    """Map auth core failures to JSON responses"""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request data"


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report input-shape failures as 400 Bad Request"""
    return JSONResponse(
        status_code=400,
        content={"detail": _validation_message(exc), "code": "bad_request"},
    )


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors"""
    error_detail = str(exc)
    error_traceback = traceback.format_exc()
    logger.error(f"Unhandled exception: {error_detail}\n{error_traceback}")

    # Don't leak internal error details outside local environments
    if settings.is_local:
        error_response = {"detail": f"Internal server error: {error_detail}"}
    else:
        error_response = {"detail": "Internal server error"}

    return JSONResponse(status_code=500, content=error_response)


def register_exception_handlers(app):
    """Register all exception handlers on the given FastAPI app."""
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
