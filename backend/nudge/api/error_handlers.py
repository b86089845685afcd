"""Error Handlers — map agent failures onto the notification API's responses.

Invariants:
    - NudgeError → its http_status with the structured error envelope; log
      level follows the error's severity, not its status
    - CAPACITY_EXCEEDED and NO_MATCHING_PENDING carry the user's pending types
      in error.details so callers can see what to clear or reply to
    - CONFIGURATION_MISSING lists the missing policy entries in error.details
    - RequestValidationError → 400 VALIDATION_ERROR with field-level details
    - Exception (catch-all) → 500 INTERNAL_ERROR, never leaks internal details
"""

import logging
from collections.abc import Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from nudge.core.errors import (
    CapacityExceededError, ConfigurationMissingError, ErrorSeverity,
    NoMatchingPendingError, NudgeError,
)

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_nudge_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


# ─── Error details ──────────────────────────────────────────────

def _pending_types(request: Request, user_id: str | None) -> list[str]:
    agent = getattr(request.app.state, "agent", None)
    if agent is None or not user_id:
        return []
    return [r.notification_type for r in agent.pending_notifications(user_id)]


def _capacity_details(request: Request, exc: CapacityExceededError) -> dict:
    return {
        "max_pending": exc.max_pending,
        "pending_types": _pending_types(request, exc.context.user_id),
    }


def _no_match_details(request: Request, exc: NoMatchingPendingError) -> dict:
    return {"pending_types": _pending_types(request, exc.user_id)}


def _missing_config_details(request: Request, exc: ConfigurationMissingError) -> dict:
    return {"missing": list(exc.missing)}


DetailBuilder = Callable[[Request, NudgeError], dict]

_DETAIL_BUILDERS: dict[type[NudgeError], DetailBuilder] = {
    CapacityExceededError: _capacity_details,
    NoMatchingPendingError: _no_match_details,
    ConfigurationMissingError: _missing_config_details,
}


def build_error_response(request: Request, exc: NudgeError) -> dict:
    """Error envelope for a NudgeError, with per-code details where known."""
    body = exc.to_response()
    builder = _DETAIL_BUILDERS.get(type(exc))
    if builder is not None:
        body["error"]["details"] = builder(request, exc)
    return body


# ─── Handlers ───────────────────────────────────────────────────

def _register_nudge_error_handler(app: FastAPI) -> None:

    @app.exception_handler(NudgeError)
    async def nudge_error_handler(request: Request, exc: NudgeError):
        """Handle all notification domain/infrastructure errors."""
        logger.log(
            _LOG_LEVELS.get(exc.severity, logging.ERROR),
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "user_id": exc.context.user_id,
                "notification_type": exc.context.notification_type,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=build_error_response(request, exc),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        fields = [".".join(str(loc) for loc in e["loc"]) for e in exc.errors()]
        logger.info(
            f"Rejected {request.method} {request.url.path}: invalid {', '.join(fields)}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "category": "validation",
                    "severity": ErrorSeverity.ERROR.value,
                    "details": [
                        {"field": field, "message": e["msg"], "type": e["type"]}
                        for field, e in zip(fields, exc.errors())
                    ],
                },
            },
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )
