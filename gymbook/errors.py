# gymbook/errors.py
"""
Domain exceptions and the handlers that turn them into JSON errors.

Every error leaves the API as ``{"error": "<message>"}`` with a matching
status code. Rejected bookings also carry the failing ``rule``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class DomainException(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.extra = extra or {}
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, **self.extra}


class AuthenticationError(DomainException):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(DomainException):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(DomainException):
    status_code = status.HTTP_404_NOT_FOUND


class BookingValidationError(DomainException):
    status_code = status.HTTP_400_BAD_REQUEST


class BookingConflictError(DomainException):
    status_code = status.HTTP_409_CONFLICT


class StorageError(DomainException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def rejection_error(decision) -> DomainException:
    """Exception for a rejected booking decision."""
    extra = {"rule": decision.rule.value}
    if decision.is_conflict:
        return BookingConflictError(decision.message, extra)
    return BookingValidationError(decision.message, extra)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "Invalid value")
    return f"{loc}: {msg}" if loc else msg


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _first_validation_message(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
