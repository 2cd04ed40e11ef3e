"""
Custom exceptions for the application and their HTTP translation.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from parley.core.logger import setup_logger

logger = setup_logger(__name__)

GENERIC_ERROR_MESSAGE = "Internal Server Error"


class ParleyError(Exception):
    """Base exception for parley."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ParleyError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ParleyError):
    """Duplicate resource detected."""

    status_code = status.HTTP_409_CONFLICT


class AuthError(ParleyError):
    """Bad credentials or missing/invalid/expired session."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(ParleyError):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND


class DependencyError(ParleyError):
    """Database or object storage failed. The message is never shown to callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    """Translate application errors into `{"message": ...}` responses."""

    @app.exception_handler(ParleyError)
    async def _parley_error_handler(_request: Request, exc: ParleyError) -> JSONResponse:
        if isinstance(exc, DependencyError):
            logger.error(f"Dependency failure: {exc.message}")
            return JSONResponse(
                status_code=exc.status_code,
                content={"message": GENERIC_ERROR_MESSAGE},
            )
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            message = str(errors[0].get("msg", message))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": message, "details": [_clean_error(e) for e in errors]},
        )

    @app.exception_handler(Exception)
    async def _unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": GENERIC_ERROR_MESSAGE},
        )


def _clean_error(error: dict[str, Any]) -> dict[str, Any]:
    # ctx may hold exception instances that are not JSON serializable
    return {
        "loc": list(error.get("loc", ())),
        "msg": error.get("msg"),
        "type": error.get("type"),
    }
