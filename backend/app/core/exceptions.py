"""
Custom exceptions and error handlers for consistent error responses.

Every error leaves the API in the same envelope as a success:
``{"data": null, "error": {"message", "code", "details"}}``.
"""

import logging
from typing import Any, Dict

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("tripcircle.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class UnauthorizedError(AppException):
    """Raised when no caller identity can be resolved."""

    def __init__(self, reason: str = None):
        super().__init__(
            message="Unauthorized",
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED,
            details={"reason": reason} if reason else None
        )


class ForbiddenError(AppException):
    """Raised when the caller is identified but not allowed to act."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class ConflictError(AppException):
    """Raised when a write collides with existing state."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="ERR_CONFLICT_001",
            status_code=status.HTTP_409_CONFLICT
        )


class DataAccessError(AppException):
    """
    Raised (or returned inside a DbResult) when the database rejects a statement.

    Integrity violations (bad foreign key, duplicate key) map to 409,
    everything else to 500.
    """

    def __init__(self, operation: str, cause: Exception = None, integrity: bool = False):
        super().__init__(
            message=f"Data access failed during {operation}",
            error_code="ERR_DATA_ACCESS",
            status_code=status.HTTP_409_CONFLICT if integrity else status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"operation": operation, "cause": type(cause).__name__ if cause else None}
        )
        self.operation = operation
        self.cause = cause


def error_envelope(message: str, code: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    return {
        "data": None,
        "error": {
            "message": message,
            "code": code,
            "details": details or {}
        }
    }


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, exc.error_code, exc.details),
        headers=headers
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        405: "ERR_METHOD_NOT_ALLOWED",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail), error_code),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=422,
        content=error_envelope(
            "Validation error",
            "ERR_VALIDATION",
            {"errors": jsonable_encoder(exc.errors())}
        )
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method, request.url.path, type(exc).__name__,
        exc_info=exc
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("An internal server error occurred", "ERR_INTERNAL_SERVER")
    )
