"""
Base exception classes and the API exception handler.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input validation failures
    ├── NotFoundError - Resource not found
    └── ServiceUnavailableError - Storage or database unavailable

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError("Thread not found", error_code="TARGET_NOT_FOUND")

The handler wired into REST_FRAMEWORK["EXCEPTION_HANDLER"] turns these into
``{"error": ..., "error_code": ...}`` bodies and converts unexpected database
failures into a retryable 503 so clients can blindly retry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import DatabaseError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used by the API exception handler
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Thread not found",
                "error_code": "TARGET_NOT_FOUND",
                "details": {"thread_id": 12}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """Raised when input validation fails outside a serializer."""

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource does not resolve."""

    default_error_code: str = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class ServiceUnavailableError(BaseApplicationError):
    """
    Raised when a backing store (database, object storage) is unavailable.

    Every mutating inbox operation is safe to retry after this error.
    """

    default_error_code: str = "UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def api_exception_handler(exc: Exception, context: dict) -> Response | None:
    """
    DRF exception handler for application errors.

    - BaseApplicationError: serialized with its own status code
    - DatabaseError: logged and returned as 503 UNAVAILABLE
    - DRF ValidationError: wrapped as VALIDATION_ERROR with field errors
    - Anything else: delegated to DRF's default handler
    """
    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception(
            f"Database failure in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        return Response(
            {
                "error": "The service is temporarily unavailable. Please retry.",
                "error_code": ServiceUnavailableError.default_error_code,
            },
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = exception_handler(exc, context)
    if response is not None and isinstance(exc, drf_exceptions.ValidationError):
        response.data = {
            "error": "Invalid input",
            "error_code": ValidationError.default_error_code,
            "errors": response.data,
        }
    return response
