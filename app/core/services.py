"""
Base service layer patterns for business logic encapsulation.

This module provides the foundation for every inbox service:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with logging and transaction helpers

Pattern Comparison:
    - ServiceResult: Expected failures (validation, missing targets, empty messages)
    - Exceptions: Unexpected failures (database errors, storage outages)

Usage:
    from core.services import BaseService, ServiceResult

    class ThreadService(BaseService):
        @classmethod
        def create_thread(cls, initiator, target_profile_id, title):
            target = ProfileDirectory.get_profile(target_profile_id)
            if target is None:
                return ServiceResult.failure(
                    "Target profile not found",
                    error_code="TARGET_NOT_FOUND",
                )

            with cls.atomic():
                thread = Thread.objects.create(...)

            cls.get_logger().info(f"Created thread {thread.id}")
            return ServiceResult.success(thread)

    # In a view
    result = ThreadService.create_thread(request.user, profile_id, title)
    if result.success:
        return Response(ThreadSerializer(result.data).data, status=201)
    return Response(result.to_response(), status=400)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures

    Usage:
        result = MessageService.append(thread, user, body="Hi")
        if result:
            message = result.data
        else:
            print(f"{result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result carrying ``data``."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides:
    - A logger named after the concrete service
    - Database transaction management

    Design Notes:
        - Services are stateless and expose classmethods
        - Use ServiceResult for expected failures
        - Let unexpected failures raise
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Return a logger named ``<module>.<ServiceClass>``."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute the enclosed block in a database transaction.

        Nested use creates a savepoint, so an IntegrityError raised inside
        rolls back only the inner block and the caller can recover.
        """
        with transaction.atomic():
            yield

    @classmethod
    def validate_required(cls, **kwargs) -> ServiceResult | None:
        """
        Validate that required fields are provided.

        Returns:
            ServiceResult.failure if any value is None or blank, None otherwise
        """
        errors = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]

        if errors:
            return ServiceResult.failure(
                "Required fields missing",
                error_code="VALIDATION_ERROR",
                errors=errors,
            )
        return None
