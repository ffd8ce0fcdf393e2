"""
Core Application - Infrastructure & Base Classes

Shared building blocks used by the inbox apps. Nothing in here knows about
threads, profiles or attachments.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError, NotFoundError, ServiceUnavailableError
    - api_exception_handler: DRF exception handler mapping errors to responses

Views (import from core.views):
    - failure_response: ServiceResult failure to API response
    - health_check: Liveness/readiness endpoint
"""
