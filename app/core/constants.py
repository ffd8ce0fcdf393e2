"""
Machine-readable error codes shared by the inbox services and API.

Every ServiceResult failure carries one of these codes, and
ERROR_STATUS maps each to the HTTP status returned to clients.
"""

from rest_framework import status


class ErrorCode:
    INVALID_PARTICIPANT = "INVALID_PARTICIPANT"
    TARGET_NOT_FOUND = "TARGET_NOT_FOUND"
    EMPTY_MESSAGE = "EMPTY_MESSAGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNAVAILABLE = "UNAVAILABLE"


ERROR_STATUS: dict[str, int] = {
    ErrorCode.INVALID_PARTICIPANT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.TARGET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.EMPTY_MESSAGE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FILE_TOO_LARGE: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorCode.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}
