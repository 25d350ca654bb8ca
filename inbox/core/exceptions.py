"""
Custom exception classes for the inbox service.
Provides structured error handling with machine-readable error codes.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes shared with the frontend"""

    # Authentication errors (401)
    AUTH_NOT_AUTHENTICATED = "AUTH_NOT_AUTHENTICATED"

    # Authorization errors (403)
    AUTHZ_FORBIDDEN = "AUTHZ_FORBIDDEN"

    # Resource errors (404, 409)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    # Validation errors (400, 422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    VALIDATION_OUT_OF_RANGE = "VALIDATION_OUT_OF_RANGE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500+)
    SERVER_ERROR = "SERVER_ERROR"
    SERVER_UNAVAILABLE = "SERVER_UNAVAILABLE"


class AppException(Exception):
    """
    Base exception class for application errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SERVER_ERROR,
        status_code: int = 500,
        field: str | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.field = field
        self.metadata = metadata or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary"""
        response = {
            "detail": self.message,
            "code": self.code.value,
        }
        if self.field:
            response["field"] = self.field
        if self.metadata:
            response["metadata"] = self.metadata
        return response


# Resource Errors (404)


class NotFoundError(AppException):
    """Resource not found"""

    def __init__(
        self,
        message: str = "Requested resource was not found",
        resource: str | None = None,
    ):
        metadata = {"resource": resource} if resource else None
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            status_code=404,
            metadata=metadata,
        )


# Validation Errors (422)


class ValidationError(AppException):
    """Validation error"""

    def __init__(
        self,
        message: str = "Please check the submitted values",
        field: str | None = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        metadata: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=422,
            field=field,
            metadata=metadata,
        )


class OutOfRangeError(ValidationError):
    """Numeric argument outside its allowed range"""

    def __init__(
        self,
        message: str,
        field: str,
        minimum: int | None = None,
        maximum: int | None = None,
    ):
        metadata: dict[str, Any] = {}
        if minimum is not None:
            metadata["min"] = minimum
        if maximum is not None:
            metadata["max"] = maximum
        super().__init__(
            message=message,
            field=field,
            code=ErrorCode.VALIDATION_OUT_OF_RANGE,
            metadata=metadata,
        )


# Server Errors (500+)


class ServerError(AppException):
    """Internal server error"""

    def __init__(
        self,
        message: str = "Internal server error",
        code: ErrorCode = ErrorCode.SERVER_ERROR,
        status_code: int = 500,
        metadata: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            metadata=metadata,
        )


class StoreUnavailableError(ServerError):
    """
    The message store cannot be reached (connection loss, timeout).
    Retryable by the caller; never retried inside the service.
    """

    def __init__(
        self,
        message: str = "Message store is temporarily unavailable",
        operation: str | None = None,
    ):
        metadata = {"operation": operation} if operation else None
        super().__init__(
            message=message,
            code=ErrorCode.SERVER_UNAVAILABLE,
            status_code=503,
            metadata=metadata,
        )
