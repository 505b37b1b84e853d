"""Error taxonomy and standardized error responses.

Domain code raises the exceptions defined here at the point of detection.
They propagate unchanged to the exception handlers registered in
dscommerce.api.app, which turn them into the JSON error body:

    {
        "timestamp": "2024-05-01T12:00:00Z",
        "status": 404,
        "error": "Not Found",
        "message": "Order 100 not found",
        "path": "/orders/100",
        "code": "ERR_RES_001"
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from fastapi import status

from dscommerce.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Error Codes - Machine-readable codes for client handling and support
# =============================================================================


class ErrorCode(str, Enum):
    """Standardized error codes for API responses.

    Format: ERR_{CATEGORY}_{NUMBER}
    Categories:
    - AUTH: Authentication and authorization
    - VAL: Validation
    - RES: Resource (not found, conflict)
    - SYS: System/server errors
    """

    # Authentication errors
    AUTH_INVALID_TOKEN = "ERR_AUTH_001"
    AUTH_MISSING_TOKEN = "ERR_AUTH_002"
    AUTH_BAD_CREDENTIALS = "ERR_AUTH_003"
    AUTH_INVALID_CLIENT = "ERR_AUTH_004"
    AUTH_USER_NOT_FOUND = "ERR_AUTH_005"
    AUTH_FORBIDDEN = "ERR_AUTH_006"
    AUTH_ROLE_REQUIRED = "ERR_AUTH_007"

    # Validation errors
    VAL_INVALID_REQUEST = "ERR_VAL_001"
    VAL_INVALID_FIELD = "ERR_VAL_002"

    # Resource errors
    RES_NOT_FOUND = "ERR_RES_001"
    RES_INTEGRITY_VIOLATION = "ERR_RES_002"

    # System errors
    SYS_INTERNAL_ERROR = "ERR_SYS_001"
    SYS_HTTP_ERROR = "ERR_SYS_002"

    # Generic
    UNKNOWN = "ERR_UNKNOWN"


# =============================================================================
# Error Information Dataclass
# =============================================================================


@dataclass
class ErrorInfo:
    """Default message and status for an error code."""

    code: ErrorCode
    message: str
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR


ERROR_REGISTRY: Dict[ErrorCode, ErrorInfo] = {
    ErrorCode.AUTH_INVALID_TOKEN: ErrorInfo(
        code=ErrorCode.AUTH_INVALID_TOKEN,
        message="Invalid or expired access token.",
        status_code=status.HTTP_401_UNAUTHORIZED,
    ),
    ErrorCode.AUTH_MISSING_TOKEN: ErrorInfo(
        code=ErrorCode.AUTH_MISSING_TOKEN,
        message="Full authentication is required to access this resource.",
        status_code=status.HTTP_401_UNAUTHORIZED,
    ),
    ErrorCode.AUTH_BAD_CREDENTIALS: ErrorInfo(
        code=ErrorCode.AUTH_BAD_CREDENTIALS,
        message="Bad credentials.",
        status_code=status.HTTP_401_UNAUTHORIZED,
    ),
    ErrorCode.AUTH_INVALID_CLIENT: ErrorInfo(
        code=ErrorCode.AUTH_INVALID_CLIENT,
        message="Client authentication failed.",
        status_code=status.HTTP_401_UNAUTHORIZED,
    ),
    ErrorCode.AUTH_USER_NOT_FOUND: ErrorInfo(
        code=ErrorCode.AUTH_USER_NOT_FOUND,
        message="Authenticated user not found.",
        status_code=status.HTTP_401_UNAUTHORIZED,
    ),
    ErrorCode.AUTH_FORBIDDEN: ErrorInfo(
        code=ErrorCode.AUTH_FORBIDDEN,
        message="Access denied.",
        status_code=status.HTTP_403_FORBIDDEN,
    ),
    ErrorCode.AUTH_ROLE_REQUIRED: ErrorInfo(
        code=ErrorCode.AUTH_ROLE_REQUIRED,
        message="Access denied. Required role is missing.",
        status_code=status.HTTP_403_FORBIDDEN,
    ),
    ErrorCode.VAL_INVALID_REQUEST: ErrorInfo(
        code=ErrorCode.VAL_INVALID_REQUEST,
        message="Invalid data.",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    ),
    ErrorCode.VAL_INVALID_FIELD: ErrorInfo(
        code=ErrorCode.VAL_INVALID_FIELD,
        message="Invalid field value.",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    ),
    ErrorCode.RES_NOT_FOUND: ErrorInfo(
        code=ErrorCode.RES_NOT_FOUND,
        message="Resource not found.",
        status_code=status.HTTP_404_NOT_FOUND,
    ),
    ErrorCode.RES_INTEGRITY_VIOLATION: ErrorInfo(
        code=ErrorCode.RES_INTEGRITY_VIOLATION,
        message="Referential integrity violation.",
        status_code=status.HTTP_409_CONFLICT,
    ),
    ErrorCode.SYS_INTERNAL_ERROR: ErrorInfo(
        code=ErrorCode.SYS_INTERNAL_ERROR,
        message="An unexpected error occurred. Please try again later.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
    ErrorCode.SYS_HTTP_ERROR: ErrorInfo(
        code=ErrorCode.SYS_HTTP_ERROR,
        message="Request could not be processed.",
        status_code=status.HTTP_400_BAD_REQUEST,
    ),
    ErrorCode.UNKNOWN: ErrorInfo(
        code=ErrorCode.UNKNOWN,
        message="An unexpected error occurred.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
}


def get_error_info(error_code: ErrorCode) -> ErrorInfo:
    """Get error information for a given error code."""
    return ERROR_REGISTRY.get(error_code, ERROR_REGISTRY[ErrorCode.UNKNOWN])


# =============================================================================
# Domain Exceptions
# =============================================================================


class CommerceError(Exception):
    """Base class for errors that map onto an HTTP status at the boundary."""

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(self, message: Optional[str] = None, error_code: Optional[ErrorCode] = None):
        self.error_code = error_code or self.default_code
        self.message = message or get_error_info(self.error_code).message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return get_error_info(self.error_code).status_code


class AuthenticationError(CommerceError):
    """No valid or resolvable principal (401)."""

    default_code = ErrorCode.AUTH_INVALID_TOKEN


class AuthorizationError(CommerceError):
    """The principal is known but lacks permission (403)."""

    default_code = ErrorCode.AUTH_FORBIDDEN


class NotFoundError(CommerceError):
    """A referenced order, product, category or user does not exist (404)."""

    default_code = ErrorCode.RES_NOT_FOUND

    @classmethod
    def for_entity(cls, entity: str, entity_id: Any) -> "NotFoundError":
        return cls(f"{entity} {entity_id} not found")


class ValidationError(CommerceError):
    """The request is well-formed JSON but semantically invalid (422)."""

    default_code = ErrorCode.VAL_INVALID_REQUEST

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[FieldMessage]] = None,
        error_code: Optional[ErrorCode] = None,
    ):
        super().__init__(message, error_code)
        self.errors: List[FieldMessage] = list(errors or [])

    def add_error(self, field_name: str, message: str) -> None:
        self.errors.append(FieldMessage(field_name=field_name, message=message))


class DatabaseIntegrityError(CommerceError):
    """A write violated a referential constraint (409)."""

    default_code = ErrorCode.RES_INTEGRITY_VIOLATION


@dataclass
class FieldMessage:
    """One failed field in a validation error."""

    field_name: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"fieldName": self.field_name, "message": self.message}


# =============================================================================
# Error Body
# =============================================================================


def create_error_body(
    status_code: int,
    message: str,
    path: str,
    error_code: ErrorCode = ErrorCode.UNKNOWN,
    errors: Optional[List[FieldMessage]] = None,
) -> Dict[str, Any]:
    """Create the standardized error response body.

    Args:
        status_code: HTTP status that will be returned
        message: Human-readable detail
        path: Request path that failed
        error_code: Machine-readable code
        errors: Field-level messages (validation errors only)

    Returns:
        Dict with timestamp, status, error, message, path and code fields
    """
    try:
        reason = HTTPStatus(status_code).phrase
    except ValueError:
        reason = "Error"

    body: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "status": status_code,
        "error": reason,
        "message": message,
        "path": path,
        "code": error_code.value,
    }
    if errors is not None:
        body["errors"] = [e.to_dict() for e in errors]
    return body


def error_body_for(exc: CommerceError, path: str) -> Dict[str, Any]:
    """Create the error body for a domain exception."""
    errors = exc.errors if isinstance(exc, ValidationError) else None
    return create_error_body(
        status_code=exc.status_code,
        message=exc.message,
        path=path,
        error_code=exc.error_code,
        errors=errors,
    )
