"""Helper utilities shared by API routes and services."""

from .errors import (
    AuthenticationError,
    AuthorizationError,
    CommerceError,
    DatabaseIntegrityError,
    ErrorCode,
    FieldMessage,
    NotFoundError,
    ValidationError,
    create_error_body,
    error_body_for,
)

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "CommerceError",
    "DatabaseIntegrityError",
    "ErrorCode",
    "FieldMessage",
    "NotFoundError",
    "ValidationError",
    "create_error_body",
    "error_body_for",
]
