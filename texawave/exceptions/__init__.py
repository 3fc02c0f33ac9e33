"""
Custom exceptions package.
"""
from texawave.exceptions.custom_exceptions import (
    AppError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    DuplicateError,
    BusinessLogicError,
    DatabaseError,
    ConfigurationError,
    validate_required_fields,
    validate_date_format,
    validate_month_format,
    validate_numeric_range
)

__all__ = [
    "AppError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "DuplicateError",
    "BusinessLogicError",
    "DatabaseError",
    "ConfigurationError",
    "validate_required_fields",
    "validate_date_format",
    "validate_month_format",
    "validate_numeric_range"
]
