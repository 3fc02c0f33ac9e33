"""
Application errors.
Services raise these; the error handler turns them into JSON responses
with the status code declared on each class.
"""
from datetime import datetime
from typing import Optional, Any, Dict, List


class AppError(Exception):
    """Base application error (500 unless a subclass says otherwise)."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Bad input (400)."""

    status_code = 400
    default_message = "Invalid input"


class AuthenticationError(AppError):
    """Missing or wrong credentials (401)."""

    status_code = 401
    default_message = "Authentication failed"


class AuthorizationError(AppError):
    """Authenticated but not allowed (403)."""

    status_code = 403
    default_message = "Access forbidden"


class NotFoundError(AppError):
    """Resource not found (404)."""

    status_code = 404

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, details={"resource": resource, "identifier": identifier})


class DuplicateError(AppError):
    """Unique field already taken (409)."""

    status_code = 409

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(
            f"{resource} with {field}='{value}' already exists",
            details={"resource": resource, "field": field, "value": value}
        )


class BusinessLogicError(AppError):
    """Business rule violation (422), e.g. an invalid status transition."""

    status_code = 422
    default_message = "Operation not allowed"


class DatabaseError(AppError):
    default_message = "Database operation failed"


class ConfigurationError(AppError):
    default_message = "Invalid configuration"


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> None:
    """Raise ValidationError listing every field that is None or blank."""
    missing = [
        field for field in required_fields
        if data.get(field) is None or (isinstance(data.get(field), str) and not data[field].strip())
    ]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            details={"missing_fields": missing}
        )


def _check_format(value: str, fmt: str, label: str, field_name: str) -> None:
    try:
        datetime.strptime(value, fmt)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid {field_name}: expected {label}, got {value!r}",
            details={"field": field_name, "value": value, "expected_format": label}
        )


def validate_date_format(date_str: str, field_name: str = "date") -> None:
    """Dates travel as YYYY-MM-DD strings."""
    _check_format(date_str, "%Y-%m-%d", "YYYY-MM-DD", field_name)


def validate_month_format(month: str, field_name: str = "month") -> None:
    """Payroll and EMI months travel as YYYY-MM strings."""
    _check_format(month, "%Y-%m", "YYYY-MM", field_name)

def validate_numeric_range(
    value: float,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> None:
    """Raise ValidationError unless min_value <= value <= max_value (either bound optional)."""
    if min_value is not None and value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got: {value}",
            details={"field": field_name, "value": value, "min": min_value}
        )

    if max_value is not None and value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got: {value}",
            details={"field": field_name, "value": value, "max": max_value}
        )
