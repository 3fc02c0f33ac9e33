"""
FastAPI dependencies shared by the routers: the authenticated user,
admin gate, feature flags, pagination and date-range query params.
"""
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional, Dict, Any
from jose import jwt, ExpiredSignatureError, JWTError
import logging

from texawave.config import settings, FEATURES
from texawave.exceptions import AuthenticationError, ValidationError, validate_date_format

logger = logging.getLogger(__name__)

security = HTTPBearer()

MAX_PAGE_SIZE = 1000


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode an access token into the user dict routes receive.

    Raises:
        AuthenticationError: If the token is expired, malformed or has no subject
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise AuthenticationError("Could not validate credentials")

    if not payload.get("sub"):
        raise AuthenticationError("Invalid token: missing user ID")

    return {
        "user_id": payload["sub"],
        "email": payload.get("email"),
        "name": payload.get("name"),
        "role": payload.get("role", "user"),
        "employee_id": payload.get("employee_id")
    }


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Dict[str, Any]:
    """
    The user behind the bearer token.

        @router.get("/profile")
        async def profile(current_user: dict = Depends(get_current_user)):
            ...
    """
    return decode_token(credentials.credentials)


def is_admin(user: Dict[str, Any]) -> bool:
    return user.get("role") == "admin"


async def get_current_admin_user(
    current_user: Dict[str, Any] = Depends(get_current_user)
) -> Dict[str, Any]:
    """Approvals, deletes and payroll crediting go through this gate."""
    if not is_admin(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def require_feature(feature_name: str):
    """
    Dependency factory answering 503 while a FEATURES flag is off.

        @router.post("/process", dependencies=[Depends(require_feature("recurring_invoices"))])
    """
    def check_feature():
        if not FEATURES.get(feature_name, False):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Feature '{feature_name}' is not enabled"
            )

    return check_feature


def pagination_params(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=MAX_PAGE_SIZE)
) -> Dict[str, int]:
    return {"skip": skip, "limit": limit}


def date_range_params(
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD")
) -> Dict[str, Optional[str]]:
    """
    Inclusive date range. Dates stay strings because documents store
    them as YYYY-MM-DD, which sorts lexicographically.

    Raises:
        ValidationError: If a date is malformed or the range is inverted
    """
    if date_from:
        validate_date_format(date_from, "date_from")
    if date_to:
        validate_date_format(date_to, "date_to")
    if date_from and date_to and date_from > date_to:
        raise ValidationError(
            "date_from must be before or equal to date_to",
            details={"date_from": date_from, "date_to": date_to}
        )
    return {"date_from": date_from, "date_to": date_to}
