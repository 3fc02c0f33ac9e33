"""
Account models: registration, login, token and profile shapes.
Roles are "admin" and "user"; a user may be linked to an employee so
that employee self-service (own loans, own leaves) works.
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional
from datetime import datetime

MIN_PASSWORD_LENGTH = 8


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    name: Optional[str] = None
    employee_id: Optional[str] = Field(None, description="Employee this account belongs to")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "hr@texawave.in", "password": "change-me-soon", "name": "Priya Raman"}
        }
    )


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Returned by register and login."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    name: Optional[str] = None
    role: str = "user"


class UserResponse(BaseModel):
    """Profile as shown to its owner; never carries the password hash."""
    id: str
    email: str
    name: Optional[str] = None
    role: str = "user"
    is_active: bool = True
    employee_id: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
