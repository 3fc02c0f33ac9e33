"""
Models package.
Pydantic schemas for all entities.
"""
from .user import (
    UserRegister,
    UserLogin,
    TokenResponse,
    UserResponse,
    PasswordChange
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "TokenResponse",
    "UserResponse",
    "PasswordChange"
]
