"""
Services package.
Business logic layer between routers and repositories.
"""
from .auth_service import AuthService

__all__ = [
    "AuthService"
]
