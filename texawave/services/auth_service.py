"""
Authentication service.
Registration, login and password changes. Passwords are bcrypt hashes;
sessions are stateless JWT bearer tokens.
"""
from typing import Dict, Any
from datetime import datetime, timedelta
import bcrypt
from jose import jwt
import logging

from texawave.config import settings
from texawave.repositories import UserRepository
from texawave.exceptions import (
    AuthenticationError,
    NotFoundError
)
from texawave.models import UserRegister, UserLogin, TokenResponse

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("id", "email", "name", "role", "is_active", "employee_id", "created_at", "last_login")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(user: Dict[str, Any]) -> str:
    """
    Sign a token for a stored user document.

    The claims carry what routes need without a database round trip:
    role for the admin gate and employee_id for self-service loans.
    """
    now = datetime.utcnow()
    claims = {
        "sub": user["id"],
        "email": user["email"],
        "name": user.get("name"),
        "role": user.get("role", "user"),
        "employee_id": user.get("employee_id"),
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    @staticmethod
    def _issue_token(user: Dict[str, Any]) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(user),
            user_id=user["id"],
            email=user["email"],
            name=user.get("name"),
            role=user.get("role", "user")
        )

    async def register(self, user_data: UserRegister) -> TokenResponse:
        """
        Register a new user. The very first account becomes admin.

        Raises:
            DuplicateError: If email already exists
        """
        logger.info(f"Registering new user: {user_data.email}")

        user_doc = {
            "email": user_data.email.lower(),
            "password_hash": hash_password(user_data.password),
            "name": user_data.name,
            "role": "admin" if await self.user_repo.count() == 0 else "user",
            "employee_id": user_data.employee_id,
            "is_active": True
        }
        user_doc["id"] = await self.user_repo.create_user(user_doc)

        logger.info(f"✅ User registered: {user_doc['email']} ({user_doc['role']})")
        return self._issue_token(user_doc)

    async def login(self, credentials: UserLogin) -> TokenResponse:
        """
        Check the password and issue a token.

        Raises:
            AuthenticationError: If credentials are invalid or account disabled
        """
        user = await self.user_repo.find_by_email(credentials.email)
        if not user or not verify_password(credentials.password, user["password_hash"]):
            logger.warning(f"Login failed for {credentials.email}")
            raise AuthenticationError("Invalid credentials")

        if not user.get("is_active", True):
            logger.warning(f"Login refused, account disabled: {credentials.email}")
            raise AuthenticationError("Account is disabled")

        await self.user_repo.update_last_login(user["id"])
        logger.info(f"✅ Login: {user['email']}")
        return self._issue_token(user)

    async def _get_user(self, user_id: str) -> Dict[str, Any]:
        user = await self.user_repo.find_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def change_password(self, user_id: str, old_password: str, new_password: str) -> bool:
        """
        Raises:
            NotFoundError: If user not found
            AuthenticationError: If the current password is wrong
        """
        user = await self._get_user(user_id)
        if not verify_password(old_password, user["password_hash"]):
            raise AuthenticationError("Current password is incorrect")

        changed = await self.user_repo.change_password(user_id, hash_password(new_password))
        if changed:
            logger.info(f"Password changed for user {user_id}")
        return changed

    async def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        """The stored user minus the password hash."""
        user = await self._get_user(user_id)
        profile = {field: user.get(field) for field in PROFILE_FIELDS}
        profile["role"] = profile["role"] or "user"
        if profile["is_active"] is None:
            profile["is_active"] = True
        return profile
