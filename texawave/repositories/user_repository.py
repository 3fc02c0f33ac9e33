"""
User accounts. Emails are stored lower-cased and are unique.
"""
from typing import Optional, Dict, Any
from datetime import datetime
import logging

from .base_repository import BaseRepository
from texawave.exceptions import DuplicateError

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.find_one({"email": email.lower()})

    async def email_exists(self, email: str) -> bool:
        return await self.exists({"email": email.lower()})

    async def create_user(self, user_data: Dict[str, Any]) -> str:
        """
        Insert a user document.

        Raises:
            DuplicateError: If the email is already registered
        """
        user_data["email"] = user_data["email"].lower()
        if await self.email_exists(user_data["email"]):
            raise DuplicateError("User", "email", user_data["email"])

        logger.info(f"Creating user: {user_data['email']}")
        return await self.create(user_data)

    async def update_last_login(self, user_id: str) -> bool:
        return await self.update(user_id, {"last_login": datetime.utcnow()})

    async def change_password(self, user_id: str, new_password_hash: str) -> bool:
        return await self.update(user_id, {"password_hash": new_password_hash})
