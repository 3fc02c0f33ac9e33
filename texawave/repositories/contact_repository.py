"""
Customer and vendor repositories.
"""
from typing import List, Dict, Any, Optional
import re

from .base_repository import BaseRepository


class ContactRepository(BaseRepository):
    """Shared queries for customers and vendors."""

    async def search(self, search: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if search:
            pattern = re.escape(search)
            query["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"company_name": {"$regex": pattern, "$options": "i"}},
                {"gstin": {"$regex": pattern, "$options": "i"}}
            ]
        return await self.find_all(query, skip=skip, limit=limit, sort=[("name", 1)])


class CustomerRepository(ContactRepository):
    pass


class VendorRepository(ContactRepository):
    pass
