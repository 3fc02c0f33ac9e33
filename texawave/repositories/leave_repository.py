"""
Leave repository.
"""
from typing import List, Dict, Any, Optional

from .base_repository import BaseRepository


class LeaveRepository(BaseRepository):
    """Repository for leave requests."""

    async def list_leaves(
        self,
        employee_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if employee_id:
            query["employee_id"] = employee_id
        if status:
            query["status"] = status
        return await self.find_all(query, skip=skip, limit=limit, sort=[("applied_at", -1)])
