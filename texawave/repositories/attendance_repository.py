"""
Attendance and holiday repositories.
"""
from typing import List, Dict, Any, Optional
import logging

from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AttendanceRepository(BaseRepository):
    """One record per employee per date."""

    async def save_for_day(self, employee_id: str, date: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or replace the fields of an employee's record for a date."""
        return await self.upsert({"employee_id": employee_id, "date": date}, data)

    async def find_range(
        self,
        date_from: str,
        date_to: str,
        employee_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Records between two dates inclusive.

        Args:
            date_from: First date (YYYY-MM-DD)
            date_to: Last date (YYYY-MM-DD)
            employee_id: Limit to one employee
        """
        query: Dict[str, Any] = {"date": {"$gte": date_from, "$lte": date_to}}
        if employee_id:
            query["employee_id"] = employee_id
        return await self.find_all(query, limit=0, sort=[("date", 1)])

    async def find_for_date(self, date: str) -> List[Dict[str, Any]]:
        return await self.find_all({"date": date}, limit=0)


class HolidayRepository(BaseRepository):
    """Company holidays."""

    async def find_by_date(self, date: str) -> Optional[Dict[str, Any]]:
        return await self.find_one({"date": date})

    async def find_range(self, date_from: str, date_to: str) -> List[Dict[str, Any]]:
        return await self.find_all(
            {"date": {"$gte": date_from, "$lte": date_to}},
            limit=0,
            sort=[("date", 1)]
        )
