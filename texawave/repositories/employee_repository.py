"""
Employee repository.
Data access layer for employee operations.
"""
from typing import List, Dict, Any, Optional
import logging
import re

from .base_repository import BaseRepository
from texawave.exceptions import DuplicateError

logger = logging.getLogger(__name__)


class EmployeeRepository(BaseRepository):
    """Repository for employee operations."""

    async def code_exists(self, employee_code: str, exclude_id: Optional[str] = None) -> bool:
        """
        Check if an employee code is taken.

        Args:
            employee_code: Company employee code
            exclude_id: Employee ID to ignore (the one being edited)
        """
        query: Dict[str, Any] = {"employee_code": employee_code.upper()}
        if exclude_id:
            query["id"] = {"$ne": exclude_id}
        return await self.exists(query)

    async def create_employee(self, employee_data: Dict[str, Any]) -> str:
        """
        Create employee with duplicate check.

        Raises:
            DuplicateError: If employee code already exists
        """
        if await self.code_exists(employee_data["employee_code"]):
            raise DuplicateError("Employee", "employee_code", employee_data["employee_code"])
        return await self.create(employee_data)

    async def find_active(self, department: Optional[str] = None) -> List[Dict[str, Any]]:
        """All active employees, optionally for one department."""
        query: Dict[str, Any] = {"status": "Active"}
        if department:
            query["department"] = department
        return await self.find_all(query, limit=0, sort=[("employee_code", 1)])

    async def search(
        self,
        department: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        """
        List employees with filters.

        Args:
            department: Department filter
            status: Status filter
            search: Case-insensitive match on name or employee code
        """
        query: Dict[str, Any] = {}
        if department:
            query["department"] = department
        if status:
            query["status"] = status
        if search:
            pattern = re.escape(search)
            query["$or"] = [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"employee_code": {"$regex": pattern, "$options": "i"}}
            ]
        return await self.find_all(query, skip=skip, limit=limit, sort=[("employee_code", 1)])
