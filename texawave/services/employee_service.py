"""
Employee master: create, list, update and deactivate. Stats count only
Active employees towards headcount by department and payroll.
"""
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

from texawave.repositories.employee_repository import EmployeeRepository
from texawave.exceptions import NotFoundError
from texawave.models.employee import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


class EmployeeService:
    def __init__(self, employee_repo: EmployeeRepository):
        self.employee_repo = employee_repo

    async def create_employee(self, employee_data: EmployeeCreate, user_id: str) -> str:
        """New employees start Active. Raises DuplicateError on a taken code."""
        logger.info(f"Creating employee: {employee_data.employee_code} {employee_data.name}")

        employee_doc = employee_data.model_dump(mode="json")
        employee_doc.update({
            "status": "Active",
            "created_by": user_id
        })

        employee_id = await self.employee_repo.create_employee(employee_doc)
        logger.info(f"✅ Employee created: {employee_id}")
        return employee_id

    async def get_employee(self, employee_id: str) -> Dict[str, Any]:
        employee = await self.employee_repo.find_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def list_employees(
        self,
        department: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        return await self.employee_repo.search(
            department=department,
            status=status,
            search=search,
            skip=skip,
            limit=limit
        )

    async def update_employee(self, employee_id: str, update_data: EmployeeUpdate) -> bool:
        """
        Update employee. Only provided fields change.

        Raises:
            NotFoundError: If employee not found
        """
        await self.get_employee(employee_id)

        update_dict = update_data.model_dump(mode="json", exclude_unset=True)
        if not update_dict:
            return True

        if update_dict.get("status") in ("Inactive", "Resigned") and not update_dict.get("relieving_date"):
            update_dict["relieving_date"] = datetime.utcnow().date().isoformat()

        await self.employee_repo.update(employee_id, update_dict)
        logger.info(f"✅ Employee updated: {employee_id}")
        return True

    async def delete_employee(self, employee_id: str) -> bool:
        """
        Deactivate an employee. History (attendance, loans) is kept.

        Raises:
            NotFoundError: If employee not found
        """
        await self.get_employee(employee_id)
        await self.employee_repo.update(employee_id, {
            "status": "Inactive",
            "relieving_date": datetime.utcnow().date().isoformat()
        })
        logger.info(f"Employee deactivated: {employee_id}")
        return True

    async def get_employee_stats(self) -> Dict[str, Any]:
        employees = await self.employee_repo.find_all(limit=0)
        active = [e for e in employees if e.get("status") == "Active"]

        by_department: Dict[str, int] = {}
        for emp in active:
            dept = emp.get("department", "Unknown")
            by_department[dept] = by_department.get(dept, 0) + 1

        return {
            "total_employees": len(employees),
            "active_employees": len(active),
            "inactive_employees": len(employees) - len(active),
            "by_department": by_department,
            "monthly_payroll": round(sum(float(e.get("gross_monthly", 0) or 0) for e in active), 2)
        }
