"""
Loan repositories: loans and payroll credits.
"""
from typing import List, Dict, Any, Optional

from .base_repository import BaseRepository


class LoanRepository(BaseRepository):
    """Repository for employee loans."""

    async def find_by_employee(self, employee_id: str, status: Optional[str] = None) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {"employee_id": employee_id}
        if status:
            query["status"] = status
        return await self.find_all(query, limit=0, sort=[("requested_at", -1)])

    async def list_loans(
        self,
        status: Optional[str] = None,
        employee_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status
        if employee_id:
            query["employee_id"] = employee_id
        return await self.find_all(query, skip=skip, limit=limit, sort=[("requested_at", -1)])

    async def set_month_entry(self, loan_id: str, field: str, month: str, entry: Dict[str, Any]) -> bool:
        """Set emi_payments.<month> or skip_requests.<month> on a loan."""
        return await self.update(loan_id, {f"{field}.{month}": entry})


class PayrollCreditRepository(BaseRepository):
    """Marks payroll as credited per employee and month."""
