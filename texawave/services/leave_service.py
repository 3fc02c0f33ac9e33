"""
Leave service.
Leave applications and their approval, which writes Leave attendance
for every day in the approved range.
"""
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

from texawave.repositories.leave_repository import LeaveRepository
from texawave.repositories.attendance_repository import AttendanceRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.exceptions import NotFoundError, BusinessLogicError
from texawave.models.leave import LeaveCreate
from texawave.services.business_rules import BusinessRules, LeaveStatus, AttendanceStatus
from texawave.utils.dates import days_inclusive, iter_dates, parse_date

logger = logging.getLogger(__name__)

LEAVE_NOTE = "Auto-marked due to approved leave"


class LeaveService:
    """Service for leave requests."""

    def __init__(
        self,
        leave_repo: LeaveRepository,
        attendance_repo: AttendanceRepository,
        employee_repo: EmployeeRepository
    ):
        self.leave_repo = leave_repo
        self.attendance_repo = attendance_repo
        self.employee_repo = employee_repo

    async def apply_leave(self, data: LeaveCreate, user_id: str) -> Dict[str, Any]:
        """
        Submit a leave request.

        Returns:
            The created leave

        Raises:
            NotFoundError: If employee not found
        """
        employee = await self.employee_repo.find_by_id(data.employee_id)
        if not employee:
            raise NotFoundError("Employee", data.employee_id)

        leave_doc = data.model_dump(mode="json")
        leave_doc.update({
            "employee_code": employee.get("employee_code"),
            "employee_name": employee.get("name"),
            "department": employee.get("department"),
            "total_days": days_inclusive(data.start_date, data.end_date),
            "status": LeaveStatus.PENDING.value,
            "applied_at": datetime.utcnow(),
            "applied_by": user_id
        })

        leave_id = await self.leave_repo.create(leave_doc)
        logger.info(f"Leave applied: {employee.get('employee_code')} {leave_doc['total_days']} day(s)")
        return leave_doc | {"id": leave_id}

    async def get_leave(self, leave_id: str) -> Dict[str, Any]:
        leave = await self.leave_repo.find_by_id(leave_id)
        if not leave:
            raise NotFoundError("Leave", leave_id)
        return leave

    async def list_leaves(
        self,
        employee_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        return await self.leave_repo.list_leaves(employee_id, status, skip, limit)

    async def _process(self, leave_id: str, status: str, admin_id: str, remarks: Optional[str]) -> Dict[str, Any]:
        leave = await self.get_leave(leave_id)

        check = BusinessRules.can_process_leave(leave)
        if not check.is_valid:
            raise BusinessLogicError(check.errors[0], details={"leave_id": leave_id})

        update = {
            "status": status,
            "processed_by": admin_id,
            "processed_at": datetime.utcnow(),
            "remarks": remarks
        }
        await self.leave_repo.update(leave_id, update)
        return leave | update

    async def approve_leave(self, leave_id: str, admin_id: str, remarks: Optional[str] = None) -> Dict[str, Any]:
        """
        Approve a pending leave and mark Leave attendance for each day.

        Returns:
            Dict with the leave and number of attendance days written

        Raises:
            BusinessLogicError: If the leave was already processed
        """
        leave = await self._process(leave_id, LeaveStatus.APPROVED.value, admin_id, remarks)

        days = 0
        for day in iter_dates(parse_date(leave["start_date"]), parse_date(leave["end_date"])):
            await self.attendance_repo.save_for_day(leave["employee_id"], day.isoformat(), {
                "employee_code": leave.get("employee_code"),
                "employee_name": leave.get("employee_name"),
                "department": leave.get("department"),
                "status": AttendanceStatus.LEAVE.value,
                "check_in": None,
                "check_out": None,
                "lunch_start": None,
                "lunch_end": None,
                "work_hrs": 0.0,
                "ot_hrs": 0.0,
                "pending_hrs": 0.0,
                "actual_work_hrs": 0.0,
                "work_hrs_display": "0:00",
                "leave_id": leave_id,
                "notes": LEAVE_NOTE
            })
            days += 1

        logger.info(f"✅ Leave approved: {leave_id} ({days} attendance day(s) marked)")
        return {"leave": leave, "attendance_days_marked": days}

    async def reject_leave(self, leave_id: str, admin_id: str, remarks: Optional[str] = None) -> Dict[str, Any]:
        leave = await self._process(leave_id, LeaveStatus.REJECTED.value, admin_id, remarks)
        logger.info(f"Leave rejected: {leave_id}")
        return leave

    async def delete_leave(self, leave_id: str) -> bool:
        await self.get_leave(leave_id)
        return await self.leave_repo.delete(leave_id)
