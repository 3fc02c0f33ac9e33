"""
Leaves router.
Leave applications and admin decisions.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.leave_repository import LeaveRepository
from texawave.repositories.attendance_repository import AttendanceRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.services.leave_service import LeaveService
from texawave.models.leave import LeaveCreate, LeaveDecision
from texawave.utils.dependencies import get_current_user, get_current_admin_user, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_leave_service() -> LeaveService:
    """Get leave service with injected dependencies."""
    db = Database.get_db()
    return LeaveService(
        LeaveRepository(db[Collections.LEAVES]),
        AttendanceRepository(db[Collections.ATTENDANCE]),
        EmployeeRepository(db[Collections.EMPLOYEES])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Apply for leave"
)
async def apply_leave(
    data: LeaveCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    """
    Submit a leave request.

    **Request Body:**
    - **employee_id**: Employee ID
    - **leave_type**: e.g. Casual Leave, Sick Leave
    - **start_date / end_date**: Inclusive range; end cannot precede start
    - **reason**: Reason for leave
    """
    return await service.apply_leave(data, current_user["user_id"])


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List leaves"
)
async def list_leaves(
    employee_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service)
) -> List[Dict[str, Any]]:
    return await service.list_leaves(employee_id, status_filter, pagination["skip"], pagination["limit"])


@router.get(
    "/{leave_id}",
    response_model=Dict[str, Any],
    summary="Get leave"
)
async def get_leave(
    leave_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    return await service.get_leave(leave_id)


@router.post(
    "/{leave_id}/approve",
    response_model=Dict[str, Any],
    summary="Approve leave (Admin only)",
    description="Approve and mark Leave attendance for every day in range"
)
async def approve_leave(
    leave_id: str = Path(...),
    decision: Optional[LeaveDecision] = None,
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    """
    Approve a pending leave.

    **Returns:**
    - leave: The updated leave
    - attendance_days_marked: Days written as Leave

    **Raises:**
    - 422: If the leave was already processed
    """
    remarks = decision.remarks if decision else None
    return await service.approve_leave(leave_id, admin_user["user_id"], remarks)


@router.post(
    "/{leave_id}/reject",
    response_model=Dict[str, Any],
    summary="Reject leave (Admin only)"
)
async def reject_leave(
    leave_id: str = Path(...),
    decision: Optional[LeaveDecision] = None,
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LeaveService = Depends(get_leave_service)
) -> Dict[str, Any]:
    remarks = decision.remarks if decision else None
    return await service.reject_leave(leave_id, admin_user["user_id"], remarks)


@router.delete(
    "/{leave_id}",
    summary="Delete leave (Admin only)"
)
async def delete_leave(
    leave_id: str = Path(...),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: LeaveService = Depends(get_leave_service)
) -> Dict[str, str]:
    logger.warning(f"Admin {admin_user['user_id']} deleting leave: {leave_id}")
    await service.delete_leave(leave_id)
    return {"message": "Leave deleted"}
