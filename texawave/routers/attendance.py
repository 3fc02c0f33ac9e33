"""
Attendance router.
Daily attendance, monthly views and company holidays.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.attendance_repository import AttendanceRepository, HolidayRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.services.attendance_service import AttendanceService
from texawave.models.attendance import AttendanceMark, BulkAttendanceMark, HolidayCreate
from texawave.exceptions import validate_date_format, validate_month_format
from texawave.utils.dependencies import get_current_user, get_current_admin_user

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_attendance_service() -> AttendanceService:
    """Get attendance service with injected dependencies."""
    db = Database.get_db()
    return AttendanceService(
        AttendanceRepository(db[Collections.ATTENDANCE]),
        HolidayRepository(db[Collections.HOLIDAYS]),
        EmployeeRepository(db[Collections.EMPLOYEES])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    summary="Mark attendance",
    description="Create or correct one employee's attendance for a day"
)
async def mark_attendance(
    data: AttendanceMark,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, Any]:
    """
    Mark attendance.

    **Request Body:**
    - **employee_id**: Employee ID
    - **date**: Date (YYYY-MM-DD)
    - **status**: Present, Absent, Half Day, Leave, Holiday or Week Off
    - **check_in / check_out**: 12-hour times, e.g. "9:55 AM"
    - **lunch_start / lunch_end**: Defaults to the shift lunch window

    Worked and pending hours are computed from the shift; Sundays use
    the Sunday shift.

    **Returns:**
    - The stored record
    """
    return await service.mark_attendance(data, current_user["user_id"])


@router.post(
    "/bulk",
    response_model=Dict[str, Any],
    summary="Bulk mark attendance",
    description="Mark the same status for several employees"
)
async def bulk_mark_attendance(
    data: BulkAttendanceMark,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, Any]:
    return await service.bulk_mark(data, current_user["user_id"])


@router.get(
    "/daily",
    response_model=List[Dict[str, Any]],
    summary="Daily sheet",
    description="Attendance status of every active employee for a date"
)
async def get_daily_sheet(
    date: str = Query(..., description="Date (YYYY-MM-DD)"),
    department: Optional[str] = Query(None, description="Filter by department"),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> List[Dict[str, Any]]:
    validate_date_format(date)
    return await service.get_daily_sheet(date, department)


@router.get(
    "/employee/{employee_id}",
    response_model=Dict[str, Any],
    summary="Employee month",
    description="Records and hours summary of one employee for a month"
)
async def get_employee_month(
    employee_id: str = Path(..., description="Employee ID"),
    month: str = Query(..., description="Month (YYYY-MM)"),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, Any]:
    """
    Get an employee's month.

    **Returns:**
    - records: Daily records
    - summary: Count per status, worked and pending hours
    """
    validate_month_format(month)
    return await service.get_employee_month(employee_id, month)


# ---- Holidays ----

@router.post(
    "/holidays",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create holiday (Admin only)",
    description="Create a holiday and mark it for applicable employees"
)
async def create_holiday(
    data: HolidayCreate,
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, Any]:
    """
    Create a holiday.

    **Request Body:**
    - **date**: Holiday date
    - **name**: Holiday name
    - **departments**: "All" or a list of departments

    Active employees of those departments without a record that day
    are marked Holiday.

    **Raises:**
    - 400: If a holiday already exists on the date
    """
    return await service.create_holiday(data, admin_user["user_id"])


@router.get(
    "/holidays",
    response_model=List[Dict[str, Any]],
    summary="List holidays"
)
async def list_holidays(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> List[Dict[str, Any]]:
    return await service.list_holidays(year)


@router.post(
    "/holidays/{holiday_id}/apply",
    response_model=Dict[str, Any],
    summary="Re-apply holiday (Admin only)",
    description="Mark the holiday for employees still without a record"
)
async def apply_holiday(
    holiday_id: str = Path(..., description="Holiday ID"),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, Any]:
    marked = await service.apply_holiday(holiday_id)
    return {"holiday_id": holiday_id, "employees_marked": marked}


@router.delete(
    "/holidays/{holiday_id}",
    summary="Delete holiday (Admin only)"
)
async def delete_holiday(
    holiday_id: str = Path(..., description="Holiday ID"),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: AttendanceService = Depends(get_attendance_service)
) -> Dict[str, str]:
    await service.delete_holiday(holiday_id)
    return {"message": "Holiday deleted"}
