"""
Attendance models.
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import date as date_type

ATTENDANCE_STATUS_PATTERN = "^(Present|Absent|Half Day|Leave|Holiday|Week Off)$"
TIME_12H_PATTERN = r"^\s*\d{1,2}:\d{2}\s*(AM|PM|am|pm)\s*$"


class AttendanceMark(BaseModel):
    """Mark or correct attendance for one employee and day."""

    employee_id: str
    date: date_type
    status: str = Field("Present", pattern=ATTENDANCE_STATUS_PATTERN)
    shift: Optional[str] = Field(None, pattern="^(day|night|sunday)$", description="Defaults to the employee shift; Sundays always use the sunday shift")
    check_in: Optional[str] = Field(None, pattern=TIME_12H_PATTERN)
    check_out: Optional[str] = Field(None, pattern=TIME_12H_PATTERN)
    lunch_start: Optional[str] = Field(None, pattern=TIME_12H_PATTERN)
    lunch_end: Optional[str] = Field(None, pattern=TIME_12H_PATTERN)
    notes: Optional[str] = None


class BulkAttendanceMark(BaseModel):
    """Mark the same status for many employees on one day."""

    date: date_type
    status: str = Field(..., pattern=ATTENDANCE_STATUS_PATTERN)
    employee_ids: List[str] = Field(..., min_length=1)
    notes: Optional[str] = None


class HolidayCreate(BaseModel):
    """Company holiday, optionally limited to departments."""

    date: date_type
    name: str = Field(..., min_length=1, max_length=120)
    departments: Union[str, List[str]] = Field("All", description='"All" or a list of departments')
