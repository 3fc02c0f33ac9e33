"""
Attendance service.
Marks daily attendance, computes worked hours per shift and applies
company holidays.
"""
from typing import List, Dict, Any, Optional
import logging

from texawave.repositories.attendance_repository import AttendanceRepository, HolidayRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.exceptions import NotFoundError, ValidationError
from texawave.models.attendance import AttendanceMark, BulkAttendanceMark, HolidayCreate
from texawave.services.business_rules import AttendanceStatus
from texawave.utils.dates import is_sunday, month_bounds, parse_date
from texawave.utils.work_hours import (
    SHIFT_CONFIGS,
    calculate_work_hours,
    default_lunch_times,
    format_hours
)

logger = logging.getLogger(__name__)

# Departments a holiday marked "All" applies to
HOLIDAY_DEPARTMENTS = ["Staff", "Worker", "Other Workers"]

WORKING_STATUSES = {AttendanceStatus.PRESENT.value, AttendanceStatus.HALF_DAY.value}

ZERO_HOURS = {"work_hrs": 0.0, "ot_hrs": 0.0, "pending_hrs": 0.0, "actual_work_hrs": 0.0}


def resolve_shift(employee: Dict[str, Any], date: str, requested: Optional[str] = None) -> str:
    """Sundays always use the sunday shift; otherwise request, then employee default."""
    if is_sunday(date):
        return "sunday"
    return requested if requested in ("day", "night") else employee.get("shift", "day")


def holiday_departments(departments) -> List[str]:
    """Expand the "All" marker into concrete departments."""
    if isinstance(departments, str):
        departments = [departments]
    if not departments or "All" in departments:
        return list(HOLIDAY_DEPARTMENTS)
    return list(departments)


class AttendanceService:
    """Service for attendance and holidays."""

    def __init__(
        self,
        attendance_repo: AttendanceRepository,
        holiday_repo: HolidayRepository,
        employee_repo: EmployeeRepository
    ):
        self.attendance_repo = attendance_repo
        self.holiday_repo = holiday_repo
        self.employee_repo = employee_repo

    async def _get_employee(self, employee_id: str) -> Dict[str, Any]:
        employee = await self.employee_repo.find_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee

    def _build_record(self, employee: Dict[str, Any], data: AttendanceMark) -> Dict[str, Any]:
        """Compute the stored attendance fields for one day."""
        date = data.date.isoformat()
        shift = resolve_shift(employee, date, data.shift)

        record: Dict[str, Any] = {
            "employee_code": employee.get("employee_code"),
            "employee_name": employee.get("name"),
            "department": employee.get("department"),
            "status": data.status,
            "shift": shift,
            "notes": data.notes,
        }

        if data.status in WORKING_STATUSES:
            lunch = default_lunch_times(shift)
            times = {
                "check_in": data.check_in,
                "check_out": data.check_out,
                "lunch_start": data.lunch_start or lunch["lunch_start"],
                "lunch_end": data.lunch_end or lunch["lunch_end"],
            }
            hours = calculate_work_hours(
                times["check_in"],
                times["check_out"],
                times["lunch_start"],
                times["lunch_end"],
                shift
            )
        else:
            times = {"check_in": None, "check_out": None, "lunch_start": None, "lunch_end": None}
            hours = dict(ZERO_HOURS)

        record.update(times)
        record.update(hours)
        record["work_hrs_display"] = format_hours(hours["work_hrs"])
        return record

    async def mark_attendance(self, data: AttendanceMark, user_id: str) -> Dict[str, Any]:
        """
        Create or correct the attendance record of an employee for a day.

        Returns:
            The stored record

        Raises:
            NotFoundError: If employee not found
        """
        employee = await self._get_employee(data.employee_id)
        record = self._build_record(employee, data)
        record["marked_by"] = user_id

        saved = await self.attendance_repo.save_for_day(data.employee_id, data.date.isoformat(), record)
        logger.info(
            f"Attendance {data.status} for {employee.get('employee_code')} on {data.date} "
            f"({record['work_hrs_display']})"
        )
        return saved

    async def bulk_mark(self, data: BulkAttendanceMark, user_id: str) -> Dict[str, Any]:
        """Mark one status for several employees; unknown IDs are reported back."""
        marked, missing = [], []
        for employee_id in data.employee_ids:
            try:
                await self.mark_attendance(
                    AttendanceMark(employee_id=employee_id, date=data.date, status=data.status, notes=data.notes),
                    user_id
                )
                marked.append(employee_id)
            except NotFoundError:
                missing.append(employee_id)
        return {"marked": len(marked), "not_found": missing}

    async def get_employee_month(self, employee_id: str, month: str) -> Dict[str, Any]:
        """
        Month view for one employee with a status and hours summary.

        Args:
            employee_id: Employee ID
            month: YYYY-MM
        """
        employee = await self._get_employee(employee_id)
        date_from, date_to = month_bounds(month)
        records = await self.attendance_repo.find_range(date_from, date_to, employee_id)

        by_status: Dict[str, int] = {s.value: 0 for s in AttendanceStatus}
        for rec in records:
            by_status[rec.get("status")] = by_status.get(rec.get("status"), 0) + 1

        total_work = sum(float(r.get("work_hrs", 0) or 0) for r in records)
        total_pending = sum(float(r.get("pending_hrs", 0) or 0) for r in records)

        return {
            "employee_id": employee_id,
            "employee_name": employee.get("name"),
            "month": month,
            "records": records,
            "summary": {
                "by_status": by_status,
                "days_marked": len(records),
                "work_hrs": round(total_work, 4),
                "pending_hrs": round(total_pending, 4),
                "work_hrs_display": format_hours(total_work),
                "pending_hrs_display": format_hours(total_pending)
            }
        }

    async def get_daily_sheet(self, date: str, department: Optional[str] = None) -> List[Dict[str, Any]]:
        """All active employees for a date, with their record or "Not Marked"."""
        employees = await self.employee_repo.find_active(department)
        records = {r["employee_id"]: r for r in await self.attendance_repo.find_for_date(date)}
        shift_names = {key: cfg.name for key, cfg in SHIFT_CONFIGS.items()}

        sheet = []
        for emp in employees:
            rec = records.get(emp["id"])
            shift = resolve_shift(emp, date)
            sheet.append({
                "employee_id": emp["id"],
                "employee_code": emp.get("employee_code"),
                "employee_name": emp.get("name"),
                "department": emp.get("department"),
                "shift": shift_names.get(shift, shift),
                "status": rec.get("status") if rec else "Not Marked",
                "record": rec
            })
        return sheet

    # ---- Holidays ----

    async def create_holiday(self, data: HolidayCreate, user_id: str) -> Dict[str, Any]:
        """
        Create a holiday and mark it for applicable employees.

        Raises:
            ValidationError: If a holiday already exists on that date
        """
        date = data.date.isoformat()
        if await self.holiday_repo.find_by_date(date):
            raise ValidationError(f"A holiday already exists on {date}", details={"date": date})

        holiday_doc = {
            "date": date,
            "name": data.name,
            "departments": holiday_departments(data.departments),
            "created_by": user_id
        }
        holiday_id = await self.holiday_repo.create(holiday_doc)
        marked = await self.apply_holiday(holiday_id)
        return {"holiday_id": holiday_id, "employees_marked": marked}

    async def list_holidays(self, year: Optional[int] = None) -> List[Dict[str, Any]]:
        if year:
            return await self.holiday_repo.find_range(f"{year}-01-01", f"{year}-12-31")
        return await self.holiday_repo.find_all(limit=0, sort=[("date", 1)])

    async def delete_holiday(self, holiday_id: str) -> bool:
        if not await self.holiday_repo.delete(holiday_id):
            raise NotFoundError("Holiday", holiday_id)
        return True

    async def apply_holiday(self, holiday_id: str) -> int:
        """
        Mark Holiday for applicable active employees who have no record
        on the holiday date. Existing records are left untouched.

        Returns:
            Number of employees marked
        """
        holiday = await self.holiday_repo.find_by_id(holiday_id)
        if not holiday:
            raise NotFoundError("Holiday", holiday_id)

        date = holiday["date"]
        departments = set(holiday_departments(holiday.get("departments")))
        employees = await self.employee_repo.find_active()
        existing = {r["employee_id"] for r in await self.attendance_repo.find_for_date(date)}

        marked = 0
        for emp in employees:
            if emp.get("department") not in departments or emp["id"] in existing:
                continue
            if parse_date(emp.get("joining_date", date)) > parse_date(date):
                continue
            await self.attendance_repo.save_for_day(emp["id"], date, {
                "employee_code": emp.get("employee_code"),
                "employee_name": emp.get("name"),
                "department": emp.get("department"),
                "status": AttendanceStatus.HOLIDAY.value,
                "shift": resolve_shift(emp, date),
                "check_in": None,
                "check_out": None,
                "lunch_start": None,
                "lunch_end": None,
                **ZERO_HOURS,
                "work_hrs_display": "0:00",
                "notes": f"Auto: {holiday['name']}"
            })
            marked += 1

        logger.info(f"✅ Holiday '{holiday['name']}' applied to {marked} employees on {date}")
        return marked
