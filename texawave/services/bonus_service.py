"""
Bonus service.

Yearly bonus per active employee from the attendance of the year. The
standard year is 355 working days; employees with fewer than 30 leaves
receive one month's gross, others a share of CTC proportional to the
days worked.
"""
from typing import List, Dict, Any, Optional
from io import BytesIO
from collections import defaultdict
import logging

from texawave.repositories.attendance_repository import AttendanceRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.services.business_rules import AttendanceStatus
from texawave.utils.dates import is_sunday, month_bounds
from texawave.utils.excel_exporter import ExcelExporter, MONTH_COLUMNS
from texawave.utils.logger import log_function_call

logger = logging.getLogger(__name__)

TOTAL_DAYS = 355
FULL_BONUS_LEAVE_LIMIT = 30
LAKH = 100000

LEAVE_WEIGHTS = {
    AttendanceStatus.ABSENT.value: 1.0,
    AttendanceStatus.LEAVE.value: 1.0,
    AttendanceStatus.HALF_DAY.value: 0.5,
}


def count_leaves(dates: List[str], records_by_date: Dict[str, Dict[str, Any]]) -> float:
    """
    Leaves of one employee over the given dates.

    A date without a record for the employee counts as absent unless it
    is a Sunday. Present, Holiday and Week Off count 0.
    """
    leaves = 0.0
    for date in dates:
        rec = records_by_date.get(date)
        if rec is None:
            if not is_sunday(date):
                leaves += 1
            continue
        leaves += LEAVE_WEIGHTS.get(rec.get("status"), 0.0)
    return leaves


def calculate_bonus(employee: Dict[str, Any], total_leaves: float) -> Dict[str, Any]:
    """
    Bonus figures for an employee with a given number of leaves.

    Returns:
        Dict with total_leaves, total_days, tw_days, per_month_wages, ctc,
        leave_difference, calculated_bonus, actual_bonus
    """
    tw_days = TOTAL_DAYS - total_leaves
    leave_difference = tw_days / TOTAL_DAYS
    gross = float(employee.get("gross_monthly", 0) or 0)
    ctc_lpa = employee.get("ctc_lpa")
    ctc = float(ctc_lpa) * LAKH if ctc_lpa else gross * 12

    calculated = ctc * leave_difference / 12
    actual = gross if total_leaves < FULL_BONUS_LEAVE_LIMIT else calculated

    return {
        "total_leaves": round(total_leaves, 1),
        "total_days": TOTAL_DAYS,
        "tw_days": round(tw_days, 1),
        "per_month_wages": gross,
        "ctc": ctc,
        "leave_difference": round(leave_difference, 10),
        "calculated_bonus": round(calculated, 2),
        "actual_bonus": round(actual, 2),
    }


class BonusService:
    """Service for the yearly bonus sheet."""

    def __init__(self, attendance_repo: AttendanceRepository, employee_repo: EmployeeRepository):
        self.attendance_repo = attendance_repo
        self.employee_repo = employee_repo

    @log_function_call(logger)
    async def calculate_year(
        self,
        year: int,
        department: Optional[str] = None,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Bonus rows for every active employee plus a summary.

        Only dates that have attendance data for somebody are considered,
        so days before attendance tracking started are not counted.

        Args:
            year: Calendar year
            department: Filter rows by department
            search: Case-insensitive match on name or employee code
        """
        employees = await self.employee_repo.find_active(department)
        records = await self.attendance_repo.find_range(f"{year}-01-01", f"{year}-12-31")

        tracked_dates = sorted({r["date"] for r in records})
        by_employee: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        for rec in records:
            by_employee[rec["employee_id"]][rec["date"]] = rec

        dates_by_month = {}
        for index, label in enumerate(MONTH_COLUMNS, 1):
            first, last = month_bounds(f"{year}-{index:02d}")
            dates_by_month[label] = [d for d in tracked_dates if first <= d <= last]

        rows = []
        for emp in employees:
            if search:
                q = search.lower()
                if q not in (emp.get("name") or "").lower() and q not in (emp.get("employee_code") or "").lower():
                    continue

            own = by_employee.get(emp["id"], {})
            monthly = {label: count_leaves(dates, own) for label, dates in dates_by_month.items()}
            total = sum(monthly.values())

            row = {
                "employee_id": emp["id"],
                "employee_code": emp.get("employee_code"),
                "name": emp.get("name"),
                "department": emp.get("department"),
                "monthly_leaves": {label: round(v, 1) for label, v in monthly.items()},
            }
            row.update(calculate_bonus(emp, total))
            rows.append(row)

        count = len(rows)
        summary = {
            "total_employees": count,
            "total_bonus": round(sum(r["actual_bonus"] for r in rows), 2),
            "total_leaves": round(sum(r["total_leaves"] for r in rows), 1),
            "average_leave_difference": (
                round(sum(r["leave_difference"] for r in rows) / count, 4) if count else 0
            ),
            "attendance_dates": len(tracked_dates),
        }

        logger.info(f"Bonus calculated for {count} employees ({year})")
        return {"year": year, "rows": rows, "summary": summary}

    async def export_year(self, year: int, department: Optional[str] = None) -> BytesIO:
        """Bonus sheet as an .xlsx file."""
        result = await self.calculate_year(year, department)
        return ExcelExporter().export_bonus_sheet(result["rows"], year)
