"""
Tests for attendance marking, holidays and leave approval.
"""
import pytest

from texawave.database import Collections
from texawave.exceptions import BusinessLogicError, NotFoundError, ValidationError
from texawave.models.attendance import AttendanceMark, BulkAttendanceMark, HolidayCreate
from texawave.models.leave import LeaveCreate
from texawave.services.attendance_service import AttendanceService, holiday_departments
from texawave.services.leave_service import LeaveService

from conftest import create_employee


@pytest.fixture
def attendance(repos):
    return AttendanceService(repos.attendance, repos.holidays, repos.employees)


@pytest.fixture
def leaves(repos):
    return LeaveService(repos.leaves, repos.attendance, repos.employees)


@pytest.fixture
def worker(seed):
    return seed(Collections.EMPLOYEES, create_employee(employee_id="emp-1", code="TW-001"))


class TestMarkAttendance:

    @pytest.mark.asyncio
    async def test_day_shift_uses_default_lunch(self, attendance, worker):
        record = await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-06", check_in="10:00 AM", check_out="6:30 PM"
        ), "admin-1")

        assert record["employee_id"] == worker["id"]
        assert record["date"] == "2025-01-06"
        assert record["shift"] == "day"
        assert record["lunch_start"] == "1:00 PM"
        assert record["work_hrs"] == 8.5
        assert record["work_hrs_display"] == "8:30"

    @pytest.mark.asyncio
    async def test_sunday_forces_sunday_shift(self, attendance, worker):
        record = await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-05", shift="night", check_in="9:00 AM", check_out="1:00 PM"
        ), "admin-1")

        assert record["shift"] == "sunday"
        assert record["lunch_start"] is None
        assert record["work_hrs"] == 4.0

    @pytest.mark.asyncio
    async def test_absent_has_no_times(self, attendance, worker):
        record = await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-06", status="Absent", check_in="10:00 AM"
        ), "admin-1")

        assert record["check_in"] is None
        assert record["work_hrs"] == 0.0

    @pytest.mark.asyncio
    async def test_correction_replaces_record(self, attendance, worker, stored):
        await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-06", status="Absent"
        ), "admin-1")
        await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-06", check_in="10:00 AM", check_out="6:30 PM"
        ), "admin-1")

        records = stored(Collections.ATTENDANCE, employee_id=worker["id"])
        assert len(records) == 1
        assert records[0]["status"] == "Present"

    @pytest.mark.asyncio
    async def test_unknown_employee(self, attendance):
        with pytest.raises(NotFoundError):
            await attendance.mark_attendance(AttendanceMark(employee_id="ghost", date="2025-01-06"), "admin-1")

    @pytest.mark.asyncio
    async def test_bulk_reports_missing(self, attendance, worker):
        result = await attendance.bulk_mark(BulkAttendanceMark(
            date="2025-01-06", status="Absent", employee_ids=[worker["id"], "ghost"]
        ), "admin-1")

        assert result == {"marked": 1, "not_found": ["ghost"]}


class TestViews:

    @pytest.mark.asyncio
    async def test_month_summary(self, attendance, worker):
        await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-06", check_in="10:00 AM", check_out="6:30 PM"
        ), "admin-1")
        await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-07", status="Absent"
        ), "admin-1")
        await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-02-03", status="Absent"
        ), "admin-1")

        month = await attendance.get_employee_month(worker["id"], "2025-01")

        assert [r["date"] for r in month["records"]] == ["2025-01-06", "2025-01-07"]
        assert month["summary"]["days_marked"] == 2
        assert month["summary"]["by_status"]["Present"] == 1
        assert month["summary"]["by_status"]["Absent"] == 1
        assert month["summary"]["work_hrs"] == 8.5
        assert month["summary"]["work_hrs_display"] == "8:30"

    @pytest.mark.asyncio
    async def test_daily_sheet_shows_unmarked(self, attendance, worker, seed):
        seed(Collections.EMPLOYEES, create_employee(employee_id="emp-2", code="TW-002", name="Meena"))
        await attendance.mark_attendance(AttendanceMark(
            employee_id=worker["id"], date="2025-01-06", status="Absent"
        ), "admin-1")

        sheet = await attendance.get_daily_sheet("2025-01-06")

        assert {row["employee_id"]: row["status"] for row in sheet} == {"emp-1": "Absent", "emp-2": "Not Marked"}


class TestHolidays:

    def test_all_expands_to_departments(self):
        assert holiday_departments("All") == ["Staff", "Worker", "Other Workers"]
        assert holiday_departments(["Staff"]) == ["Staff"]

    @pytest.mark.asyncio
    async def test_holiday_marks_applicable_employees(self, attendance, seed, stored):
        seed(
            Collections.EMPLOYEES,
            create_employee(employee_id="staff-1", code="TW-010", department="Staff"),
            create_employee(employee_id="staff-new", code="TW-011", department="Staff", joining_date="2025-06-01"),
            create_employee(employee_id="staff-present", code="TW-012", department="Staff"),
            create_employee(employee_id="worker-1", code="TW-013", department="Worker"),
        )
        await attendance.mark_attendance(AttendanceMark(
            employee_id="staff-present", date="2025-01-14", check_in="10:00 AM", check_out="6:30 PM"
        ), "admin-1")

        result = await attendance.create_holiday(HolidayCreate(
            date="2025-01-14", name="Pongal", departments=["Staff"]
        ), "admin-1")

        assert result["employees_marked"] == 1
        holiday_records = stored(Collections.ATTENDANCE, status="Holiday")
        assert [r["employee_id"] for r in holiday_records] == ["staff-1"]
        assert holiday_records[0]["notes"] == "Auto: Pongal"
        assert stored(Collections.ATTENDANCE, employee_id="staff-present")[0]["status"] == "Present"

    @pytest.mark.asyncio
    async def test_one_holiday_per_date(self, attendance, worker):
        await attendance.create_holiday(HolidayCreate(date="2025-01-14", name="Pongal"), "admin-1")
        with pytest.raises(ValidationError):
            await attendance.create_holiday(HolidayCreate(date="2025-01-14", name="Again"), "admin-1")

    @pytest.mark.asyncio
    async def test_list_by_year(self, attendance, worker):
        await attendance.create_holiday(HolidayCreate(date="2025-01-14", name="Pongal"), "admin-1")
        await attendance.create_holiday(HolidayCreate(date="2024-10-31", name="Deepavali"), "admin-1")

        holidays = await attendance.list_holidays(2025)

        assert [h["name"] for h in holidays] == ["Pongal"]


class TestLeaves:

    async def apply(self, leaves, worker):
        return await leaves.apply_leave(LeaveCreate(
            employee_id=worker["id"], start_date="2025-02-03", end_date="2025-02-05", reason="Family function"
        ), "user-1")

    @pytest.mark.asyncio
    async def test_apply_counts_days(self, leaves, worker):
        leave = await self.apply(leaves, worker)

        assert leave["status"] == "Pending"
        assert leave["total_days"] == 3
        assert leave["employee_code"] == "TW-001"

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValueError):
            LeaveCreate(employee_id="emp-1", start_date="2025-02-05", end_date="2025-02-03", reason="x")

    @pytest.mark.asyncio
    async def test_approve_marks_attendance(self, leaves, worker, stored):
        leave = await self.apply(leaves, worker)

        result = await leaves.approve_leave(leave["id"], "admin-1", "Enjoy")

        assert result["attendance_days_marked"] == 3
        assert result["leave"]["status"] == "Approved"
        records = stored(Collections.ATTENDANCE, employee_id=worker["id"], status="Leave")
        assert sorted(r["date"] for r in records) == ["2025-02-03", "2025-02-04", "2025-02-05"]
        assert all(r["leave_id"] == leave["id"] for r in records)

    @pytest.mark.asyncio
    async def test_leave_processed_once(self, leaves, worker):
        leave = await self.apply(leaves, worker)
        await leaves.reject_leave(leave["id"], "admin-1", "Peak season")

        with pytest.raises(BusinessLogicError):
            await leaves.approve_leave(leave["id"], "admin-1")

    @pytest.mark.asyncio
    async def test_reject_writes_no_attendance(self, leaves, worker, stored):
        leave = await self.apply(leaves, worker)

        rejected = await leaves.reject_leave(leave["id"], "admin-1")

        assert rejected["status"] == "Rejected"
        assert stored(Collections.ATTENDANCE) == []
