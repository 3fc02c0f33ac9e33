"""
Tests for the yearly bonus calculation and its Excel export.
"""
import pytest
from openpyxl import load_workbook

from texawave.database import Collections
from texawave.services.bonus_service import BonusService, calculate_bonus, count_leaves

from conftest import create_employee


def attendance(employee_id, date, status):
    return {"id": f"{employee_id}-{date}", "employee_id": employee_id, "date": date, "status": status}


@pytest.fixture
def bonus(repos):
    return BonusService(repos.attendance, repos.employees)


@pytest.fixture
def year_data(seed):
    seed(
        Collections.EMPLOYEES,
        create_employee(employee_id="emp-a", code="TW-001", name="Ravi Kumar", gross_monthly=20000.0),
        create_employee(employee_id="emp-b", code="TW-002", name="Meena", department="Staff",
                        gross_monthly=25000.0, ctc_lpa=3.6),
        create_employee(employee_id="emp-x", code="TW-003", name="Left Already", status="Inactive"),
    )
    seed(
        Collections.ATTENDANCE,
        attendance("emp-b", "2025-01-05", "Present"),
        attendance("emp-a", "2025-01-06", "Present"),
        attendance("emp-b", "2025-01-06", "Absent"),
        attendance("emp-a", "2025-01-07", "Half Day"),
        attendance("emp-a", "2024-12-30", "Absent"),
    )


class TestBonusMath:

    def test_unmarked_weekday_counts_as_leave(self):
        records = {"2025-01-06": {"status": "Present"}}
        assert count_leaves(["2025-01-05", "2025-01-06", "2025-01-07"], records) == 1.0

    def test_half_day_and_holiday_weights(self):
        records = {
            "2025-01-06": {"status": "Half Day"},
            "2025-01-07": {"status": "Holiday"},
            "2025-01-08": {"status": "Leave"},
        }
        assert count_leaves(list(records), records) == 1.5

    def test_few_leaves_earn_one_month_gross(self):
        result = calculate_bonus({"gross_monthly": 20000.0}, 12)
        assert result["tw_days"] == 343
        assert result["actual_bonus"] == 20000.0

    def test_many_leaves_earn_proportional_share(self):
        result = calculate_bonus({"gross_monthly": 20000.0}, 35.5)
        assert result["leave_difference"] == pytest.approx(0.9)
        assert result["calculated_bonus"] == 18000.0
        assert result["actual_bonus"] == 18000.0

    def test_ctc_from_lakhs(self):
        result = calculate_bonus({"gross_monthly": 25000.0, "ctc_lpa": 3.6}, 0)
        assert result["ctc"] == pytest.approx(360000.0)


class TestYearSheet:

    @pytest.mark.asyncio
    async def test_rows_use_tracked_dates_only(self, bonus, year_data):
        result = await bonus.calculate_year(2025)

        rows = {row["employee_id"]: row for row in result["rows"]}
        assert list(rows) == ["emp-a", "emp-b"]
        assert rows["emp-a"]["total_leaves"] == 0.5
        assert rows["emp-a"]["monthly_leaves"]["JAN"] == 0.5
        assert rows["emp-a"]["monthly_leaves"]["FEB"] == 0
        assert rows["emp-b"]["total_leaves"] == 2.0
        assert rows["emp-b"]["actual_bonus"] == 25000.0
        assert result["summary"]["total_employees"] == 2
        assert result["summary"]["total_bonus"] == 45000.0
        assert result["summary"]["attendance_dates"] == 3

    @pytest.mark.asyncio
    async def test_search_and_department(self, bonus, year_data):
        by_code = await bonus.calculate_year(2025, search="tw-002")
        by_department = await bonus.calculate_year(2025, department="Worker")

        assert [r["name"] for r in by_code["rows"]] == ["Meena"]
        assert [r["name"] for r in by_department["rows"]] == ["Ravi Kumar"]

    @pytest.mark.asyncio
    async def test_year_without_attendance(self, bonus, year_data):
        result = await bonus.calculate_year(2023)
        assert all(row["total_leaves"] == 0 for row in result["rows"])
        assert result["summary"]["attendance_dates"] == 0

    @pytest.mark.asyncio
    async def test_export_workbook(self, bonus, year_data):
        output = await bonus.export_year(2025)

        ws = load_workbook(output).active
        assert ws.title == "Bonus 2025"
        headers = [cell.value for cell in ws[1]]
        assert headers[:3] == ["SL.NO", "NAME", "JAN"]
        assert headers[-1] == "Actual Bonus"
        assert len(headers) == 22
        assert ws["B2"].value == "Ravi Kumar"
        assert ws["C2"].value == 0.5
        assert ws["B4"].value == "TOTAL"
        assert ws["V4"].value == 45000.0
