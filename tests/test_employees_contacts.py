"""
Tests for the employee master and the customer/vendor contact books.
"""
import pytest

from texawave.database import Collections
from texawave.exceptions import DuplicateError, NotFoundError
from texawave.models.contact import ContactCreate, ContactUpdate
from texawave.models.employee import EmployeeCreate, EmployeeUpdate
from texawave.services.contact_service import ContactService
from texawave.services.employee_service import EmployeeService

from conftest import create_contact, create_employee


@pytest.fixture
def employees(repos):
    return EmployeeService(repos.employees)


@pytest.fixture
def vendors(repos):
    return ContactService(repos.vendors, "Vendor")


def employee_request(**overrides):
    payload = {
        "employee_code": " tw-042 ",
        "name": "Ravi Kumar",
        "department": "Worker",
        "joining_date": "2024-01-01",
        "gross_monthly": 18000
    }
    payload.update(overrides)
    return EmployeeCreate(**payload)


class TestEmployees:

    @pytest.mark.asyncio
    async def test_create_normalizes_code(self, employees, stored):
        employee_id = await employees.create_employee(employee_request(), "admin-1")

        employee = await employees.get_employee(employee_id)
        assert employee["employee_code"] == "TW-042"
        assert employee["status"] == "Active"
        assert employee["joining_date"] == "2024-01-01"
        assert len(stored(Collections.EMPLOYEES)) == 1

    @pytest.mark.asyncio
    async def test_duplicate_code(self, employees):
        await employees.create_employee(employee_request(), "admin-1")

        with pytest.raises(DuplicateError):
            await employees.create_employee(employee_request(employee_code="TW-042", name="Other"), "admin-1")

    @pytest.mark.asyncio
    async def test_missing_employee(self, employees):
        with pytest.raises(NotFoundError):
            await employees.get_employee("missing")

    @pytest.mark.asyncio
    async def test_list_filters(self, employees, seed):
        seed(
            Collections.EMPLOYEES,
            create_employee(employee_id="emp-2", code="TW-002", name="Meena", department="Staff"),
            create_employee(employee_id="emp-1", code="TW-001", name="Ravi Kumar"),
            create_employee(employee_id="emp-3", code="TW-003", name="Suresh", status="Inactive"),
        )

        everyone = await employees.list_employees()
        staff = await employees.list_employees(department="Staff")
        active = await employees.list_employees(status="Active")
        searched = await employees.list_employees(search="ravi")

        assert [e["id"] for e in everyone] == ["emp-1", "emp-2", "emp-3"]
        assert [e["id"] for e in staff] == ["emp-2"]
        assert [e["id"] for e in active] == ["emp-1", "emp-2"]
        assert [e["id"] for e in searched] == ["emp-1"]

    @pytest.mark.asyncio
    async def test_resigning_sets_relieving_date(self, employees, seed):
        seed(Collections.EMPLOYEES, create_employee(employee_id="emp-1"))

        await employees.update_employee("emp-1", EmployeeUpdate(status="Resigned"))

        employee = await employees.get_employee("emp-1")
        assert employee["status"] == "Resigned"
        assert employee["relieving_date"]

    @pytest.mark.asyncio
    async def test_partial_update(self, employees, seed):
        seed(Collections.EMPLOYEES, create_employee(employee_id="emp-1"))

        await employees.update_employee("emp-1", EmployeeUpdate(gross_monthly=22000))

        employee = await employees.get_employee("emp-1")
        assert employee["gross_monthly"] == 22000.0
        assert employee["name"] == "Ravi Kumar"
        assert "relieving_date" not in employee

    @pytest.mark.asyncio
    async def test_delete_deactivates(self, employees, seed, stored):
        seed(Collections.EMPLOYEES, create_employee(employee_id="emp-1"))

        assert await employees.delete_employee("emp-1") is True

        assert stored(Collections.EMPLOYEES)[0]["status"] == "Inactive"

    @pytest.mark.asyncio
    async def test_stats(self, employees, seed):
        seed(
            Collections.EMPLOYEES,
            create_employee(employee_id="emp-1", gross_monthly=20000.0),
            create_employee(employee_id="emp-2", code="TW-002", department="Staff", gross_monthly=30000.0),
            create_employee(employee_id="emp-3", code="TW-003", status="Inactive", gross_monthly=50000.0),
        )

        stats = await employees.get_employee_stats()

        assert stats == {
            "total_employees": 3,
            "active_employees": 2,
            "inactive_employees": 1,
            "by_department": {"Worker": 1, "Staff": 1},
            "monthly_payroll": 50000.0
        }


class TestContacts:

    @pytest.mark.asyncio
    async def test_create_uppercases_currency(self, vendors):
        vendor = await vendors.create_contact(ContactCreate(name="Coimbatore Yarns", currency="usd"), "admin-1")

        assert vendor["id"]
        assert vendor["currency"] == "USD"
        assert vendor["is_active"] is True
        assert vendor["payment_terms_days"] == 30

    @pytest.mark.asyncio
    async def test_search(self, vendors, seed):
        seed(
            Collections.VENDORS,
            create_contact(contact_id="v-1", name="Coimbatore Yarns", gstin="33BBBBB1111B1Z5"),
            create_contact(contact_id="v-2", name="Anand Dyes", gstin="29CCCCC2222C1Z5"),
        )

        by_name = await vendors.list_contacts(search="yarn")
        by_gstin = await vendors.list_contacts(search="29ccccc")

        assert [v["id"] for v in by_name] == ["v-1"]
        assert [v["id"] for v in by_gstin] == ["v-2"]
        assert [v["id"] for v in await vendors.list_contacts()] == ["v-2", "v-1"]

    @pytest.mark.asyncio
    async def test_update(self, vendors, seed):
        seed(Collections.VENDORS, create_contact(contact_id="v-1"))

        updated = await vendors.update_contact("v-1", ContactUpdate(currency="eur", payment_terms_days=45))

        assert updated["currency"] == "EUR"
        assert updated["payment_terms_days"] == 45
        assert updated["name"] == "Sri Lakshmi Textiles"

    @pytest.mark.asyncio
    async def test_delete_and_missing(self, vendors, seed, stored):
        seed(Collections.VENDORS, create_contact(contact_id="v-1"))

        await vendors.delete_contact("v-1")

        assert stored(Collections.VENDORS) == []
        with pytest.raises(NotFoundError) as exc:
            await vendors.get_contact("v-1")
        assert exc.value.message == "Vendor not found: v-1"
