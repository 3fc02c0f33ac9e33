"""
Test configuration and fixtures for pytest.

MockDB stands in for a Motor database: collections keep documents in
memory and understand the query and update operators the repositories use.
"""
import copy
import re
import uuid
from datetime import date
from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio

from texawave.database import Database, Collections
from texawave.repositories.attendance_repository import AttendanceRepository, HolidayRepository
from texawave.repositories.contact_repository import CustomerRepository, VendorRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.repositories.invoice_repository import (
    InvoiceRepository,
    CreditNoteRepository,
    PaymentReceivedRepository,
    RecurringProfileRepository
)
from texawave.repositories.leave_repository import LeaveRepository
from texawave.repositories.loan_repository import LoanRepository, PayrollCreditRepository
from texawave.repositories.purchase_repository import BillRepository, PaymentMadeRepository
from texawave.repositories.quotation_repository import QuotationRepository
from texawave.repositories.sales_order_repository import (
    SalesOrderRepository,
    ProductionJobRepository,
    InspectionRepository
)


# =============================================================================
# MOCK DATABASE
# =============================================================================

_MISSING = object()


def _get_path(doc, path):
    current = doc
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _set_path(doc, path, value):
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value


def _match_operator(value, op, expected):
    if op == "$exists":
        return (value is not _MISSING) == bool(expected)
    if op == "$ne":
        return value is _MISSING or value != expected
    if op == "$nin":
        return value is _MISSING or value not in expected
    if value is _MISSING:
        return False
    if op == "$in":
        return value in expected
    if op == "$gte":
        return value is not None and value >= expected
    if op == "$lte":
        return value is not None and value <= expected
    if op == "$gt":
        return value is not None and value > expected
    if op == "$lt":
        return value is not None and value < expected
    raise NotImplementedError(op)


def _matches(doc, query):
    for key, expected in (query or {}).items():
        if key == "$or":
            if not any(_matches(doc, sub) for sub in expected):
                return False
            continue
        if key == "$and":
            if not all(_matches(doc, sub) for sub in expected):
                return False
            continue

        value = _get_path(doc, key)
        if isinstance(expected, dict) and any(k.startswith("$") for k in expected):
            if "$regex" in expected:
                flags = re.IGNORECASE if "i" in expected.get("$options", "") else 0
                if not isinstance(value, str) or not re.search(expected["$regex"], value, flags):
                    return False
            for op, operand in expected.items():
                if op in ("$regex", "$options"):
                    continue
                if not _match_operator(value, op, operand):
                    return False
        elif value is _MISSING or value != expected:
            return False
    return True


def _project(doc, projection):
    result = copy.deepcopy(doc)
    if projection and projection.get("_id") == 0:
        result.pop("_id", None)
    return result


def _apply_update(doc, update, inserting=False):
    for path, value in update.get("$set", {}).items():
        _set_path(doc, path, copy.deepcopy(value))
    for path, amount in update.get("$inc", {}).items():
        current = _get_path(doc, path)
        _set_path(doc, path, (0 if current is _MISSING else current) + amount)
    for path, value in update.get("$push", {}).items():
        current = _get_path(doc, path)
        _set_path(doc, path, ([] if current is _MISSING else list(current)) + [copy.deepcopy(value)])
    if inserting:
        for path, value in update.get("$setOnInsert", {}).items():
            _set_path(doc, path, copy.deepcopy(value))


class MockCursor:
    """Mock Motor cursor."""

    def __init__(self, docs):
        self.docs = docs

    def sort(self, keys, direction=None):
        if isinstance(keys, str):
            keys = [(keys, direction or 1)]
        for field, order in reversed(list(keys)):
            def sort_key(doc, field=field):
                value = _get_path(doc, field)
                missing = value is _MISSING or value is None
                return (missing, None if missing else value)
            self.docs.sort(key=sort_key, reverse=order < 0)
        return self

    def skip(self, n):
        self.docs = self.docs[n:]
        return self

    def limit(self, n):
        if n:
            self.docs = self.docs[:n]
        return self

    async def to_list(self, length=None):
        return self.docs[:length] if length else list(self.docs)


class MockCollection:
    """Mock Motor collection."""

    def __init__(self, name, data):
        self.name = name
        self.data = data

    async def create_index(self, *args, **kwargs):
        return "index"

    async def insert_one(self, doc):
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", uuid.uuid4().hex)
        self.data.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one(self, query=None, projection=None):
        for doc in self.data:
            if _matches(doc, query):
                return _project(doc, projection)
        return None

    def find(self, query=None, projection=None):
        return MockCursor([_project(doc, projection) for doc in self.data if _matches(doc, query)])

    async def count_documents(self, query=None, **kwargs):
        count = sum(1 for doc in self.data if _matches(doc, query))
        limit = kwargs.get("limit")
        return min(count, limit) if limit else count

    async def update_one(self, query, update, upsert=False):
        for doc in self.data:
            if _matches(doc, query):
                _apply_update(doc, update)
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            new_doc = {
                key: copy.deepcopy(value) for key, value in query.items()
                if not key.startswith("$") and not isinstance(value, dict)
            }
            _apply_update(new_doc, update, inserting=True)
            result = await self.insert_one(new_doc)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=result.inserted_id)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def update_many(self, query, update):
        matched = [doc for doc in self.data if _matches(doc, query)]
        for doc in matched:
            _apply_update(doc, update)
        return SimpleNamespace(matched_count=len(matched), modified_count=len(matched))

    async def delete_one(self, query):
        for index, doc in enumerate(self.data):
            if _matches(doc, query):
                del self.data[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query):
        before = len(self.data)
        self.data[:] = [doc for doc in self.data if not _matches(doc, query)]
        return SimpleNamespace(deleted_count=before - len(self.data))


class MockDB:
    """Mock database: collections are created on first access."""

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = []
        return MockCollection(name, self.collections[name])


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def db():
    return MockDB()


@pytest.fixture
def repos(db):
    """Every repository bound to the mock database."""
    return SimpleNamespace(
        employees=EmployeeRepository(db[Collections.EMPLOYEES]),
        attendance=AttendanceRepository(db[Collections.ATTENDANCE]),
        holidays=HolidayRepository(db[Collections.HOLIDAYS]),
        leaves=LeaveRepository(db[Collections.LEAVES]),
        loans=LoanRepository(db[Collections.LOANS]),
        payroll_credits=PayrollCreditRepository(db[Collections.PAYROLL_CREDITS]),
        customers=CustomerRepository(db[Collections.CUSTOMERS]),
        vendors=VendorRepository(db[Collections.VENDORS]),
        quotations=QuotationRepository(db[Collections.QUOTATIONS]),
        orders=SalesOrderRepository(db[Collections.SALES_ORDERS]),
        jobs=ProductionJobRepository(db[Collections.PRODUCTION_JOBS]),
        inspections=InspectionRepository(db[Collections.INSPECTIONS]),
        invoices=InvoiceRepository(db[Collections.INVOICES]),
        credit_notes=CreditNoteRepository(db[Collections.CREDIT_NOTES]),
        payments_received=PaymentReceivedRepository(db[Collections.PAYMENTS_RECEIVED]),
        recurring=RecurringProfileRepository(db[Collections.RECURRING_PROFILES]),
        bills=BillRepository(db[Collections.BILLS]),
        payments_made=PaymentMadeRepository(db[Collections.PAYMENTS_MADE]),
    )


@pytest.fixture
def admin_user():
    return {"user_id": "admin-1", "email": "admin@texawave.in", "name": "Admin", "role": "admin", "employee_id": None}


@pytest.fixture
def staff_user():
    return {"user_id": "user-1", "email": "staff@texawave.in", "name": "Staff", "role": "user", "employee_id": None}


def create_employee(
    employee_id=None,
    code="TW-001",
    name="Ravi Kumar",
    department="Worker",
    gross_monthly=20000.0,
    ctc_lpa=None,
    shift="day",
    joining_date="2024-01-01",
    status="Active"
):
    return {
        "id": employee_id or str(uuid.uuid4()),
        "employee_code": code,
        "name": name,
        "department": department,
        "gross_monthly": gross_monthly,
        "ctc_lpa": ctc_lpa,
        "shift": shift,
        "joining_date": joining_date,
        "status": status
    }


def create_contact(contact_id=None, name="Sri Lakshmi Textiles", gstin="33AAAAA0000A1Z5"):
    return {
        "id": contact_id or str(uuid.uuid4()),
        "name": name,
        "company_name": name,
        "gstin": gstin
    }


def create_invoice(
    invoice_id=None,
    customer_id="cust-1",
    total=1180.0,
    paid_amount=0.0,
    payment_status="Unpaid",
    invoice_date="2025-01-10",
    number="INV-25-0001"
):
    return {
        "id": invoice_id or str(uuid.uuid4()),
        "invoice_number": number,
        "customer_id": customer_id,
        "invoice_date": invoice_date,
        "total": total,
        "paid_amount": paid_amount,
        "payment_status": payment_status,
        "items": []
    }


@pytest.fixture
def seed(db):
    """Insert raw documents into a collection."""
    def _seed(collection, *docs):
        for doc in docs:
            db.collections.setdefault(collection, []).append(copy.deepcopy(doc))
        return docs[0] if len(docs) == 1 else docs
    return _seed


@pytest.fixture
def stored(db):
    """Read back raw documents of a collection."""
    def _stored(collection, **filters):
        return [d for d in db.collections.get(collection, []) if all(d.get(k) == v for k, v in filters.items())]
    return _stored


# =============================================================================
# API CLIENT
# =============================================================================

@pytest_asyncio.fixture
async def api(db, admin_user):
    """
    HTTP client against the application with the mock database.

    The authenticated user is admin by default; tests switch it with
    api.as_user(dict).
    """
    from texawave.main import app
    from texawave.utils.dependencies import get_current_user

    current = {"user": admin_user}
    Database.set_db(db)
    app.dependency_overrides[get_current_user] = lambda: current["user"]

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        client.as_user = lambda user: current.update(user=user)
        yield client

    app.dependency_overrides.clear()
    Database.set_db(None)


@pytest.fixture
def today_iso():
    return date.today().isoformat()
