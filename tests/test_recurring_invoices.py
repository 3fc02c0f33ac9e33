"""
Tests for recurring invoice profiles and the daily processor.
"""
from datetime import date

import pytest

from texawave.database import Collections, Database
from texawave.models.recurring_invoice import RecurringProfileCreate, RecurringProfileUpdate
from texawave.scheduler import process_recurring_invoices_daily
from texawave.services.recurring_invoice_service import RecurringInvoiceService, next_invoice_date

from conftest import create_contact


@pytest.fixture
def customer(seed):
    return seed(Collections.CUSTOMERS, create_contact(contact_id="cust-1"))


@pytest.fixture
def recurring(repos):
    return RecurringInvoiceService(repos.recurring, repos.invoices, repos.customers)


def profile_request(**overrides):
    payload = {
        "profile_name": "Monthly tape supply",
        "customer_id": "cust-1",
        "start_date": "2025-01-01",
        "items": [{"description": "Elastic tape 20mm", "qty": 10, "rate": 100}]
    }
    payload.update(overrides)
    return RecurringProfileCreate(**payload)


class TestNextInvoiceDate:

    @pytest.mark.parametrize("frequency,expected", [
        ("weekly", date(2025, 2, 7)),
        ("monthly", date(2025, 2, 28)),
        ("quarterly", date(2025, 4, 30)),
        ("half-yearly", date(2025, 7, 31)),
        ("yearly", date(2026, 1, 31)),
    ])
    def test_frequencies(self, frequency, expected):
        assert next_invoice_date(date(2025, 1, 31), frequency) == expected

    def test_custom_days(self):
        assert next_invoice_date(date(2025, 1, 1), "custom", 10) == date(2025, 1, 11)
        assert next_invoice_date(date(2025, 1, 1), "custom") == date(2025, 1, 31)


class TestProfiles:

    @pytest.mark.asyncio
    async def test_create(self, recurring, customer):
        profile = await recurring.create_profile(profile_request(), "user-1")

        assert profile["status"] == "Active"
        assert profile["next_invoice_date"] == "2025-01-01"
        assert profile["total"] == 1180.0
        assert profile["customer_name"] == customer["name"]
        assert profile["custom_days"] is None

    @pytest.mark.asyncio
    async def test_custom_defaults_to_thirty_days(self, recurring, customer):
        profile = await recurring.create_profile(profile_request(frequency="custom"), "user-1")
        assert profile["custom_days"] == 30

    @pytest.mark.asyncio
    async def test_pause(self, recurring, customer):
        profile = await recurring.create_profile(profile_request(), "user-1")
        paused = await recurring.update_profile(profile["id"], RecurringProfileUpdate(status="Paused"))
        assert paused["status"] == "Paused"


class TestProcessing:

    @pytest.mark.asyncio
    async def test_due_profile_raises_invoice(self, recurring, customer, stored):
        profile = await recurring.create_profile(profile_request(), "user-1")

        result = await recurring.process_due_profiles(date(2025, 1, 1))

        assert result["processed"] == 1
        assert result["invoices_created"] == 1
        invoice = stored(Collections.INVOICES)[0]
        assert invoice["invoice_number"].startswith("RINV-25-")
        assert invoice["recurring_profile_id"] == profile["id"]
        assert invoice["due_date"] == "2025-01-31"
        assert invoice["total"] == 1180.0
        assert invoice["payment_status"] == "Unpaid"

        updated = await recurring.get_profile(profile["id"])
        assert updated["next_invoice_date"] == "2025-02-01"
        assert updated["last_invoice_date"] == "2025-01-01"
        assert updated["generated_invoice_ids"] == result["invoice_ids"]

    @pytest.mark.asyncio
    async def test_not_raised_twice_for_a_period(self, recurring, customer):
        await recurring.create_profile(profile_request(), "user-1")
        await recurring.process_due_profiles(date(2025, 1, 1))

        again = await recurring.process_due_profiles(date(2025, 1, 2))

        assert again["processed"] == 0

    @pytest.mark.asyncio
    async def test_paused_and_future_profiles_skipped(self, recurring, customer):
        paused = await recurring.create_profile(profile_request(), "user-1")
        await recurring.update_profile(paused["id"], RecurringProfileUpdate(status="Paused"))
        await recurring.create_profile(profile_request(start_date="2025-06-01"), "user-1")

        result = await recurring.process_due_profiles(date(2025, 1, 15))

        assert result == {"processed": 0, "invoices_created": 0, "expired": 0, "invoice_ids": []}

    @pytest.mark.asyncio
    async def test_profile_past_end_date_expires(self, recurring, customer, stored):
        profile = await recurring.create_profile(
            profile_request(start_date="2024-12-01", end_date="2024-12-31"), "user-1"
        )

        result = await recurring.process_due_profiles(date(2025, 1, 5))

        assert result["expired"] == 1
        assert result["invoices_created"] == 0
        assert (await recurring.get_profile(profile["id"]))["status"] == "Expired"
        assert stored(Collections.INVOICES) == []


class TestSchedulerJob:

    @pytest.mark.asyncio
    async def test_daily_job_processes_today(self, db, seed, stored, today_iso):
        seed(Collections.RECURRING_PROFILES, {
            "id": "rec-1",
            "profile_name": "Weekly samples",
            "customer_id": "cust-1",
            "frequency": "weekly",
            "next_invoice_date": today_iso,
            "status": "Active",
            "total": 500.0,
            "generated_invoice_ids": []
        })
        Database.set_db(db)
        try:
            await process_recurring_invoices_daily()
        finally:
            Database.set_db(None)

        assert len(stored(Collections.INVOICES, recurring_profile_id="rec-1")) == 1
        assert stored(Collections.RECURRING_PROFILES)[0]["next_invoice_date"] > today_iso
