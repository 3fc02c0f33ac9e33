"""
Recurring invoice service.

Profiles describe an invoice to raise on a schedule. The processor runs
daily from the scheduler and on demand; it raises one invoice per due
profile and advances the profile's next invoice date.
"""
from typing import List, Dict, Any, Optional
from datetime import date, timedelta
import logging
import time

from texawave.repositories.invoice_repository import InvoiceRepository, RecurringProfileRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.exceptions import NotFoundError
from texawave.models.recurring_invoice import RecurringProfileCreate, RecurringProfileUpdate
from texawave.services.business_rules import RecurringStatus, PaymentStatus
from texawave.services.invoice_service import tax_settings, INVOICE_STATUS_GENERATED
from texawave.utils.gst_calculator import calculate_invoice_totals
from texawave.utils.numbering import generate_recurring_invoice_number
from texawave.utils.dates import add_months, parse_date, today, to_date_str
from texawave.utils.logger import log_function_call

logger = logging.getLogger(__name__)

RECURRING_DUE_DAYS = 30
DEFAULT_CUSTOM_DAYS = 30

MONTHS_PER_FREQUENCY = {
    "monthly": 1,
    "quarterly": 3,
    "half-yearly": 6,
    "yearly": 12,
}


def next_invoice_date(current: date, frequency: str, custom_days: Optional[int] = None) -> date:
    """
    Advance a date by one period of the profile frequency.

    Args:
        current: Date of the invoice just raised
        frequency: weekly, monthly, quarterly, half-yearly, yearly or custom
        custom_days: Period length for custom profiles
    """
    if frequency == "weekly":
        return current + timedelta(days=7)
    if frequency in MONTHS_PER_FREQUENCY:
        return add_months(current, MONTHS_PER_FREQUENCY[frequency])
    return current + timedelta(days=custom_days or DEFAULT_CUSTOM_DAYS)


class RecurringInvoiceService:
    """Service for recurring invoice profiles."""

    def __init__(
        self,
        profile_repo: RecurringProfileRepository,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository
    ):
        self.profile_repo = profile_repo
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo

    async def create_profile(self, data: RecurringProfileCreate, user_id: str) -> Dict[str, Any]:
        """
        Create an Active profile; the first invoice is due on the start date.

        Raises:
            NotFoundError: If customer not found
        """
        customer = await self.customer_repo.find_by_id(data.customer_id)
        if not customer:
            raise NotFoundError("Customer", data.customer_id)

        taxes = tax_settings(data)
        totals = calculate_invoice_totals(
            [item.model_dump() for item in data.items],
            data.currency,
            taxes["rates"],
            taxes["flags"]
        )

        profile_doc = data.model_dump(mode="json", exclude={"items"})
        profile_doc.update({
            "customer_name": customer.get("name"),
            "custom_days": data.custom_days or (DEFAULT_CUSTOM_DAYS if data.frequency == "custom" else None),
            **totals,
            "next_invoice_date": data.start_date.isoformat(),
            "status": RecurringStatus.ACTIVE.value,
            "generated_invoice_ids": [],
            "created_by": user_id
        })

        profile_id = await self.profile_repo.create(profile_doc)
        logger.info(f"Recurring profile '{data.profile_name}' created ({data.frequency})")
        return profile_doc | {"id": profile_id}

    async def get_profile(self, profile_id: str) -> Dict[str, Any]:
        profile = await self.profile_repo.find_by_id(profile_id)
        if not profile:
            raise NotFoundError("Recurring profile", profile_id)
        return profile

    async def list_profiles(self, status: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        query = {"status": status} if status else {}
        return await self.profile_repo.find_all(query, skip=skip, limit=limit, sort=[("next_invoice_date", 1)])

    async def update_profile(self, profile_id: str, data: RecurringProfileUpdate) -> Dict[str, Any]:
        await self.get_profile(profile_id)
        changes = data.model_dump(mode="json", exclude_unset=True)
        if changes:
            await self.profile_repo.update(profile_id, changes)
        return await self.get_profile(profile_id)

    async def delete_profile(self, profile_id: str) -> bool:
        if not await self.profile_repo.delete(profile_id):
            raise NotFoundError("Recurring profile", profile_id)
        return True

    async def _raise_invoice(self, profile: Dict[str, Any], on: date, sequence: int) -> str:
        invoice_doc = {
            "invoice_number": generate_recurring_invoice_number(sequence, on),
            "mode": "recurring",
            "recurring_profile_id": profile["id"],
            "customer_id": profile.get("customer_id"),
            "customer_name": profile.get("customer_name"),
            "invoice_date": on.isoformat(),
            "due_date": (on + timedelta(days=RECURRING_DUE_DAYS)).isoformat(),
            "currency": profile.get("currency", "INR"),
            "cgst_percent": profile.get("cgst_percent"),
            "sgst_percent": profile.get("sgst_percent"),
            "igst_percent": profile.get("igst_percent"),
            "apply_cgst": profile.get("apply_cgst", True),
            "apply_sgst": profile.get("apply_sgst", True),
            "apply_igst": profile.get("apply_igst", False),
            "items": profile.get("items", []),
            "transport_charge": profile.get("transport_charge", 0.0),
            "taxable": profile.get("taxable", 0.0),
            "taxable_amount": profile.get("taxable_amount", 0.0),
            "cgst": profile.get("cgst", 0.0),
            "sgst": profile.get("sgst", 0.0),
            "igst": profile.get("igst", 0.0),
            "total": profile.get("total", 0.0),
            "status": INVOICE_STATUS_GENERATED,
            "payment_status": PaymentStatus.UNPAID.value,
            "paid_amount": 0.0,
            "balance": profile.get("total", 0.0),
            "notes": profile.get("notes"),
            "created_by": "scheduler"
        }
        return await self.invoice_repo.create(invoice_doc)

    @log_function_call(logger)
    async def process_due_profiles(self, on: Optional[date] = None) -> Dict[str, Any]:
        """
        Raise invoices for every Active profile due on or before a date.

        Profiles past their end date are marked Expired instead.

        Args:
            on: Processing date (defaults to today)

        Returns:
            Dict with processed, invoices_created, expired and invoice_ids
        """
        run_date = on or today()
        due = await self.profile_repo.find_due(run_date.isoformat())

        invoice_ids, expired = [], 0
        base_sequence = int(time.time() * 1000)
        for index, profile in enumerate(due):
            end_date = profile.get("end_date")
            if end_date and parse_date(end_date) < run_date:
                await self.profile_repo.update(profile["id"], {"status": RecurringStatus.EXPIRED.value})
                expired += 1
                logger.info(f"Recurring profile '{profile.get('profile_name')}' expired")
                continue

            invoice_id = await self._raise_invoice(profile, run_date, base_sequence + index)
            await self.profile_repo.push(profile["id"], "generated_invoice_ids", invoice_id)

            advanced = next_invoice_date(
                parse_date(profile["next_invoice_date"]),
                profile.get("frequency", "monthly"),
                profile.get("custom_days")
            )
            await self.profile_repo.update(profile["id"], {
                "next_invoice_date": to_date_str(advanced),
                "last_invoice_date": run_date.isoformat()
            })
            invoice_ids.append(invoice_id)

        logger.info(f"Recurring invoices: {len(invoice_ids)} created, {expired} profiles expired")
        return {
            "processed": len(due),
            "invoices_created": len(invoice_ids),
            "expired": expired,
            "invoice_ids": invoice_ids
        }
