"""
Purchase service.
Vendor bills and the payments made against them.
"""
from typing import List, Dict, Any, Optional
import logging

from texawave.repositories.purchase_repository import BillRepository, PaymentMadeRepository
from texawave.repositories.contact_repository import VendorRepository
from texawave.exceptions import NotFoundError, ValidationError, BusinessLogicError
from texawave.models.bill import BillCreate
from texawave.models.payment import PaymentMadeCreate
from texawave.services.business_rules import BillStatus
from texawave.services.credit_note_service import calculate_tax_lines
from texawave.utils.numbering import generate_document_number
from texawave.utils.dates import today, to_date_str

logger = logging.getLogger(__name__)


def bill_status(total: float, paid: float) -> str:
    if paid >= total:
        return BillStatus.PAID.value
    if paid > 0:
        return BillStatus.PARTIALLY_PAID.value
    return BillStatus.OPEN.value


class PurchaseService:
    """Service for vendor bills and payments made."""

    def __init__(
        self,
        bill_repo: BillRepository,
        payment_repo: PaymentMadeRepository,
        vendor_repo: VendorRepository
    ):
        self.bill_repo = bill_repo
        self.payment_repo = payment_repo
        self.vendor_repo = vendor_repo

    async def _get_vendor(self, vendor_id: str) -> Dict[str, Any]:
        vendor = await self.vendor_repo.find_by_id(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    # ---- Bills ----

    async def create_bill(self, data: BillCreate, user_id: str) -> Dict[str, Any]:
        """
        Record a vendor bill.

        Raises:
            NotFoundError: If vendor not found
        """
        vendor = await self._get_vendor(data.vendor_id)

        bill_date = data.bill_date or today()
        totals = calculate_tax_lines([item.model_dump() for item in data.items])
        paid = round(min(data.paid_amount, totals["total"]), 2)
        count = await self.bill_repo.count()

        bill_doc = {
            "bill_number": generate_document_number("bill", count, bill_date),
            "vendor_bill_number": data.vendor_bill_number,
            "vendor_id": vendor["id"],
            "vendor_name": vendor.get("name"),
            "bill_date": bill_date.isoformat(),
            "due_date": to_date_str(data.due_date),
            **totals,
            "paid_amount": paid,
            "balance": round(totals["total"] - paid, 2),
            "status": bill_status(totals["total"], paid),
            "notes": data.notes,
            "created_by": user_id
        }

        bill_id = await self.bill_repo.create(bill_doc)
        logger.info(f"Bill {bill_doc['bill_number']} from {vendor.get('name')}: {totals['total']}")
        return bill_doc | {"id": bill_id}

    async def get_bill(self, bill_id: str) -> Dict[str, Any]:
        bill = await self.bill_repo.find_by_id(bill_id)
        if not bill:
            raise NotFoundError("Bill", bill_id)
        return bill

    async def list_bills(
        self,
        vendor_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        return await self.bill_repo.list_bills(vendor_id, status, skip, limit)

    async def delete_bill(self, bill_id: str) -> bool:
        bill = await self.get_bill(bill_id)
        if await self.payment_repo.find_by_bill(bill_id):
            raise BusinessLogicError("Cannot delete a bill with payments recorded")
        await self.bill_repo.delete(bill_id)
        logger.info(f"Bill deleted: {bill.get('bill_number')}")
        return True

    # ---- Payments made ----

    async def record_payment(self, data: PaymentMadeCreate, user_id: str) -> Dict[str, Any]:
        """
        Pay a vendor bill.

        The applied amount is capped at the bill balance and the bill
        status is refreshed.

        Raises:
            ValidationError: If amount is not positive
            NotFoundError: If vendor or bill not found
            BusinessLogicError: If the bill belongs to another vendor or is already paid
        """
        if data.amount <= 0:
            raise ValidationError("Payment amount must be greater than 0", details={"amount": data.amount})

        vendor = await self._get_vendor(data.vendor_id)
        bill = await self.get_bill(data.bill_id)
        if bill.get("vendor_id") != vendor["id"]:
            raise BusinessLogicError("Bill belongs to a different vendor")

        total = float(bill.get("total", 0) or 0)
        paid = float(bill.get("paid_amount", 0) or 0)
        balance = round(max(0.0, total - paid), 2)
        if balance <= 0:
            raise BusinessLogicError("Bill is already paid", details={"bill_id": data.bill_id})

        applied = round(min(data.amount, balance), 2)
        new_paid = round(paid + applied, 2)
        await self.bill_repo.update(bill["id"], {
            "paid_amount": new_paid,
            "balance": round(total - new_paid, 2),
            "status": bill_status(total, new_paid)
        })

        payment_date = data.payment_date or today()
        payment_doc = {
            "vendor_id": vendor["id"],
            "vendor_name": vendor.get("name"),
            "bill_id": bill["id"],
            "bill_number": bill.get("bill_number"),
            "amount": data.amount,
            "applied_amount": applied,
            "payment_date": payment_date.isoformat(),
            "payment_mode": data.payment_mode or "Bank Transfer",
            "reference": data.reference,
            "notes": data.notes,
            "created_by": user_id
        }

        payment_id = await self.payment_repo.create(payment_doc)
        logger.info(f"Payment {applied} made to {vendor.get('name')} for {bill.get('bill_number')}")
        return payment_doc | {"id": payment_id}

    async def list_payments(self, vendor_id: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        return await self.payment_repo.list_payments(vendor_id, skip, limit)
