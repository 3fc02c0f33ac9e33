"""
Credit note service.
Credit notes reduce what a customer owes; their balance can be applied
to open invoices.
"""
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

from texawave.repositories.invoice_repository import InvoiceRepository, CreditNoteRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.exceptions import NotFoundError, ValidationError, BusinessLogicError, validate_required_fields
from texawave.models.credit_note import CreditNoteCreate, CreditNoteApply
from texawave.services.business_rules import CreditNoteStatus, CREDIT_NOTE_REASONS
from texawave.services.invoice_service import invoice_balance, payment_update
from texawave.utils.numbering import generate_credit_note_number
from texawave.utils.dates import today

logger = logging.getLogger(__name__)


def calculate_tax_lines(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Totals for lines carrying their own tax percentage.

    Each line amount is qty × rate × (1 + tax%/100). Used by credit
    notes and vendor bills.

    Returns:
        Dict with items, sub_total, tax_amount, total
    """
    lines = []
    sub_total = tax_amount = 0.0
    for item in items:
        qty = float(item.get("qty", 0) or 0)
        rate = float(item.get("rate", 0) or 0)
        tax_percent = float(item.get("tax_percent", 0) or 0)
        base = qty * rate
        tax = base * tax_percent / 100
        sub_total += base
        tax_amount += tax
        lines.append(dict(item) | {"amount": round(base + tax, 2)})

    return {
        "items": lines,
        "sub_total": round(sub_total, 2),
        "tax_amount": round(tax_amount, 2),
        "total": round(sub_total + tax_amount, 2),
    }


class CreditNoteService:
    """Service for customer credit notes."""

    def __init__(
        self,
        credit_note_repo: CreditNoteRepository,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository
    ):
        self.credit_note_repo = credit_note_repo
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo

    async def create_credit_note(self, data: CreditNoteCreate, user_id: str) -> Dict[str, Any]:
        """
        Create an Open credit note.

        Raises:
            ValidationError: If customer or reason is blank, the reason is unknown
                or an item has no description
            NotFoundError: If customer not found
        """
        validate_required_fields(data.model_dump(), ["customer_id", "reason"])
        if data.reason not in CREDIT_NOTE_REASONS:
            raise ValidationError(
                f"Invalid reason: {data.reason}",
                details={"allowed": CREDIT_NOTE_REASONS}
            )
        if any(not item.description.strip() for item in data.items):
            raise ValidationError("Every item needs a description")

        customer = await self.customer_repo.find_by_id(data.customer_id)
        if not customer:
            raise NotFoundError("Customer", data.customer_id)

        invoice_number = None
        if data.invoice_id:
            invoice = await self.invoice_repo.find_by_id(data.invoice_id)
            if not invoice:
                raise NotFoundError("Invoice", data.invoice_id)
            invoice_number = invoice.get("invoice_number")

        note_date = data.credit_note_date or today()
        totals = calculate_tax_lines([item.model_dump() for item in data.items])
        count = await self.credit_note_repo.count()

        note_doc = {
            "credit_note_number": generate_credit_note_number(count, note_date),
            "credit_note_date": note_date.isoformat(),
            "customer_id": customer["id"],
            "customer_name": customer.get("name"),
            "invoice_id": data.invoice_id,
            "invoice_number": invoice_number,
            "reason": data.reason,
            **totals,
            "balance": totals["total"],
            "status": CreditNoteStatus.OPEN.value,
            "applications": [],
            "notes": data.notes,
            "created_by": user_id
        }

        note_id = await self.credit_note_repo.create(note_doc)
        logger.info(f"Credit note {note_doc['credit_note_number']} created: {totals['total']}")
        return note_doc | {"id": note_id}

    async def from_invoice(self, invoice_id: str, reason: str, user_id: str) -> Dict[str, Any]:
        """
        Create a credit note mirroring an invoice's lines.

        Line tax is the sum of the GST percentages applied on the invoice.
        """
        invoice = await self.invoice_repo.find_by_id(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)

        items = []
        for line in invoice.get("items", []):
            tax_percent = 0.0
            for tax in ("cgst", "sgst", "igst"):
                if invoice.get(f"apply_{tax}"):
                    tax_percent += float(line.get(f"{tax}_percent", invoice.get(f"{tax}_percent", 0)) or 0)
            items.append({
                "description": line.get("description") or line.get("product_name") or "Item",
                "qty": line.get("qty", 1),
                "rate": line.get("rate", 0),
                "tax_percent": tax_percent
            })

        data = CreditNoteCreate(
            customer_id=invoice["customer_id"],
            invoice_id=invoice_id,
            reason=reason,
            items=items
        )
        return await self.create_credit_note(data, user_id)

    async def get_credit_note(self, note_id: str) -> Dict[str, Any]:
        note = await self.credit_note_repo.find_by_id(note_id)
        if not note:
            raise NotFoundError("Credit note", note_id)
        return note

    async def list_credit_notes(
        self,
        customer_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        return await self.credit_note_repo.list_credit_notes(customer_id, status, skip, limit)

    async def apply_to_invoice(self, note_id: str, data: CreditNoteApply, user_id: str) -> Dict[str, Any]:
        """
        Apply credit to an invoice of the same customer.

        The amount is capped at both the credit balance and the invoice
        balance. A note whose balance reaches 0 becomes Applied.

        Raises:
            BusinessLogicError: If the note is not open or nothing can be applied
        """
        note = await self.get_credit_note(note_id)
        if note.get("status") != CreditNoteStatus.OPEN.value:
            raise BusinessLogicError(f"Credit note is {note.get('status')}", details={"credit_note_id": note_id})

        invoice = await self.invoice_repo.find_by_id(data.invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", data.invoice_id)
        if invoice.get("customer_id") != note.get("customer_id"):
            raise BusinessLogicError("Invoice belongs to a different customer")

        note_balance = float(note.get("balance", 0) or 0)
        available = min(note_balance, invoice_balance(invoice))
        amount = min(data.amount, available) if data.amount else available
        amount = round(amount, 2)
        if amount <= 0:
            raise BusinessLogicError("Nothing to apply", details={"credit_balance": note_balance})

        await self.invoice_repo.update(invoice["id"], payment_update(invoice, amount))

        new_balance = round(note_balance - amount, 2)
        note_update: Dict[str, Any] = {"balance": new_balance}
        if new_balance <= 0:
            note_update["status"] = CreditNoteStatus.APPLIED.value
        await self.credit_note_repo.update(note_id, note_update)
        await self.credit_note_repo.push(note_id, "applications", {
            "invoice_id": invoice["id"],
            "invoice_number": invoice.get("invoice_number"),
            "amount": amount,
            "applied_at": datetime.utcnow(),
            "applied_by": user_id
        })

        logger.info(f"Credit {note.get('credit_note_number')} applied {amount} to {invoice.get('invoice_number')}")
        return await self.get_credit_note(note_id)

    async def void_credit_note(self, note_id: str) -> Dict[str, Any]:
        note = await self.get_credit_note(note_id)
        if note.get("applications"):
            raise BusinessLogicError("Applied credit notes cannot be voided")
        await self.credit_note_repo.update(note_id, {"status": CreditNoteStatus.VOID.value, "balance": 0.0})
        return await self.get_credit_note(note_id)
