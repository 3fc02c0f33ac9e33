"""
Payments received service.
Customer receipts allocated across open invoices.
"""
from typing import List, Dict, Any, Optional
import logging

from texawave.repositories.invoice_repository import InvoiceRepository, PaymentReceivedRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.exceptions import NotFoundError, ValidationError
from texawave.models.payment import PaymentReceivedCreate
from texawave.services.business_rules import PAYABLE_INVOICE_STATUSES
from texawave.services.invoice_service import invoice_balance, payment_update
from texawave.utils.numbering import generate_document_number
from texawave.utils.dates import today

logger = logging.getLogger(__name__)


class PaymentReceivedService:
    """Service for customer payments."""

    def __init__(
        self,
        payment_repo: PaymentReceivedRepository,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository
    ):
        self.payment_repo = payment_repo
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo

    async def open_invoices(self, customer_id: str) -> List[Dict[str, Any]]:
        """Invoices of a customer that can receive an allocation."""
        invoices = await self.invoice_repo.find_payable(customer_id, sorted(PAYABLE_INVOICE_STATUSES))
        for invoice in invoices:
            invoice["balance"] = invoice_balance(invoice)
        return [i for i in invoices if i["balance"] > 0]

    async def record_payment(self, data: PaymentReceivedCreate, user_id: str) -> Dict[str, Any]:
        """
        Record a customer payment and apply its allocations.

        Allocations to invoices that are not payable are skipped; each is
        capped at the invoice balance. Whatever is left after allocations
        and bank charges is kept as excess.

        Raises:
            ValidationError: If amount is not positive, or allocations exceed
                the amount net of bank charges
            NotFoundError: If customer not found
        """
        if data.amount <= 0:
            raise ValidationError("Payment amount must be greater than 0", details={"amount": data.amount})

        available = round(data.amount - data.bank_charges, 2)
        requested = round(sum(a.amount for a in data.allocations if a.amount > 0), 2)
        if requested > available:
            raise ValidationError(
                "Allocations exceed the amount received net of bank charges",
                details={"allocated": requested, "available": available}
            )

        customer = await self.customer_repo.find_by_id(data.customer_id)
        if not customer:
            raise NotFoundError("Customer", data.customer_id)

        applied = []
        for allocation in data.allocations:
            if allocation.amount <= 0:
                continue
            invoice = await self.invoice_repo.find_by_id(allocation.invoice_id)
            if not invoice or invoice.get("customer_id") != customer["id"]:
                logger.warning(f"Skipping allocation to unknown invoice {allocation.invoice_id}")
                continue
            if invoice.get("payment_status") not in PAYABLE_INVOICE_STATUSES:
                logger.warning(f"Skipping allocation to {invoice.get('invoice_number')}: {invoice.get('payment_status')}")
                continue

            amount = round(min(allocation.amount, invoice_balance(invoice)), 2)
            if amount <= 0:
                continue

            await self.invoice_repo.update(invoice["id"], payment_update(invoice, amount))
            applied.append({
                "invoice_id": invoice["id"],
                "invoice_number": invoice.get("invoice_number"),
                "amount": amount
            })

        allocated = round(sum(a["amount"] for a in applied), 2)
        excess = round(max(0.0, data.amount - allocated - data.bank_charges), 2)

        payment_date = data.payment_date or today()
        count = await self.payment_repo.count()

        payment_doc = {
            "payment_number": generate_document_number("payment_received", count, payment_date),
            "customer_id": customer["id"],
            "customer_name": customer.get("name"),
            "amount": data.amount,
            "bank_charges": data.bank_charges,
            "payment_date": payment_date.isoformat(),
            "payment_mode": data.payment_mode,
            "reference": data.reference,
            "allocations": applied,
            "allocated_amount": allocated,
            "excess_amount": excess,
            "notes": data.notes,
            "created_by": user_id
        }

        payment_id = await self.payment_repo.create(payment_doc)
        logger.info(
            f"✅ Payment {payment_doc['payment_number']} from {customer.get('name')}: "
            f"{data.amount} allocated={allocated} excess={excess}"
        )
        return payment_doc | {"id": payment_id}

    async def get_payment(self, payment_id: str) -> Dict[str, Any]:
        payment = await self.payment_repo.find_by_id(payment_id)
        if not payment:
            raise NotFoundError("Payment", payment_id)
        return payment

    async def list_payments(self, customer_id: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        return await self.payment_repo.list_payments(customer_id, skip, limit)
