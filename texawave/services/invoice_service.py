"""
Invoice service.

GST invoices raised directly or from a sales order. The payment helpers
at module level are shared by credit notes and customer payments.
"""
from typing import List, Dict, Any, Optional
from datetime import date, timedelta
import logging

from texawave.config import settings
from texawave.repositories.invoice_repository import InvoiceRepository
from texawave.repositories.sales_order_repository import SalesOrderRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.exceptions import NotFoundError, ValidationError, BusinessLogicError
from texawave.models.invoice import InvoiceCreate
from texawave.services.business_rules import (
    BusinessRules,
    OrderStatus,
    OrderInvoiceStatus,
    PaymentStatus
)
from texawave.utils.gst_calculator import calculate_invoice_totals
from texawave.utils.numbering import generate_document_number
from texawave.utils.dates import today

logger = logging.getLogger(__name__)

INVOICE_STATUS_GENERATED = "Generated"


def invoice_balance(invoice: Dict[str, Any]) -> float:
    """Amount still owed on an invoice, never negative."""
    total = float(invoice.get("total", 0) or 0)
    paid = float(invoice.get("paid_amount", 0) or 0)
    return round(max(0.0, total - paid), 2)


def payment_update(invoice: Dict[str, Any], amount: float) -> Dict[str, Any]:
    """
    Fields to set on an invoice after receiving an amount.

    Returns:
        Dict with paid_amount, balance and payment_status
    """
    total = float(invoice.get("total", 0) or 0)
    paid = round(float(invoice.get("paid_amount", 0) or 0) + amount, 2)
    status = PaymentStatus.PAID.value if paid >= total else PaymentStatus.PARTIAL.value
    return {
        "paid_amount": paid,
        "balance": round(max(0.0, total - paid), 2),
        "payment_status": status
    }


def tax_settings(source: Any) -> Dict[str, Dict[str, Any]]:
    """Rates and apply flags from an invoice payload or recurring profile."""
    get = source.get if isinstance(source, dict) else lambda key, default=None: getattr(source, key, default)
    return {
        "rates": {
            "cgst": get("cgst_percent", settings.DEFAULT_CGST_PERCENT),
            "sgst": get("sgst_percent", settings.DEFAULT_SGST_PERCENT),
            "igst": get("igst_percent", settings.DEFAULT_IGST_PERCENT),
        },
        "flags": {
            "cgst": get("apply_cgst", True),
            "sgst": get("apply_sgst", True),
            "igst": get("apply_igst", False),
        }
    }


class InvoiceService:
    """Service for sales invoices."""

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository,
        order_repo: SalesOrderRepository
    ):
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo
        self.order_repo = order_repo

    async def _next_invoice_number(self, invoice_date: date) -> str:
        count = await self.invoice_repo.count()
        number = generate_document_number("invoice", count, invoice_date)
        while await self.invoice_repo.exists({"invoice_number": number}):
            count += 1
            number = generate_document_number("invoice", count, invoice_date)
        return number

    async def create_invoice(self, data: InvoiceCreate, user_id: str) -> Dict[str, Any]:
        """
        Create an invoice with GST totals.

        Lines with zero quantity are dropped. In "order" mode the linked
        sales order is marked invoiced.

        Returns:
            The created invoice

        Raises:
            NotFoundError: If customer or order not found
            ValidationError: If no line has a quantity
            BusinessLogicError: If the order cannot be invoiced
        """
        customer = await self.customer_repo.find_by_id(data.customer_id)
        if not customer:
            raise NotFoundError("Customer", data.customer_id)

        items = [item.model_dump() for item in data.items if item.qty != 0]
        if not items:
            raise ValidationError("Add at least one item with quantity")

        order = None
        if data.mode == "order":
            order = await self.order_repo.find_by_id(data.order_id)
            if not order:
                raise NotFoundError("Sales order", data.order_id)
            check = BusinessRules.can_invoice_order(order)
            if not check.is_valid:
                raise BusinessLogicError(check.errors[0], details={"order_id": data.order_id})

        taxes = tax_settings(data)
        totals = calculate_invoice_totals(
            items,
            data.currency,
            taxes["rates"],
            taxes["flags"],
            data.transport_charge_type,
            data.transport_charge,
            data.transport_charge_percent
        )

        invoice_date = data.invoice_date or today()
        due_date = data.due_date or invoice_date + timedelta(days=settings.INVOICE_DUE_DAYS)
        invoice_doc = {
            "invoice_number": await self._next_invoice_number(invoice_date),
            "mode": data.mode,
            "order_id": data.order_id if order else None,
            "so_number": order.get("so_number") if order else None,
            "customer_id": customer["id"],
            "customer_name": customer.get("name"),
            "customer_gstin": customer.get("gstin"),
            "invoice_date": invoice_date.isoformat(),
            "due_date": due_date.isoformat(),
            "currency": data.currency,
            "cgst_percent": taxes["rates"]["cgst"],
            "sgst_percent": taxes["rates"]["sgst"],
            "igst_percent": taxes["rates"]["igst"],
            "apply_cgst": data.apply_cgst,
            "apply_sgst": data.apply_sgst,
            "apply_igst": data.apply_igst,
            "transport_charge_type": data.transport_charge_type,
            "transport_mode": data.transport_mode,
            "transporter_name": data.transporter_name,
            **totals,
            "status": INVOICE_STATUS_GENERATED,
            "payment_status": PaymentStatus.UNPAID.value,
            "paid_amount": 0.0,
            "balance": totals["total"],
            "notes": data.notes,
            "created_by": user_id
        }

        invoice_id = await self.invoice_repo.create(invoice_doc)

        if order:
            await self.order_repo.update(order["id"], {
                "invoice_status": OrderInvoiceStatus.GENERATED.value,
                "status": OrderStatus.INVOICE_GENERATED.value,
                "invoice_id": invoice_id,
                "invoice_number": invoice_doc["invoice_number"]
            })

        logger.info(f"✅ Invoice {invoice_doc['invoice_number']} created: total={totals['total']}")
        return invoice_doc | {"id": invoice_id}

    async def get_invoice(self, invoice_id: str) -> Dict[str, Any]:
        invoice = await self.invoice_repo.find_by_id(invoice_id)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        invoice["balance"] = invoice_balance(invoice)
        return invoice

    async def list_invoices(
        self,
        customer_id: Optional[str] = None,
        payment_status: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        invoices = await self.invoice_repo.list_invoices(
            customer_id, payment_status, date_from, date_to, skip, limit
        )
        for invoice in invoices:
            invoice["balance"] = invoice_balance(invoice)
        return invoices

    async def delete_invoice(self, invoice_id: str) -> bool:
        """
        Delete an invoice without payments.

        Raises:
            BusinessLogicError: If payments were recorded
        """
        invoice = await self.get_invoice(invoice_id)
        check = BusinessRules.can_delete_invoice(invoice)
        if not check.is_valid:
            raise BusinessLogicError(check.errors[0], details={"invoice_id": invoice_id})

        await self.invoice_repo.delete(invoice_id)
        logger.info(f"Invoice deleted: {invoice.get('invoice_number')}")
        return True
