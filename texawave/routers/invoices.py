"""
Invoices router.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.invoice_repository import InvoiceRepository
from texawave.repositories.sales_order_repository import SalesOrderRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.services.invoice_service import InvoiceService
from texawave.models.invoice import InvoiceCreate
from texawave.utils.dependencies import (
    get_current_user,
    get_current_admin_user,
    pagination_params,
    date_range_params
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_invoice_service() -> InvoiceService:
    """Get invoice service with injected dependencies."""
    db = Database.get_db()
    return InvoiceService(
        InvoiceRepository(db[Collections.INVOICES]),
        CustomerRepository(db[Collections.CUSTOMERS]),
        SalesOrderRepository(db[Collections.SALES_ORDERS])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create invoice",
    description="Create a GST invoice, directly or from a sales order"
)
async def create_invoice(
    data: InvoiceCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
) -> Dict[str, Any]:
    """
    Create an invoice.

    **Request Body:**
    - **mode**: "direct" or "order" (requires order_id)
    - **customer_id**: Customer ID
    - **items**: Lines; those with qty 0 are dropped
    - **cgst/sgst/igst_percent** and **apply_*** flags: taxes apply to INR only
    - **transport_charge_type**: "fixed" or "percent"

    **Returns:**
    - Invoice with number INV-YY-NNNN, totals and due date

    **Raises:**
    - 400: No line with quantity
    - 422: Order not ready to be invoiced or already invoiced
    """
    return await service.create_invoice(data, current_user["user_id"])


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List invoices"
)
async def list_invoices(
    customer_id: Optional[str] = Query(None),
    payment_status: Optional[str] = Query(None, description="Unpaid, Partial, Paid"),
    dates: Dict[str, Optional[str]] = Depends(date_range_params),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
) -> List[Dict[str, Any]]:
    return await service.list_invoices(
        customer_id,
        payment_status,
        dates["date_from"],
        dates["date_to"],
        pagination["skip"],
        pagination["limit"]
    )


@router.get(
    "/{invoice_id}",
    response_model=Dict[str, Any],
    summary="Get invoice"
)
async def get_invoice(
    invoice_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
) -> Dict[str, Any]:
    return await service.get_invoice(invoice_id)


@router.delete(
    "/{invoice_id}",
    summary="Delete invoice (Admin only)",
    description="Only invoices without payments can be deleted"
)
async def delete_invoice(
    invoice_id: str = Path(...),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: InvoiceService = Depends(get_invoice_service)
) -> Dict[str, str]:
    logger.warning(f"Admin {admin_user['user_id']} deleting invoice: {invoice_id}")
    await service.delete_invoice(invoice_id)
    return {"message": "Invoice deleted"}
