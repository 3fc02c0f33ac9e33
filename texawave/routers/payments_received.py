"""
Payments received router.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.invoice_repository import InvoiceRepository, PaymentReceivedRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.services.payment_service import PaymentReceivedService
from texawave.models.payment import PaymentReceivedCreate
from texawave.utils.dependencies import get_current_user, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_payment_service() -> PaymentReceivedService:
    """Get payment service with injected dependencies."""
    db = Database.get_db()
    return PaymentReceivedService(
        PaymentReceivedRepository(db[Collections.PAYMENTS_RECEIVED]),
        InvoiceRepository(db[Collections.INVOICES]),
        CustomerRepository(db[Collections.CUSTOMERS])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Record payment received"
)
async def record_payment(
    data: PaymentReceivedCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PaymentReceivedService = Depends(get_payment_service)
) -> Dict[str, Any]:
    """
    Record a customer payment.

    **Request Body:**
    - **customer_id**: Customer ID
    - **amount**: Amount received (> 0)
    - **bank_charges**: Charges deducted by the bank
    - **allocations**: invoice_id / amount pairs, each capped at the invoice balance

    **Returns:**
    - Payment with number RCPT-YY-NNNN, applied allocations and excess amount
    """
    return await service.record_payment(data, current_user["user_id"])


@router.get(
    "/open-invoices/{customer_id}",
    response_model=List[Dict[str, Any]],
    summary="Open invoices of a customer"
)
async def list_open_invoices(
    customer_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PaymentReceivedService = Depends(get_payment_service)
) -> List[Dict[str, Any]]:
    return await service.open_invoices(customer_id)


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List payments received"
)
async def list_payments(
    customer_id: Optional[str] = Query(None),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PaymentReceivedService = Depends(get_payment_service)
) -> List[Dict[str, Any]]:
    return await service.list_payments(customer_id, pagination["skip"], pagination["limit"])


@router.get(
    "/{payment_id}",
    response_model=Dict[str, Any],
    summary="Get payment received"
)
async def get_payment(
    payment_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PaymentReceivedService = Depends(get_payment_service)
) -> Dict[str, Any]:
    return await service.get_payment(payment_id)
