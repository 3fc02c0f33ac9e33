"""
Purchases router.
Vendor bills and payments made, mounted as two routers.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.purchase_repository import BillRepository, PaymentMadeRepository
from texawave.repositories.contact_repository import VendorRepository
from texawave.services.purchase_service import PurchaseService
from texawave.models.bill import BillCreate
from texawave.models.payment import PaymentMadeCreate
from texawave.utils.dependencies import get_current_user, get_current_admin_user, pagination_params

logger = logging.getLogger(__name__)

bills_router = APIRouter()
payments_made_router = APIRouter()


async def get_purchase_service() -> PurchaseService:
    """Get purchase service with injected dependencies."""
    db = Database.get_db()
    return PurchaseService(
        BillRepository(db[Collections.BILLS]),
        PaymentMadeRepository(db[Collections.PAYMENTS_MADE]),
        VendorRepository(db[Collections.VENDORS])
    )


# ---- Bills ----

@bills_router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Record vendor bill"
)
async def create_bill(
    data: BillCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service)
) -> Dict[str, Any]:
    """
    Record a bill.

    **Request Body:**
    - **vendor_id**: Vendor ID
    - **items**: Lines with qty, rate and tax_percent
    - **paid_amount**: Amount already paid

    **Returns:**
    - Bill with number BILL-YY-NNNN and status Open, Partially Paid or Paid
    """
    return await service.create_bill(data, current_user["user_id"])


@bills_router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List bills"
)
async def list_bills(
    vendor_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service)
) -> List[Dict[str, Any]]:
    return await service.list_bills(vendor_id, status_filter, pagination["skip"], pagination["limit"])


@bills_router.get(
    "/{bill_id}",
    response_model=Dict[str, Any],
    summary="Get bill"
)
async def get_bill(
    bill_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service)
) -> Dict[str, Any]:
    return await service.get_bill(bill_id)


@bills_router.delete(
    "/{bill_id}",
    summary="Delete bill (Admin only)"
)
async def delete_bill(
    bill_id: str = Path(...),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: PurchaseService = Depends(get_purchase_service)
) -> Dict[str, str]:
    await service.delete_bill(bill_id)
    return {"message": "Bill deleted"}


# ---- Payments made ----

@payments_made_router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Record payment made"
)
async def record_payment_made(
    data: PaymentMadeCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service)
) -> Dict[str, Any]:
    """
    Pay a vendor bill.

    The bill's paid amount grows by the payment (capped at its balance)
    and its status is refreshed.

    **Raises:**
    - 400: Amount not positive
    - 422: Bill already paid or belongs to another vendor
    """
    return await service.record_payment(data, current_user["user_id"])


@payments_made_router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List payments made"
)
async def list_payments_made(
    vendor_id: Optional[str] = Query(None),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: PurchaseService = Depends(get_purchase_service)
) -> List[Dict[str, Any]]:
    return await service.list_payments(vendor_id, pagination["skip"], pagination["limit"])
