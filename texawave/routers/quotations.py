"""
Quotations router.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.quotation_repository import QuotationRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.services.quotation_service import QuotationService
from texawave.models.quotation import QuotationCreate, QuotationStatusUpdate
from texawave.utils.dependencies import get_current_user, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_quotation_service() -> QuotationService:
    """Get quotation service with injected dependencies."""
    db = Database.get_db()
    return QuotationService(
        QuotationRepository(db[Collections.QUOTATIONS]),
        CustomerRepository(db[Collections.CUSTOMERS])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create quotation"
)
async def create_quotation(
    data: QuotationCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service)
) -> Dict[str, Any]:
    """
    Create a Draft quotation.

    **Request Body:**
    - **customer_id**: Customer ID
    - **items**: Lines with product, qty and rate
    - **delivery_term**: Promised delivery date, used by the sales order
    - **cgst_percent / sgst_percent**: Applied on INR quotations only
    - **transport_percent**: Percentage of subtotal

    **Returns:**
    - Quotation with number SQFY-YY-NNNN and totals
    """
    return await service.create_quotation(data, current_user["user_id"])


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List quotations"
)
async def list_quotations(
    status_filter: Optional[str] = Query(None, alias="status"),
    customer_id: Optional[str] = Query(None),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service)
) -> List[Dict[str, Any]]:
    return await service.list_quotations(status_filter, customer_id, pagination["skip"], pagination["limit"])


@router.get(
    "/{quotation_id}",
    response_model=Dict[str, Any],
    summary="Get quotation"
)
async def get_quotation(
    quotation_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service)
) -> Dict[str, Any]:
    return await service.get_quotation(quotation_id)


@router.patch(
    "/{quotation_id}/status",
    response_model=Dict[str, Any],
    summary="Change quotation status",
    description="Send, accept or reject; Accepted and Rejected are final"
)
async def update_quotation_status(
    data: QuotationStatusUpdate,
    quotation_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: QuotationService = Depends(get_quotation_service)
) -> Dict[str, Any]:
    return await service.update_status(quotation_id, data.status, current_user["user_id"])
