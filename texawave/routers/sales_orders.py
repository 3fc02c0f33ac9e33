"""
Sales orders router.
Order entry, confirmation into production jobs, job/QC updates and
manual post-QC transitions.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.sales_order_repository import (
    SalesOrderRepository,
    ProductionJobRepository,
    InspectionRepository
)
from texawave.repositories.quotation_repository import QuotationRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.services.sales_order_service import SalesOrderService
from texawave.models.sales_order import (
    SalesOrderFromQuotation,
    SalesOrderCreate,
    SalesOrderUpdate,
    OrderStatusUpdate,
    JobQCUpdate
)
from texawave.utils.dependencies import get_current_user, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_sales_order_service() -> SalesOrderService:
    """Get sales order service with injected dependencies."""
    db = Database.get_db()
    return SalesOrderService(
        SalesOrderRepository(db[Collections.SALES_ORDERS]),
        ProductionJobRepository(db[Collections.PRODUCTION_JOBS]),
        InspectionRepository(db[Collections.INSPECTIONS]),
        QuotationRepository(db[Collections.QUOTATIONS]),
        CustomerRepository(db[Collections.CUSTOMERS])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create sales order",
    description="Create a sales order from manually entered lines"
)
async def create_sales_order(
    data: SalesOrderCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    """
    Create a manual sales order.

    **Request Body:**
    - **customer_id**: Customer ID
    - **items**: At least one line; amount defaults to qty × rate
    - **currency**: CGST/SGST apply to INR orders only
    - **cgst_percent / sgst_percent**: Default 9 each
    - **transport_percent**: Percentage of subtotal

    **Returns:**
    - Order with number SO-NNNN and status Pending
    """
    return await service.create_manual(data, current_user["user_id"])


@router.post(
    "/from-quotation",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create sales order from quotation"
)
async def create_from_quotation(
    data: SalesOrderFromQuotation,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    """
    Convert an accepted quotation.

    **Raises:**
    - 404: Quotation not found
    - 422: Quotation not Accepted or already converted
    """
    return await service.create_from_quotation(data, current_user["user_id"])


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List sales orders",
    description="Orders with derived status and progress"
)
async def list_sales_orders(
    status_filter: Optional[str] = Query(None, alias="status", description="Derived status"),
    customer_id: Optional[str] = Query(None),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> List[Dict[str, Any]]:
    return await service.list_orders(status_filter, customer_id, pagination["skip"], pagination["limit"])


@router.get(
    "/{order_id}",
    response_model=Dict[str, Any],
    summary="Get sales order",
    description="Order detail with jobs, inspections and production summary"
)
async def get_sales_order(
    order_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    return await service.get_order(order_id)


@router.put(
    "/{order_id}",
    response_model=Dict[str, Any],
    summary="Update sales order",
    description="Only delivery date and instructions can change"
)
async def update_sales_order(
    order_id: str = Path(...),
    data: SalesOrderUpdate = ...,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    return await service.update_order(order_id, data)


@router.delete(
    "/{order_id}",
    response_model=Dict[str, Any],
    summary="Delete sales order",
    description="Deletes the order with its production jobs and inspections"
)
async def delete_sales_order(
    order_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    logger.warning(f"User {current_user['user_id']} deleting sales order: {order_id}")
    result = await service.delete_order(order_id)
    return {"message": "Sales order deleted", **result}


@router.post(
    "/{order_id}/confirm",
    response_model=Dict[str, Any],
    summary="Confirm sales order",
    description="Confirm a Pending order and create one production job per line"
)
async def confirm_sales_order(
    order_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    """
    Confirm an order.

    **Raises:**
    - 422: Order is not Pending or has no items
    """
    return await service.confirm_order(order_id, current_user["user_id"])


@router.put(
    "/{order_id}/jobs/{job_id}/qc",
    response_model=Dict[str, Any],
    summary="Save job and QC",
    description="Update a production job together with its inspection"
)
async def save_job_and_qc(
    data: JobQCUpdate,
    order_id: str = Path(...),
    job_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    """
    Save production and QC of one job.

    **Request Body:**
    - **job_status**: notstarted, running, paused or completed
    - **qc_status**: pending, in-progress or completed
    - **ok_qty / not_ok_qty**: Together at most the job quantity

    The order production status, QC status and derived status are
    recomputed.

    **Raises:**
    - 400: Inspected quantity exceeds the job quantity
    - 404: Job does not belong to the order
    """
    return await service.save_job_and_qc(order_id, job_id, data, current_user["user_id"])


@router.patch(
    "/{order_id}/status",
    response_model=Dict[str, Any],
    summary="Change order status",
    description="QC Completed → Ready for Dispatch → Delivered, Invoice Generated → Closed"
)
async def update_order_status(
    data: OrderStatusUpdate,
    order_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    return await service.update_status(order_id, data.status, current_user["user_id"])


@router.get(
    "/{order_id}/production",
    response_model=Dict[str, Any],
    summary="Production summary"
)
async def get_production_summary(
    order_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: SalesOrderService = Depends(get_sales_order_service)
) -> Dict[str, Any]:
    return await service.get_production_summary(order_id)
