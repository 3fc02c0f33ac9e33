"""
Recurring invoices router.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.invoice_repository import InvoiceRepository, RecurringProfileRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.services.recurring_invoice_service import RecurringInvoiceService
from texawave.models.recurring_invoice import RecurringProfileCreate, RecurringProfileUpdate
from texawave.utils.dependencies import (
    get_current_user,
    get_current_admin_user,
    pagination_params,
    require_feature
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_feature("recurring_invoices"))])


async def get_recurring_service() -> RecurringInvoiceService:
    """Get recurring invoice service with injected dependencies."""
    db = Database.get_db()
    return RecurringInvoiceService(
        RecurringProfileRepository(db[Collections.RECURRING_PROFILES]),
        InvoiceRepository(db[Collections.INVOICES]),
        CustomerRepository(db[Collections.CUSTOMERS])
    )


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create recurring profile"
)
async def create_profile(
    data: RecurringProfileCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RecurringInvoiceService = Depends(get_recurring_service)
) -> Dict[str, Any]:
    """
    Create a recurring invoice profile.

    **Request Body:**
    - **profile_name**: Display name
    - **customer_id**: Customer ID
    - **frequency**: weekly, monthly, quarterly, half-yearly, yearly or custom
    - **custom_days**: Period for custom profiles (default 30)
    - **start_date**: First invoice date
    - **end_date**: Optional; the profile expires after it
    """
    return await service.create_profile(data, current_user["user_id"])


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List recurring profiles"
)
async def list_profiles(
    status_filter: Optional[str] = Query(None, alias="status"),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RecurringInvoiceService = Depends(get_recurring_service)
) -> List[Dict[str, Any]]:
    return await service.list_profiles(status_filter, pagination["skip"], pagination["limit"])


@router.post(
    "/process",
    response_model=Dict[str, Any],
    summary="Process due profiles (Admin only)",
    description="Raise invoices for every profile due today; also runs daily from the scheduler"
)
async def process_due_profiles(
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: RecurringInvoiceService = Depends(get_recurring_service)
) -> Dict[str, Any]:
    logger.info(f"Manual recurring invoice run by {admin_user['user_id']}")
    return await service.process_due_profiles()


@router.get(
    "/{profile_id}",
    response_model=Dict[str, Any],
    summary="Get recurring profile"
)
async def get_profile(
    profile_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RecurringInvoiceService = Depends(get_recurring_service)
) -> Dict[str, Any]:
    return await service.get_profile(profile_id)


@router.put(
    "/{profile_id}",
    response_model=Dict[str, Any],
    summary="Update recurring profile",
    description="Rename, pause/resume, change frequency or end date"
)
async def update_profile(
    profile_id: str = Path(...),
    data: RecurringProfileUpdate = ...,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RecurringInvoiceService = Depends(get_recurring_service)
) -> Dict[str, Any]:
    return await service.update_profile(profile_id, data)


@router.delete(
    "/{profile_id}",
    summary="Delete recurring profile"
)
async def delete_profile(
    profile_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: RecurringInvoiceService = Depends(get_recurring_service)
) -> Dict[str, str]:
    await service.delete_profile(profile_id)
    return {"message": "Recurring profile deleted"}
