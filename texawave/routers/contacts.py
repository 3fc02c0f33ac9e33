"""
Contacts router.
Customers and vendors share the same endpoints; two routers are built
from one factory and mounted under different prefixes.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional, Callable
import logging

from texawave.database import Database, Collections
from texawave.repositories.contact_repository import CustomerRepository, VendorRepository
from texawave.services.contact_service import ContactService
from texawave.models.contact import ContactCreate, ContactUpdate
from texawave.utils.dependencies import get_current_user, get_current_admin_user, pagination_params

logger = logging.getLogger(__name__)


async def get_customer_service() -> ContactService:
    db = Database.get_db()
    return ContactService(CustomerRepository(db[Collections.CUSTOMERS]), "Customer")


async def get_vendor_service() -> ContactService:
    db = Database.get_db()
    return ContactService(VendorRepository(db[Collections.VENDORS]), "Vendor")


def build_contact_router(resource: str, get_service: Callable) -> APIRouter:
    """Create CRUD endpoints for one contact type."""
    router = APIRouter()

    @router.post(
        "",
        response_model=Dict[str, Any],
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {resource.lower()}"
    )
    async def create_contact(
        data: ContactCreate,
        current_user: Dict[str, Any] = Depends(get_current_user),
        service: ContactService = Depends(get_service)
    ) -> Dict[str, Any]:
        return await service.create_contact(data, current_user["user_id"])

    @router.get(
        "",
        response_model=List[Dict[str, Any]],
        summary=f"List {resource.lower()}s"
    )
    async def list_contacts(
        search: Optional[str] = Query(None, description="Search name, company or GSTIN"),
        pagination: Dict[str, Any] = Depends(pagination_params),
        current_user: Dict[str, Any] = Depends(get_current_user),
        service: ContactService = Depends(get_service)
    ) -> List[Dict[str, Any]]:
        return await service.list_contacts(search, pagination["skip"], pagination["limit"])

    @router.get(
        "/{contact_id}",
        response_model=Dict[str, Any],
        summary=f"Get {resource.lower()}"
    )
    async def get_contact(
        contact_id: str = Path(...),
        current_user: Dict[str, Any] = Depends(get_current_user),
        service: ContactService = Depends(get_service)
    ) -> Dict[str, Any]:
        return await service.get_contact(contact_id)

    @router.put(
        "/{contact_id}",
        response_model=Dict[str, Any],
        summary=f"Update {resource.lower()}"
    )
    async def update_contact(
        contact_id: str = Path(...),
        data: ContactUpdate = ...,
        current_user: Dict[str, Any] = Depends(get_current_user),
        service: ContactService = Depends(get_service)
    ) -> Dict[str, Any]:
        return await service.update_contact(contact_id, data)

    @router.delete(
        "/{contact_id}",
        summary=f"Delete {resource.lower()} (Admin only)"
    )
    async def delete_contact(
        contact_id: str = Path(...),
        admin_user: Dict[str, Any] = Depends(get_current_admin_user),
        service: ContactService = Depends(get_service)
    ) -> Dict[str, str]:
        await service.delete_contact(contact_id)
        return {"message": f"{resource} deleted"}

    return router


customers_router = build_contact_router("Customer", get_customer_service)
vendors_router = build_contact_router("Vendor", get_vendor_service)
