"""
Credit notes router.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.invoice_repository import InvoiceRepository, CreditNoteRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.services.credit_note_service import CreditNoteService
from texawave.services.business_rules import CREDIT_NOTE_REASONS
from texawave.models.credit_note import CreditNoteCreate, CreditNoteApply, CreditNoteFromInvoice
from texawave.utils.dependencies import get_current_user, get_current_admin_user, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_credit_note_service() -> CreditNoteService:
    """Get credit note service with injected dependencies."""
    db = Database.get_db()
    return CreditNoteService(
        CreditNoteRepository(db[Collections.CREDIT_NOTES]),
        InvoiceRepository(db[Collections.INVOICES]),
        CustomerRepository(db[Collections.CUSTOMERS])
    )


@router.get("/reasons", response_model=List[str], summary="Credit note reasons")
async def list_reasons(current_user: Dict[str, Any] = Depends(get_current_user)) -> List[str]:
    return CREDIT_NOTE_REASONS


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create credit note"
)
async def create_credit_note(
    data: CreditNoteCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: CreditNoteService = Depends(get_credit_note_service)
) -> Dict[str, Any]:
    """
    Create a credit note.

    **Request Body:**
    - **customer_id**: Customer ID
    - **reason**: One of the reasons from /reasons
    - **items**: Lines with description, qty, rate and tax_percent (default 18)

    **Raises:**
    - 400: Unknown reason or an item without description
    """
    return await service.create_credit_note(data, current_user["user_id"])


@router.post(
    "/from-invoice",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create credit note from invoice",
    description="Copy an invoice's lines; tax is the sum of the applied GST rates"
)
async def create_from_invoice(
    data: CreditNoteFromInvoice,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: CreditNoteService = Depends(get_credit_note_service)
) -> Dict[str, Any]:
    return await service.from_invoice(data.invoice_id, data.reason, current_user["user_id"])


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List credit notes"
)
async def list_credit_notes(
    customer_id: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    pagination: Dict[str, Any] = Depends(pagination_params),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: CreditNoteService = Depends(get_credit_note_service)
) -> List[Dict[str, Any]]:
    return await service.list_credit_notes(customer_id, status_filter, pagination["skip"], pagination["limit"])


@router.get(
    "/{note_id}",
    response_model=Dict[str, Any],
    summary="Get credit note"
)
async def get_credit_note(
    note_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: CreditNoteService = Depends(get_credit_note_service)
) -> Dict[str, Any]:
    return await service.get_credit_note(note_id)


@router.post(
    "/{note_id}/apply",
    response_model=Dict[str, Any],
    summary="Apply credit to invoice"
)
async def apply_credit_note(
    data: CreditNoteApply,
    note_id: str = Path(...),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: CreditNoteService = Depends(get_credit_note_service)
) -> Dict[str, Any]:
    """
    Apply credit to an open invoice of the same customer.

    The amount is capped at the credit balance and the invoice balance.
    """
    return await service.apply_to_invoice(note_id, data, current_user["user_id"])


@router.post(
    "/{note_id}/void",
    response_model=Dict[str, Any],
    summary="Void credit note (Admin only)"
)
async def void_credit_note(
    note_id: str = Path(...),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: CreditNoteService = Depends(get_credit_note_service)
) -> Dict[str, Any]:
    return await service.void_credit_note(note_id)
