"""
Quotation service.
"""
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

from texawave.repositories.quotation_repository import QuotationRepository
from texawave.repositories.contact_repository import CustomerRepository
from texawave.exceptions import NotFoundError, BusinessLogicError
from texawave.models.quotation import QuotationCreate
from texawave.services.business_rules import BusinessRules, QuotationStatus
from texawave.utils.gst_calculator import calculate_order_totals
from texawave.utils.numbering import generate_document_number
from texawave.utils.dates import today, to_date_str

logger = logging.getLogger(__name__)


class QuotationService:
    """Service for customer quotations."""

    def __init__(self, quotation_repo: QuotationRepository, customer_repo: CustomerRepository):
        self.quotation_repo = quotation_repo
        self.customer_repo = customer_repo

    async def create_quotation(self, data: QuotationCreate, user_id: str) -> Dict[str, Any]:
        """
        Create a Draft quotation with computed totals.

        Raises:
            NotFoundError: If customer not found
        """
        customer = await self.customer_repo.find_by_id(data.customer_id)
        if not customer:
            raise NotFoundError("Customer", data.customer_id)

        quotation_date = data.quotation_date or today()
        totals = calculate_order_totals(
            [item.model_dump() for item in data.items],
            data.currency,
            data.cgst_percent,
            data.sgst_percent,
            data.transport_percent
        )
        count = await self.quotation_repo.count()

        quotation_doc = {
            "quotation_number": generate_document_number("quotation", count, quotation_date),
            "customer_id": customer["id"],
            "customer_name": customer.get("name"),
            "quotation_date": quotation_date.isoformat(),
            "valid_until": to_date_str(data.valid_until),
            "delivery_term": to_date_str(data.delivery_term),
            "currency": data.currency,
            "cgst_percent": data.cgst_percent,
            "sgst_percent": data.sgst_percent,
            "transport_percent": data.transport_percent,
            **totals,
            "notes": data.notes,
            "status": QuotationStatus.DRAFT.value,
            "created_by": user_id
        }

        quotation_id = await self.quotation_repo.create(quotation_doc)
        logger.info(f"Quotation created: {quotation_doc['quotation_number']} total={totals['grand_total']}")
        return quotation_doc | {"id": quotation_id}

    async def get_quotation(self, quotation_id: str) -> Dict[str, Any]:
        quotation = await self.quotation_repo.find_by_id(quotation_id)
        if not quotation:
            raise NotFoundError("Quotation", quotation_id)
        return quotation

    async def list_quotations(
        self,
        status: Optional[str] = None,
        customer_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        return await self.quotation_repo.list_quotations(status, customer_id, skip, limit)

    async def update_status(self, quotation_id: str, status: str, user_id: str) -> Dict[str, Any]:
        """
        Move a quotation to Sent, Accepted or Rejected.

        Raises:
            BusinessLogicError: If the quotation is already Accepted or Rejected
        """
        quotation = await self.get_quotation(quotation_id)
        check = BusinessRules.can_change_quotation_status(quotation.get("status"), status)
        if not check.is_valid:
            raise BusinessLogicError(check.errors[0], details={"quotation_id": quotation_id})

        await self.quotation_repo.update(quotation_id, {
            "status": status,
            "status_changed_by": user_id,
            "status_changed_at": datetime.utcnow()
        })
        logger.info(f"Quotation {quotation.get('quotation_number')} → {status}")
        return await self.get_quotation(quotation_id)
