"""
Invoice repositories: invoices, credit notes, payments received and
recurring invoice profiles.
"""
from typing import List, Dict, Any, Optional

from .base_repository import BaseRepository


class InvoiceRepository(BaseRepository):
    """Repository for sales invoices."""

    async def list_invoices(
        self,
        customer_id: Optional[str] = None,
        payment_status: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if customer_id:
            query["customer_id"] = customer_id
        if payment_status:
            query["payment_status"] = payment_status
        if date_from or date_to:
            query["invoice_date"] = {}
            if date_from:
                query["invoice_date"]["$gte"] = date_from
            if date_to:
                query["invoice_date"]["$lte"] = date_to
        return await self.find_all(query, skip=skip, limit=limit, sort=[("created_at", -1)])

    async def find_payable(self, customer_id: str, statuses: List[str]) -> List[Dict[str, Any]]:
        """Invoices of a customer that can still receive payments."""
        return await self.find_all(
            {"customer_id": customer_id, "payment_status": {"$in": statuses}},
            limit=0,
            sort=[("invoice_date", 1)]
        )


class CreditNoteRepository(BaseRepository):

    async def list_credit_notes(
        self,
        customer_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if customer_id:
            query["customer_id"] = customer_id
        if status:
            query["status"] = status
        return await self.find_all(query, skip=skip, limit=limit, sort=[("created_at", -1)])


class PaymentReceivedRepository(BaseRepository):

    async def list_payments(
        self,
        customer_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if customer_id:
            query["customer_id"] = customer_id
        return await self.find_all(query, skip=skip, limit=limit, sort=[("payment_date", -1)])


class RecurringProfileRepository(BaseRepository):
    """Repository for recurring invoice profiles."""

    async def find_due(self, today: str) -> List[Dict[str, Any]]:
        """Active profiles whose next invoice date has arrived."""
        return await self.find_all(
            {"status": "Active", "next_invoice_date": {"$lte": today}},
            limit=0
        )
