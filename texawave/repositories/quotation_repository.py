"""
Quotation repository.
"""
from typing import List, Dict, Any, Optional

from .base_repository import BaseRepository


class QuotationRepository(BaseRepository):

    async def list_quotations(
        self,
        status: Optional[str] = None,
        customer_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if status:
            query["status"] = status
        if customer_id:
            query["customer_id"] = customer_id
        return await self.find_all(query, skip=skip, limit=limit, sort=[("created_at", -1)])
