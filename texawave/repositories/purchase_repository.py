"""
Purchase repositories: vendor bills and payments made.
"""
from typing import List, Dict, Any, Optional

from .base_repository import BaseRepository


class BillRepository(BaseRepository):

    async def list_bills(
        self,
        vendor_id: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if vendor_id:
            query["vendor_id"] = vendor_id
        if status:
            query["status"] = status
        return await self.find_all(query, skip=skip, limit=limit, sort=[("bill_date", -1)])


class PaymentMadeRepository(BaseRepository):

    async def find_by_bill(self, bill_id: str) -> List[Dict[str, Any]]:
        return await self.find_all({"bill_id": bill_id}, limit=0, sort=[("payment_date", 1)])

    async def list_payments(
        self,
        vendor_id: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Dict[str, Any]]:
        query: Dict[str, Any] = {}
        if vendor_id:
            query["vendor_id"] = vendor_id
        return await self.find_all(query, skip=skip, limit=limit, sort=[("payment_date", -1)])
