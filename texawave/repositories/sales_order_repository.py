"""
Sales order repositories.
Orders, the production jobs fanned out from them and per-job inspections.
"""
from typing import List, Dict, Any, Optional
import logging

from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SalesOrderRepository(BaseRepository):
    """Repository for sales orders."""

    async def list_orders(
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

    async def find_by_quotation(self, quotation_id: str) -> Optional[Dict[str, Any]]:
        return await self.find_one({"quotation_id": quotation_id})


class ProductionJobRepository(BaseRepository):
    """Repository for production jobs."""

    async def find_by_order(self, order_id: str) -> List[Dict[str, Any]]:
        return await self.find_all({"order_id": order_id}, limit=0, sort=[("line_index", 1)])

    async def find_by_orders(self, order_ids: List[str]) -> List[Dict[str, Any]]:
        if not order_ids:
            return []
        return await self.find_all({"order_id": {"$in": order_ids}}, limit=0)

    async def delete_by_order(self, order_id: str) -> int:
        return await self.delete_many({"order_id": order_id})


class InspectionRepository(BaseRepository):
    """Repository for job inspections (one per job)."""

    async def find_by_order(self, order_id: str) -> List[Dict[str, Any]]:
        return await self.find_all({"order_id": order_id}, limit=0)

    async def find_by_orders(self, order_ids: List[str]) -> List[Dict[str, Any]]:
        if not order_ids:
            return []
        return await self.find_all({"order_id": {"$in": order_ids}}, limit=0)

    async def save_for_job(self, job_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.upsert({"job_id": job_id}, data)

    async def delete_by_order(self, order_id: str) -> int:
        return await self.delete_many({"order_id": order_id})
