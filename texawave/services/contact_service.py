"""
Contact service.
Customers and vendors share one service, parameterized by repository
and resource label.
"""
from typing import List, Dict, Any, Optional
import logging

from texawave.repositories.contact_repository import ContactRepository
from texawave.exceptions import NotFoundError
from texawave.models.contact import ContactCreate, ContactUpdate

logger = logging.getLogger(__name__)


class ContactService:
    """CRUD for a contact collection."""

    def __init__(self, contact_repo: ContactRepository, resource: str = "Customer"):
        self.contact_repo = contact_repo
        self.resource = resource

    async def create_contact(self, data: ContactCreate, user_id: str) -> Dict[str, Any]:
        contact_doc = data.model_dump()
        contact_doc["currency"] = contact_doc["currency"].upper()
        contact_doc["is_active"] = True
        contact_doc["created_by"] = user_id

        contact_id = await self.contact_repo.create(contact_doc)
        logger.info(f"{self.resource} created: {data.name}")
        return contact_doc | {"id": contact_id}

    async def get_contact(self, contact_id: str) -> Dict[str, Any]:
        contact = await self.contact_repo.find_by_id(contact_id)
        if not contact:
            raise NotFoundError(self.resource, contact_id)
        return contact

    async def list_contacts(self, search: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Dict[str, Any]]:
        return await self.contact_repo.search(search, skip, limit)

    async def update_contact(self, contact_id: str, data: ContactUpdate) -> Dict[str, Any]:
        await self.get_contact(contact_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("currency"):
            changes["currency"] = changes["currency"].upper()
        if changes:
            await self.contact_repo.update(contact_id, changes)
        return await self.get_contact(contact_id)

    async def delete_contact(self, contact_id: str) -> bool:
        if not await self.contact_repo.delete(contact_id):
            raise NotFoundError(self.resource, contact_id)
        logger.info(f"{self.resource} deleted: {contact_id}")
        return True
