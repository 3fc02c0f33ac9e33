"""
Base repository with generic CRUD operations for MongoDB.
Entity repositories subclass it and add their own queries.

Documents are addressed by a string UUID stored in the "id" field; the
Mongo "_id" is never returned to callers.
"""
from typing import Optional, List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorCollection
from datetime import datetime
import logging
import uuid

from texawave.utils.logger import log_database_operation

logger = logging.getLogger(__name__)

NO_MONGO_ID = {"_id": 0}


class BaseRepository:
    """Generic CRUD over one Motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @property
    def name(self) -> str:
        return self.collection.name

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _stamped(fields: Dict[str, Any]) -> Dict[str, Any]:
        return {**fields, "updated_at": datetime.utcnow()}

    async def create(self, document: Dict[str, Any]) -> str:
        """
        Insert a document and return its id.

        The caller's dict receives "id", "created_at" and "updated_at";
        Motor's "_id" lands only on the inserted copy.
        """
        now = datetime.utcnow()
        document.setdefault("id", self.new_id())
        document.setdefault("created_at", now)
        document.setdefault("updated_at", now)

        await self.collection.insert_one(dict(document))
        logger.info(f"Created document in {self.name}: {document['id']}")
        return document["id"]

    async def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        log_database_operation(logger, "find", self.name, doc_id)
        return await self.collection.find_one({"id": doc_id}, NO_MONGO_ID)

    async def find_one(self, filter_query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one(filter_query, NO_MONGO_ID)

    async def find_all(
        self,
        filter_query: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100,
        sort: Optional[List[tuple]] = None
    ) -> List[Dict[str, Any]]:
        """
        Query with optional sort and pagination.

        Args:
            filter_query: MongoDB filter (None matches everything)
            skip: Documents to skip
            limit: Page size; 0 returns every match
            sort: (field, direction) pairs
        """
        cursor = self.collection.find(filter_query or {}, NO_MONGO_ID)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=limit or None)

    async def count(self, filter_query: Optional[Dict[str, Any]] = None) -> int:
        return await self.collection.count_documents(filter_query or {})

    async def exists(self, filter_query: Dict[str, Any]) -> bool:
        return await self.collection.count_documents(filter_query, limit=1) > 0

    async def update(self, doc_id: str, update_data: Dict[str, Any]) -> bool:
        """$set the given fields. Returns False when no document has that id."""
        result = await self.collection.update_one({"id": doc_id}, {"$set": self._stamped(update_data)})
        if not result.matched_count:
            return False
        logger.info(f"Updated document in {self.name}: {doc_id}")
        return True

    async def push(self, doc_id: str, field: str, value: Any) -> bool:
        """Append a value to an array field."""
        result = await self.collection.update_one(
            {"id": doc_id},
            {"$push": {field: value}, "$set": self._stamped({})}
        )
        return result.matched_count > 0

    async def upsert(self, filter_query: Dict[str, Any], update_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update the document matching an equality filter, or insert it.
        A new document gets a fresh id; an existing one keeps its id.

        Returns:
            The stored document
        """
        await self.collection.update_one(
            filter_query,
            {
                "$set": self._stamped(update_data),
                "$setOnInsert": {"id": self.new_id(), "created_at": datetime.utcnow()}
            },
            upsert=True
        )
        log_database_operation(logger, "upsert", self.name)
        return await self.find_one(filter_query)

    async def delete(self, doc_id: str) -> bool:
        result = await self.collection.delete_one({"id": doc_id})
        if not result.deleted_count:
            return False
        logger.info(f"Deleted document from {self.name}: {doc_id}")
        return True

    async def delete_many(self, filter_query: Dict[str, Any]) -> int:
        result = await self.collection.delete_many(filter_query)
        logger.info(f"Deleted {result.deleted_count} documents from {self.name}")
        return result.deleted_count
