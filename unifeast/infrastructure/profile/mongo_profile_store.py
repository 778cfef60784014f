"""MongoDB profile store (secondary).

Holds the snake_case key-value profile records, one document per user:

    {"_id": user_id, "user_id": user_id, "email": ..., "other_allergies": [...],
     "created_at": "...Z", "updated_at": "...Z", ...}

`_id` mirrors `user_id` so the unique index on `_id` makes create
conditional. The document `_id` never leaves this adapter.
"""

from typing import Any, Dict, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from unifeast.domain.profile.core.exceptions.profile_errors import (
    BackendError,
    ProfileAlreadyExistsError,
    ProfileNotFoundError,
)
from unifeast.domain.profile.core.ports.profile_store import IProfileStore
from unifeast.infrastructure.profile.clock import utc_now_iso

logger = structlog.get_logger(__name__)


class MongoProfileStore(IProfileStore):
    """Secondary store adapter over motor.

    Examples:
        >>> client = AsyncIOMotorClient(uri)
        >>> store = MongoProfileStore(client["unifeast"]["unifeast-users"], client=client)
        >>> record = await store.get("user-1")
    """

    key_field = "user_id"

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        client: Optional[AsyncIOMotorClient] = None,
        name: str = "secondary",
    ) -> None:
        """Initialize store with a collection handle.

        Args:
            collection: Motor collection holding profile documents
            client: Owning client, closed by close(); None when the caller
                manages the client
            name: Store name used in logs and errors
        """
        self.name = name
        self._collection = collection
        self._client = client

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            document = await self._collection.find_one({"_id": user_id})
        except PyMongoError as e:
            raise self._backend_error("find_one", e, user_id) from e

        if not document:
            return None
        return self._from_document(document)

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        user_id = record.get(self.key_field)
        if not user_id:
            raise ValueError(f"Record has no '{self.key_field}'")

        now = utc_now_iso()
        document = {**record, "_id": user_id, "created_at": now, "updated_at": now}
        try:
            await self._collection.insert_one(document)
        except DuplicateKeyError as e:
            raise ProfileAlreadyExistsError(user_id, self.name) from e
        except PyMongoError as e:
            raise self._backend_error("insert_one", e, user_id) from e

        logger.info("Profile document created", store=self.name, user_id=user_id)
        return self._from_document(document)

    async def update(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        changes = {k: v for k, v in fields.items() if k not in ("_id", self.key_field)}
        changes["updated_at"] = utc_now_iso()
        try:
            document = await self._collection.find_one_and_update(
                {"_id": user_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._backend_error("find_one_and_update", e, user_id) from e

        if document is None:
            raise ProfileNotFoundError(user_id, self.name)
        return self._from_document(document)

    async def delete(self, user_id: str) -> bool:
        """Delete a profile document (operational use only).

        Returns:
            True if a document was deleted
        """
        try:
            result = await self._collection.delete_one({"_id": user_id})
        except PyMongoError as e:
            raise self._backend_error("delete_one", e, user_id) from e
        return bool(result.deleted_count)

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _from_document(self, document: Dict[str, Any]) -> Dict[str, Any]:
        record = {k: v for k, v in document.items() if k != "_id"}
        record.setdefault(self.key_field, document.get("_id"))
        return record

    def _backend_error(self, operation: str, error: Exception, user_id: str) -> BackendError:
        logger.error(
            "Secondary store operation failed",
            store=self.name,
            operation=operation,
            user_id=user_id,
            error_type=type(error).__name__,
        )
        return BackendError(self.name, f"{operation} failed: {type(error).__name__}")
