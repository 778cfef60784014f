"""Unit tests for MongoProfileStore with a mocked motor collection."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from unifeast.domain.profile.core.exceptions.profile_errors import (
    BackendError,
    ProfileAlreadyExistsError,
    ProfileNotFoundError,
)
from unifeast.infrastructure.profile.mongo_profile_store import MongoProfileStore


@pytest.fixture
def collection() -> MagicMock:
    """Mock motor collection with awaitable operations."""
    mock = MagicMock()
    mock.find_one = AsyncMock(return_value=None)
    mock.insert_one = AsyncMock()
    mock.find_one_and_update = AsyncMock(return_value=None)
    mock.delete_one = AsyncMock()
    return mock


@pytest.fixture
def store(collection) -> MongoProfileStore:
    return MongoProfileStore(collection)


class TestMongoProfileStoreGet:
    """Test reads."""

    @pytest.mark.asyncio
    async def test_get_strips_document_id(self, store, collection, secondary_record):
        """Test the Mongo _id never leaves the adapter."""
        collection.find_one.return_value = {"_id": "user-1", **secondary_record}

        record = await store.get("user-1")

        assert record == secondary_record
        collection.find_one.assert_awaited_once_with({"_id": "user-1"})

    @pytest.mark.asyncio
    async def test_get_fills_user_id_from_document_id(self, store, collection):
        """Test documents missing user_id still carry the key."""
        collection.find_one.return_value = {"_id": "user-1", "email": "a@b.c"}

        assert (await store.get("user-1"))["user_id"] == "user-1"

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        """Test absence is None."""
        assert await store.get("user-1") is None

    @pytest.mark.asyncio
    async def test_driver_error_is_backend_error(self, store, collection):
        """Test driver failures are never absence."""
        collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(BackendError) as exc_info:
            await store.get("user-1")

        assert exc_info.value.store == "secondary"
        assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)


class TestMongoProfileStoreWrites:
    """Test create / update / delete."""

    @pytest.mark.asyncio
    async def test_create_keys_by_user_id_and_stamps(self, store, collection):
        """Test create inserts with _id = user_id and server timestamps."""
        record = {"user_id": "user-1", "email": "a@b.c", "other_allergies": []}

        created = await store.create(record)

        document = collection.insert_one.await_args.args[0]
        assert document["_id"] == "user-1"
        assert document["created_at"] == document["updated_at"]
        assert document["created_at"].endswith("Z")
        assert "_id" not in created
        assert created["created_at"] == document["created_at"]

    @pytest.mark.asyncio
    async def test_create_duplicate_is_already_exists(self, store, collection):
        """Test the unique _id makes create conditional."""
        collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

        with pytest.raises(ProfileAlreadyExistsError):
            await store.create({"user_id": "user-1"})

    @pytest.mark.asyncio
    async def test_update_sets_fields_and_returns_new_document(self, store, collection):
        """Test update uses $set and returns the post-update document."""
        collection.find_one_and_update.return_value = {
            "_id": "user-1",
            "user_id": "user-1",
            "milk_allergy": True,
        }

        updated = await store.update("user-1", {"milk_allergy": True, "user_id": "other"})

        filter_, update = collection.find_one_and_update.await_args.args
        assert filter_ == {"_id": "user-1"}
        assert update["$set"]["milk_allergy"] is True
        assert "user_id" not in update["$set"]
        assert update["$set"]["updated_at"].endswith("Z")
        assert (
            collection.find_one_and_update.await_args.kwargs["return_document"]
            is ReturnDocument.AFTER
        )
        assert updated == {"user_id": "user-1", "milk_allergy": True}

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(self, store):
        """Test update of an absent document reports absence."""
        with pytest.raises(ProfileNotFoundError):
            await store.update("user-1", {"milk_allergy": True})

    @pytest.mark.asyncio
    async def test_delete(self, store, collection):
        """Test delete reports whether a document was removed."""
        collection.delete_one.return_value = MagicMock(deleted_count=1)
        assert await store.delete("user-1") is True

        collection.delete_one.return_value = MagicMock(deleted_count=0)
        assert await store.delete("user-1") is False

    @pytest.mark.asyncio
    async def test_close_closes_owned_client(self, collection):
        """Test close() releases the owning client once."""
        client = MagicMock()
        store = MongoProfileStore(collection, client=client)

        await store.close()
        await store.close()

        client.close.assert_called_once_with()
