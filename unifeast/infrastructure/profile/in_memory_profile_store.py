"""In-memory profile store for testing."""

from copy import deepcopy
from typing import Any, Dict, Optional

from unifeast.domain.profile.core.exceptions.profile_errors import (
    ProfileAlreadyExistsError,
    ProfileNotFoundError,
)
from unifeast.domain.profile.core.ports.profile_store import IProfileStore
from unifeast.infrastructure.profile.clock import utc_now_iso


class InMemoryProfileStore(IProfileStore):
    """Dict-backed store speaking either raw shape.

    Records are deep-copied on the way in and out so callers never share
    state with the store.

    Examples:
        >>> primary = InMemoryProfileStore(name="primary", key_field="id")
        >>> secondary = InMemoryProfileStore(
        ...     name="secondary", key_field="user_id", stamp_timestamps=True
        ... )
        >>> await secondary.create({"user_id": "u1", "email": "a@b.c"})
    """

    def __init__(
        self,
        name: str = "primary",
        key_field: str = "id",
        stamp_timestamps: bool = False,
    ) -> None:
        """Initialize empty in-memory storage.

        Args:
            name: Store name used in errors
            key_field: Raw field holding the user id
            stamp_timestamps: Maintain created_at/updated_at like the
                secondary store does
        """
        self.name = name
        self.key_field = key_field
        self._stamp_timestamps = stamp_timestamps
        self._records: Dict[str, Dict[str, Any]] = {}
        self.create_calls = 0

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        record = self._records.get(user_id)
        return deepcopy(record) if record is not None else None

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.create_calls += 1
        user_id = record.get(self.key_field)
        if not user_id:
            raise ValueError(f"Record has no '{self.key_field}'")
        if user_id in self._records:
            raise ProfileAlreadyExistsError(user_id, self.name)

        stored = deepcopy(record)
        if self._stamp_timestamps:
            now = utc_now_iso()
            stored["created_at"] = now
            stored["updated_at"] = now
        self._records[user_id] = stored
        return deepcopy(stored)

    async def update(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if user_id not in self._records:
            raise ProfileNotFoundError(user_id, self.name)

        stored = self._records[user_id]
        changes = {k: v for k, v in deepcopy(fields).items() if k != self.key_field}
        stored.update(changes)
        if self._stamp_timestamps:
            stored["updated_at"] = utc_now_iso()
        return deepcopy(stored)

    async def delete(self, user_id: str) -> bool:
        """Delete a record.

        Returns:
            True if a record was deleted, False if none existed
        """
        return self._records.pop(user_id, None) is not None

    def put(self, record: Dict[str, Any]) -> None:
        """Seed a record as-is (no stamping, no create accounting)."""
        self._records[record[self.key_field]] = deepcopy(record)

    def clear(self) -> None:
        """Clear all records (test helper)."""
        self._records.clear()
        self.create_calls = 0

    def count(self) -> int:
        return len(self._records)
