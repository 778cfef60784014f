"""Profile store port (interface)."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class IProfileStore(ABC):
    """Raw-record contract shared by the primary and secondary stores.

    Stores speak their own wire shape (see the schema normalizer); they never
    see canonical `Profile` objects.

    Failure contract:
    - absence is reported as None (get) or ProfileNotFoundError (update)
    - a lost conditional create is ProfileAlreadyExistsError
    - everything else (network, credentials, throttling, timeouts,
      malformed responses) is BackendError

    Examples:
        >>> class DictStore(IProfileStore):
        ...     name = "dict"
        ...     key_field = "id"
        ...     async def get(self, user_id): ...
    """

    name: str
    key_field: str

    @abstractmethod
    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the raw record for user_id.

        Returns:
            Raw record, or None if the store has no record for user_id

        Raises:
            BackendError: On any failure other than absence
        """
        pass

    @abstractmethod
    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Create a record if, and only if, none exists for its key.

        Args:
            record: Full raw record including the key field

        Returns:
            The record as stored (server-side defaults included)

        Raises:
            ProfileAlreadyExistsError: If a record with the same key exists
            BackendError: On any other failure
        """
        pass

    @abstractmethod
    async def update(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Write only the given fields of an existing record.

        Args:
            user_id: Record key
            fields: Raw fields to set; fields not listed are preserved

        Returns:
            The full record as stored after the write

        Raises:
            ProfileNotFoundError: If no record exists for user_id
            BackendError: On any other failure
        """
        pass

    async def close(self) -> None:
        """Release client resources. Default: nothing to release."""
        return None
