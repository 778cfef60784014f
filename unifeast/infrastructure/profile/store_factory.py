"""Profile store factories for environment-based selection.

Backends are chosen by settings:
- primary: "graphql" (GraphQLProfileStore) or "inmemory"
- secondary: "mongodb" (MongoProfileStore) or "inmemory"

Default for both: inmemory

Stores are built per session and never cached at module level; the caller
closes them (see ProfileSession).
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from unifeast.domain.profile.core.ports.profile_store import IProfileStore
from unifeast.domain.profile.core.value_objects.auth_session import AuthSession
from unifeast.infrastructure.config import Settings
from unifeast.infrastructure.profile.graphql_profile_store import GraphQLProfileStore
from unifeast.infrastructure.profile.in_memory_profile_store import InMemoryProfileStore
from unifeast.infrastructure.profile.mongo_profile_store import MongoProfileStore

SERVER_SELECTION_TIMEOUT_MS = 5000


def create_primary_store(
    settings: Settings, session: Optional[AuthSession] = None
) -> IProfileStore:
    """Create the primary store for settings.

    Args:
        settings: Loaded settings
        session: Signed-in session whose token authorizes GraphQL requests

    Returns:
        IProfileStore speaking the primary (camelCase) shape

    Raises:
        ValueError: On an unknown backend or a missing endpoint
    """
    backend = settings.primary_backend

    if backend == "graphql":
        if not settings.primary_endpoint:
            raise ValueError(
                "UNIFEAST_PRIMARY_ENDPOINT is required when UNIFEAST_PRIMARY_BACKEND=graphql"
            )
        return GraphQLProfileStore(
            settings.primary_endpoint,
            access_token=session.access_token if session else None,
            timeout=settings.primary_timeout,
        )

    elif backend == "inmemory":
        return InMemoryProfileStore(name="primary", key_field="id")

    else:
        raise ValueError(
            f"Invalid UNIFEAST_PRIMARY_BACKEND value: {backend}. "
            "Expected 'graphql' or 'inmemory'"
        )


def create_secondary_store(settings: Settings) -> IProfileStore:
    """Create the secondary store for settings.

    Returns:
        IProfileStore speaking the secondary (snake_case) shape

    Raises:
        ValueError: On an unknown backend or a missing URI
    """
    backend = settings.secondary_backend

    if backend == "mongodb":
        if not settings.secondary_uri:
            raise ValueError(
                "UNIFEAST_SECONDARY_URI is required when UNIFEAST_SECONDARY_BACKEND=mongodb"
            )
        client: AsyncIOMotorClient = AsyncIOMotorClient(
            settings.secondary_uri,
            serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
        )
        collection = client[settings.secondary_database][settings.secondary_collection]
        return MongoProfileStore(collection, client=client)

    elif backend == "inmemory":
        return InMemoryProfileStore(name="secondary", key_field="user_id", stamp_timestamps=True)

    else:
        raise ValueError(
            f"Invalid UNIFEAST_SECONDARY_BACKEND value: {backend}. "
            "Expected 'mongodb' or 'inmemory'"
        )
