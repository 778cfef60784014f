"""Profile session: store client lifecycle for one signed-in user.

Clients are built when the session opens and closed when it ends (sign-out),
so credentials never outlive the session.
"""

from typing import Any, Iterable, List, Mapping, Optional, Union

import structlog

from unifeast.application.menu.queries.assemble_menu import AssembleMenuQuery, MenuEntry
from unifeast.application.profile.commands.ensure_profile import EnsureProfileCommand
from unifeast.application.profile.commands.update_profile import UpdateProfileCommand
from unifeast.application.profile.profile_repository import ProfileRepository
from unifeast.domain.menu.entities.item import Item
from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.ports.profile_store import IProfileStore
from unifeast.domain.profile.core.value_objects.auth_session import AuthSession
from unifeast.domain.profile.core.value_objects.profile_update import ProfileUpdate
from unifeast.infrastructure.config import Settings
from unifeast.infrastructure.profile.store_factory import (
    create_primary_store,
    create_secondary_store,
)

logger = structlog.get_logger(__name__)


class ProfileSession:
    """Async context manager owning both store clients for a session.

    Examples:
        >>> async with ProfileSession.open(settings, auth_session) as session:
        ...     profile = await session.ensure_profile()
        ...     entries = await session.assemble_menu(catalog)
    """

    def __init__(
        self,
        auth_session: AuthSession,
        primary: IProfileStore,
        secondary: IProfileStore,
        repository: ProfileRepository,
    ) -> None:
        self.auth_session = auth_session
        self.primary = primary
        self.secondary = secondary
        self.repository = repository
        self._closed = False

    @classmethod
    def open(
        cls,
        settings: Settings,
        auth_session: AuthSession,
        primary: Optional[IProfileStore] = None,
        secondary: Optional[IProfileStore] = None,
    ) -> "ProfileSession":
        """Build stores and repository for auth_session.

        Args:
            settings: Loaded settings (backends, endpoints, policy)
            auth_session: Signed-in user
            primary: Pre-built primary store (overrides settings)
            secondary: Pre-built secondary store (overrides settings)
        """
        primary = primary or create_primary_store(settings, auth_session)
        secondary = secondary or create_secondary_store(settings)
        repository = ProfileRepository(
            primary, secondary, policy=settings.primary_failure_policy
        )
        logger.info(
            "Profile session opened",
            user_id=auth_session.user_id,
            primary=primary.name,
            secondary=secondary.name,
            policy=settings.primary_failure_policy.value,
        )
        return cls(auth_session, primary, secondary, repository)

    async def __aenter__(self) -> "ProfileSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Close both store clients (idempotent)."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.primary.close()
        finally:
            await self.secondary.close()
        logger.info("Profile session closed", user_id=self.auth_session.user_id)

    async def ensure_profile(self) -> Profile:
        return await EnsureProfileCommand(self.repository).execute(self.auth_session)

    async def update_profile(
        self,
        changes: Union[ProfileUpdate, Mapping[str, Any]],
        ensured: Optional[Profile] = None,
    ) -> Profile:
        return await UpdateProfileCommand(self.repository).execute(
            self.auth_session, changes, ensured
        )

    async def assemble_menu(self, catalog: Iterable[Item]) -> List[MenuEntry]:
        return await AssembleMenuQuery(self.repository).execute(
            self.auth_session.user_id, catalog
        )
