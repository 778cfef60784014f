"""Dual-source profile repository.

Reads the primary store first and falls back to the secondary store;
writes (create and update) go to the primary store, which is authoritative
for new writes. The one exception is a secondary-only profile carrying
session data, which the primary store cannot hold: it is updated where it
lives. Stores are injected; the repository owns no clients.

The repository never retries: retry policy belongs to callers (see
`application.profile.commands`).
"""

from typing import Any, Callable, Dict, Mapping, Optional, Union

import structlog

from unifeast.application.profile.resolution import (
    PrimaryFailurePolicy,
    ProfileResolution,
    ResolutionState,
)
from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.exceptions.profile_errors import (
    BackendError,
    ProfileAlreadyExistsError,
    ProfileDomainError,
    ProfileNotFoundError,
    SessionNotReadyError,
)
from unifeast.domain.profile.core.ports.profile_store import IProfileStore
from unifeast.domain.profile.core.value_objects.profile_update import ProfileUpdate
from unifeast.domain.profile.normalization.schema_normalizer import (
    PRIMARY_SHAPE,
    SECONDARY_SHAPE,
    StoreShape,
    from_wire,
    to_primary,
    update_to_primary,
    update_to_secondary,
)

logger = structlog.get_logger(__name__)


class ProfileRepository:
    """Canonical profile access over the primary and secondary stores.

    Examples:
        >>> repository = ProfileRepository(primary_store, secondary_store)
        >>> profile = await repository.ensure_exists("user-1", "ada@uni.ac.uk")
        >>> profile = await repository.update("user-1", {"identity_tier": "staff"})
    """

    def __init__(
        self,
        primary: IProfileStore,
        secondary: IProfileStore,
        policy: PrimaryFailurePolicy = PrimaryFailurePolicy.FAIL_FAST,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._policy = policy

    @property
    def policy(self) -> PrimaryFailurePolicy:
        return self._policy

    # ============================================================
    # Public operations
    # ============================================================

    async def get(self, user_id: str) -> Profile:
        """Get the canonical profile.

        Raises:
            ProfileNotFoundError: If both stores report absence
            BackendError: If a store fails for any other reason
        """
        resolution = await self.resolve(user_id)
        return resolution.unwrap()

    async def create(self, user_id: str, email: str) -> Profile:
        """Write the default profile to the primary store.

        The write is conditional. If a record already exists (a concurrent
        first login won the race) the existing record is read back and
        returned instead of being overwritten. Stale copies in the secondary
        store are ignored.

        Raises:
            BackendError: If the primary store fails
        """
        self._require_user_id(user_id)
        profile = Profile.new(user_id, email)

        try:
            stored = await self._primary.create(to_primary(profile))
        except ProfileAlreadyExistsError:
            logger.info("Profile already created concurrently, reading back", user_id=user_id)
            raw = await self._primary.get(user_id)
            if raw is None:
                raise BackendError(
                    self._primary.name, f"profile {user_id} reported as existing but not readable"
                )
            return self._decode(raw, PRIMARY_SHAPE, self._primary)

        logger.info("Profile created", user_id=user_id, store=self._primary.name)
        return self._decode(stored, PRIMARY_SHAPE, self._primary)

    async def update(
        self, user_id: str, changes: Union[ProfileUpdate, Mapping[str, Any]]
    ) -> Profile:
        """Write the supplied fields to the primary store.

        Returns the canonical form of the record the store returned, so
        store-side defaults stay authoritative. A profile held only by the
        secondary store is promoted: its canonical form, with the update
        applied, is created in the primary store. A secondary-only profile
        carrying session data is updated in place instead, since the primary
        store cannot hold that data.

        Raises:
            ProfileValidationError: If changes are malformed (nothing written)
            ProfileNotFoundError: If neither store holds the profile
            BackendError: If a store fails
        """
        update = ProfileUpdate.coerce(changes)
        self._require_user_id(user_id)

        try:
            stored = await self._primary.update(user_id, update_to_primary(update))
        except ProfileNotFoundError:
            return await self._promote(user_id, update)

        logger.info(
            "Profile updated",
            user_id=user_id,
            store=self._primary.name,
            fields=sorted(update.fields_set()),
        )
        return self._decode(stored, PRIMARY_SHAPE, self._primary)

    async def ensure_exists(self, user_id: str, email: Optional[str]) -> Profile:
        """Get the profile, creating the default one if both stores lack it.

        Sequential calls create at most once.

        Raises:
            BackendError: If a store fails (never followed by a create)
        """
        resolution = await self.resolve(user_id, email=email or "")
        return resolution.unwrap()

    async def resolve(self, user_id: str, email: Optional[str] = None) -> ProfileResolution:
        """Run the search state machine.

        Args:
            user_id: Profile key
            email: When given, absence in both stores leads to CREATED;
                when None, it leads to FAILED with ProfileNotFoundError

        Returns:
            Terminal ProfileResolution (never raises store errors)
        """
        self._require_user_id(user_id)

        try:
            raw = await self._primary.get(user_id)
        except BackendError as primary_error:
            return await self._after_primary_failure(user_id, primary_error)

        if raw is not None:
            return self._resolved(
                user_id,
                ResolutionState.FOUND_PRIMARY,
                lambda: self._decode(raw, PRIMARY_SHAPE, self._primary),
            )

        try:
            raw = await self._secondary.get(user_id)
        except BackendError as e:
            return self._failed(user_id, e)

        if raw is not None:
            return self._resolved(
                user_id,
                ResolutionState.FOUND_SECONDARY,
                lambda: self._decode(raw, SECONDARY_SHAPE, self._secondary),
            )

        if email is None:
            return self._failed(user_id, ProfileNotFoundError(user_id))

        try:
            created = await self.create(user_id, email)
        except BackendError as e:
            return self._failed(user_id, e)
        return self._resolved(user_id, ResolutionState.CREATED, lambda: created)

    # ============================================================
    # Internals
    # ============================================================

    async def _after_primary_failure(
        self, user_id: str, primary_error: BackendError
    ) -> ProfileResolution:
        if self._policy is PrimaryFailurePolicy.FAIL_FAST:
            return self._failed(user_id, primary_error)

        try:
            raw = await self._secondary.get(user_id)
        except BackendError as e:
            logger.warning(
                "Secondary store also failed after primary failure",
                user_id=user_id,
                error=str(e),
            )
            return self._failed(user_id, primary_error)

        if raw is None:
            return self._failed(user_id, primary_error)

        return self._resolved(
            user_id,
            ResolutionState.FOUND_SECONDARY,
            lambda: self._decode(raw, SECONDARY_SHAPE, self._secondary),
        )

    async def _promote(self, user_id: str, update: ProfileUpdate) -> Profile:
        raw = await self._secondary.get(user_id)
        if raw is None:
            raise ProfileNotFoundError(user_id)

        current = self._decode(raw, SECONDARY_SHAPE, self._secondary)
        if current.session_data:
            stored = await self._secondary.update(user_id, update_to_secondary(update))
            logger.info(
                "Profile kept in secondary store to preserve session data",
                user_id=user_id,
                store=self._secondary.name,
                fields=sorted(update.fields_set()),
            )
            return self._decode(stored, SECONDARY_SHAPE, self._secondary)

        promoted = update.apply_to(current)
        try:
            stored = await self._primary.create(to_primary(promoted))
        except ProfileAlreadyExistsError:
            stored = await self._primary.update(user_id, update_to_primary(update))

        logger.info(
            "Profile promoted from secondary store",
            user_id=user_id,
            source=self._secondary.name,
            target=self._primary.name,
        )
        return self._decode(stored, PRIMARY_SHAPE, self._primary)

    def _resolved(
        self, user_id: str, state: ResolutionState, decode: Callable[[], Profile]
    ) -> ProfileResolution:
        try:
            profile = decode()
        except BackendError as e:
            return self._failed(user_id, e)
        logger.info("Profile resolved", user_id=user_id, state=state.value)
        return ProfileResolution(user_id=user_id, state=state, profile=profile)

    def _failed(self, user_id: str, error: ProfileDomainError) -> ProfileResolution:
        level = "info" if isinstance(error, ProfileNotFoundError) else "error"
        getattr(logger, level)(
            "Profile resolution failed",
            user_id=user_id,
            state=ResolutionState.FAILED.value,
            error=str(error),
        )
        return ProfileResolution(user_id=user_id, state=ResolutionState.FAILED, error=error)

    @staticmethod
    def _decode(raw: Dict[str, Any], shape: StoreShape, store: IProfileStore) -> Profile:
        try:
            return from_wire(raw, shape)
        except (TypeError, ValueError) as e:
            raise BackendError(store.name, f"malformed profile record: {e}") from e

    @staticmethod
    def _require_user_id(user_id: str) -> None:
        if not user_id or not user_id.strip():
            raise SessionNotReadyError()
