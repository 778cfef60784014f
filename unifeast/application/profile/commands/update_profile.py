"""Update profile command."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from unifeast.application.profile.profile_repository import ProfileRepository
from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.value_objects.auth_session import AuthSession
from unifeast.domain.profile.core.value_objects.profile_update import ProfileUpdate


@dataclass
class UpdateProfileCommand:
    """Command to apply a profile edit for the signed-in user.

    An update is only issued once the profile has been ensured for the
    session. Callers pass the profile that ensure returned; when they have
    none, ensure runs first. Failures are surfaced immediately (no retry).

    Examples:
        >>> command = UpdateProfileCommand(repository)
        >>> profile = await command.execute(session, {"identity_tier": "staff"}, ensured)
        >>> profile.identity_tier
        <IdentityTier.STAFF: 'staff'>
    """

    repository: ProfileRepository

    async def execute(
        self,
        session: AuthSession,
        changes: Union[ProfileUpdate, Mapping[str, Any]],
        ensured: Optional[Profile] = None,
    ) -> Profile:
        """Execute update profile command.

        Args:
            session: Authenticated session
            changes: Fields to change (validated before anything is read or written)
            ensured: Profile returned by ensure for this session, if any

        Returns:
            Updated canonical profile

        Raises:
            ProfileValidationError: If changes are malformed
            ProfileNotFoundError: If the profile vanished from both stores
            BackendError: If a store fails
        """
        update = ProfileUpdate.coerce(changes)

        if ensured is None or ensured.id != session.user_id:
            ensured = await self.repository.ensure_exists(session.user_id, session.login_email)

        if update.is_empty():
            return ensured

        return await self.repository.update(session.user_id, update)
