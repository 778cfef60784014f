"""Ensure profile command (first access after sign-in)."""

from dataclasses import dataclass

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from unifeast.application.profile.profile_repository import ProfileRepository
from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.exceptions.profile_errors import BackendError
from unifeast.domain.profile.core.value_objects.auth_session import AuthSession

logger = structlog.get_logger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Ensure profile failed, retrying",
        attempt=retry_state.attempt_number,
        error=str(error),
    )


@dataclass
class EnsureProfileCommand:
    """Command to get the session's profile, creating it on first access.

    Backend failures are retried here, with exponential backoff, and never
    inside the repository. The repository never creates after a backend
    failure, so a retry cannot produce a duplicate profile.

    Examples:
        >>> command = EnsureProfileCommand(repository)
        >>> profile = await command.execute(AuthSession("user-1", "ada@uni.ac.uk"))
    """

    repository: ProfileRepository
    max_attempts: int = 3
    backoff_multiplier: float = 0.5
    backoff_max: float = 4.0

    async def execute(self, session: AuthSession) -> Profile:
        """Execute ensure profile command.

        Args:
            session: Authenticated session supplying user id and login email

        Returns:
            The canonical profile

        Raises:
            BackendError: If every attempt failed (last error re-raised)
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.backoff_multiplier, min=0, max=self.backoff_max
            ),
            retry=retry_if_exception_type(BackendError),
            before_sleep=_log_retry,
            reraise=True,
        ):
            with attempt:
                return await self.repository.ensure_exists(session.user_id, session.login_email)

        raise AssertionError("unreachable: AsyncRetrying re-raises the last error")
