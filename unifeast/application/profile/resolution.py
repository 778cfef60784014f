"""Profile resolution states and policies."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.exceptions.profile_errors import (
    ProfileDomainError,
    ProfileNotFoundError,
)


class ResolutionState(str, Enum):
    """States of the primary -> secondary -> create search.

    Transitions only move forward in search order:

        UNRESOLVED -> FOUND_PRIMARY
        UNRESOLVED -> FOUND_SECONDARY   (primary reported absence)
        UNRESOLVED -> CREATED           (both reported absence, ensure mode)
        UNRESOLVED -> FAILED            (backend failure, or absence in get mode)

    Every state except UNRESOLVED is terminal.
    """

    UNRESOLVED = "unresolved"
    FOUND_PRIMARY = "found_primary"
    FOUND_SECONDARY = "found_secondary"
    CREATED = "created"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ResolutionState.UNRESOLVED


class PrimaryFailurePolicy(str, Enum):
    """What resolution does when the primary store fails (not absence).

    FAIL_FAST: stop in FAILED without consulting the secondary store.
    READ_SECONDARY: consult the secondary store; a hit ends in
        FOUND_SECONDARY, a miss or failure ends in FAILED with the primary
        error.

    Neither policy creates a profile after a primary failure: the profile
    may exist but be unreachable.
    """

    FAIL_FAST = "fail_fast"
    READ_SECONDARY = "read_secondary"


@dataclass(frozen=True)
class ProfileResolution:
    """Terminal outcome of a resolution run."""

    user_id: str
    state: ResolutionState
    profile: Optional[Profile] = None
    error: Optional[ProfileDomainError] = None

    def __post_init__(self) -> None:
        if not self.state.is_terminal:
            raise ValueError("Resolution must end in a terminal state")
        if (self.state is ResolutionState.FAILED) != (self.profile is None):
            raise ValueError(
                f"Inconsistent resolution: {self.state.value} with profile={self.profile}"
            )

    @property
    def found(self) -> bool:
        return self.profile is not None

    def unwrap(self) -> Profile:
        """Return the profile or raise the failure that ended resolution."""
        if self.profile is not None:
            return self.profile
        raise self.error or ProfileNotFoundError(self.user_id)
