"""Profile application layer: dual-source repository and commands."""

from unifeast.application.profile.profile_repository import ProfileRepository
from unifeast.application.profile.resolution import (
    PrimaryFailurePolicy,
    ProfileResolution,
    ResolutionState,
)

__all__ = [
    "PrimaryFailurePolicy",
    "ProfileRepository",
    "ProfileResolution",
    "ResolutionState",
]
