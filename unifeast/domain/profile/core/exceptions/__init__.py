"""Profile domain exceptions."""

from unifeast.domain.profile.core.exceptions.profile_errors import (
    BackendError,
    ProfileAlreadyExistsError,
    ProfileDomainError,
    ProfileNotFoundError,
    ProfileValidationError,
    SessionNotReadyError,
)

__all__ = [
    "BackendError",
    "ProfileAlreadyExistsError",
    "ProfileDomainError",
    "ProfileNotFoundError",
    "ProfileValidationError",
    "SessionNotReadyError",
]
