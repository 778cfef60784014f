"""Profile domain exceptions."""

from typing import Optional, Sequence


class ProfileDomainError(Exception):
    """Base exception for profile domain errors."""

    pass


class ProfileNotFoundError(ProfileDomainError):
    """Profile is absent from a store (or from every store consulted).

    This is a normal, recoverable condition: it routes resolution to the
    fallback store or to the create path.
    """

    def __init__(self, user_id: str, store: Optional[str] = None):
        """Initialize with user identifier.

        Args:
            user_id: Identifier that was looked up
            store: Store that reported absence (None when all stores did)
        """
        self.user_id = user_id
        self.store = store
        where = f" in {store} store" if store else ""
        super().__init__(f"Profile not found{where}: {user_id}")


class ProfileAlreadyExistsError(ProfileDomainError):
    """Conditional create lost: a record with the same key already exists."""

    def __init__(self, user_id: str, store: str):
        self.user_id = user_id
        self.store = store
        super().__init__(f"Profile already exists in {store} store: {user_id}")


class BackendError(ProfileDomainError):
    """A store failed for a reason other than absence.

    Covers network failures, expired or missing credentials, throttling,
    timeouts and malformed responses. Never treated as absence and never
    retried by the repository.
    """

    def __init__(self, store: str, message: str):
        """Initialize with failing store and reason.

        Args:
            store: Name of the store that failed
            message: Human-readable failure reason
        """
        self.store = store
        self.message = message
        super().__init__(f"{store} store error: {message}")


class ProfileValidationError(ProfileDomainError):
    """Update payload is malformed; no write was attempted."""

    def __init__(self, message: str, errors: Sequence[str] = ()):
        self.errors = tuple(errors)
        detail = f" ({'; '.join(self.errors)})" if self.errors else ""
        super().__init__(f"{message}{detail}")


class SessionNotReadyError(ProfileDomainError):
    """Core was used before the auth collaborator supplied a user id."""

    def __init__(self) -> None:
        super().__init__("No authenticated session: user id is required")
