"""AuthSession value object."""

from dataclasses import dataclass, field
from typing import Optional

from unifeast.domain.profile.core.exceptions.profile_errors import SessionNotReadyError


@dataclass(frozen=True)
class AuthSession:
    """Identity handed over by the authentication collaborator.

    Examples:
        >>> session = AuthSession(user_id="eu-west-2:abc", login_email="a@uni.ac.uk")
        >>> session.user_id
        'eu-west-2:abc'

    Raises:
        SessionNotReadyError: If user_id is empty
    """

    user_id: str
    login_email: str = ""
    access_token: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.user_id or not self.user_id.strip():
            raise SessionNotReadyError()
        # The login email may legitimately be missing from the session
        if self.login_email is None:
            object.__setattr__(self, "login_email", "")
