"""IdentityTier value object."""

from enum import Enum
from typing import Optional


class IdentityTier(str, Enum):
    """Pricing/classification category of a campus user.

    Examples:
        >>> IdentityTier("staff")
        <IdentityTier.STAFF: 'staff'>
        >>> IdentityTier.parse(" Visitor ")
        <IdentityTier.VISITOR: 'visitor'>
        >>> IdentityTier.parse("alumni") is None
        True
    """

    STUDENT = "student"
    STAFF = "staff"
    VISITOR = "visitor"

    @classmethod
    def default(cls) -> "IdentityTier":
        """Tier assigned to new profiles."""
        return cls.STUDENT

    @classmethod
    def parse(cls, value: object) -> Optional["IdentityTier"]:
        """Return the matching tier, or None when value is not a known tier.

        Matching ignores case and surrounding whitespace.
        """
        if isinstance(value, IdentityTier):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None
