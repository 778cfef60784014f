"""Pricing resolver - selects an item's price for the user's identity tier."""

from decimal import Decimal
from typing import Optional

from unifeast.domain.menu.entities.item import Item
from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.value_objects.identity_tier import IdentityTier


def price_for(profile: Optional[Profile], item: Item) -> Decimal:
    """Price of item for profile's identity tier.

    Missing profile or unrecognised tier falls back to the student price.
    Total: never raises.

    Examples:
        >>> item = Item(name="Tikka", student_price="8.50", staff_price="10.00",
        ...             visitor_price="12.00")
        >>> price_for(Profile(id="u1", identity_tier=IdentityTier.STAFF), item)
        Decimal('10.00')
        >>> price_for(None, item)
        Decimal('8.50')
    """
    if profile is None:
        return item.student_price

    tier = IdentityTier.parse(profile.identity_tier)
    if tier is IdentityTier.STAFF:
        return item.staff_price
    if tier is IdentityTier.VISITOR:
        return item.visitor_price
    return item.student_price
