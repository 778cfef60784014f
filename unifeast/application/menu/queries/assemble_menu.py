"""Assemble menu query.

Pairs every catalog item with the user's price and an allergen warning
flag. Profile lookup failures never block the menu: it renders with the
default view (student prices, no warnings).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

import structlog

from unifeast.application.profile.profile_repository import ProfileRepository
from unifeast.domain.menu.entities.item import Item
from unifeast.domain.menu.services.allergen_matcher import has_allergen_conflict
from unifeast.domain.menu.services.pricing import price_for
from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.exceptions.profile_errors import ProfileDomainError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MenuEntry:
    """One rendered menu row."""

    item: Item
    price: Decimal
    has_allergen_warning: bool


@dataclass
class AssembleMenuQuery:
    """Query producing menu entries for a user.

    Examples:
        >>> query = AssembleMenuQuery(repository)
        >>> entries = await query.execute("user-1", catalog)
        >>> [(e.item.name, e.price, e.has_allergen_warning) for e in entries]
        [('Chicken Tikka Masala', Decimal('10.00'), True)]
    """

    repository: ProfileRepository

    async def execute(self, user_id: Optional[str], catalog: Iterable[Item]) -> List[MenuEntry]:
        """Execute assemble menu query.

        Args:
            user_id: Signed-in user, or None before sign-in completes
            catalog: Items in display order

        Returns:
            One entry per item, in catalog order (unavailable items included)
        """
        profile = await self._load_profile(user_id)
        return [
            MenuEntry(
                item=item,
                price=price_for(profile, item),
                has_allergen_warning=has_allergen_conflict(profile, item),
            )
            for item in catalog
        ]

    async def _load_profile(self, user_id: Optional[str]) -> Optional[Profile]:
        if not user_id:
            return None
        try:
            return await self.repository.get(user_id)
        except ProfileDomainError as e:
            logger.warning(
                "Profile unavailable, rendering default menu",
                user_id=user_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None
