"""Pure menu services: allergen matching and tiered pricing."""

from unifeast.domain.menu.services.allergen_matcher import (
    conflicting_tags,
    has_allergen_conflict,
    user_allergen_labels,
)
from unifeast.domain.menu.services.pricing import price_for

__all__ = [
    "conflicting_tags",
    "has_allergen_conflict",
    "price_for",
    "user_allergen_labels",
]
