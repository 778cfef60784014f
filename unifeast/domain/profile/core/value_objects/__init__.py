"""Profile value objects."""

from unifeast.domain.profile.core.value_objects.allergens import (
    CORE_ALLERGEN_LABELS,
    CoreAllergens,
    ExtraAllergen,
    normalize_labels,
)
from unifeast.domain.profile.core.value_objects.dietary_preference import (
    DietaryPreference,
    ordered_tags,
)
from unifeast.domain.profile.core.value_objects.identity_tier import IdentityTier

__all__ = [
    "CORE_ALLERGEN_LABELS",
    "CoreAllergens",
    "DietaryPreference",
    "ExtraAllergen",
    "IdentityTier",
    "normalize_labels",
    "ordered_tags",
]
