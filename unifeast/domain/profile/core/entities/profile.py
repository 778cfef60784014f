"""Profile entity - canonical, backend-agnostic dietary profile."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Optional, Tuple

from unifeast.domain.profile.core.value_objects.allergens import (
    CoreAllergens,
    ExtraAllergen,
    normalize_labels,
)
from unifeast.domain.profile.core.value_objects.identity_tier import IdentityTier


@dataclass(frozen=True)
class Profile:
    """Canonical dietary/allergen profile of one user.

    Exactly one canonical profile exists per user id, whichever physical
    store currently holds it. Instances are immutable; updates produce new
    instances (see `ProfileUpdate.apply_to`).

    Invariants:
    - id is non-empty and never changes
    - dietary_preferences has no duplicates (it is a set)
    - other_allergens holds trimmed, non-empty, distinct labels in
      first-seen order
    - core flags and other labels together are the full allergen set; a
      label may overlap a core flag
    - timestamps are timezone-aware; naive values are taken as UTC

    Examples:
        >>> profile = Profile.new("user-1", "ada@uni.ac.uk")
        >>> profile.identity_tier
        <IdentityTier.STUDENT: 'student'>
        >>> profile.allergen_labels()
        ()
    """

    id: str
    email: str = ""
    display_name: str = ""
    identity_tier: IdentityTier = IdentityTier.STUDENT
    dietary_preferences: FrozenSet[str] = frozenset()
    period_plan: str = ""
    core_allergens: CoreAllergens = field(default_factory=CoreAllergens)
    other_allergens: Tuple[str, ...] = ()
    session_data: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate invariants and normalize collections."""
        if not self.id or not self.id.strip():
            raise ValueError("Profile id cannot be empty")

        object.__setattr__(self, "dietary_preferences", frozenset(self.dietary_preferences))
        object.__setattr__(self, "other_allergens", normalize_labels(self.other_allergens))
        for name in ("created_at", "updated_at"):
            value = getattr(self, name)
            if value is not None and value.tzinfo is None:
                object.__setattr__(self, name, value.replace(tzinfo=timezone.utc))

    @staticmethod
    def new(user_id: str, email: str) -> "Profile":
        """Factory for the default profile written on first access.

        All allergen flags false, tier student, every text field empty
        except email.
        """
        return Profile(id=user_id, email=email or "")

    def allergen_labels(self) -> Tuple[str, ...]:
        """Labels for every set core flag followed by every other allergen."""
        return self.core_allergens.labels() + self.other_allergens

    def has_allergens(self) -> bool:
        return bool(self.allergen_labels())

    def extra_allergen_flags(self) -> Dict[ExtraAllergen, bool]:
        """Which named extra allergens appear in other_allergens.

        Used to prefill toggle forms. Matching is by label or key, any case;
        free-text labels that match no named allergen are ignored here.
        """
        present = {ExtraAllergen.from_label(label) for label in self.other_allergens}
        return {allergen: allergen in present for allergen in ExtraAllergen}
