"""ProfileUpdate - partial update payload for a profile."""

from dataclasses import replace
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.exceptions.profile_errors import ProfileValidationError
from unifeast.domain.profile.core.value_objects.allergens import (
    CoreAllergens,
    ExtraAllergen,
    normalize_labels,
)
from unifeast.domain.profile.core.value_objects.dietary_preference import DietaryPreference
from unifeast.domain.profile.core.value_objects.identity_tier import IdentityTier

# Fields fixed at creation; never part of an update.
IMMUTABLE_FIELDS = ("id", "email")

# Fields owned by other components; carried through unmodified, never written.
UNOWNED_FIELDS = ("session_data",)


class ProfileUpdate(BaseModel):
    """Validated set of profile fields to change.

    Every field is optional; only supplied, non-null fields are written.
    Identity and email are not updatable, and session data belongs to
    other components.

    Examples:
        >>> update = ProfileUpdate.from_mapping({"identity_tier": "staff", "peanuts": True})
        >>> sorted(update.fields_set())
        ['identity_tier', 'peanuts']
        >>> ProfileUpdate.from_mapping({"email": "x@y.z"})
        Traceback (most recent call last):
        ...
        unifeast.domain.profile.core.exceptions.profile_errors.ProfileValidationError: ...
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    display_name: Optional[str] = None
    identity_tier: Optional[IdentityTier] = None
    dietary_preferences: Optional[FrozenSet[str]] = None
    period_plan: Optional[str] = None
    milk: Optional[bool] = None
    eggs: Optional[bool] = None
    peanuts: Optional[bool] = None
    tree_nuts: Optional[bool] = None
    shellfish: Optional[bool] = None
    other_allergens: Optional[Tuple[str, ...]] = None

    @field_validator("identity_tier", mode="before")
    @classmethod
    def _known_tier(cls, value: Any) -> Any:
        if value is None:
            return None
        tier = IdentityTier.parse(value)
        if tier is None:
            allowed = ", ".join(t.value for t in IdentityTier)
            raise ValueError(f"identity tier must be one of {allowed}, got {value!r}")
        return tier

    @field_validator("dietary_preferences", mode="before")
    @classmethod
    def _known_tags(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        tags = set()
        unknown = []
        for tag in value:
            if not isinstance(tag, str):
                raise ValueError(f"dietary preference must be a string, got {tag!r}")
            if not tag.strip():
                continue
            preference = DietaryPreference.parse(tag)
            if preference is None:
                unknown.append(tag)
            else:
                tags.add(preference.value)
        if unknown:
            raise ValueError(f"unknown dietary preferences: {', '.join(unknown)}")
        return frozenset(tags)

    @field_validator("other_allergens", mode="before")
    @classmethod
    def _clean_labels(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        if not all(isinstance(label, str) for label in value):
            raise ValueError("other allergens must be strings")
        return normalize_labels(value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProfileUpdate":
        """Validate a raw mapping of changes.

        Raises:
            ProfileValidationError: On immutable, unowned, unknown or malformed fields
        """
        rejected = [f"{name}: immutable" for name in IMMUTABLE_FIELDS if name in data]
        rejected += [f"{name}: not owned by the profile" for name in UNOWNED_FIELDS if name in data]
        if rejected:
            raise ProfileValidationError("Profile fields are not updatable", rejected)
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ProfileValidationError("Invalid profile update", errors) from e

    @classmethod
    def coerce(cls, changes: Union["ProfileUpdate", Mapping[str, Any]]) -> "ProfileUpdate":
        """Accept an already-validated update or validate a mapping."""
        if isinstance(changes, ProfileUpdate):
            return changes
        return cls.from_mapping(changes)

    def fields_set(self) -> Dict[str, Any]:
        """Supplied, non-null fields keyed by name."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }

    def is_empty(self) -> bool:
        return not self.fields_set()

    def apply_to(self, profile: Profile) -> Profile:
        """Return profile with the supplied fields replaced.

        Idempotent: applying the same update twice gives the same profile.
        """
        changes = self.fields_set()
        flags = {name: changes.pop(name) for name in CoreAllergens.flag_names() if name in changes}
        if flags:
            changes["core_allergens"] = replace(profile.core_allergens, **flags)
        return replace(profile, **changes)

    def with_extra_allergens(self, allergens: Iterable[ExtraAllergen]) -> "ProfileUpdate":
        """Return a copy whose other_allergens are the labels of the toggled extras.

        Labels are written in the form's display order.
        """
        chosen = set(allergens)
        data = dict(self.fields_set())
        data["other_allergens"] = [a.label for a in ExtraAllergen if a in chosen]
        return ProfileUpdate.from_mapping(data)
