"""Schema normalizer - maps both store shapes onto the canonical Profile.

Primary store (GraphQL data model), camelCase:

    id, email, userName, userIdentity, dietaryPreferences, periodPlan,
    milkAllergy, eggsAllergy, peanutsAllergy, treeNutsAllergy,
    shellfishAllergy, otherAllergens

    dietaryPreferences and otherAllergens are comma-joined strings.

Secondary store (key-value table), snake_case:

    user_id, email, user_name, user_identity, dietary_preferences,
    period_plan, milk_allergy, eggs_allergy, peanuts_allergy,
    tree_nuts_allergy, shellfish_allergy, other_allergies, session_data,
    created_at, updated_at

    other_allergies is a native list; timestamps are ISO-8601 strings.

Every canonical field has an explicit entry in each shape's field table,
either a wire name or UNSUPPORTED. The tables are checked against the
Profile dataclass when this module is imported, so adding a canonical field
without deciding how each store maps it fails loudly.

Round-trips are lossless over the fields a store supports:

    from_primary(to_primary(p)) == p      (session_data, timestamps excluded)
    from_secondary(to_secondary(p)) == p
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

import structlog

from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.value_objects.allergens import CoreAllergens, normalize_labels
from unifeast.domain.profile.core.value_objects.dietary_preference import ordered_tags
from unifeast.domain.profile.core.value_objects.identity_tier import IdentityTier
from unifeast.domain.profile.core.value_objects.profile_update import ProfileUpdate

logger = structlog.get_logger(__name__)

UNSUPPORTED = None

LABEL_SEPARATOR = ","


# ============================================================
# Label lists
# ============================================================


def split_labels(text: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-joined list, trimming and dropping empty segments.

    Examples:
        >>> split_labels("Celery,Gluten,")
        ('Celery', 'Gluten')
        >>> split_labels(" ,, ")
        ()
    """
    if not text:
        return ()
    return normalize_labels(text.split(LABEL_SEPARATOR))


def join_labels(labels: Iterable[str]) -> str:
    """Join labels with no leading, trailing or doubled separators.

    Examples:
        >>> join_labels(["Celery", "", " Gluten "])
        'Celery,Gluten'
    """
    return LABEL_SEPARATOR.join(normalize_labels(labels))


# ============================================================
# Value codecs
# ============================================================


def _decode_text(value: Any) -> str:
    return "" if value is None else str(value)


def _decode_flag(value: Any) -> bool:
    return bool(value) if value is not None else False


def _decode_tier(value: Any) -> IdentityTier:
    if value is None or value == "":
        return IdentityTier.default()
    tier = IdentityTier.parse(value)
    if tier is None:
        logger.warning("Unknown identity tier in stored profile, using default", value=value)
        return IdentityTier.default()
    return tier


def _encode_tier(tier: IdentityTier) -> str:
    return tier.value


def _present(values: Iterable[Any]) -> Iterable[Any]:
    # Null list entries read as absent; other non-strings are rejected
    return (value for value in values if value is not None)


def _decode_tags(value: Any) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset(split_labels(value))
    return frozenset(normalize_labels(_present(value)))


def _encode_tags(tags: FrozenSet[str]) -> str:
    return join_labels(ordered_tags(tags))


def _decode_joined_labels(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return split_labels(value)
    return normalize_labels(_present(value))


def _decode_label_list(value: Any) -> Tuple[str, ...]:
    # Older secondary records may hold the joined string form
    return _decode_joined_labels(value)


def _encode_label_list(labels: Tuple[str, ...]) -> list:
    return list(labels)


def _decode_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    # Naive values are taken as UTC by Profile
    return dt


def _encode_timestamp(dt: datetime) -> str:
    return dt.isoformat()


@dataclass(frozen=True)
class _Codec:
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]


_TEXT = _Codec(encode=str, decode=_decode_text)
_FLAG = _Codec(encode=bool, decode=_decode_flag)
_TIER = _Codec(encode=_encode_tier, decode=_decode_tier)
_TAGS = _Codec(encode=_encode_tags, decode=_decode_tags)
_JOINED_LABELS = _Codec(encode=join_labels, decode=_decode_joined_labels)
_LABEL_LIST = _Codec(encode=_encode_label_list, decode=_decode_label_list)
_TIMESTAMP = _Codec(encode=_encode_timestamp, decode=_decode_timestamp)


# ============================================================
# Field tables
# ============================================================

_CORE_PREFIX = "core_allergens."


def canonical_field_paths() -> Tuple[str, ...]:
    """Canonical fields, with core allergen flags flattened to dotted paths."""
    paths = []
    for f in fields(Profile):
        if f.name == "core_allergens":
            paths.extend(_CORE_PREFIX + name for name in CoreAllergens.flag_names())
        else:
            paths.append(f.name)
    return tuple(paths)


@dataclass(frozen=True)
class StoreShape:
    """Wire shape of one store: canonical path -> (wire name, codec)."""

    name: str
    key_field: str
    wire_names: Mapping[str, Optional[str]]
    codecs: Mapping[str, _Codec]

    def supported_paths(self) -> Tuple[str, ...]:
        return tuple(path for path, wire in self.wire_names.items() if wire is not UNSUPPORTED)

    def check_exhaustive(self) -> None:
        canonical = set(canonical_field_paths())
        declared = set(self.wire_names)
        if canonical != declared:
            missing = sorted(canonical - declared)
            extra = sorted(declared - canonical)
            raise TypeError(
                f"{self.name} shape out of sync with Profile: "
                f"unmapped={missing} unknown={extra}"
            )
        uncoded = sorted(set(self.supported_paths()) - set(self.codecs))
        if uncoded:
            raise TypeError(f"{self.name} shape has no codec for {uncoded}")


PRIMARY_SHAPE = StoreShape(
    name="primary",
    key_field="id",
    wire_names={
        "id": "id",
        "email": "email",
        "display_name": "userName",
        "identity_tier": "userIdentity",
        "dietary_preferences": "dietaryPreferences",
        "period_plan": "periodPlan",
        "core_allergens.milk": "milkAllergy",
        "core_allergens.eggs": "eggsAllergy",
        "core_allergens.peanuts": "peanutsAllergy",
        "core_allergens.tree_nuts": "treeNutsAllergy",
        "core_allergens.shellfish": "shellfishAllergy",
        "other_allergens": "otherAllergens",
        "session_data": UNSUPPORTED,
        "created_at": UNSUPPORTED,
        "updated_at": UNSUPPORTED,
    },
    codecs={
        "id": _TEXT,
        "email": _TEXT,
        "display_name": _TEXT,
        "identity_tier": _TIER,
        "dietary_preferences": _TAGS,
        "period_plan": _TEXT,
        "core_allergens.milk": _FLAG,
        "core_allergens.eggs": _FLAG,
        "core_allergens.peanuts": _FLAG,
        "core_allergens.tree_nuts": _FLAG,
        "core_allergens.shellfish": _FLAG,
        "other_allergens": _JOINED_LABELS,
    },
)

SECONDARY_SHAPE = StoreShape(
    name="secondary",
    key_field="user_id",
    wire_names={
        "id": "user_id",
        "email": "email",
        "display_name": "user_name",
        "identity_tier": "user_identity",
        "dietary_preferences": "dietary_preferences",
        "period_plan": "period_plan",
        "core_allergens.milk": "milk_allergy",
        "core_allergens.eggs": "eggs_allergy",
        "core_allergens.peanuts": "peanuts_allergy",
        "core_allergens.tree_nuts": "tree_nuts_allergy",
        "core_allergens.shellfish": "shellfish_allergy",
        "other_allergens": "other_allergies",
        "session_data": "session_data",
        "created_at": "created_at",
        "updated_at": "updated_at",
    },
    codecs={
        "id": _TEXT,
        "email": _TEXT,
        "display_name": _TEXT,
        "identity_tier": _TIER,
        "dietary_preferences": _TAGS,
        "period_plan": _TEXT,
        "core_allergens.milk": _FLAG,
        "core_allergens.eggs": _FLAG,
        "core_allergens.peanuts": _FLAG,
        "core_allergens.tree_nuts": _FLAG,
        "core_allergens.shellfish": _FLAG,
        "other_allergens": _LABEL_LIST,
        "session_data": _TEXT,
        "created_at": _TIMESTAMP,
        "updated_at": _TIMESTAMP,
    },
)

# ProfileUpdate field -> canonical path
_UPDATE_PATHS: Dict[str, str] = {
    name: (_CORE_PREFIX + name if name in CoreAllergens.flag_names() else name)
    for name in ProfileUpdate.model_fields
}

for _shape in (PRIMARY_SHAPE, SECONDARY_SHAPE):
    _shape.check_exhaustive()

_unknown_update_paths = set(_UPDATE_PATHS.values()) - set(canonical_field_paths())
if _unknown_update_paths:
    raise TypeError(f"ProfileUpdate fields without canonical path: {sorted(_unknown_update_paths)}")

# Every updatable field must be writable to both stores
for _shape in (PRIMARY_SHAPE, SECONDARY_SHAPE):
    _unwritable = sorted(set(_UPDATE_PATHS.values()) - set(_shape.supported_paths()))
    if _unwritable:
        raise TypeError(f"ProfileUpdate fields not supported by {_shape.name}: {_unwritable}")


# ============================================================
# Conversions
# ============================================================


def _flatten(profile: Profile) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for f in fields(Profile):
        value = getattr(profile, f.name)
        if f.name == "core_allergens":
            for name in CoreAllergens.flag_names():
                values[_CORE_PREFIX + name] = getattr(value, name)
        else:
            values[f.name] = value
    return values


def _unflatten(values: Dict[str, Any]) -> Profile:
    flags = {
        path[len(_CORE_PREFIX):]: values.pop(path)
        for path in list(values)
        if path.startswith(_CORE_PREFIX)
    }
    return Profile(core_allergens=CoreAllergens(**flags), **values)


def to_wire(profile: Profile, shape: StoreShape) -> Dict[str, Any]:
    """Encode profile in the shape's wire format.

    Unsupported fields are dropped; unset timestamps are omitted.
    """
    flat = _flatten(profile)
    record: Dict[str, Any] = {}
    for path, wire in shape.wire_names.items():
        if wire is UNSUPPORTED or flat[path] is None:
            continue
        record[wire] = shape.codecs[path].encode(flat[path])
    return record


def from_wire(raw: Mapping[str, Any], shape: StoreShape) -> Profile:
    """Decode a raw record of the given shape into a canonical Profile.

    Missing or null fields read as canonical defaults; unsupported fields
    take their defaults. Nothing is invented beyond that.

    Raises:
        ValueError: If the record has no key or holds undecodable values
    """
    if not raw.get(shape.key_field):
        raise ValueError(f"{shape.name} record has no '{shape.key_field}'")

    values: Dict[str, Any] = {}
    for path, wire in shape.wire_names.items():
        if wire is UNSUPPORTED:
            continue
        values[path] = shape.codecs[path].decode(raw.get(wire))
    return _unflatten(values)


def update_to_wire(update: ProfileUpdate, shape: StoreShape) -> Dict[str, Any]:
    """Encode only the supplied fields of update for the shape."""
    record: Dict[str, Any] = {}
    for name, value in update.fields_set().items():
        path = _UPDATE_PATHS[name]
        record[shape.wire_names[path]] = shape.codecs[path].encode(value)
    return record


def from_primary(raw: Mapping[str, Any]) -> Profile:
    return from_wire(raw, PRIMARY_SHAPE)


def from_secondary(raw: Mapping[str, Any]) -> Profile:
    return from_wire(raw, SECONDARY_SHAPE)


def to_primary(profile: Profile) -> Dict[str, Any]:
    return to_wire(profile, PRIMARY_SHAPE)


def to_secondary(profile: Profile) -> Dict[str, Any]:
    return to_wire(profile, SECONDARY_SHAPE)


def update_to_primary(update: ProfileUpdate) -> Dict[str, Any]:
    return update_to_wire(update, PRIMARY_SHAPE)


def update_to_secondary(update: ProfileUpdate) -> Dict[str, Any]:
    return update_to_wire(update, SECONDARY_SHAPE)
