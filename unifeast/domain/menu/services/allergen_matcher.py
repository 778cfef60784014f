"""Allergen matcher.

Cross-references a user's allergen labels against a catalog item's
allergen tags. Catalog tags and profile labels are maintained
independently and differ in granularity ("tree nuts" vs "nuts"), so the
match is a case-insensitive substring test in both directions rather than
equality. False alarms are accepted; missed allergens are not.
"""

from typing import Iterable, Optional, Tuple

from unifeast.domain.menu.entities.item import Item
from unifeast.domain.profile.core.entities.profile import Profile


def _comparable(labels: Iterable[str]) -> Tuple[str, ...]:
    """Lowercase and trim labels, dropping empty and whitespace-only ones."""
    return tuple(label.strip().lower() for label in labels if label and label.strip())


def user_allergen_labels(profile: Optional[Profile]) -> Tuple[str, ...]:
    """Labels of every set core flag plus every other allergen, comparable form."""
    if profile is None:
        return ()
    return _comparable(profile.allergen_labels())


def conflicting_tags(profile: Optional[Profile], item: Item) -> Tuple[str, ...]:
    """Item tags that conflict with the user's allergens, in item order.

    Examples:
        >>> profile = Profile(id="u1", other_allergens=("Tree Nuts",))
        >>> item = Item(name="Trail mix", student_price=1, staff_price=1,
        ...             visitor_price=1, allergen_tags=("peanuts", "nuts"))
        >>> conflicting_tags(profile, item)
        ('nuts',)
    """
    user_labels = user_allergen_labels(profile)
    if not user_labels:
        return ()

    conflicts = []
    for original in item.allergen_tags:
        tag = original.strip().lower()
        if not tag:
            continue
        if any(tag in label or label in tag for label in user_labels):
            conflicts.append(original)
    return tuple(conflicts)


def has_allergen_conflict(profile: Optional[Profile], item: Item) -> bool:
    """Whether a "may contain allergens" warning must be shown for item.

    Empty user allergen set, empty item tag set or missing profile never
    conflict.
    """
    return bool(conflicting_tags(profile, item))
