"""DietaryPreference vocabulary."""

from enum import Enum
from typing import Iterable, Optional, Tuple


class DietaryPreference(str, Enum):
    """Fixed vocabulary of dietary preference tags.

    The enum value is the tag exactly as stored by both backends.

    Examples:
        >>> DietaryPreference.parse("gluten-free")
        <DietaryPreference.GLUTEN_FREE: 'Gluten-Free'>
        >>> DietaryPreference.parse("Paleo") is None
        True
    """

    HALAL = "Halal"
    VEGAN = "Vegan"
    VEGETARIAN = "Vegetarian"
    GLUTEN_FREE = "Gluten-Free"
    KOSHER = "Kosher"
    DAIRY_FREE = "Dairy-Free"
    NUT_FREE = "Nut-Free"

    @classmethod
    def vocabulary(cls) -> Tuple[str, ...]:
        """All tags, in display order."""
        return tuple(member.value for member in cls)

    @classmethod
    def parse(cls, tag: str) -> Optional["DietaryPreference"]:
        """Case-insensitive lookup of a tag; None if outside the vocabulary."""
        wanted = tag.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


def ordered_tags(tags: Iterable[str]) -> Tuple[str, ...]:
    """Sort tags in vocabulary order, unknown tags last in alphabetical order.

    Gives dietary preference sets a deterministic serialized form.

    Examples:
        >>> ordered_tags({"Vegan", "Halal", "Pescatarian"})
        ('Halal', 'Vegan', 'Pescatarian')
    """
    vocabulary = DietaryPreference.vocabulary()
    known = [tag for tag in vocabulary if tag in tags]
    unknown = sorted(tag for tag in set(tags) if tag not in vocabulary)
    return tuple(known + unknown)
