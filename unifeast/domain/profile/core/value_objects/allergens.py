"""Allergen value objects.

Two allergen families exist on a profile:

- the five core allergens, stored as independent boolean flags;
- extra allergens, stored as free-text labels. The ten named extras below
  are what the profile form offers, but stores may hold any label.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple


# Flag name -> label used when matching against catalog allergen tags.
CORE_ALLERGEN_LABELS: Dict[str, str] = {
    "milk": "milk",
    "eggs": "eggs",
    "peanuts": "peanuts",
    "tree_nuts": "tree nuts",
    "shellfish": "shellfish",
}


@dataclass(frozen=True)
class CoreAllergens:
    """The five core allergen flags.

    Examples:
        >>> CoreAllergens(peanuts=True, tree_nuts=True).labels()
        ('peanuts', 'tree nuts')
        >>> CoreAllergens().any()
        False
    """

    milk: bool = False
    eggs: bool = False
    peanuts: bool = False
    tree_nuts: bool = False
    shellfish: bool = False

    @classmethod
    def flag_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def labels(self) -> Tuple[str, ...]:
        """Labels of the flags that are set, in declaration order."""
        return tuple(
            CORE_ALLERGEN_LABELS[name] for name in self.flag_names() if getattr(self, name)
        )

    def any(self) -> bool:
        return any(getattr(self, name) for name in self.flag_names())


class ExtraAllergen(str, Enum):
    """Named extra allergens offered by the profile form.

    The value is the stable key; `label` is the text written into the
    profile's other-allergen list when the allergen is toggled on.
    """

    CELERY = "celery"
    GLUTEN = "gluten"
    CRUSTACEANS = "crustaceans"
    FISH = "fish"
    LUPIN = "lupin"
    MOLLUSCS = "molluscs"
    MUSTARD = "mustard"
    SESAME = "sesame"
    SOYBEANS = "soybeans"
    SULPHITES = "sulphites"

    @property
    def label(self) -> str:
        return _EXTRA_ALLERGEN_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> Optional["ExtraAllergen"]:
        """Find the extra allergen whose label or key equals label (any case)."""
        wanted = label.strip().lower()
        for member in cls:
            if wanted in (member.value, member.label.lower()):
                return member
        return None


_EXTRA_ALLERGEN_LABELS: Dict[ExtraAllergen, str] = {
    ExtraAllergen.CELERY: "Celery",
    ExtraAllergen.GLUTEN: "Cereals containing gluten",
    ExtraAllergen.CRUSTACEANS: "Crustaceans",
    ExtraAllergen.FISH: "Fish",
    ExtraAllergen.LUPIN: "Lupin",
    ExtraAllergen.MOLLUSCS: "Molluscs",
    ExtraAllergen.MUSTARD: "Mustard",
    ExtraAllergen.SESAME: "Sesame seeds",
    ExtraAllergen.SOYBEANS: "Soybeans",
    ExtraAllergen.SULPHITES: "Sulphur dioxide and sulphites",
}


def normalize_labels(labels: Iterable[str]) -> Tuple[str, ...]:
    """Trim labels, drop blank ones and repeats, keep first-seen order.

    Examples:
        >>> normalize_labels([" Celery", "", "Gluten", "Celery", "  "])
        ('Celery', 'Gluten')

    Raises:
        TypeError: If a label is not a string
    """
    seen = set()
    result = []
    for label in labels:
        if not isinstance(label, str):
            raise TypeError(f"allergen label must be a string, got {label!r}")
        cleaned = label.strip()
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        result.append(cleaned)
    return tuple(result)
