"""Unit tests for the allergen matcher."""

from decimal import Decimal

import pytest

from unifeast.domain.menu.entities.item import Item
from unifeast.domain.menu.services.allergen_matcher import (
    conflicting_tags,
    has_allergen_conflict,
    user_allergen_labels,
)
from unifeast.domain.profile.core.entities.profile import Profile
from unifeast.domain.profile.core.value_objects.allergens import CoreAllergens


def make_item(*tags: str) -> Item:
    return Item(
        name="Dish",
        student_price=Decimal("1.00"),
        staff_price=Decimal("1.00"),
        visitor_price=Decimal("1.00"),
        allergen_tags=tags,
    )


class TestAllergenMatcher:
    """Test conflict detection between profiles and catalog items."""

    def test_peanut_flag_conflicts_with_peanut_tag(self):
        """Test a set core flag matches the same item tag."""
        profile = Profile(id="u1", core_allergens=CoreAllergens(peanuts=True))

        assert has_allergen_conflict(profile, make_item("peanuts", "gluten")) is True

    def test_peanut_flag_ignores_unrelated_tags(self):
        """Test no conflict when tags share nothing with the profile."""
        profile = Profile(id="u1", core_allergens=CoreAllergens(peanuts=True))

        assert has_allergen_conflict(profile, make_item("milk", "eggs")) is False

    def test_containment_is_case_insensitive(self):
        """Test 'Tree Nuts' catches the coarser 'nuts' tag."""
        profile = Profile(id="u1", other_allergens=("Tree Nuts",))
        item = make_item("peanuts", "nuts")

        assert has_allergen_conflict(profile, item) is True
        assert conflicting_tags(profile, item) == ("nuts",)

    def test_tree_nuts_flag_catches_nuts_tag(self):
        """Test the tree nuts flag label contains the 'nuts' tag."""
        profile = Profile(id="u1", core_allergens=CoreAllergens(tree_nuts=True))

        assert has_allergen_conflict(profile, make_item("Nuts")) is True

    def test_tag_containing_label_conflicts(self):
        """Test containment works in the other direction too."""
        profile = Profile(id="u1", other_allergens=("gluten",))

        assert has_allergen_conflict(profile, make_item("Cereals containing GLUTEN")) is True

    def test_false_positive_is_accepted(self):
        """Test substring overlap flags an item even when unrelated."""
        profile = Profile(id="u1", other_allergens=("Fish",))

        assert has_allergen_conflict(profile, make_item("shellfish")) is True

    def test_whitespace_is_trimmed(self):
        """Test padded labels and tags still match."""
        profile = Profile(id="u1", other_allergens=("  Celery ",))

        assert has_allergen_conflict(profile, make_item(" celery  ")) is True

    @pytest.mark.parametrize(
        "tags",
        [
            ("milk", "eggs", "peanuts", "tree nuts", "shellfish", "gluten"),
            ("",),
            (),
        ],
    )
    def test_profile_without_allergens_never_conflicts(self, tags):
        """Test an empty allergen set never produces a warning."""
        assert has_allergen_conflict(Profile(id="u1"), make_item(*tags)) is False

    def test_empty_tags_never_conflict(self):
        """Test items with no (or blank) tags never warn."""
        profile = Profile(
            id="u1",
            core_allergens=CoreAllergens(milk=True, eggs=True),
            other_allergens=("Fish",),
        )

        assert has_allergen_conflict(profile, make_item()) is False
        assert has_allergen_conflict(profile, make_item("", "   ")) is False

    def test_missing_profile_never_conflicts(self):
        """Test the default view shows no warnings."""
        assert has_allergen_conflict(None, make_item("peanuts")) is False

    def test_user_labels_are_comparable(self):
        """Test user labels are lowercased and trimmed."""
        profile = Profile(
            id="u1",
            core_allergens=CoreAllergens(shellfish=True),
            other_allergens=("Sesame seeds",),
        )

        assert user_allergen_labels(profile) == ("shellfish", "sesame seeds")
        assert user_allergen_labels(None) == ()
