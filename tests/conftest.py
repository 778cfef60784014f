"""Shared test fixtures.

Loads .env.test (when present) so integration tests can point at a live
MongoDB; unit tests only use the in-memory and mocked stores below.
"""

from decimal import Decimal
from pathlib import Path
from typing import List

import pytest
from dotenv import load_dotenv

from unifeast.domain.menu.entities.item import Item
from unifeast.infrastructure.profile.in_memory_profile_store import InMemoryProfileStore

env_test_path = Path(__file__).parent.parent / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path, override=True)


@pytest.fixture
def primary_store() -> InMemoryProfileStore:
    """Fresh in-memory store speaking the primary (camelCase) shape."""
    return InMemoryProfileStore(name="primary", key_field="id")


@pytest.fixture
def secondary_store() -> InMemoryProfileStore:
    """Fresh in-memory store speaking the secondary (snake_case) shape."""
    return InMemoryProfileStore(name="secondary", key_field="user_id", stamp_timestamps=True)


@pytest.fixture
def primary_record() -> dict:
    """Primary-shape record with every supported field populated."""
    return {
        "id": "user-1",
        "email": "ada@uni.ac.uk",
        "userName": "Ada",
        "userIdentity": "staff",
        "dietaryPreferences": "Halal,Nut-Free",
        "periodPlan": "term-1",
        "milkAllergy": False,
        "eggsAllergy": True,
        "peanutsAllergy": True,
        "treeNutsAllergy": False,
        "shellfishAllergy": False,
        "otherAllergens": "Celery,Cereals containing gluten",
    }


@pytest.fixture
def secondary_record() -> dict:
    """Secondary-shape record as the key-value table stores it."""
    return {
        "user_id": "user-1",
        "email": "ada@uni.ac.uk",
        "user_name": "Ada",
        "user_identity": "visitor",
        "dietary_preferences": "Vegan",
        "period_plan": "",
        "milk_allergy": True,
        "eggs_allergy": False,
        "peanuts_allergy": False,
        "tree_nuts_allergy": False,
        "shellfish_allergy": False,
        "other_allergies": ["Fish"],
        "session_data": '{"cart": []}',
        "created_at": "2024-03-01T09:00:00.000Z",
        "updated_at": "2024-03-02T10:30:00.000Z",
    }


@pytest.fixture
def catalog() -> List[Item]:
    """Sample campus catalog in display order."""
    return [
        Item(
            name="Chicken Tikka Masala",
            restaurant_name="Spice Route",
            student_price=Decimal("8.50"),
            staff_price=Decimal("10.00"),
            visitor_price=Decimal("12.00"),
            allergen_tags=("milk", "eggs"),
        ),
        Item(
            name="Caesar Salad",
            restaurant_name="Green Bowl",
            student_price=Decimal("6.00"),
            staff_price=Decimal("7.50"),
            visitor_price=Decimal("9.00"),
            allergen_tags=("eggs", "gluten"),
        ),
        Item(
            name="Peanut Butter Sandwich",
            restaurant_name="Deli Corner",
            student_price=Decimal("4.50"),
            staff_price=Decimal("5.50"),
            visitor_price=Decimal("6.50"),
            allergen_tags=("peanuts", "gluten"),
            available=False,
        ),
    ]
