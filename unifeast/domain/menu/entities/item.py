"""Catalog item supplied by the catalog collaborator."""

from decimal import Decimal
from typing import Any, Mapping, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Item(BaseModel):
    """Read-only catalog entry.

    Accepts both the canonical field names and the catalog feed's names
    (`dish_name`, `allergens`).

    Example:
        >>> item = Item.from_dict({
        ...     "dish_name": "Caesar Salad",
        ...     "student_price": 6.00,
        ...     "staff_price": 7.50,
        ...     "visitor_price": 9.00,
        ...     "allergens": ["eggs", "gluten"],
        ... })
        >>> item.allergen_tags
        ('eggs', 'gluten')
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., validation_alias=AliasChoices("name", "dish_name"))
    restaurant_name: str = ""
    description: str = ""
    category: str = ""
    cuisine_type: str = ""
    student_price: Decimal = Field(..., ge=0)
    staff_price: Decimal = Field(..., ge=0)
    visitor_price: Decimal = Field(..., ge=0)
    image_url: str = ""
    allergen_tags: Tuple[str, ...] = Field(
        default=(), validation_alias=AliasChoices("allergen_tags", "allergens")
    )
    available: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Item":
        """Build an item from a catalog feed record."""
        return cls.model_validate(dict(data))
