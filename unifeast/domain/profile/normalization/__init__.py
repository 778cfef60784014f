"""Schema normalization between store wire shapes and the canonical Profile."""

from unifeast.domain.profile.normalization.schema_normalizer import (
    PRIMARY_SHAPE,
    SECONDARY_SHAPE,
    StoreShape,
    from_primary,
    from_secondary,
    from_wire,
    join_labels,
    split_labels,
    to_primary,
    to_secondary,
    to_wire,
    update_to_primary,
    update_to_secondary,
    update_to_wire,
)

__all__ = [
    "PRIMARY_SHAPE",
    "SECONDARY_SHAPE",
    "StoreShape",
    "from_primary",
    "from_secondary",
    "from_wire",
    "join_labels",
    "split_labels",
    "to_primary",
    "to_secondary",
    "to_wire",
    "update_to_primary",
    "update_to_secondary",
    "update_to_wire",
]
