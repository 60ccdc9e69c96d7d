"""
Typed prototype views - Pydantic models built from data.raw entries.

Views are read-only snapshots; the FObject tree stays the source of truth.
"""

from modloader.prototypes.base import (
    Prototype,
    LocalisedString,
    register_prototype,
    get_prototype_type,
    get_all_prototype_types,
    load_prototypes,
)
from modloader.prototypes.types import (
    Color,
    FloatPair,
    ItemPrototype,
    TileEffectPrototype,
)

__all__ = [
    "Prototype",
    "LocalisedString",
    "register_prototype",
    "get_prototype_type",
    "get_all_prototype_types",
    "load_prototypes",
    "Color",
    "FloatPair",
    "ItemPrototype",
    "TileEffectPrototype",
]
