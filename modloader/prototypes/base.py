"""
Base class for typed prototype views.

Prototypes in data.raw are loosely typed tables. A view picks out the
fields a tool cares about and validates them with Pydantic. Views never
modify the tree; they are built from it.

Usage:
    @register_prototype("item")
    class ItemPrototype(Prototype):
        stack_size: int | None = None

    items = load_prototypes(data_raw, "item", registry)
    items["iron-plate"].stack_size
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict

from modloader.core.values import FObject

if TYPE_CHECKING:
    from modloader.mods.registry import ModRegistry


# A plain string or a {"1": key, "2": param, ...} table
LocalisedString = Union[str, dict[str, Any]]

P = TypeVar('P', bound='Prototype')


class Prototype(BaseModel):
    """
    Common prototype fields.

    Attributes:
        name: Unique name within the prototype type
        type: Prototype type (key under data.raw)
        order: Sort order string
        localised_name: Display name override
        localised_description: Description override
    """

    model_config = ConfigDict(
        # Prototypes carry many fields no view models
        extra='ignore',
        frozen=True,
    )

    _type_name: ClassVar[str] = ""

    name: str
    type: str
    order: Optional[str] = None
    localised_name: Optional[LocalisedString] = None
    localised_description: Optional[LocalisedString] = None

    @classmethod
    def get_type_name(cls) -> str:
        return cls._type_name

    @classmethod
    def from_fobject(
        cls: type[P],
        obj: FObject,
        registry: ModRegistry | None = None,
    ) -> P:
        """
        Build a view from a converted prototype table.

        Args:
            obj: The prototype's FObject
            registry: Used to resolve __mod__ asset paths (optional)

        Raises:
            pydantic.ValidationError: If a modelled field has the wrong shape
        """
        return cls.model_validate(obj.to_dict(), context={"registry": registry})


# Registry of view types by prototype type name
_prototype_registry: dict[str, type[Prototype]] = {}


def register_prototype(type_name: str):
    """
    Decorator to register a view for a prototype type.

    Usage:
        @register_prototype("item")
        class ItemPrototype(Prototype):
            ...
    """
    def decorator(cls: type[P]) -> type[P]:
        cls._type_name = type_name
        _prototype_registry[type_name] = cls
        return cls
    return decorator


def get_prototype_type(type_name: str) -> type[Prototype] | None:
    """Get the view class for a prototype type."""
    return _prototype_registry.get(type_name)


def get_all_prototype_types() -> dict[str, type[Prototype]]:
    return _prototype_registry.copy()


def load_prototypes(
    data_raw: FObject,
    type_name: str,
    registry: ModRegistry | None = None,
) -> dict[str, Prototype]:
    """
    Build views for every prototype of one type.

    Args:
        data_raw: The converted data.raw object
        type_name: Prototype type, e.g. "item"
        registry: Used to resolve asset paths

    Returns:
        Views keyed by prototype name (empty if the type has no entries)

    Raises:
        KeyError: If no view is registered for type_name
    """
    cls = get_prototype_type(type_name)
    if cls is None:
        raise KeyError(f"No prototype view registered for '{type_name}'")

    views: dict[str, Prototype] = {}
    for entry in data_raw.table(type_name):
        prototype = entry.table()
        if prototype:
            views[entry.key] = cls.from_fobject(prototype, registry)
    return views
