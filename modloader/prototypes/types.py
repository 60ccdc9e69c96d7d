"""
Views for common prototype types.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from modloader.prototypes.base import Prototype, register_prototype


UINT32_MAX = 2**32 - 1


def _array_values(value: Any) -> Any:
    """{"1": a, "2": b} -> [a, b]; scalars become one-element lists."""
    if isinstance(value, dict):
        return [value[k] for k in sorted(value, key=_index_key)]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [value]
    return value


def _index_key(key: str) -> tuple[int, Any]:
    return (0, int(key)) if key.isdigit() else (1, key)


# One or two floats, given either as a number or as a Lua array
FloatPair = Annotated[
    list[float],
    BeforeValidator(_array_values),
    Field(min_length=1, max_length=2),
]

Energy = str  # e.g. "4MJ"


class Color(BaseModel):
    """
    RGBA colour.

    Accepts {r=, g=, b=, a=} or {r, g, b[, a]} tables; missing channels
    default to 0 (alpha to 1).
    """

    model_config = ConfigDict(frozen=True)

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0

    @model_validator(mode='before')
    @classmethod
    def _from_array(cls, data: Any) -> Any:
        if isinstance(data, dict) and "1" in data:
            channels = dict(zip("rgba", _array_values(data)))
            return channels
        return data


@register_prototype("item")
class ItemPrototype(Prototype):
    """
    Item prototype.

    Attributes:
        icon: Icon file, resolved to the filesystem when a registry is given
        stack_size: Items per inventory slot
        fuel_value: Energy when burnt, e.g. "4MJ"
        fuel_glow_color: Glow colour while burning
    """
    icon: Optional[Path] = None
    icon_size: Optional[int] = None
    stack_size: Optional[int] = Field(None, ge=0, le=UINT32_MAX)
    default_request_amount: Optional[int] = Field(None, ge=0, le=UINT32_MAX)
    wire_count: Optional[int] = Field(None, ge=0, le=UINT32_MAX)
    subgroup: Optional[str] = None
    burnt_result: Optional[str] = None
    place_result: Optional[str] = None
    placed_as_equipment_result: Optional[str] = None

    fuel_value: Optional[Energy] = None
    fuel_category: Optional[str] = None
    fuel_acceleration_multiplier: Optional[float] = None
    fuel_top_speed_multiplier: Optional[float] = None
    fuel_emissions_multiplier: Optional[float] = None
    fuel_glow_color: Optional[Color] = None

    @field_validator("icon", mode='before')
    @classmethod
    def _resolve_icon(cls, value: Any, info: ValidationInfo) -> Any:
        registry = (info.context or {}).get("registry")
        if isinstance(value, str) and registry is not None:
            return registry.resolve_mod_path(value)
        return value


@register_prototype("tile-effect")
class TileEffectPrototype(Prototype):
    """Water and other animated tile shader settings."""
    animation_scale: Optional[FloatPair] = None
    animation_speed: Optional[float] = None
    dark_threshold: Optional[FloatPair] = None
    reflection_threshold: Optional[FloatPair] = None
    specular_threshold: Optional[FloatPair] = None
    foam_color: Optional[Color] = None
    foam_color_multiplier: Optional[float] = None
    specular_lightness: Optional[Color] = None
    tick_scale: Optional[float] = None
    far_zoom: Optional[float] = None
    near_zoom: Optional[float] = None
