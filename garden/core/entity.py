"""Entity model: dataclass for sprite-backed game objects and their config record."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Protocol, Union

import structlog
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from garden.core.host import SCREEN_HEIGHT, SCREEN_WIDTH, TILE_SIZE, Host, SpriteFlag

logger = structlog.get_logger()

# Sprite index meaning "no sprite assigned"
NO_SPRITE = 255

# Field defaults, grouped by how unusable values are normalized
_POSITION_DEFAULTS = {"x": 0, "y": 0}
_INDEX_DEFAULTS = {"sprite_id": NO_SPRITE, "color_key": 0, "sprite_rotation": 0, "sprite_flip": 0}
_FLAG_DEFAULTS = {"gc_exempt": False}

# Sizing fields must stay >= 1; anything lower collapses to 1
_SIZING_FIELDS = frozenset({"sprite_scale", "composite_width", "composite_height"})


def _to_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None if it can't be one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _positive_or_one(value: int) -> int:
    return value if value >= 1 else 1


def coerce_field(name: str, value: Any) -> Any:
    """Normalize a configurable entity field.

    Missing, ``None`` or unconvertible values become the field default.
    Index and sizing fields are rounded down to ints, and sizing fields are
    raised to at least 1. Unknown names pass through unchanged.
    """
    if name in _POSITION_DEFAULTS:
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
            return value
        number = _to_number(value)
        return _POSITION_DEFAULTS[name] if number is None else number
    if name in _INDEX_DEFAULTS:
        number = _to_number(value)
        return _INDEX_DEFAULTS[name] if number is None else math.floor(number)
    if name in _SIZING_FIELDS:
        number = _to_number(value)
        return 1 if number is None else _positive_or_one(math.floor(number))
    if name in _FLAG_DEFAULTS:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        return _FLAG_DEFAULTS[name]
    return value


class FrameObject(Protocol):
    """Anything the entity store can update and draw once per frame."""

    def update(self, host: Host) -> None: ...

    def draw(self, host: Host) -> None: ...


class EntityConfig(BaseModel):
    """Configuration record an entity is built from.

    Every field is optional and no value is rejected: missing, ``None`` or
    unconvertible values fall back to the defaults, and sizing values below
    1 become 1.
    """

    model_config = ConfigDict(extra="ignore")

    x: float = 0
    y: float = 0
    sprite_id: int = NO_SPRITE
    color_key: int = 0
    sprite_rotation: int = 0
    sprite_flip: int = 0
    sprite_scale: int = 1
    composite_width: int = 1
    composite_height: int = 1
    gc_exempt: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def degrade_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        return coerce_field(info.field_name, v)


@dataclass(eq=False)
class Entity:
    """Base game object with a position and a sprite appearance.

    Concrete kinds (see ``garden.core.variants``) must override ``update()``;
    they share the ``draw()`` defined here. Entities compare by identity so
    that a store can tell two equal-looking plants apart.
    """

    # Position
    x: float = 0
    y: float = 0

    # Sprite appearance
    sprite_id: int = NO_SPRITE
    color_key: int = 0  # palette index drawn as transparent
    sprite_rotation: int = 0  # n * 90 degrees, n in 0..3
    sprite_flip: int = 0  # 1 = x axis, 2 = y axis, 3 = both

    # Sprite size, in 8x8 tiles and magnification
    sprite_scale: int = 1
    composite_width: int = 1
    composite_height: int = 1

    # Lifecycle
    gc_exempt: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        super().__setattr__(name, coerce_field(name, value))

    @classmethod
    def from_config(
        cls,
        config: Optional[Union[EntityConfig, Mapping[str, Any]]] = None,
    ) -> "Entity":
        """Build an entity of this kind from a configuration record.

        Args:
            config: An EntityConfig, a plain mapping of field names, or None
                for an all-defaults entity.

        Returns:
            A new instance of ``cls``.
        """
        if config is None:
            config = EntityConfig()
        elif not isinstance(config, EntityConfig):
            config = EntityConfig.model_validate(dict(config))
        return cls(**config.model_dump())

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def sprite_size_x(self) -> int:
        """Rendered width in pixels."""
        return TILE_SIZE * self.composite_width * self.sprite_scale

    @property
    def sprite_size_y(self) -> int:
        """Rendered height in pixels."""
        return TILE_SIZE * self.composite_height * self.sprite_scale

    def get_position(self) -> tuple[float, float]:
        return (self.x, self.y)

    def get_is_onscreen(self) -> bool:
        """Check whether any part of the sprite can be on screen.

        Each axis is tested against its own sprite size, so a wide but short
        composite sprite is culled on y by its height, not its width.
        """
        x_onscreen = -self.sprite_size_x <= self.x <= SCREEN_WIDTH
        y_onscreen = -self.sprite_size_y <= self.y <= SCREEN_HEIGHT
        return x_onscreen and y_onscreen

    def draw(self, host: Host) -> None:
        """Blit the sprite through the host.

        A sprite asset flagged NO_TRANSFORM is always drawn unrotated and
        unflipped, whatever this instance is configured with.
        """
        if host.sprite_flag(self.sprite_id, SpriteFlag.NO_TRANSFORM):
            flip, rotation = 0, 0
        else:
            flip, rotation = self.sprite_flip, self.sprite_rotation
        host.draw_sprite(
            self.sprite_id,
            self.x,
            self.y,
            self.color_key,
            self.sprite_scale,
            flip,
            rotation,
        )

    def update(self, host: Host) -> None:
        """Per-frame behavior. Concrete kinds must override this.

        Calling the base implementation is a development-time defect: it is
        reported and otherwise ignored so the frame still renders.
        """
        logger.warning(
            "base_entity_update_called",
            kind=self.kind,
            hint="every entity kind must define its own update()",
        )

    def to_config(self) -> EntityConfig:
        """Snapshot the configurable fields back into a config record."""
        return EntityConfig(**{f.name: getattr(self, f.name) for f in fields(self)})
