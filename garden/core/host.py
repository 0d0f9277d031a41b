"""Host platform interface: the drawing, asset and random primitives the core consumes."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Protocol

# Fixed screen geometry of the console
SCREEN_WIDTH = 240
SCREEN_HEIGHT = 136
TILE_SIZE = 8


class SpriteFlag(IntEnum):
    """Meaning of the per-sprite asset flag bits."""

    NO_TRANSFORM = 0  # Do not flip or rotate


class Host(Protocol):
    """Protocol for the host platform an entity draws through.

    Real consoles, windowed renderers and the in-memory HeadlessHost all
    expose these primitives.
    """

    def sprite_flag(self, sprite_id: int, flag: int) -> bool:
        """Return True if bit ``flag`` is set for sprite ``sprite_id``."""
        ...

    def draw_sprite(
        self,
        sprite_id: int,
        x: float,
        y: float,
        color_key: int,
        scale: int,
        flip: int,
        rotation: int,
    ) -> None:
        """Blit a sprite at (x, y)."""
        ...

    def clear_screen(self, color: int) -> None:
        """Fill the screen with a palette color."""
        ...

    def draw_text(self, text: str, x: float, y: float) -> None:
        """Print text at (x, y)."""
        ...

    def rand_int(self, max_value: int) -> int:
        """Uniform random integer between 0 and max_value inclusive."""
        ...


@dataclass
class DrawCall:
    """One primitive issued to a HeadlessHost."""

    op: str  # "cls", "spr" or "print"
    args: tuple


@dataclass
class HeadlessHost:
    """In-memory host that records every primitive instead of rendering it.

    Sprite flags are stored as a bitmask per sprite id, so
    ``sprite_flags={3: 0b1}`` marks sprite 3 as NO_TRANSFORM.
    """

    sprite_flags: dict[int, int] = field(default_factory=dict)
    seed: Optional[int] = None
    calls: list[DrawCall] = field(default_factory=list)
    _rng: random.Random = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def set_sprite_flag(self, sprite_id: int, flag: int, value: bool = True) -> None:
        """Set or clear a flag bit on a sprite asset."""
        mask = self.sprite_flags.get(sprite_id, 0)
        if value:
            mask |= 1 << flag
        else:
            mask &= ~(1 << flag)
        self.sprite_flags[sprite_id] = mask

    def sprite_flag(self, sprite_id: int, flag: int) -> bool:
        return bool(self.sprite_flags.get(sprite_id, 0) & (1 << flag))

    def draw_sprite(
        self,
        sprite_id: int,
        x: float,
        y: float,
        color_key: int,
        scale: int,
        flip: int,
        rotation: int,
    ) -> None:
        self.calls.append(
            DrawCall("spr", (sprite_id, x, y, color_key, scale, flip, rotation))
        )

    def clear_screen(self, color: int) -> None:
        self.calls.append(DrawCall("cls", (color,)))

    def draw_text(self, text: str, x: float, y: float) -> None:
        self.calls.append(DrawCall("print", (text, x, y)))

    def rand_int(self, max_value: int) -> int:
        return self._rng.randint(0, max_value)

    def sprite_calls(self) -> list[DrawCall]:
        """Return only the recorded sprite blits, in issue order."""
        return [c for c in self.calls if c.op == "spr"]

    def reset(self) -> None:
        """Forget recorded calls (e.g. between frames)."""
        self.calls.clear()
