"""Concrete entity kinds living in the garden."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from garden.core.entity import Entity, EntityConfig
from garden.core.host import SCREEN_HEIGHT, SCREEN_WIDTH, Host


@dataclass(eq=False)
class Plant(Entity):
    """A planted crop. Stays put; growth is not simulated yet."""

    def update(self, host: Host) -> None:
        pass


@dataclass(eq=False)
class Weed(Entity):
    """A weed patch. Static like a plant."""

    def update(self, host: Host) -> None:
        pass


@dataclass(eq=False)
class Critter(Entity):
    """A wandering animal (squirrel, crow).

    Each frame it steps -1, 0 or +1 pixel on each axis. A step that would
    leave the area where the sprite fits on screen is skipped, so a critter
    inside stays inside. One placed outside is never moved onto the screen
    in a single jump: it only takes steps that bring it closer.
    """

    def update(self, host: Host) -> None:
        self.wander(host)

    def wander(self, host: Host) -> None:
        dx = host.rand_int(2) - 1
        dy = host.rand_int(2) - 1
        self.x = _step(self.x, dx, SCREEN_WIDTH - self.sprite_size_x)
        self.y = _step(self.y, dy, SCREEN_HEIGHT - self.sprite_size_y)


def _step(position: float, delta: int, upper: float) -> float:
    """Apply ``delta`` unless it moves away from ``[0, upper]``."""
    # Sprites larger than the screen can only sit at 0
    upper = max(0, upper)
    moved = position + delta
    if 0 <= moved <= upper:
        return moved
    if (moved < 0 and delta > 0) or (moved > upper and delta < 0):
        return moved
    return position


@dataclass(eq=False)
class Pet(Critter):
    """A cat or dog. Wanders like a critter but idles most frames."""

    # Moves on roughly one frame in IDLE_CHANCE + 1
    IDLE_CHANCE = 4

    def update(self, host: Host) -> None:
        if host.rand_int(self.IDLE_CHANCE) == 0:
            self.wander(host)


ENTITY_KINDS: dict[str, type[Entity]] = {
    "plant": Plant,
    "weed": Weed,
    "critter": Critter,
    "pet": Pet,
}


def create_entity(
    kind: str,
    config: Optional[Union[EntityConfig, Mapping[str, Any]]] = None,
) -> Entity:
    """Build an entity by kind name.

    Raises:
        KeyError: If ``kind`` is not a registered entity kind.
    """
    try:
        cls = ENTITY_KINDS[kind]
    except KeyError:
        raise KeyError(f"unknown entity kind: {kind!r}") from None
    return cls.from_config(config)
