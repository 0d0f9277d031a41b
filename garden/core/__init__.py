"""Garden core: entities, the entity store traversal and the frame driver."""

from garden.core.engine import GardenEngine
from garden.core.entity import Entity, EntityConfig, FrameObject
from garden.core.entity_store import EntityGroup, EntitySequence, EntityStore
from garden.core.host import HeadlessHost, Host
from garden.core.variants import Critter, Pet, Plant, Weed

__all__ = [
    "GardenEngine",
    "Entity",
    "EntityConfig",
    "FrameObject",
    "EntityGroup",
    "EntitySequence",
    "EntityStore",
    "HeadlessHost",
    "Host",
    "Critter",
    "Pet",
    "Plant",
    "Weed",
]
