"""Entity store: a tree of named groups whose leaves are ordered entity sequences.

The store owns the per-frame traversal that updates and draws every entity.
Groups enumerate their children in insertion order and sequences keep
insertion order too, so a traversal over an unchanged store always visits
entities in the same order (later entities in a sequence draw on top).
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional, Union

import structlog

from garden.core.entity import FrameObject
from garden.core.host import Host

logger = structlog.get_logger()

PATH_SEPARATOR = "/"

# Standard garden layout: a dict is a nested group, a list is an entity sequence
GARDEN_LAYOUT: dict[str, Any] = {
    "plants": {
        "row1": [],
        "row2": [],
        "row3": [],
    },
    "critters": {
        "squirrels": [],
        "crows": [],
        "pets": {
            "cats": [],
            "dogs": [],
        },
    },
    "weeds": [],
}


class EntitySequence(list):
    """Ordered leaf of the store. Owns the entities it holds."""

    def __repr__(self) -> str:
        return f"EntitySequence({list.__repr__(self)})"


class EntityGroup:
    """Named mapping of child groups and sequences.

    A group may also carry metadata values (labels, counters...). Those are
    stored alongside the children but are never treated as game data.
    """

    def __init__(self) -> None:
        self._children: dict[str, Any] = {}

    @classmethod
    def from_layout(cls, layout: Mapping[str, Any]) -> "EntityGroup":
        """Build a group tree from a nested layout description.

        Args:
            layout: Mapping of names to either a nested mapping (a group) or a
                list of entities (a sequence, copied). Any other value is kept
                as metadata.

        Returns:
            The root group of the new tree.
        """
        group = cls()
        for name, value in layout.items():
            if isinstance(value, EntityGroup):
                group._children[name] = value
            elif isinstance(value, Mapping):
                group._children[name] = cls.from_layout(value)
            elif isinstance(value, list):
                group._children[name] = EntitySequence(value)
            else:
                group._children[name] = value
        return group

    def add_group(self, name: str) -> "EntityGroup":
        """Return the child group ``name``, creating it if needed."""
        child = self._children.get(name)
        if isinstance(child, EntityGroup):
            return child
        self._check_free(name)
        child = EntityGroup()
        self._children[name] = child
        return child

    def add_sequence(self, name: str) -> EntitySequence:
        """Return the child sequence ``name``, creating it if needed."""
        child = self._children.get(name)
        if isinstance(child, EntitySequence):
            return child
        self._check_free(name)
        child = EntitySequence()
        self._children[name] = child
        return child

    def set_meta(self, name: str, value: Any) -> None:
        """Attach a non-container value, skipped by traversals."""
        if isinstance(value, (EntityGroup, EntitySequence)):
            raise TypeError("use add_group()/add_sequence() for container children")
        self._check_free(name, allow_meta=True)
        self._children[name] = value

    def _check_free(self, name: str, allow_meta: bool = False) -> None:
        if name not in self._children:
            return
        existing = self._children[name]
        if allow_meta and not isinstance(existing, (EntityGroup, EntitySequence)):
            return
        raise ValueError(f"child {name!r} already exists as {type(existing).__name__}")

    def detach(self, name: str) -> Any:
        """Remove and return the child ``name``."""
        return self._children.pop(name)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._children.items()))

    def __getitem__(self, name: str) -> Any:
        return self._children[name]

    def __contains__(self, name: object) -> bool:
        return name in self._children

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._children))

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"EntityGroup({self._children!r})"


Node = Union[EntityGroup, EntitySequence]


class EntityStore:
    """Owns the group tree and drives the per-frame update/draw traversal.

    Entities are dispatched by capability: anything with ``update(host)`` and
    ``draw(host)`` can live in a sequence.
    """

    def __init__(self, host: Host, root: Optional[EntityGroup] = None) -> None:
        """Initialize the store.

        Args:
            host: Host platform passed to every entity update and draw.
            root: Existing group tree; an empty group when omitted. The tree
                is claimed on construction: a group or sequence placed under
                more than one name keeps only its first placement, and an
                entity listed more than once keeps only its first occurrence.
        """
        self.host = host
        self.root = root if root is not None else EntityGroup()
        self._claim(self.root, "", {id(self.root)}, set())

    def _claim(
        self,
        group: EntityGroup,
        prefix: str,
        seen_nodes: set[int],
        seen_entities: set[int],
    ) -> None:
        """Enforce single placement of containers and single ownership of entities."""
        for name, child in group.items():
            if not isinstance(child, (EntityGroup, EntitySequence)):
                continue

            path = f"{prefix}{PATH_SEPARATOR}{name}" if prefix else name
            if id(child) in seen_nodes:
                group.detach(name)
                logger.warning("store_node_refused", path=path, reason="already_placed")
                continue
            seen_nodes.add(id(child))

            if isinstance(child, EntityGroup):
                self._claim(child, path, seen_nodes, seen_entities)
                continue

            kept = []
            for entity in child:
                if id(entity) in seen_entities:
                    logger.warning(
                        "entity_add_refused",
                        path=path,
                        kind=type(entity).__name__,
                        reason="already_owned",
                    )
                    continue
                seen_entities.add(id(entity))
                kept.append(entity)
            if len(kept) != len(child):
                child[:] = kept

    @classmethod
    def with_garden_layout(cls, host: Host) -> "EntityStore":
        """Create a store with the standard (empty) garden groups."""
        return cls(host, EntityGroup.from_layout(GARDEN_LAYOUT))

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def update_and_draw(
        self,
        node: Optional[EntityGroup] = None,
        suppress_draw: bool = False,
    ) -> bool:
        """Update, then draw, every entity below ``node``.

        Args:
            node: Group to walk; the store root when omitted.
            suppress_draw: If True, entities are updated but not drawn.

        Returns:
            True once every entity has been visited.

        Note:
            Each sequence is snapshotted before it is walked, so entities
            added or removed by an update take effect on the next frame.
        """
        if node is None:
            node = self.root

        for _name, child in node.items():
            if isinstance(child, EntitySequence):
                for entity in tuple(child):
                    entity.update(self.host)
                    if not suppress_draw:
                        entity.draw(self.host)
            elif isinstance(child, EntityGroup):
                self.update_and_draw(child, suppress_draw)

        return True

    def iter_entities(self, node: Optional[EntityGroup] = None) -> Iterator[FrameObject]:
        """Yield every entity in traversal order."""
        for _path, sequence in self.iter_sequences(node):
            yield from sequence

    def iter_sequences(
        self,
        node: Optional[EntityGroup] = None,
        prefix: str = "",
    ) -> Iterator[tuple[str, EntitySequence]]:
        """Yield ``(path, sequence)`` pairs in traversal order."""
        if node is None:
            node = self.root
        for name, child in node.items():
            path = f"{prefix}{PATH_SEPARATOR}{name}" if prefix else name
            if isinstance(child, EntitySequence):
                yield path, child
            elif isinstance(child, EntityGroup):
                yield from self.iter_sequences(child, path)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def node(self, path: str) -> Node:
        """Resolve a slash-separated path such as ``"critters/pets/cats"``.

        Raises:
            KeyError: If a path segment is missing or crosses a non-group.
        """
        current: Any = self.root
        for part in filter(None, path.split(PATH_SEPARATOR)):
            if not isinstance(current, EntityGroup) or part not in current:
                raise KeyError(path)
            current = current[part]
        if not isinstance(current, (EntityGroup, EntitySequence)):
            raise KeyError(path)
        return current

    def group(self, path: str) -> EntityGroup:
        found = self.node(path)
        if not isinstance(found, EntityGroup):
            raise KeyError(f"{path} is not a group")
        return found

    def sequence(self, path: str) -> EntitySequence:
        found = self.node(path)
        if not isinstance(found, EntitySequence):
            raise KeyError(f"{path} is not a sequence")
        return found

    def owner_of(self, entity: FrameObject) -> Optional[str]:
        """Return the path of the sequence holding ``entity``, if any."""
        for path, sequence in self.iter_sequences():
            if any(e is entity for e in sequence):
                return path
        return None

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, path: str, entity: FrameObject) -> bool:
        """Append an entity to the sequence at ``path``.

        Args:
            path: Slash-separated path of the target sequence.
            entity: The entity to add.

        Returns:
            bool: True if added, False if the entity already belongs to a
            sequence in this store.
        """
        sequence = self.sequence(path)
        owner = self.owner_of(entity)
        if owner is not None:
            logger.warning(
                "entity_add_refused",
                path=path,
                owner=owner,
                reason="already_owned",
            )
            return False

        sequence.append(entity)
        logger.debug("entity_added", path=path, kind=type(entity).__name__)
        return True

    def remove(self, entity: FrameObject) -> bool:
        """Detach an entity from its owning sequence.

        Returns:
            bool: True if removed, False if it wasn't in the store.
        """
        for path, sequence in self.iter_sequences():
            for index, candidate in enumerate(sequence):
                if candidate is entity:
                    del sequence[index]
                    logger.debug("entity_removed", path=path, kind=type(entity).__name__)
                    return True

        logger.warning("entity_remove_failed", kind=type(entity).__name__, reason="not_found")
        return False

    def count(self) -> int:
        return sum(len(sequence) for _path, sequence in self.iter_sequences())

    def clear(self) -> None:
        """Empty every sequence, keeping the group layout."""
        for _path, sequence in self.iter_sequences():
            sequence.clear()
        logger.info("entity_store_cleared")
