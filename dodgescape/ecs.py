"""
Entity-Component-System Core
=============================
Integer entity IDs with one component dictionary per component type.

Destruction is deferred: systems mark entities with ``destroy_entity`` while
they iterate, and the frame loop applies the removals in one pass with
``process_dead_entities``. Queries iterate over a snapshot of matching IDs,
so marking or spawning mid-iteration never skips or revisits an entity.
"""

from typing import Dict, Set, Type, TypeVar, Optional, Iterator, Tuple, Any, List


C = TypeVar('C')


class World:
    """
    Owns every entity of one game session.

    A fresh World is created for each session, which is how all
    per-session entity state gets reset.
    """

    def __init__(self):
        self._next_entity_id: int = 0
        self._entities: Set[int] = set()
        self._components: Dict[Type, Dict[int, Any]] = {}
        self._dead_entities: Set[int] = set()

    def create_entity(self, *components: Any) -> int:
        """Create a new entity, attach the given components, return its ID."""
        entity_id = self._next_entity_id
        self._next_entity_id += 1
        self._entities.add(entity_id)
        for component in components:
            self.add_component(entity_id, component)
        return entity_id

    def destroy_entity(self, entity_id: int) -> None:
        """Mark an entity for destruction (applied at end of frame)."""
        if entity_id in self._entities:
            self._dead_entities.add(entity_id)

    def process_dead_entities(self) -> int:
        """Remove all entities marked for destruction. Returns how many went."""
        removed = 0
        for entity_id in self._dead_entities:
            if entity_id not in self._entities:
                continue
            self._entities.remove(entity_id)
            for store in self._components.values():
                store.pop(entity_id, None)
            removed += 1
        self._dead_entities.clear()
        return removed

    def add_component(self, entity_id: int, component: Any) -> None:
        self._components.setdefault(type(component), {})[entity_id] = component

    def get_component(self, entity_id: int, component_type: Type[C]) -> Optional[C]:
        """Get a component for an entity, or None if not found."""
        return self._components.get(component_type, {}).get(entity_id)

    def has_component(self, entity_id: int, component_type: Type) -> bool:
        return entity_id in self._components.get(component_type, {})

    def query(self, *component_types: Type) -> Iterator[Tuple[Any, ...]]:
        """
        Query for all live entities that have ALL given component types.

        Yields tuples of (entity_id, component1, component2, ...) in
        ascending entity order. Entities marked dead are skipped, including
        ones marked after the query started.
        """
        for entity_id in self.entity_ids(*component_types):
            if entity_id in self._dead_entities:
                continue
            yield (entity_id,) + tuple(
                self._components[ct][entity_id] for ct in component_types
            )

    def entity_ids(self, *component_types: Type) -> List[int]:
        """Sorted snapshot of entity IDs carrying all given component types."""
        if not component_types:
            return []
        stores = [self._components.get(ct) for ct in component_types]
        if any(store is None for store in stores):
            return []
        candidates = set(stores[0])
        for store in stores[1:]:
            candidates &= store.keys()
        return sorted(candidates)

    def count(self, *component_types: Type) -> int:
        """Number of live entities carrying all given component types."""
        return sum(1 for _ in self.query(*component_types))

    def entity_count(self) -> int:
        """Return the number of active entities."""
        return len(self._entities) - len(self._dead_entities)

    def is_alive(self, entity_id: int) -> bool:
        """Check if an entity is alive (exists and not marked for death)."""
        return entity_id in self._entities and entity_id not in self._dead_entities
