"""Play board - the in-memory play document.

Holds the ordered entity collection and the route currently being drawn.
All mutation is expected from one control thread (the host's UI thread);
there is no locking.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Optional

from .core.entities import (
    Entity,
    RouteSegment,
    add_pre_snap_route_to_player,
    add_route_to_player,
    create_entity,
    create_route_segment,
)
from .core.events import EventBus, EventType
from .core.field import FieldGeometry
from .core.vec2 import NormalizedPoint, PixelPoint


logger = logging.getLogger(__name__)


class PlayBoard:
    """Ordered collection of entities keyed by id.

    Entities are immutable; editing one means replacing it. Every mutation
    bumps `version` so a playback session knows when to rebuild timelines.

    Usage:
        board = PlayBoard(geometry)
        qb = board.place_player("QB", (200, 340))
        board.begin_route(qb.id)
        board.extend_route((200, 300))
        board.extend_route((260, 220))
        board.complete_route()
    """

    def __init__(
        self,
        geometry: Optional[FieldGeometry] = None,
        entities: Iterable[Entity] = (),
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.geometry = geometry
        self.event_bus = event_bus or EventBus()
        self._entities: dict[str, Entity] = {}
        self.version: int = 0

        # Route being drawn
        self._drawing_for: Optional[str] = None
        self._drawing_points: list[NormalizedPoint] = []

        if entities:
            self.add_entities(entities)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def entities(self) -> list[Entity]:
        """Snapshot of the entities in insertion order."""
        return list(self._entities.values())

    def get(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    # =========================================================================
    # Mutation
    # =========================================================================

    def place_player(self, position_label: str, pixel: Any) -> Entity:
        """Drop a single player at a pixel position (e.g. from a palette drag)."""
        if self.geometry is None:
            raise ValueError("place_player needs a FieldGeometry to convert pixels")
        anchor = self.geometry.pixels_to_normalized(pixel)
        entity = create_entity(position_label, anchor)
        self.add_entities([entity])
        return entity

    def add_entities(self, entities: Iterable[Entity]) -> list[Entity]:
        """Append entities as one operation.

        Raises:
            ValueError: if an id is already on the board or repeated in the batch
        """
        batch = list(entities)
        seen: set[str] = set()
        for entity in batch:
            if entity.id in self._entities or entity.id in seen:
                raise ValueError(f"Duplicate entity id: {entity.id}")
            seen.add(entity.id)

        for entity in batch:
            self._entities[entity.id] = entity
            self.event_bus.emit_simple(
                EventType.ENTITY_ADDED,
                entity_id=entity.id,
                description=f"{entity.display_name} added",
                position=entity.position_label,
            )
        if batch:
            self.version += 1
        return batch

    def replace_entity(self, entity: Entity) -> bool:
        """Swap in a new value for an existing entity (same id)."""
        if entity.id not in self._entities:
            logger.warning("replace_entity: unknown entity %s", entity.id)
            return False
        self._entities[entity.id] = entity
        self.version += 1
        return True

    def delete_entity(self, entity_id: str) -> bool:
        removed = self._entities.pop(entity_id, None)
        if removed is None:
            return False
        if self._drawing_for == entity_id:
            self.cancel_route()
        self.version += 1
        self.event_bus.emit_simple(
            EventType.ENTITY_REMOVED,
            entity_id=entity_id,
            description=f"{removed.display_name} removed",
        )
        return True

    def clear(self) -> None:
        self._entities.clear()
        self.cancel_route()
        self.version += 1
        self.event_bus.emit_simple(EventType.BOARD_CLEARED, description="Board cleared")

    # =========================================================================
    # Route drawing
    # =========================================================================

    @property
    def is_drawing(self) -> bool:
        return self._drawing_for is not None

    @property
    def drawing_points(self) -> list[NormalizedPoint]:
        return list(self._drawing_points)

    def begin_route(self, entity_id: str) -> bool:
        """Start drawing a route from the entity's anchor."""
        entity = self._entities.get(entity_id)
        if entity is None:
            logger.warning("begin_route: unknown entity %s", entity_id)
            return False
        self._drawing_for = entity_id
        self._drawing_points = [entity.anchor]
        return True

    def extend_route(self, pixel: Any) -> Optional[NormalizedPoint]:
        """Add a drag sample. Samples outside the touch area are ignored."""
        if self._drawing_for is None or self.geometry is None:
            return None

        sample = PixelPoint.coerce(pixel)
        if sample is None or not self.geometry.is_within_field(sample.x, sample.y):
            return None

        point = self.geometry.pixels_to_normalized(
            self.geometry.constrain_to_field(sample.x, sample.y)
        )
        self._drawing_points.append(point)
        return point

    def complete_route(self, pre_snap: bool = False) -> Optional[Entity]:
        """Finish the drawing and attach it to the entity.

        Returns:
            The updated entity, or None if nothing usable was drawn
        """
        entity_id, points = self._drawing_for, self._drawing_points
        self.cancel_route()
        if entity_id is None or entity_id not in self._entities:
            return None
        if len(points) < 2:
            logger.debug("complete_route: discarding route with %d point(s)", len(points))
            return None

        route = create_route_segment(points)
        if route is None:
            return None
        return self.assign_route(entity_id, route, pre_snap=pre_snap)

    def cancel_route(self) -> None:
        self._drawing_for = None
        self._drawing_points = []

    def assign_route(
        self,
        entity_id: str,
        route: RouteSegment,
        pre_snap: bool = False,
    ) -> Optional[Entity]:
        """Attach a route to an entity, replacing any route in that phase."""
        entity = self._entities.get(entity_id)
        if entity is None:
            logger.warning("assign_route: unknown entity %s", entity_id)
            return None

        updated = (
            add_pre_snap_route_to_player(entity, route) if pre_snap
            else add_route_to_player(entity, route)
        )
        self._entities[entity_id] = updated
        self.version += 1
        self.event_bus.emit_simple(
            EventType.ROUTE_ASSIGNED,
            entity_id=entity_id,
            description=f"{'pre-snap' if pre_snap else 'main'} route, {len(route)} points",
            route_id=route.id,
            pre_snap=pre_snap,
        )
        return updated

    def __repr__(self) -> str:
        return f"PlayBoard(entities={len(self._entities)}, version={self.version})"
