"""Core entities - placed players and their routes.

Entities are immutable values owned by the play board. Every mutator returns
a new Entity so the host can keep old values around for undo/redo.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Optional
from uuid import uuid4

from .vec2 import NormalizedPoint


logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================

class Team(str, Enum):
    """Which side of the ball an entity plays on."""
    OFFENSE = "offense"
    DEFENSE = "defense"


OFFENSIVE_POSITIONS = frozenset({
    "QB", "WR", "RB", "TE", "OL", "C", "G", "T", "FB", "HB",
    "LT", "LG", "RG", "RT",
})

DEFENSIVE_POSITIONS = frozenset({
    "DT", "DE", "LB", "CB", "S", "NT", "OLB", "ILB", "MLB", "FS", "SS",
})

BACKFIELD_POSITIONS = frozenset({"RB", "FB", "HB"})


def classify_position(position_label: Optional[str]) -> Optional[Team]:
    """Which team a position label belongs to, or None if unknown."""
    if not position_label:
        return None
    label = position_label.upper()
    if label in OFFENSIVE_POSITIONS:
        return Team.OFFENSE
    if label in DEFENSIVE_POSITIONS:
        return Team.DEFENSE
    return None


# =============================================================================
# Routes
# =============================================================================

@dataclass(frozen=True)
class RouteSegment:
    """An ordered path in normalized field space.

    Point order is path order. Never empty once created through
    create_route_segment().
    """
    points: tuple[NormalizedPoint, ...]
    id: str = ""

    @property
    def start(self) -> NormalizedPoint:
        return self.points[0]

    @property
    def end(self) -> NormalizedPoint:
        return self.points[-1]

    @property
    def length(self) -> float:
        """Polyline arc length."""
        return sum(a.distance_to(b) for a, b in zip(self.points, self.points[1:]))

    def __len__(self) -> int:
        return len(self.points)


def create_route_segment(
    points: Iterable[Any],
    id: Optional[str] = None,
) -> Optional[RouteSegment]:
    """Build a route from drawn points.

    Points are not clamped; live-drag input is expected to arrive already
    clamped by the field geometry. Points that are not coordinate pairs are
    dropped.

    Returns:
        The route, or None when there are no usable points.
    """
    coerced = []
    for point in points or ():
        p = NormalizedPoint.coerce(point)
        if p is None:
            logger.debug("Dropping invalid route point %r", point)
            continue
        coerced.append(p)

    if not coerced:
        return None
    return RouteSegment(points=tuple(coerced), id=id or f"route_{uuid4().hex}")


def validate_route_segment(route: Optional[RouteSegment]) -> bool:
    """A route is animatable when it has two or more in-range points."""
    if route is None or len(route.points) < 2:
        return False
    return all(p.in_unit_square() for p in route.points)


# =============================================================================
# Entity
# =============================================================================

@dataclass(frozen=True)
class Entity:
    """A player placed on the board.

    Attributes:
        id: Unique identifier
        position_label: Position abbreviation (QB, WR, SAM...)
        anchor: Resting position in normalized space, always in [0, 1]
        pre_snap_route: Motion before the snap
        main_route: Route run after the snap
        label: Slot label from a formation (e.g. "WR1", "SAM")
        group: Slot group from a formation (e.g. "OL", "LB-tier")
    """
    id: str
    position_label: str
    anchor: NormalizedPoint
    pre_snap_route: Optional[RouteSegment] = None
    main_route: Optional[RouteSegment] = None
    label: Optional[str] = None
    group: Optional[str] = None

    @property
    def team(self) -> Optional[Team]:
        return classify_position(self.position_label)

    @property
    def is_offense(self) -> bool:
        return self.team == Team.OFFENSE

    @property
    def is_defense(self) -> bool:
        return self.team == Team.DEFENSE

    @property
    def has_routes(self) -> bool:
        return self.pre_snap_route is not None or self.main_route is not None

    @property
    def display_name(self) -> str:
        return self.label or self.position_label


def clamp_normalized(point: Any) -> NormalizedPoint:
    """Coerce and clamp a point into [0, 1]; invalid input becomes the origin."""
    p = NormalizedPoint.coerce(point)
    if p is None:
        logger.debug("Invalid normalized point %r, using origin", point)
        return NormalizedPoint(0.0, 0.0)
    return p.clamped()


def generate_entity_id() -> str:
    return f"player_{uuid4().hex}"


def create_entity(
    position_label: str,
    anchor: Any,
    id: Optional[str] = None,
    label: Optional[str] = None,
    group: Optional[str] = None,
) -> Entity:
    """Create an entity with its anchor clamped into the field."""
    return Entity(
        id=id or generate_entity_id(),
        position_label=position_label,
        anchor=clamp_normalized(anchor),
        label=label,
        group=group,
    )


def add_route_to_player(entity: Entity, route: RouteSegment) -> Entity:
    """Return a copy of the entity with its main route set or replaced."""
    return replace(entity, main_route=route)


def add_pre_snap_route_to_player(entity: Entity, route: RouteSegment) -> Entity:
    """Return a copy of the entity with its pre-snap motion set or replaced."""
    return replace(entity, pre_snap_route=route)


def remove_route_from_player(entity: Entity, route_id: str) -> Entity:
    """Return a copy of the entity without the route with the given id."""
    updated = entity
    if entity.main_route is not None and entity.main_route.id == route_id:
        updated = replace(updated, main_route=None)
    if entity.pre_snap_route is not None and entity.pre_snap_route.id == route_id:
        updated = replace(updated, pre_snap_route=None)
    return updated


def clear_routes(entity: Entity) -> Entity:
    return replace(entity, pre_snap_route=None, main_route=None)


def update_entity_anchor(entity: Entity, anchor: Any) -> Entity:
    """Return a copy of the entity moved to a new (clamped) anchor."""
    return replace(entity, anchor=clamp_normalized(anchor))


def distance(a: NormalizedPoint, b: NormalizedPoint) -> float:
    """Euclidean distance between two normalized points."""
    return math.hypot(b.x - a.x, b.y - a.y)
