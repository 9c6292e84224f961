"""Core layer - foundational types and utilities."""

from .vec2 import Vec2, NormalizedPoint, PixelPoint
from .config import EngineConfig, get_config, set_config
from .errors import ChalkboardError, PlayDocumentError, UnknownFormationError
from .events import Event, EventType, EventBus
from .field import FieldBounds, FieldGeometry, TouchBounds
from .entities import (
    Entity,
    RouteSegment,
    Team,
    create_entity,
    create_route_segment,
    add_route_to_player,
    add_pre_snap_route_to_player,
    remove_route_from_player,
    update_entity_anchor,
    validate_route_segment,
    classify_position,
)
from .clock import MasterClock, ClockState, PlaybackStatus

__all__ = [
    "Vec2",
    "NormalizedPoint",
    "PixelPoint",
    "EngineConfig",
    "get_config",
    "set_config",
    "ChalkboardError",
    "PlayDocumentError",
    "UnknownFormationError",
    "Event",
    "EventType",
    "EventBus",
    "FieldBounds",
    "FieldGeometry",
    "TouchBounds",
    "Entity",
    "RouteSegment",
    "Team",
    "create_entity",
    "create_route_segment",
    "add_route_to_player",
    "add_pre_snap_route_to_player",
    "remove_route_from_player",
    "update_entity_anchor",
    "validate_route_segment",
    "classify_position",
    "MasterClock",
    "ClockState",
    "PlaybackStatus",
]
