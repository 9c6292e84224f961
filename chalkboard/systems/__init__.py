"""Systems layer - placement, timelines and reactive triggers."""

from .placement import (
    CollisionReport,
    FormationPlacer,
    check_formation_collisions,
    compute_slot_positions,
    detect_offensive_strong_side,
)
from .timeline import (
    PlayerTimeline,
    TimelineConfig,
    build_timelines,
    create_player_timeline,
    get_max_timeline_duration,
    get_player_position_at_time,
)
from .triggers import (
    ReactiveTrigger,
    ResponseDescriptor,
    ResponseType,
    TriggerEngine,
    TriggerState,
    create_reactive_trigger,
    update_triggers,
)

__all__ = [
    "CollisionReport",
    "FormationPlacer",
    "check_formation_collisions",
    "compute_slot_positions",
    "detect_offensive_strong_side",
    "PlayerTimeline",
    "TimelineConfig",
    "build_timelines",
    "create_player_timeline",
    "get_max_timeline_duration",
    "get_player_position_at_time",
    "ReactiveTrigger",
    "ResponseDescriptor",
    "ResponseType",
    "TriggerEngine",
    "TriggerState",
    "create_reactive_trigger",
    "update_triggers",
]
