"""Reactive trigger engine.

Defensive entities react to offensive movement. A trigger watches the
distance between a trigger entity (usually offense) and a responder
(usually defense):

    PENDING   -> ACTIVE     distance drops below the threshold
    ACTIVE    -> TRIGGERED  response_delay has elapsed since activation

Transitions only move forward. Once TRIGGERED, the responder runs its
response route regardless of where the trigger entity goes next.

update_triggers() is a pure function of (triggers, positions, time) and is
called once per tick by the playback session. TriggerEngine holds the
current trigger set and the bookkeeping around it.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Mapping, Optional
from uuid import uuid4

from ..core.config import get_config
from ..core.entities import RouteSegment, create_route_segment
from ..core.events import EventBus, EventType
from ..core.vec2 import NormalizedPoint


logger = logging.getLogger(__name__)


class TriggerState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    TRIGGERED = "triggered"


class ResponseType(str, Enum):
    FOLLOW = "follow"   # Shadow the trigger entity (corner on a receiver)
    SHIFT = "shift"     # Slide laterally toward it (linebacker bump)
    ROTATE = "rotate"   # Rotate toward it (safety rotation)
    CUSTOM = "custom"   # Use the supplied response route


# Generated route distances, normalized units
FOLLOW_DISTANCE = 0.08
SHIFT_DISTANCE = 0.05
ROTATE_DISTANCE = 0.06

_STATE_ORDER = {TriggerState.PENDING: 0, TriggerState.ACTIVE: 1, TriggerState.TRIGGERED: 2}


@dataclass(frozen=True)
class ReactiveTrigger:
    """One trigger/responder pairing.

    Attributes:
        id: Unique trigger id
        trigger_entity_id: Entity whose movement sets the trigger off
        responder_entity_id: Entity that reacts
        distance_threshold: Activation distance, normalized units (0, 1]
        response_delay: Milliseconds from activation to response
        response_type: How a route is generated when none is supplied
        response_route: Route supplied at creation, if any
        generated_route: Route generated at activation
        state: Lifecycle state
        activated_at: Playback time of PENDING -> ACTIVE
        triggered_at: Playback time of ACTIVE -> TRIGGERED
    """
    id: str
    trigger_entity_id: str
    responder_entity_id: str
    distance_threshold: float = 0.15
    response_delay: float = 500.0
    response_type: ResponseType = ResponseType.FOLLOW
    response_route: Optional[RouteSegment] = None
    generated_route: Optional[RouteSegment] = None
    state: TriggerState = TriggerState.PENDING
    activated_at: Optional[float] = None
    triggered_at: Optional[float] = None

    @property
    def route(self) -> Optional[RouteSegment]:
        """The route the responder runs once triggered."""
        return self.response_route or self.generated_route

    @property
    def is_pending(self) -> bool:
        return self.state == TriggerState.PENDING

    @property
    def is_active(self) -> bool:
        return self.state == TriggerState.ACTIVE

    @property
    def is_triggered(self) -> bool:
        return self.state == TriggerState.TRIGGERED

    def rearmed(self) -> ReactiveTrigger:
        """Back to PENDING for a new playback run."""
        return replace(
            self,
            state=TriggerState.PENDING,
            generated_route=None,
            activated_at=None,
            triggered_at=None,
        )


@dataclass(frozen=True)
class ResponseDescriptor:
    """What a renderer needs to draw a responder's reaction."""
    trigger_id: str
    responder_entity_id: str
    trigger_entity_id: str
    response_type: ResponseType
    route: Optional[RouteSegment]
    state: TriggerState
    trigger_time: Optional[float]


@dataclass
class TriggerStats:
    total: int = 0
    pending: int = 0
    active: int = 0
    triggered: int = 0


# =============================================================================
# Construction and validation
# =============================================================================

def _coerce_response_type(value):
    try:
        return ResponseType(value)
    except ValueError:
        # Kept as given so validate_trigger can reject it
        return value


def create_reactive_trigger(
    trigger_entity_id: str,
    responder_entity_id: str,
    distance_threshold: Optional[float] = None,
    response_delay: Optional[float] = None,
    response_type: ResponseType = ResponseType.FOLLOW,
    response_route: Optional[RouteSegment] = None,
    id: Optional[str] = None,
) -> ReactiveTrigger:
    """Build a trigger value. Use validate_trigger() before arming it."""
    config = get_config()
    return ReactiveTrigger(
        id=id or (
            f"trigger_{trigger_entity_id}_{responder_entity_id}_"
            f"{int(time.time() * 1000)}_{uuid4().hex[:6]}"
        ),
        trigger_entity_id=trigger_entity_id,
        responder_entity_id=responder_entity_id,
        distance_threshold=(
            distance_threshold if distance_threshold is not None
            else config.default_trigger_threshold
        ),
        response_delay=(
            response_delay if response_delay is not None
            else config.default_response_delay
        ),
        response_type=_coerce_response_type(response_type),
        response_route=response_route,
    )


def validate_trigger(trigger: ReactiveTrigger) -> list[str]:
    """Validate a trigger, returning a list of problems (empty when valid)."""
    errors = []
    if not trigger.trigger_entity_id or not trigger.responder_entity_id:
        errors.append("trigger and responder entity ids are required")
    elif trigger.trigger_entity_id == trigger.responder_entity_id:
        errors.append("an entity cannot trigger itself")
    if not isinstance(trigger.response_type, ResponseType):
        errors.append(f"unknown response_type {trigger.response_type!r}")
    threshold = trigger.distance_threshold
    if not isinstance(threshold, (int, float)) or not 0 < threshold <= 1:
        errors.append(f"distance_threshold must be in (0, 1], got {threshold!r}")
    delay = trigger.response_delay
    if not isinstance(delay, (int, float)) or delay < 0 or math.isnan(delay):
        errors.append(f"response_delay must be non-negative, got {delay!r}")
    return errors


# =============================================================================
# Response routes
# =============================================================================

def _unit_toward(origin: NormalizedPoint, target: NormalizedPoint) -> NormalizedPoint:
    dx, dy = target.x - origin.x, target.y - origin.y
    length = math.hypot(dx, dy)
    if length <= 0:
        return NormalizedPoint(0.0, 0.0)
    return NormalizedPoint(dx / length, dy / length)


def generate_response_route(
    response_type: ResponseType,
    trigger_position: NormalizedPoint,
    responder_position: NormalizedPoint,
) -> Optional[RouteSegment]:
    """Two-point route from the responder's position toward its reaction spot.

    CUSTOM with no supplied route falls back to FOLLOW.
    """
    if response_type == ResponseType.SHIFT:
        direction = 1.0 if trigger_position.x > responder_position.x else -1.0
        target = NormalizedPoint(
            responder_position.x + direction * SHIFT_DISTANCE,
            responder_position.y,
        )
    elif response_type == ResponseType.ROTATE:
        unit = _unit_toward(responder_position, trigger_position)
        target = NormalizedPoint(
            responder_position.x + unit.x * ROTATE_DISTANCE,
            responder_position.y + unit.y * ROTATE_DISTANCE,
        )
    else:
        # Stay FOLLOW_DISTANCE behind the trigger entity, on the responder's side
        unit = _unit_toward(responder_position, trigger_position)
        target = NormalizedPoint(
            trigger_position.x - unit.x * FOLLOW_DISTANCE,
            trigger_position.y - unit.y * FOLLOW_DISTANCE,
        )

    return create_route_segment([responder_position, target.clamped()])


# =============================================================================
# Per-tick update
# =============================================================================

def update_trigger(
    trigger: ReactiveTrigger,
    trigger_position: NormalizedPoint,
    responder_position: NormalizedPoint,
    global_time: float,
) -> ReactiveTrigger:
    """Advance one trigger. Returns the same value when nothing changes."""
    updated = trigger

    if updated.state == TriggerState.PENDING:
        distance = trigger_position.distance_to(responder_position)
        if distance < updated.distance_threshold:
            generated = None
            if updated.response_route is None:
                generated = generate_response_route(
                    updated.response_type, trigger_position, responder_position
                )
            updated = replace(
                updated,
                state=TriggerState.ACTIVE,
                activated_at=global_time,
                generated_route=generated,
            )

    if updated.state == TriggerState.ACTIVE:
        if global_time - updated.activated_at >= updated.response_delay:
            updated = replace(updated, state=TriggerState.TRIGGERED, triggered_at=global_time)

    return updated


def update_triggers(
    triggers: Iterable[ReactiveTrigger],
    positions: Mapping[str, NormalizedPoint],
    global_time: float,
    missing: Optional[set[str]] = None,
) -> list[ReactiveTrigger]:
    """Advance every trigger against the current positions.

    Triggers that reference an entity absent from `positions` are left
    unchanged for this tick. Pass a `missing` set to have each absent id
    logged only once across calls.
    """
    result = []
    for trigger in triggers:
        trigger_pos = positions.get(trigger.trigger_entity_id)
        responder_pos = positions.get(trigger.responder_entity_id)
        if trigger_pos is None or responder_pos is None:
            for entity_id in (trigger.trigger_entity_id, trigger.responder_entity_id):
                if entity_id in positions:
                    continue
                if missing is None or entity_id not in missing:
                    logger.warning("Trigger %s references missing entity %s", trigger.id, entity_id)
                    if missing is not None:
                        missing.add(entity_id)
            result.append(trigger)
            continue
        result.append(update_trigger(trigger, trigger_pos, responder_pos, global_time))
    return result


# =============================================================================
# Engine
# =============================================================================

class TriggerEngine:
    """Holds the trigger set for one play.

    Invalid triggers are logged and never added. Rendering code asks for
    response descriptors per responder.
    """

    def __init__(self, event_bus: Optional[EventBus] = None) -> None:
        self.event_bus = event_bus or EventBus()
        self._triggers: dict[str, ReactiveTrigger] = {}
        self._missing: set[str] = set()

    @property
    def triggers(self) -> list[ReactiveTrigger]:
        return list(self._triggers.values())

    def get(self, trigger_id: str) -> Optional[ReactiveTrigger]:
        return self._triggers.get(trigger_id)

    def __len__(self) -> int:
        return len(self._triggers)

    # =========================================================================
    # Management
    # =========================================================================

    def add_trigger(self, trigger: ReactiveTrigger) -> bool:
        """Arm a trigger. Returns False (and logs) if it is invalid."""
        errors = validate_trigger(trigger)
        if errors:
            logger.warning("Rejected trigger %s: %s", trigger.id, "; ".join(errors))
            self.event_bus.emit_simple(
                EventType.TRIGGER_REJECTED,
                entity_id=trigger.responder_entity_id or None,
                target_id=trigger.trigger_entity_id or None,
                description="; ".join(errors),
                trigger_id=trigger.id,
            )
            return False

        self._triggers[trigger.id] = trigger
        self.event_bus.emit_simple(
            EventType.TRIGGER_ADDED,
            entity_id=trigger.responder_entity_id,
            target_id=trigger.trigger_entity_id,
            description=f"{trigger.response_type.value} at {trigger.distance_threshold:.2f}",
            trigger_id=trigger.id,
        )
        return True

    def create_quick_response(
        self,
        trigger_entity_id: str,
        responder_entity_id: str,
        response_type: ResponseType = ResponseType.FOLLOW,
    ) -> Optional[ReactiveTrigger]:
        """Arm a trigger with quick defaults (tight threshold, short delay).

        Returns:
            The trigger, or None if it was rejected
        """
        config = get_config()
        trigger = create_reactive_trigger(
            trigger_entity_id,
            responder_entity_id,
            distance_threshold=config.quick_response_threshold,
            response_delay=config.quick_response_delay,
            response_type=response_type,
        )
        return trigger if self.add_trigger(trigger) else None

    def remove_trigger(self, trigger_id: str) -> bool:
        return self._triggers.pop(trigger_id, None) is not None

    def clear_all_triggers(self) -> None:
        self._triggers.clear()
        self._missing.clear()

    def reset(self) -> None:
        """Re-arm every trigger for a new playback run."""
        self._triggers = {tid: t.rearmed() for tid, t in self._triggers.items()}
        self._missing.clear()

    # =========================================================================
    # Per-tick
    # =========================================================================

    def update(
        self,
        positions: Mapping[str, NormalizedPoint],
        global_time: float,
    ) -> list[ReactiveTrigger]:
        """Advance all triggers and return the ones that changed state."""
        previous = self._triggers
        known_missing = set(self._missing)
        updated = update_triggers(previous.values(), positions, global_time, self._missing)
        self._triggers = {t.id: t for t in updated}

        for entity_id in sorted(self._missing - known_missing):
            self.event_bus.emit_simple(
                EventType.MISSING_REFERENCE,
                time=global_time,
                entity_id=entity_id,
                description="trigger references an entity that is not on the board",
            )

        changed = []
        for trigger in updated:
            before = previous[trigger.id]
            if _STATE_ORDER[trigger.state] <= _STATE_ORDER[before.state]:
                continue
            changed.append(trigger)
            if before.is_pending:
                self._emit_transition(EventType.TRIGGER_ACTIVATED, trigger, trigger.activated_at)
            if trigger.is_triggered:
                self._emit_transition(EventType.TRIGGER_FIRED, trigger, trigger.triggered_at)
        return changed

    def _emit_transition(self, event_type: EventType, trigger: ReactiveTrigger, at: float) -> None:
        logger.debug("%s: %s -> %s", event_type.value, trigger.trigger_entity_id, trigger.responder_entity_id)
        self.event_bus.emit_simple(
            event_type,
            time=at,
            entity_id=trigger.responder_entity_id,
            target_id=trigger.trigger_entity_id,
            description=trigger.response_type.value,
            trigger_id=trigger.id,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_player_triggers(self, player_id: str) -> list[ReactiveTrigger]:
        """Every trigger the entity takes part in, as trigger or responder."""
        return [
            t for t in self._triggers.values()
            if player_id in (t.trigger_entity_id, t.responder_entity_id)
        ]

    def get_active_triggers_for_player(
        self,
        player_id: str,
        include_active: bool = False,
    ) -> list[ResponseDescriptor]:
        """Responses a responder should be rendering.

        By default only TRIGGERED responses; include_active adds ones still
        waiting out their delay.
        """
        wanted = {TriggerState.TRIGGERED}
        if include_active:
            wanted.add(TriggerState.ACTIVE)
        return [
            ResponseDescriptor(
                trigger_id=t.id,
                responder_entity_id=t.responder_entity_id,
                trigger_entity_id=t.trigger_entity_id,
                response_type=t.response_type,
                route=t.route,
                state=t.state,
                trigger_time=t.triggered_at if t.is_triggered else t.activated_at,
            )
            for t in self._triggers.values()
            if t.responder_entity_id == player_id and t.state in wanted
        ]

    def get_trigger_stats(self) -> TriggerStats:
        stats = TriggerStats(total=len(self._triggers))
        for trigger in self._triggers.values():
            if trigger.is_pending:
                stats.pending += 1
            elif trigger.is_active:
                stats.active += 1
            else:
                stats.triggered += 1
        return stats
