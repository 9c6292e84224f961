"""Timeline orchestrator.

Turns each entity's routes into a two-phase timeline and answers "where is
entity E at global time t". Phases:

    pre-snap:  [pre_snap_start_time, snap_time)  - motion and shifts
    main:      [snap_time, snap_time + main_play_duration]

Timelines reference their entity by id only and carry a copy of its anchor,
so the entity collection and the timeline collection can be rebuilt or
serialized independently.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..core.config import get_config
from ..core.entities import Entity, RouteSegment
from ..core.vec2 import NormalizedPoint, clamp_unit


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineConfig:
    """Phase timing in milliseconds."""
    pre_snap_duration: float = 2000.0
    main_play_duration: float = 3000.0
    pre_snap_start_time: float = 0.0
    snap_time: float = 2000.0

    def __post_init__(self):
        if self.pre_snap_duration <= 0 or self.main_play_duration <= 0:
            raise ValueError(f"Phase durations must be positive: {self}")
        if not self.pre_snap_start_time < self.snap_time:
            raise ValueError(f"snap_time must come after pre_snap_start_time: {self}")
        if not math.isclose(self.pre_snap_start_time + self.pre_snap_duration, self.snap_time):
            raise ValueError(f"pre_snap_start_time + pre_snap_duration must equal snap_time: {self}")

    @property
    def main_end(self) -> float:
        return self.snap_time + self.main_play_duration

    @classmethod
    def from_engine_config(cls) -> TimelineConfig:
        """Timing from the engine config. snap_time wins if the pre-snap values disagree."""
        config = get_config()
        pre_snap_duration = config.snap_time - config.pre_snap_start_time
        if not math.isclose(pre_snap_duration, config.pre_snap_duration):
            logger.warning(
                "pre_snap_duration %.0fms disagrees with snap_time %.0fms, using %.0fms",
                config.pre_snap_duration,
                config.snap_time,
                pre_snap_duration,
            )
        return cls(
            pre_snap_duration=pre_snap_duration,
            main_play_duration=config.main_play_duration,
            pre_snap_start_time=config.pre_snap_start_time,
            snap_time=config.snap_time,
        )


@dataclass(frozen=True)
class PreSnapPhase:
    start: float
    snap_time: float
    route: Optional[RouteSegment] = None

    def fraction_at(self, t: float) -> float:
        return clamp_unit((t - self.start) / (self.snap_time - self.start))


@dataclass(frozen=True)
class MainPhase:
    snap_time: float
    end: float
    route: Optional[RouteSegment] = None

    def fraction_at(self, t: float) -> float:
        return clamp_unit((t - self.snap_time) / (self.end - self.snap_time))


@dataclass(frozen=True)
class PlayerTimeline:
    """Timing for one entity. The entity itself is looked up by id."""
    entity_id: str
    anchor: NormalizedPoint
    pre_snap_phase: PreSnapPhase
    main_phase: MainPhase

    @property
    def snap_time(self) -> float:
        return self.main_phase.snap_time

    @property
    def end(self) -> float:
        return self.main_phase.end

    @property
    def has_routes(self) -> bool:
        return self.pre_snap_phase.route is not None or self.main_phase.route is not None


# =============================================================================
# Construction
# =============================================================================

def create_player_timeline(
    entity: Entity,
    pre_snap_route: Optional[RouteSegment] = None,
    main_route: Optional[RouteSegment] = None,
    config: Optional[TimelineConfig] = None,
) -> PlayerTimeline:
    """Build a timeline for an entity.

    Entities without routes still get one, so they stay visible at their
    anchor for the whole play.
    """
    config = config or TimelineConfig.from_engine_config()
    return PlayerTimeline(
        entity_id=entity.id,
        anchor=entity.anchor,
        pre_snap_phase=PreSnapPhase(
            start=config.pre_snap_start_time,
            snap_time=config.snap_time,
            route=pre_snap_route,
        ),
        main_phase=MainPhase(
            snap_time=config.snap_time,
            end=config.main_end,
            route=main_route,
        ),
    )


def build_timelines(
    entities: Iterable[Entity],
    config: Optional[TimelineConfig] = None,
) -> dict[str, PlayerTimeline]:
    """Timelines for every entity, keyed by entity id."""
    config = config or TimelineConfig.from_engine_config()
    return {
        entity.id: create_player_timeline(
            entity, entity.pre_snap_route, entity.main_route, config
        )
        for entity in entities
    }


# =============================================================================
# Interpolation
# =============================================================================

def position_along_route(
    points: Sequence[NormalizedPoint],
    fraction: float,
) -> Optional[NormalizedPoint]:
    """Point at a fraction of the route's arc length.

    Linear between consecutive points; the segment is the one whose
    cumulative-length fraction brackets the requested fraction. Zero-length
    routes (a single point, or repeated points) return the first point.
    """
    if not points:
        return None
    fraction = clamp_unit(fraction)
    first = NormalizedPoint(points[0].x, points[0].y)
    if len(points) == 1:
        return first

    lengths = [a.distance_to(b) for a, b in zip(points, points[1:])]
    total = sum(lengths)
    if total <= 0:
        return first
    if fraction >= 1.0:
        last = points[-1]
        return NormalizedPoint(last.x, last.y)

    target = fraction * total
    travelled = 0.0
    for (a, b), length in zip(zip(points, points[1:]), lengths):
        if length > 0 and travelled + length >= target:
            local = (target - travelled) / length
            return NormalizedPoint(
                a.x + (b.x - a.x) * local,
                a.y + (b.y - a.y) * local,
            )
        travelled += length

    last = points[-1]
    return NormalizedPoint(last.x, last.y)


def get_player_position_at_time(timeline: PlayerTimeline, global_time: float) -> NormalizedPoint:
    """Where the entity is at a global time.

    Before the snap the pre-snap route is used, from the snap on the main
    route. A phase without a route leaves the entity at its anchor.
    """
    if global_time < timeline.snap_time:
        phase_route = timeline.pre_snap_phase.route
        fraction = timeline.pre_snap_phase.fraction_at(global_time)
    else:
        phase_route = timeline.main_phase.route
        fraction = timeline.main_phase.fraction_at(global_time)

    if phase_route is None:
        return timeline.anchor

    position = position_along_route(phase_route.points, fraction)
    return position if position is not None else timeline.anchor


def get_max_timeline_duration(
    timelines: Iterable[PlayerTimeline],
    override: Optional[float] = None,
) -> float:
    """Total playback duration: the latest main-phase end, unless overridden."""
    if override is not None and override > 0:
        return float(override)

    ends = [t.end for t in timelines]
    if not ends:
        return get_config().default_play_duration
    return max(ends)


# =============================================================================
# Activity
# =============================================================================

def is_player_active_at_time(timeline: PlayerTimeline, global_time: float) -> bool:
    """True while the entity is running a route in the phase covering global_time."""
    pre = timeline.pre_snap_phase
    if pre.route is not None and pre.start <= global_time < pre.snap_time:
        return True
    main = timeline.main_phase
    return main.route is not None and main.snap_time <= global_time <= main.end


def get_active_players_at_time(
    timelines: Iterable[PlayerTimeline],
    global_time: float,
) -> list[str]:
    return [t.entity_id for t in timelines if is_player_active_at_time(t, global_time)]
