"""Playback session - the per-frame driver.

Binds the play board, per-entity timelines, the master clock and the
reactive triggers. The host calls tick() from its render loop and draws the
returned frame.

Frame lifecycle:
    1. Clock advances
    2. Every timeline is resolved at the clock's current time
    3. Triggered responses override their responders' positions
    4. Triggers observe the resolved positions (changes apply next frame)

Usage:
    session = PlaybackSession(board)
    session.play()
    frame = session.tick(16.7)
    renderer.draw(frame.positions)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .board import PlayBoard
from .core.clock import MasterClock, PlaybackStatus
from .core.config import get_config
from .core.entities import Entity
from .core.events import EventType
from .core.vec2 import NormalizedPoint, clamp_unit
from .systems.timeline import (
    PlayerTimeline,
    TimelineConfig,
    build_timelines,
    get_max_timeline_duration,
    get_player_position_at_time,
    position_along_route,
)
from .systems.triggers import TriggerEngine


logger = logging.getLogger(__name__)


# Sampling step when catching trigger state up across a seek or long tick
TRIGGER_REPLAY_STEP_MS = 1000.0 / 60.0

DEFAULT_RESPONSE_DURATION = 1000.0


@dataclass
class Frame:
    """Positions for one rendered frame.

    Attributes:
        time: Playback time in milliseconds
        progress: Clock progress [0, 1]
        status: Clock status when the frame was produced
        positions: Entity id -> current normalized position
    """
    time: float
    progress: float
    status: PlaybackStatus
    positions: dict[str, NormalizedPoint] = field(default_factory=dict)

    def as_dict(self) -> dict[str, dict[str, float]]:
        """Renderer-facing form: {entity_id: {"x": .., "y": ..}}."""
        return {entity_id: p.to_dict() for entity_id, p in self.positions.items()}

    def __getitem__(self, entity_id: str) -> NormalizedPoint:
        return self.positions[entity_id]

    def __len__(self) -> int:
        return len(self.positions)


class PlaybackSession:
    """Animates a play board.

    Timelines are rebuilt automatically whenever the board changes. With no
    entities the session still runs, producing empty frames.
    """

    def __init__(
        self,
        board: PlayBoard,
        triggers: Optional[TriggerEngine] = None,
        timeline_config: Optional[TimelineConfig] = None,
        duration_override: Optional[float] = None,
        speed: float = 1.0,
    ) -> None:
        self.board = board
        self.event_bus = board.event_bus
        self.triggers = triggers or TriggerEngine(self.event_bus)
        self.timeline_config = timeline_config or TimelineConfig.from_engine_config()
        self.duration_override = duration_override
        self.response_duration = get_config().response_duration
        if not self.response_duration > 0:
            logger.warning(
                "response_duration %r is not positive, using %.0fms (non-fatal)",
                self.response_duration,
                DEFAULT_RESPONSE_DURATION,
            )
            self.response_duration = DEFAULT_RESPONSE_DURATION

        self.timelines: dict[str, PlayerTimeline] = {}
        self.clock = MasterClock(speed=speed, on_finish=self._on_clock_finish)
        self._built_version: Optional[int] = None
        self._trigger_time: Optional[float] = None   # Last time triggers were evaluated
        self._failed: set[str] = set()               # Entities already logged as unresolvable

        self.rebuild()

    # =========================================================================
    # Timelines
    # =========================================================================

    def rebuild(self) -> None:
        """Rebuild timelines from the board's current entities."""
        self.timelines = build_timelines(self.board.entities, self.timeline_config)
        duration = get_max_timeline_duration(self.timelines.values(), self.duration_override)
        self.clock.set_duration(duration)
        self._built_version = self.board.version
        self._failed.clear()
        logger.debug("Rebuilt %d timelines, duration %.0fms", len(self.timelines), duration)

    def _ensure_current(self) -> None:
        if self._built_version != self.board.version:
            self.rebuild()

    @property
    def has_routes(self) -> bool:
        self._ensure_current()
        return any(t.has_routes for t in self.timelines.values())

    @property
    def duration(self) -> float:
        return self.clock.duration

    @property
    def current_time(self) -> float:
        return self.clock.current_time

    @property
    def is_playing(self) -> bool:
        return self.clock.is_playing

    # =========================================================================
    # Controls
    # =========================================================================

    def play(self) -> bool:
        self._ensure_current()
        if self.clock.progress >= 1.0:
            self.triggers.reset()
            self._trigger_time = None
        started = self.clock.play()
        if started:
            self.event_bus.emit_simple(EventType.PLAYBACK_STARTED, time=self.clock.current_time)
        return started

    def pause(self) -> None:
        was_playing = self.clock.is_playing
        self.clock.pause()
        if was_playing:
            self.event_bus.emit_simple(EventType.PLAYBACK_PAUSED, time=self.clock.current_time)

    def restart(self) -> None:
        self.clock.restart()
        self.triggers.reset()
        self._trigger_time = None
        self.event_bus.emit_simple(EventType.PLAYBACK_RESTARTED)

    def seek(self, fraction: float) -> Frame:
        """Jump to a progress fraction and return the frame there."""
        self._ensure_current()
        self.clock.seek(fraction)
        self.event_bus.emit_simple(
            EventType.PLAYBACK_SEEK,
            time=self.clock.current_time,
            progress=self.clock.progress,
        )
        return self._frame(evaluate_triggers=True)

    def set_speed(self, speed: float) -> float:
        applied = self.clock.set_speed(speed)
        self.event_bus.emit_simple(
            EventType.SPEED_CHANGED, time=self.clock.current_time, speed=applied
        )
        return applied

    # =========================================================================
    # Frame driving
    # =========================================================================

    def tick(self, delta_ms: float) -> Frame:
        """Advance the clock by delta_ms of host time and resolve a frame."""
        self._ensure_current()
        self.clock.tick(delta_ms)
        return self._frame(evaluate_triggers=True)

    def advance_to(self, now_ms: float) -> Frame:
        """Advance using an absolute host timestamp and resolve a frame."""
        self._ensure_current()
        self.clock.advance_to(now_ms)
        return self._frame(evaluate_triggers=True)

    def current_frame(self) -> Frame:
        """Resolve the frame at the current time without advancing anything."""
        self._ensure_current()
        return self._frame(evaluate_triggers=False)

    def positions_at(self, global_time: float) -> dict[str, NormalizedPoint]:
        """Resolve every entity at an arbitrary time using current trigger state."""
        self._ensure_current()
        return self._resolve(global_time)

    def _frame(self, evaluate_triggers: bool) -> Frame:
        now = self.clock.current_time
        evaluate = evaluate_triggers and len(self.triggers) > 0
        if evaluate:
            if self._trigger_time is None:
                self._step_triggers(0.0, now)
            elif now < self._trigger_time:
                self._replay_triggers(now)
            elif now > self._trigger_time + TRIGGER_REPLAY_STEP_MS:
                self._step_triggers(self._trigger_time + TRIGGER_REPLAY_STEP_MS, now)

        positions = self._resolve(now)
        if evaluate:
            self.triggers.update(positions, now)
            self._trigger_time = now
        return Frame(
            time=now,
            progress=self.clock.progress,
            status=self.clock.status,
            positions=positions,
        )

    # =========================================================================
    # Resolution
    # =========================================================================

    def _resolve(self, global_time: float) -> dict[str, NormalizedPoint]:
        positions: dict[str, NormalizedPoint] = {}
        for entity_id, timeline in self.timelines.items():
            try:
                positions[entity_id] = get_player_position_at_time(timeline, global_time)
            except Exception as e:
                positions[entity_id] = self._fallback_position(entity_id, timeline, e)

        if len(self.triggers):
            self._apply_responses(positions, global_time)
        return positions

    def _fallback_position(
        self,
        entity_id: str,
        timeline: PlayerTimeline,
        error: Exception,
    ) -> NormalizedPoint:
        if entity_id not in self._failed:
            self._failed.add(entity_id)
            logger.warning("Could not resolve %s, holding at anchor (non-fatal): %s", entity_id, error)
            self.event_bus.emit_simple(
                EventType.ERROR,
                entity_id=entity_id,
                description=f"position resolution failed: {error}",
            )
        anchor = NormalizedPoint.coerce(timeline.anchor)
        return anchor.clamped() if anchor is not None else NormalizedPoint(0.0, 0.0)

    def _apply_responses(self, positions: dict[str, NormalizedPoint], global_time: float) -> None:
        """Move responders along their triggered response routes."""
        for trigger in self.triggers.triggers:
            if not trigger.is_triggered or trigger.route is None:
                continue
            if trigger.responder_entity_id not in positions:
                continue
            fraction = clamp_unit((global_time - trigger.triggered_at) / self.response_duration)
            position = position_along_route(trigger.route.points, fraction)
            if position is not None:
                positions[trigger.responder_entity_id] = position

    def _replay_triggers(self, until: float) -> None:
        """Re-derive trigger state from the start of the play up to `until`.

        Triggers only move forward, so going back in time means re-arming
        and walking forward again.
        """
        self.triggers.reset()
        self._step_triggers(0.0, until)

    def _step_triggers(self, start: float, until: float) -> None:
        """Sample triggers from `start` up to (not including) `until`.

        A seek or a long tick then leaves the triggers in the state a
        frame-by-frame playback would have reached.
        """
        t = start
        while t < until:
            self.triggers.update(self._resolve(t), t)
            t += TRIGGER_REPLAY_STEP_MS

    def _on_clock_finish(self, finished: bool) -> None:
        if finished:
            logger.info("Playback complete (%.0fms)", self.clock.duration)
            self.event_bus.emit_simple(EventType.PLAYBACK_COMPLETE, time=self.clock.duration)

    # =========================================================================
    # Convenience
    # =========================================================================

    def entity(self, entity_id: str) -> Optional[Entity]:
        return self.board.get(entity_id)

    def __repr__(self) -> str:
        return (
            f"PlaybackSession(entities={len(self.timelines)}, "
            f"t={self.clock.current_time:.0f}/{self.clock.duration:.0f}ms, "
            f"status={self.clock.status.value})"
        )
