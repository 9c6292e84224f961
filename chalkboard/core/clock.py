"""Master animation clock.

One shared progress scalar drives every entity timeline. The clock owns no
timer of its own: the host calls tick() (or advance_to()) from its render
loop, and the clock moves progress toward 1 while a run is in flight.

At most one run is ever in flight. play() while playing is a no-op, and
pause/restart/seek cancel the current run before touching progress.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .config import get_config
from .vec2 import clamp, clamp_unit


logger = logging.getLogger(__name__)


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ClockState:
    """Snapshot of the clock for renderers and tests."""
    progress: float
    speed: float
    is_playing: bool
    status: PlaybackStatus
    duration: float

    @property
    def current_time(self) -> float:
        return self.progress * self.duration


# Called with True on natural completion, False when a run is cancelled
FinishCallback = Callable[[bool], None]


class MasterClock:
    """Shared playback clock.

    Progress advances at speed / duration per millisecond, so a full run from
    0 takes duration / speed milliseconds of host time.

    Usage:
        clock = MasterClock(duration=5000)
        clock.play()
        clock.tick(16.7)   # from the host's frame loop
        clock.current_time
    """

    def __init__(
        self,
        duration: Optional[float] = None,
        speed: float = 1.0,
        on_finish: Optional[FinishCallback] = None,
        min_speed: Optional[float] = None,
        max_speed: Optional[float] = None,
    ) -> None:
        config = get_config()
        self.min_speed = min_speed if min_speed is not None else config.min_speed
        self.max_speed = max_speed if max_speed is not None else config.max_speed
        self._duration = config.default_play_duration
        self.set_duration(duration if duration is not None else config.default_play_duration)

        self._progress: float = 0.0
        self._speed: float = clamp(speed, self.min_speed, self.max_speed)
        self._status = PlaybackStatus.IDLE
        self._run_id: Optional[int] = None   # In-flight run, None when stopped
        self._runs_started: int = 0
        self._last_now: Optional[float] = None
        self.on_finish = on_finish

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def is_playing(self) -> bool:
        return self._run_id is not None

    @property
    def current_time(self) -> float:
        """Playback time in milliseconds."""
        return self._progress * self._duration

    @property
    def remaining_ms(self) -> float:
        """Host milliseconds left until the current run completes."""
        return (1.0 - self._progress) * self._duration / self._speed

    def state(self) -> ClockState:
        return ClockState(
            progress=self._progress,
            speed=self._speed,
            is_playing=self.is_playing,
            status=self._status,
            duration=self._duration,
        )

    def set_duration(self, duration: float) -> None:
        """Change the total playback duration. Progress is kept as a fraction."""
        if duration <= 0:
            raise ValueError(f"Duration must be positive, got {duration}")
        self._duration = float(duration)

    # =========================================================================
    # Controls
    # =========================================================================

    def play(self) -> bool:
        """Start a run from the current progress.

        Returns:
            True if a run was started, False if one was already in flight
        """
        if self.is_playing:
            return False

        if self._progress >= 1.0:
            # A completed play replays from the start
            self._progress = 0.0

        self._runs_started += 1
        self._run_id = self._runs_started
        self._last_now = None
        self._status = PlaybackStatus.PLAYING
        logger.debug("Clock run started at progress %.3f (speed %.2f)", self._progress, self._speed)
        return True

    def pause(self) -> None:
        """Halt the in-flight run; progress keeps its value."""
        if self._cancel_run():
            self._status = PlaybackStatus.PAUSED

    def restart(self) -> None:
        """Halt any run and reset progress to 0."""
        self._cancel_run()
        self._progress = 0.0
        self._status = PlaybackStatus.IDLE

    def seek(self, fraction: float) -> None:
        """Jump to a progress fraction, leaving the clock paused."""
        self._cancel_run()
        self._progress = clamp_unit(float(fraction))
        self._status = PlaybackStatus.PAUSED

    def set_speed(self, speed: float) -> float:
        """Change playback speed, clamped to [min_speed, max_speed].

        A run in flight keeps its progress and continues at the new rate.

        Returns:
            The speed actually applied
        """
        self._speed = clamp(float(speed), self.min_speed, self.max_speed)
        return self._speed

    # =========================================================================
    # Frame driving
    # =========================================================================

    def tick(self, delta_ms: float) -> float:
        """Advance the in-flight run by delta_ms of host time.

        Returns:
            Progress after the tick
        """
        if not self.is_playing or delta_ms <= 0:
            return self._progress

        self._progress = clamp_unit(self._progress + delta_ms * self._speed / self._duration)
        if self._progress >= 1.0:
            self._complete()
        return self._progress

    def advance_to(self, now_ms: float) -> float:
        """Advance using an absolute host timestamp (e.g. a frame callback time).

        The first call after play() only records the timestamp.
        """
        if not self.is_playing:
            return self._progress

        last, self._last_now = self._last_now, now_ms
        if last is None:
            return self._progress
        return self.tick(now_ms - last)

    # =========================================================================
    # Internal
    # =========================================================================

    def _cancel_run(self) -> bool:
        if not self.is_playing:
            return False
        self._run_id = None
        self._last_now = None
        logger.debug("Clock run cancelled at progress %.3f", self._progress)
        if self.on_finish is not None:
            self.on_finish(False)
        return True

    def _complete(self) -> None:
        self._run_id = None
        self._last_now = None
        self._progress = 1.0
        self._status = PlaybackStatus.COMPLETED
        logger.debug("Clock run completed")
        if self.on_finish is not None:
            self.on_finish(True)

    def __repr__(self) -> str:
        return (
            f"MasterClock(progress={self._progress:.3f}, speed={self._speed:.2f}, "
            f"status={self._status.value})"
        )
