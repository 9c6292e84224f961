"""Engine configuration.

Tunable constants for placement, timelines, playback and reactive triggers.
Every setting has a sensible default and can be overridden through a
CHALKBOARD_* environment variable or programmatically via set_config().
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number), using %s", name, raw, default)
        return default


@dataclass
class EngineConfig:
    """Configuration for the playbook engine.

    Distances are in normalized field units (0-1), times in milliseconds.
    """

    # Formation placement
    min_separation: float = field(
        default_factory=lambda: _env_float("CHALKBOARD_MIN_SEPARATION", 0.015)
    )

    # Timeline phases
    pre_snap_duration: float = field(
        default_factory=lambda: _env_float("CHALKBOARD_PRE_SNAP_DURATION", 2000.0)
    )
    main_play_duration: float = field(
        default_factory=lambda: _env_float("CHALKBOARD_MAIN_PLAY_DURATION", 3000.0)
    )
    pre_snap_start_time: float = 0.0
    snap_time: float = field(
        default_factory=lambda: _env_float("CHALKBOARD_SNAP_TIME", 2000.0)
    )
    default_play_duration: float = 5000.0  # Used when there is nothing to animate

    # Playback speed
    min_speed: float = 0.1
    max_speed: float = 5.0

    # Reactive triggers
    default_trigger_threshold: float = 0.15
    default_response_delay: float = 500.0
    quick_response_threshold: float = 0.12  # ~12% of field width
    quick_response_delay: float = 300.0
    response_duration: float = field(
        default_factory=lambda: _env_float("CHALKBOARD_RESPONSE_DURATION", 1000.0)
    )

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Create config from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []
        if self.min_separation < 0:
            errors.append("min_separation must be non-negative")
        if self.pre_snap_duration <= 0 or self.main_play_duration <= 0:
            errors.append("phase durations must be positive")
        if not self.pre_snap_start_time < self.snap_time:
            errors.append("snap_time must come after pre_snap_start_time")
        elif self.pre_snap_start_time + self.pre_snap_duration != self.snap_time:
            errors.append("pre_snap_start_time + pre_snap_duration must equal snap_time")
        if not 0 < self.min_speed <= self.max_speed:
            errors.append("speed bounds must satisfy 0 < min_speed <= max_speed")
        if not 0 < self.quick_response_threshold <= 1:
            errors.append("quick_response_threshold must be in (0, 1]")
        if self.response_duration <= 0:
            errors.append("response_duration must be positive")
        return errors


# Global config (can be overridden per-session)
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the global engine configuration."""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config


def set_config(config: Optional[EngineConfig]) -> Optional[EngineConfig]:
    """Set global engine configuration, returning the previous one.

    Passing None drops the override so the next get_config() rereads the
    environment.
    """
    global _config
    previous = _config
    _config = config
    return previous
