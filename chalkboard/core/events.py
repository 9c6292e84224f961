"""Event system for board and playback state changes.

Events are emitted by the placement engine, the playback session and the
trigger engine. They are recorded for diagnostics and can be subscribed to
by the host application.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class EventType(str, Enum):
    """Types of events that can occur on the board."""

    # =========================================================================
    # Board
    # =========================================================================
    ENTITY_ADDED = "entity_added"
    ENTITY_REMOVED = "entity_removed"
    ROUTE_ASSIGNED = "route_assigned"
    FORMATION_PLACED = "formation_placed"
    FORMATION_REJECTED = "formation_rejected"
    BOARD_CLEARED = "board_cleared"

    # =========================================================================
    # Playback
    # =========================================================================
    PLAYBACK_STARTED = "playback_started"
    PLAYBACK_PAUSED = "playback_paused"
    PLAYBACK_RESTARTED = "playback_restarted"
    PLAYBACK_SEEK = "playback_seek"
    PLAYBACK_COMPLETE = "playback_complete"
    SPEED_CHANGED = "speed_changed"

    # =========================================================================
    # Reactive triggers
    # =========================================================================
    TRIGGER_ADDED = "trigger_added"
    TRIGGER_REJECTED = "trigger_rejected"
    TRIGGER_ACTIVATED = "trigger_activated"
    TRIGGER_FIRED = "trigger_fired"

    # =========================================================================
    # System
    # =========================================================================
    MISSING_REFERENCE = "missing_reference"
    ERROR = "error"


@dataclass
class Event:
    """An event that occurred on the board or during playback.

    Attributes:
        type: The type of event
        time: Playback time in milliseconds (0 for board edits)
        entity_id: Primary entity involved (if any)
        target_id: Secondary entity involved (if any)
        data: Additional event-specific data
        description: Human-readable description
    """
    type: EventType
    time: float = 0.0
    entity_id: Optional[str] = None
    target_id: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def __str__(self) -> str:
        parts = [f"[{self.time:.0f}ms]", f"{self.type.value}"]

        if self.entity_id:
            parts.append(f"by {self.entity_id}")

        if self.target_id:
            parts.append(f"-> {self.target_id}")

        if self.description:
            parts.append(f"- {self.description}")

        return " ".join(parts)


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """Pub/sub event bus for board events.

    Usage:
        bus = EventBus()
        bus.subscribe(EventType.TRIGGER_FIRED, my_handler)
        bus.emit_simple(EventType.PLAYBACK_COMPLETE, time=5000.0)
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []
        self._history: list[Event] = []
        self._recording: bool = True

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to a specific event type."""
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from a specific event type."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def emit(self, event: Event) -> None:
        """Emit an event to all subscribers."""
        if self._recording:
            self._history.append(event)

        for handler in self._handlers[event.type]:
            handler(event)

        for handler in self._global_handlers:
            handler(event)

    def emit_simple(
        self,
        event_type: EventType,
        time: float = 0.0,
        entity_id: Optional[str] = None,
        target_id: Optional[str] = None,
        description: str = "",
        **data: Any,
    ) -> Event:
        """Convenience method to emit an event with less boilerplate."""
        event = Event(
            type=event_type,
            time=time,
            entity_id=entity_id,
            target_id=target_id,
            description=description,
            data=data,
        )
        self.emit(event)
        return event

    @property
    def history(self) -> list[Event]:
        """Get all recorded events."""
        return self._history

    def clear_history(self) -> None:
        self._history.clear()

    def set_recording(self, enabled: bool) -> None:
        self._recording = enabled

    def get_events_by_type(self, event_type: EventType) -> list[Event]:
        """Get all events of a specific type from history."""
        return [e for e in self._history if e.type == event_type]

    def get_events_for_entity(self, entity_id: str) -> list[Event]:
        """Get all events involving a specific entity."""
        return [
            e for e in self._history
            if e.entity_id == entity_id or e.target_id == entity_id
        ]

    def format_history(self, last_n: Optional[int] = None) -> str:
        """Format event history as readable text."""
        events = self._history[-last_n:] if last_n else self._history
        return "\n".join(str(e) for e in events)

    def __len__(self) -> int:
        return len(self._history)

    def __bool__(self) -> bool:
        """EventBus is always truthy (even with empty history)."""
        return True
