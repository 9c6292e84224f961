"""Chalkboard - playbook diagramming and animation engine.

Coaches place personnel on a schematic field, draw motion and routes, drop
in formation templates and play back a synchronized animation:
- Normalized [0, 1] field space, independent of screen size
- Atomic formation placement with collision checks and strong-side mirroring
- Two-phase (pre-snap / main) timelines driven by one master clock
- Reactive defensive responses triggered by proximity
"""

__version__ = "0.1.0"

from .board import PlayBoard
from .orchestrator import Frame, PlaybackSession

__all__ = ["PlayBoard", "Frame", "PlaybackSession", "__version__"]
