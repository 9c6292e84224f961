"""Exceptions raised by the playbook engine.

Per-tick resolution never raises; these cover load-time and programmer
errors only.
"""

from __future__ import annotations

from typing import Optional


class ChalkboardError(Exception):
    """Base exception for playbook engine errors."""
    pass


class PlayDocumentError(ChalkboardError):
    """Raised when a serialized play document cannot be loaded."""
    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class UnknownFormationError(ChalkboardError, KeyError):
    """Raised when a formation id or name is not in the catalog."""
    pass
