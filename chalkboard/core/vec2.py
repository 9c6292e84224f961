"""2D point values for the playbook board.

Two coordinate spaces share one immutable value type:

    NormalizedPoint - resolution-independent field space, [0, 1] on both axes
    PixelPoint      - device pixels, as produced by touch input

Arithmetic preserves the flavour of the left operand, so a route built from
NormalizedPoints stays in field space.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True, slots=True)
class Vec2:
    """Immutable 2D vector.

    Coordinate system (both spaces):
        +X = Right (as drawn on the board)
        +Y = Down the screen
    """
    x: float = 0.0
    y: float = 0.0

    # =========================================================================
    # Arithmetic Operations
    # =========================================================================

    def __add__(self, other: Vec2) -> Vec2:
        return self.__class__(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return self.__class__(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return self.__class__(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Vec2:
        return self.__class__(self.x * scalar, self.y * scalar)

    def __neg__(self) -> Vec2:
        return self.__class__(-self.x, -self.y)

    # =========================================================================
    # Vector Operations
    # =========================================================================

    def length(self) -> float:
        """Magnitude of vector."""
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalized(self) -> Vec2:
        """Unit vector in same direction."""
        length = self.length()
        if length < 0.0001:
            return self.__class__(0, 0)
        return self.__class__(self.x / length, self.y / length)

    def distance_to(self, other: Vec2) -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def lerp(self, other: Vec2, t: float) -> Vec2:
        """Linear interpolation to another vector."""
        return self.__class__(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t
        )

    # =========================================================================
    # Utility
    # =========================================================================

    def with_x(self, x: float) -> Vec2:
        """Return new vector with different x."""
        return self.__class__(x, self.y)

    def with_y(self, y: float) -> Vec2:
        """Return new vector with different y."""
        return self.__class__(self.x, y)

    def is_close(self, other: Vec2, tolerance: float = 1e-6) -> bool:
        """Component-wise comparison within a tolerance."""
        return abs(self.x - other.x) <= tolerance and abs(self.y - other.y) <= tolerance

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.x:.4f}, {self.y:.4f})"

    # =========================================================================
    # Class Methods
    # =========================================================================

    @classmethod
    def zero(cls) -> Vec2:
        """Zero vector."""
        return cls(0.0, 0.0)

    @classmethod
    def coerce(cls, value: Any) -> Optional[Vec2]:
        """Build a point from a Vec2, an {x, y} mapping or an (x, y) pair.

        Returns None when the value has no usable finite numeric coordinates.
        """
        if isinstance(value, Vec2):
            x, y = value.x, value.y
        elif isinstance(value, Mapping):
            x, y = value.get("x"), value.get("y")
        elif isinstance(value, (tuple, list)) and len(value) == 2:
            x, y = value
        else:
            return None

        if not (_is_number(x) and _is_number(y)):
            return None
        return cls(float(x), float(y))


@dataclass(frozen=True, slots=True)
class NormalizedPoint(Vec2):
    """A point in normalized field space."""

    def clamped(self) -> NormalizedPoint:
        """Return the point clamped into [0, 1] on both axes."""
        return NormalizedPoint(clamp_unit(self.x), clamp_unit(self.y))

    def in_unit_square(self) -> bool:
        return 0.0 <= self.x <= 1.0 and 0.0 <= self.y <= 1.0


@dataclass(frozen=True, slots=True)
class PixelPoint(Vec2):
    """A point in device pixel space."""


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value between min and max."""
    return max(min_val, min(max_val, value))


def clamp_unit(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
