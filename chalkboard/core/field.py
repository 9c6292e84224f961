"""Field geometry and coordinate conversion.

Entity anchors and route points live in a normalized [0, 1] x [0, 1] field
space so plays are resolution independent. The device maps that space onto
pixels through the *extended* field bounds, which reach past the visible
field so that chips and route handles near the sidelines stay draggable.

Coordinate system (both spaces):
    Origin = top-left of the extended frame
    +X = Right
    +Y = Down the screen
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .vec2 import NormalizedPoint, PixelPoint, clamp, clamp_unit


logger = logging.getLogger(__name__)


# =============================================================================
# Layout Ratios (fractions of the screen)
# =============================================================================

EXTEND_X_RATIO = 0.26           # Horizontal safe-area extension
EXTEND_Y_RATIO = 0.07           # Vertical safe-area extension
FIELD_ASPECT_RATIO = 0.85       # Field width / height
HEADER_HEIGHT_RATIO = 0.10
CARD_MARGIN_RATIO = 0.015
CARD_PADDING_RATIO = 0.01
MAX_FIELD_WIDTH_RATIO = 0.96
CHIP_SIZE_RATIO = 0.05          # Of the smaller screen dimension
TOUCH_MARGIN = 400.0            # Pixels past the screen still accepted as touches


# =============================================================================
# Bounds
# =============================================================================

@dataclass(frozen=True)
class FieldBounds:
    """Visible field rectangle plus the interaction-safe extended rectangle.

    All values in pixels. The extended rectangle always contains the visible
    one and is the affine frame for coordinate conversion.
    """
    top: float
    bottom: float
    left: float
    right: float
    extended_top: float
    extended_bottom: float
    extended_left: float
    extended_right: float

    def __post_init__(self):
        if not (self.extended_left <= self.left <= self.right <= self.extended_right):
            raise ValueError(f"Extended bounds must contain visible bounds horizontally: {self}")
        if not (self.extended_top <= self.top <= self.bottom <= self.extended_bottom):
            raise ValueError(f"Extended bounds must contain visible bounds vertically: {self}")
        if self.extended_width <= 0 or self.extended_height <= 0:
            raise ValueError(f"Extended bounds must have positive area: {self}")

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def extended_width(self) -> float:
        return self.extended_right - self.extended_left

    @property
    def extended_height(self) -> float:
        return self.extended_bottom - self.extended_top

    @property
    def center(self) -> PixelPoint:
        """Centre of the visible field."""
        return PixelPoint((self.left + self.right) / 2, (self.top + self.bottom) / 2)


@dataclass(frozen=True)
class TouchBounds:
    """Generous hit-test rectangle used for drag gestures."""
    left: float
    top: float
    right: float
    bottom: float

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom


@dataclass(frozen=True)
class FieldDimensions:
    """Sizes derived from the screen, for hosts that lay out the board."""
    width: float
    height: float
    aspect_ratio: float
    card_width: float
    card_margin: float
    card_padding: float
    chip_size: float


# =============================================================================
# Geometry
# =============================================================================

class FieldGeometry:
    """Bidirectional mapping between normalized field space and pixels.

    All conversion helpers are total: malformed input degrades to the origin
    rather than raising, so a bad touch sample can never break a gesture.
    """

    def __init__(
        self,
        bounds: FieldBounds,
        touch_bounds: Optional[TouchBounds] = None,
        dimensions: Optional[FieldDimensions] = None,
    ) -> None:
        self.bounds = bounds
        self.touch_bounds = touch_bounds or TouchBounds(
            left=bounds.extended_left,
            top=bounds.extended_top,
            right=bounds.extended_right,
            bottom=bounds.extended_bottom,
        )
        self.dimensions = dimensions

    @classmethod
    def from_screen(
        cls,
        screen_width: float,
        screen_height: float,
        extend_x: float = EXTEND_X_RATIO,
        extend_y: float = EXTEND_Y_RATIO,
        field_height_ratio: Optional[float] = None,
        field_aspect_ratio: float = FIELD_ASPECT_RATIO,
        header_height: Optional[float] = None,
        safe_area_top: float = 0.0,
        safe_area_bottom: float = 0.0,
        touch_margin: float = TOUCH_MARGIN,
    ) -> FieldGeometry:
        """Lay the field out on a screen of the given size.

        Args:
            screen_width: Screen width in pixels
            screen_height: Screen height in pixels
            extend_x: Horizontal extension as a ratio of screen width
            extend_y: Vertical extension as a ratio of screen height
            field_height_ratio: Minimum field height as a ratio of screen height
            field_aspect_ratio: Field width / height
            header_height: Header height in pixels (default 10% of screen)
            safe_area_top: Top inset in pixels
            safe_area_bottom: Bottom inset in pixels
            touch_margin: Pixels past the screen edge still accepted as touches

        Raises:
            ValueError: if the screen is empty or an extension ratio is negative
        """
        if screen_width <= 0 or screen_height <= 0:
            raise ValueError(f"Screen must have positive size, got {screen_width}x{screen_height}")
        if extend_x < 0 or extend_y < 0:
            raise ValueError("Extension ratios must be non-negative")

        screen_min = min(screen_width, screen_height)
        card_margin = screen_width * CARD_MARGIN_RATIO
        card_padding = screen_width * CARD_PADDING_RATIO
        header = header_height if header_height is not None else screen_height * HEADER_HEIGHT_RATIO

        # Field runs from the header to the bottom of the screen
        available_height = screen_height - safe_area_top - safe_area_bottom - header
        field_height = available_height
        if field_height_ratio is not None:
            field_height = max(screen_height * field_height_ratio, available_height)
        field_height = max(field_height, 1.0)
        field_width = min(screen_width * MAX_FIELD_WIDTH_RATIO, field_height * field_aspect_ratio)

        extend_x_px = screen_width * extend_x
        extend_y_px = screen_height * extend_y
        left = card_margin

        bounds = FieldBounds(
            top=0.0,
            bottom=field_height,
            left=left,
            right=left + field_width,
            extended_top=-extend_y_px,
            extended_bottom=field_height + extend_y_px,
            extended_left=left - extend_x_px,
            extended_right=left + field_width + extend_x_px,
        )
        touch = TouchBounds(
            left=min(0.0, bounds.extended_left),
            top=min(0.0, bounds.extended_top),
            right=max(screen_width + touch_margin, bounds.extended_right),
            bottom=max(screen_height + touch_margin, bounds.extended_bottom),
        )
        dimensions = FieldDimensions(
            width=field_width,
            height=field_height,
            aspect_ratio=field_aspect_ratio,
            card_width=screen_width - card_margin * 2,
            card_margin=card_margin,
            card_padding=card_padding,
            chip_size=screen_min * CHIP_SIZE_RATIO,
        )
        return cls(bounds, touch, dimensions)

    # =========================================================================
    # Conversion
    # =========================================================================

    def normalized_to_pixels(self, point: Any) -> PixelPoint:
        """Map a normalized point into pixels through the extended frame."""
        p = NormalizedPoint.coerce(point)
        if p is None:
            logger.debug("normalized_to_pixels: invalid point %r, using origin", point)
            return PixelPoint(0.0, 0.0)

        b = self.bounds
        return PixelPoint(
            b.extended_left + p.x * b.extended_width,
            b.extended_top + p.y * b.extended_height,
        )

    def pixels_to_normalized(self, point: Any) -> NormalizedPoint:
        """Map a pixel point into normalized space, clamping each axis to [0, 1]."""
        p = PixelPoint.coerce(point)
        if p is None:
            logger.debug("pixels_to_normalized: invalid point %r, using origin", point)
            return NormalizedPoint(0.0, 0.0)

        b = self.bounds
        return NormalizedPoint(
            clamp_unit((p.x - b.extended_left) / b.extended_width),
            clamp_unit((p.y - b.extended_top) / b.extended_height),
        )

    def route_to_pixels(self, points: Iterable[Any]) -> list[PixelPoint]:
        return [self.normalized_to_pixels(p) for p in points]

    def route_to_normalized(self, points: Iterable[Any]) -> list[NormalizedPoint]:
        return [self.pixels_to_normalized(p) for p in points]

    # =========================================================================
    # Hit testing
    # =========================================================================

    def is_within_field(self, x: Any, y: Any) -> bool:
        """Check a pixel position against the touch-overlay bounds.

        Deliberately looser than the visible field so drags that start or
        end near an edge are not dropped.
        """
        p = PixelPoint.coerce((x, y))
        if p is None:
            return False
        return self.touch_bounds.contains(p.x, p.y)

    def constrain_to_field(self, x: Any, y: Any) -> PixelPoint:
        """Clamp a pixel position into the extended bounds."""
        p = PixelPoint.coerce((x, y))
        if p is None:
            logger.debug("constrain_to_field: invalid point (%r, %r), using origin", x, y)
            return PixelPoint(0.0, 0.0)

        b = self.bounds
        return PixelPoint(
            clamp(p.x, b.extended_left, b.extended_right),
            clamp(p.y, b.extended_top, b.extended_bottom),
        )

    def field_center(self) -> PixelPoint:
        """Centre of the visible field in pixels."""
        return self.bounds.center

    def __repr__(self) -> str:
        b = self.bounds
        return (
            f"FieldGeometry(visible={b.width:.0f}x{b.height:.0f}, "
            f"extended={b.extended_width:.0f}x{b.extended_height:.0f})"
        )
