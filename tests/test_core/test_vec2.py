"""Tests for 2D point values."""

import math

import pytest

from chalkboard.core.vec2 import NormalizedPoint, PixelPoint, Vec2, clamp, clamp_unit


class TestVec2:
    """Tests for basic vector behaviour."""

    def test_arithmetic(self):
        """Addition, subtraction and scaling work component-wise."""
        a = Vec2(1, 2)
        b = Vec2(3, 5)
        assert a + b == Vec2(4, 7)
        assert b - a == Vec2(2, 3)
        assert a * 2 == Vec2(2, 4)
        assert 2 * a == Vec2(2, 4)
        assert -a == Vec2(-1, -2)

    def test_arithmetic_keeps_coordinate_space(self):
        """Adding normalized points gives a normalized point."""
        p = NormalizedPoint(0.1, 0.2) + NormalizedPoint(0.3, 0.3)
        assert isinstance(p, NormalizedPoint)
        assert p.x == pytest.approx(0.4)
        assert p.y == pytest.approx(0.5)

    def test_distance_and_length(self):
        """Distance and length should use the Euclidean norm."""
        assert Vec2(0, 0).distance_to(Vec2(3, 4)) == pytest.approx(5.0)
        assert Vec2(3, 4).length() == pytest.approx(5.0)

    def test_normalized_zero_vector(self):
        """A zero vector normalizes to zero instead of dividing by zero."""
        assert Vec2(0, 0).normalized() == Vec2(0, 0)

    def test_lerp(self):
        """lerp should interpolate linearly between two vectors."""
        assert Vec2(0, 0).lerp(Vec2(10, 20), 0.25) == Vec2(2.5, 5)

    def test_points_are_immutable(self):
        """Points should reject attribute assignment."""
        p = NormalizedPoint(0.5, 0.5)
        with pytest.raises(AttributeError):
            p.x = 0.7


class TestCoerce:
    """Tests for building points from loose input."""

    def test_from_tuple_and_mapping(self):
        """coerce should accept (x, y) tuples and {"x", "y"} mappings."""
        assert NormalizedPoint.coerce((0.2, 0.3)) == NormalizedPoint(0.2, 0.3)
        assert NormalizedPoint.coerce({"x": 0.2, "y": 0.3}) == NormalizedPoint(0.2, 0.3)

    def test_from_other_point(self):
        """coerce should rebuild another point in the target coordinate space."""
        p = PixelPoint.coerce(NormalizedPoint(0.2, 0.3))
        assert isinstance(p, PixelPoint)
        assert p == PixelPoint(0.2, 0.3)

    def test_rejects_non_numeric(self):
        """Strings, booleans and missing keys are not coordinates."""
        assert NormalizedPoint.coerce(("a", 0.3)) is None
        assert NormalizedPoint.coerce((True, 0.3)) is None
        assert NormalizedPoint.coerce({"x": 0.2}) is None
        assert NormalizedPoint.coerce(None) is None
        assert NormalizedPoint.coerce((1, 2, 3)) is None

    def test_rejects_non_finite(self):
        """NaN and infinity should not coerce to a point."""
        assert NormalizedPoint.coerce((math.nan, 0.3)) is None
        assert NormalizedPoint.coerce({"x": math.inf, "y": 0.3}) is None


class TestNormalizedPoint:
    """Tests for normalized field points."""

    def test_clamped(self):
        """clamped should pull both coordinates into [0, 1]."""
        assert NormalizedPoint(1.5, -0.2).clamped() == NormalizedPoint(1.0, 0.0)

    def test_in_unit_square(self):
        """in_unit_square should include the edges and nothing beyond."""
        assert NormalizedPoint(0.0, 1.0).in_unit_square()
        assert not NormalizedPoint(1.01, 0.5).in_unit_square()

    def test_clamp_helpers(self):
        """clamp and clamp_unit should bound scalars."""
        assert clamp(7, 0, 5) == 5
        assert clamp(-1, 0, 5) == 0
        assert clamp_unit(0.4) == 0.4
        assert clamp_unit(2.0) == 1.0
