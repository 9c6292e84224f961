"""Tests for entities and routes."""

import pytest

from chalkboard.core.entities import (
    Team,
    add_pre_snap_route_to_player,
    add_route_to_player,
    classify_position,
    clear_routes,
    create_entity,
    create_route_segment,
    remove_route_from_player,
    update_entity_anchor,
    validate_route_segment,
)
from chalkboard.core.vec2 import NormalizedPoint


class TestClassifyPosition:
    """Tests for position -> team classification."""

    def test_offense(self):
        """Offensive labels should classify as offense, case-insensitively."""
        for label in ["QB", "wr", "TE", "C", "LT", "FB"]:
            assert classify_position(label) == Team.OFFENSE

    def test_defense(self):
        """Defensive labels should classify as defense, case-insensitively."""
        for label in ["CB", "ss", "NT", "MLB", "DE"]:
            assert classify_position(label) == Team.DEFENSE

    def test_unknown(self):
        """Unknown or empty labels should have no team."""
        assert classify_position("K") is None
        assert classify_position("") is None
        assert classify_position(None) is None


class TestCreateEntity:
    """Tests for entity creation."""

    def test_anchor_is_clamped(self):
        """Anchors outside the unit square should be clamped."""
        entity = create_entity("WR", (1.5, -0.2))
        assert entity.anchor == NormalizedPoint(1.0, 0.0)

    def test_invalid_anchor_becomes_origin(self):
        """A malformed anchor should fall back to the origin."""
        entity = create_entity("WR", "not a point")
        assert entity.anchor == NormalizedPoint(0.0, 0.0)

    def test_generated_ids_are_unique(self):
        """Generated ids should be unique and prefixed with player_."""
        ids = {create_entity("WR", (0.5, 0.5)).id for _ in range(50)}
        assert len(ids) == 50
        assert all(i.startswith("player_") for i in ids)

    def test_explicit_fields(self):
        """Explicit id, label and group should be kept."""
        entity = create_entity("LB", (0.4, 0.3), id="sam", label="SAM", group="LB-tier")
        assert entity.id == "sam"
        assert entity.display_name == "SAM"
        assert entity.group == "LB-tier"
        assert entity.is_defense
        assert not entity.has_routes

    def test_display_name_falls_back_to_position(self):
        """display_name should fall back to the position label."""
        assert create_entity("QB", (0.5, 0.5)).display_name == "QB"


class TestRouteSegment:
    """Tests for route creation and validation."""

    def test_empty_route_is_none(self):
        """An empty or missing point list should give no route."""
        assert create_route_segment([]) is None
        assert create_route_segment(None) is None

    def test_invalid_points_dropped(self):
        """Points that cannot be coerced should be dropped."""
        route = create_route_segment([(0.1, 0.1), "junk", {"x": 0.2, "y": 0.2}])
        assert len(route) == 2
        assert route.end == NormalizedPoint(0.2, 0.2)

    def test_points_are_not_clamped(self):
        """Clamping is the geometry's job; routes keep what they are given."""
        route = create_route_segment([(0.5, 0.5), (1.2, 0.5)])
        assert route.end.x == 1.2
        assert not validate_route_segment(route)

    def test_route_ids(self):
        """Routes should keep an explicit id or generate one."""
        assert create_route_segment([(0, 0)], id="r1").id == "r1"
        assert create_route_segment([(0, 0)]).id.startswith("route_")

    def test_length(self):
        """Route length should be the sum of its segment lengths."""
        route = create_route_segment([(0, 0), (0.3, 0.4), (0.3, 0.9)])
        assert route.length == pytest.approx(1.0)

    def test_validate(self):
        """A drawable route needs at least two points."""
        assert validate_route_segment(create_route_segment([(0.1, 0.1), (0.2, 0.2)]))
        assert not validate_route_segment(create_route_segment([(0.1, 0.1)]))
        assert not validate_route_segment(None)


class TestEntityMutators:
    """Mutators return new entities and leave the original alone."""

    @pytest.fixture
    def wr(self):
        return create_entity("WR", (0.2, 0.5), id="wr")

    @pytest.fixture
    def route(self):
        return create_route_segment([(0.2, 0.5), (0.2, 0.2)], id="go")

    def test_add_route(self, wr, route):
        """Adding a main route should not touch the original entity."""
        updated = add_route_to_player(wr, route)
        assert updated.main_route is route
        assert wr.main_route is None
        assert updated.has_routes

    def test_add_pre_snap_route(self, wr, route):
        """Adding a pre-snap route should leave the main route alone."""
        updated = add_pre_snap_route_to_player(wr, route)
        assert updated.pre_snap_route is route
        assert updated.main_route is None

    def test_add_route_replaces(self, wr, route):
        """A new main route should replace the old one."""
        other = create_route_segment([(0.2, 0.5), (0.4, 0.4)], id="slant")
        updated = add_route_to_player(add_route_to_player(wr, route), other)
        assert updated.main_route.id == "slant"

    def test_remove_route_by_id(self, wr, route):
        """Only the route with the matching id should be removed."""
        updated = remove_route_from_player(add_route_to_player(wr, route), "go")
        assert updated.main_route is None
        unchanged = remove_route_from_player(add_route_to_player(wr, route), "other")
        assert unchanged.main_route is route

    def test_clear_routes(self, wr, route):
        """clear_routes should drop both routes."""
        updated = clear_routes(add_pre_snap_route_to_player(add_route_to_player(wr, route), route))
        assert not updated.has_routes

    def test_update_anchor_clamps(self, wr):
        """Moving an anchor should clamp it and leave the original alone."""
        moved = update_entity_anchor(wr, (0.5, 2.0))
        assert moved.anchor == NormalizedPoint(0.5, 1.0)
        assert wr.anchor == NormalizedPoint(0.2, 0.5)
