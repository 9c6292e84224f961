"""Tests for the play board and route drawing."""

import pytest

from chalkboard.board import PlayBoard
from chalkboard.core.entities import create_route_segment
from chalkboard.core.events import EventType
from chalkboard.core.vec2 import NormalizedPoint


class TestEntities:
    """Tests for adding, replacing and removing entities."""

    def test_place_player_from_pixels(self, board):
        """Players placed by pixel should get a normalized anchor."""
        qb = board.place_player("QB", (50, 50))
        assert qb.anchor == NormalizedPoint(0.5, 0.5)
        assert qb.id in board
        assert board.get(qb.id) is qb

    def test_place_player_needs_geometry(self):
        """Pixel placement without geometry should raise."""
        with pytest.raises(ValueError):
            PlayBoard().place_player("QB", (50, 50))

    def test_insertion_order(self, board, make_entity):
        """Entities should iterate in insertion order."""
        board.add_entities([make_entity("QB", 0.5, 0.6, id="qb"), make_entity("WR", 0.2, 0.5, id="wr")])
        board.add_entities([make_entity("CB", 0.2, 0.4, id="cb")])
        assert [e.id for e in board] == ["qb", "wr", "cb"]

    def test_duplicate_id_rejects_batch(self, board, make_entity):
        """A duplicate id should reject the whole batch."""
        board.add_entities([make_entity("QB", 0.5, 0.6, id="qb")])
        with pytest.raises(ValueError):
            board.add_entities([make_entity("WR", 0.2, 0.5, id="wr"), make_entity("RB", 0.5, 0.7, id="qb")])
        assert len(board) == 1
        assert "wr" not in board

    def test_duplicate_within_batch(self, board, make_entity):
        """Duplicates inside one batch should be rejected too."""
        with pytest.raises(ValueError):
            board.add_entities([make_entity("WR", 0.2, 0.5, id="x"), make_entity("WR", 0.8, 0.5, id="x")])
        assert len(board) == 0

    def test_version_bumps_on_change(self, board, make_entity):
        """version should change only when the board does."""
        start = board.version
        board.add_entities([make_entity("QB", 0.5, 0.6, id="qb")])
        assert board.version == start + 1
        board.add_entities([])
        assert board.version == start + 1
        board.delete_entity("qb")
        assert board.version == start + 2

    def test_replace_entity(self, board, make_entity):
        """replace_entity should only replace known ids."""
        board.add_entities([make_entity("QB", 0.5, 0.6, id="qb")])
        assert board.replace_entity(make_entity("QB", 0.4, 0.6, id="qb"))
        assert board.get("qb").anchor.x == 0.4
        assert not board.replace_entity(make_entity("QB", 0.4, 0.6, id="ghost"))

    def test_delete_and_clear(self, board, make_entity, event_bus):
        """Deleting and clearing should announce what was removed."""
        board.add_entities([make_entity("QB", 0.5, 0.6, id="qb"), make_entity("WR", 0.2, 0.5, id="wr")])
        assert board.delete_entity("qb")
        assert not board.delete_entity("qb")
        board.clear()
        assert len(board) == 0
        assert len(event_bus.get_events_by_type(EventType.ENTITY_REMOVED)) == 1
        assert len(event_bus.get_events_by_type(EventType.BOARD_CLEARED)) == 1

    def test_initial_entities(self, make_entity):
        """Entities passed at construction should be on the board."""
        board = PlayBoard(entities=[make_entity("QB", 0.5, 0.6, id="qb")])
        assert len(board) == 1


class TestRouteDrawing:
    """Tests for drawing routes with drag samples."""

    @pytest.fixture
    def qb(self, board, make_entity):
        board.add_entities([make_entity("QB", 0.5, 0.5, id="qb")])
        return board.get("qb")

    def test_route_starts_at_anchor(self, board, qb):
        """Drawing should start from the entity's anchor."""
        assert board.begin_route("qb")
        assert board.is_drawing
        assert board.drawing_points == [qb.anchor]

    def test_begin_unknown_entity(self, board):
        """Drawing for an unknown entity should not start."""
        assert not board.begin_route("ghost")
        assert not board.is_drawing

    def test_extend_converts_pixels(self, board, qb):
        """Drag samples should convert to normalized points."""
        board.begin_route("qb")
        point = board.extend_route((50, 0))
        assert point == NormalizedPoint(0.5, 0.25)

    def test_samples_outside_touch_area_ignored(self, board, qb):
        """Samples outside the touch area should be ignored."""
        board.begin_route("qb")
        assert board.extend_route((1000, 0)) is None
        assert board.extend_route("garbage") is None
        assert len(board.drawing_points) == 1

    def test_extend_without_begin(self, board, qb):
        """Samples without an active drawing should be ignored."""
        assert board.extend_route((50, 0)) is None

    def test_complete_main_route(self, board, qb, event_bus):
        """Completing a drawing should assign the main route."""
        board.begin_route("qb")
        board.extend_route((50, 20))
        board.extend_route((90, -20))
        updated = board.complete_route()

        assert not board.is_drawing
        assert updated.main_route is not None
        assert len(updated.main_route) == 3
        assert updated.main_route.start == qb.anchor
        assert board.get("qb") is updated
        assert len(event_bus.get_events_by_type(EventType.ROUTE_ASSIGNED)) == 1

    def test_complete_pre_snap_route(self, board, qb):
        """pre_snap=True should assign the motion route instead."""
        board.begin_route("qb")
        board.extend_route((70, 50))
        updated = board.complete_route(pre_snap=True)
        assert updated.pre_snap_route is not None
        assert updated.main_route is None

    def test_single_point_discarded(self, board, qb):
        """A drawing with only the anchor should be discarded."""
        board.begin_route("qb")
        assert board.complete_route() is None
        assert not board.get("qb").has_routes

    def test_cancel(self, board, qb):
        """Cancelling should drop the drawing without assigning a route."""
        board.begin_route("qb")
        board.extend_route((50, 20))
        board.cancel_route()
        assert board.complete_route() is None
        assert not board.get("qb").has_routes

    def test_deleting_entity_cancels_drawing(self, board, qb):
        """Deleting the drawn entity should cancel the drawing."""
        board.begin_route("qb")
        board.delete_entity("qb")
        assert not board.is_drawing

    def test_assign_route(self, board, qb):
        """assign_route should set the main route of known entities only."""
        route = create_route_segment([(0.5, 0.5), (0.5, 0.2)], id="go")
        assert board.assign_route("qb", route).main_route.id == "go"
        assert board.assign_route("ghost", route) is None
