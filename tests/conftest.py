"""Shared pytest fixtures for Chalkboard tests."""

import pytest

from chalkboard.board import PlayBoard
from chalkboard.core.config import EngineConfig, set_config
from chalkboard.core.entities import Entity, create_entity, create_route_segment
from chalkboard.core.events import EventBus
from chalkboard.core.field import FieldBounds, FieldGeometry
from chalkboard.systems.placement import FormationPlacer


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture(autouse=True)
def engine_config(monkeypatch) -> EngineConfig:
    """Fresh default configuration for every test, restored afterwards."""
    for name in (
        "CHALKBOARD_MIN_SEPARATION",
        "CHALKBOARD_PRE_SNAP_DURATION",
        "CHALKBOARD_MAIN_PLAY_DURATION",
        "CHALKBOARD_SNAP_TIME",
        "CHALKBOARD_RESPONSE_DURATION",
    ):
        monkeypatch.delenv(name, raising=False)

    config = EngineConfig()
    previous = set_config(config)
    yield config
    set_config(previous)


# =============================================================================
# Field Fixtures
# =============================================================================


@pytest.fixture
def bounds() -> FieldBounds:
    """100x100 visible field inside a 200x200 extended frame.

    Normalized (0, 0) is pixel (-50, -50), (0.5, 0.5) is (50, 50) and
    (1, 1) is (150, 150).
    """
    return FieldBounds(
        top=0.0,
        bottom=100.0,
        left=0.0,
        right=100.0,
        extended_top=-50.0,
        extended_bottom=150.0,
        extended_left=-50.0,
        extended_right=150.0,
    )


@pytest.fixture
def geometry(bounds) -> FieldGeometry:
    return FieldGeometry(bounds)


# =============================================================================
# Board Fixtures
# =============================================================================


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def board(geometry, event_bus) -> PlayBoard:
    """Empty board with geometry attached."""
    return PlayBoard(geometry, event_bus=event_bus)


@pytest.fixture
def placer(board) -> FormationPlacer:
    return FormationPlacer(board)


@pytest.fixture
def routed_qb() -> Entity:
    """QB with a pre-snap shift right and a main route straight up the field.

    Pre-snap: (0.5, 0.5) -> (0.6, 0.5)
    Main:     (0.6, 0.5) -> (0.6, 0.3)
    """
    entity = create_entity("QB", (0.5, 0.5), id="qb")
    return Entity(
        id=entity.id,
        position_label=entity.position_label,
        anchor=entity.anchor,
        pre_snap_route=create_route_segment([(0.5, 0.5), (0.6, 0.5)], id="qb-motion"),
        main_route=create_route_segment([(0.6, 0.5), (0.6, 0.3)], id="qb-route"),
    )


@pytest.fixture
def make_entity():
    """Factory for plain entities at a normalized anchor."""
    def _make(position_label: str, x: float, y: float, id: str = None, label: str = None) -> Entity:
        return create_entity(position_label, (x, y), id=id, label=label)
    return _make
