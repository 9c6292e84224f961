"""Formation placement engine.

Places a whole formation as one atomic operation:

1. Orient defensive templates toward the offense's strong side
2. Resolve every slot to an absolute normalized position
3. Clamp into the field
4. Check every new position against the other new positions and against
   everyone already on the board
5. Create all entities at once, or none of them

Collision checking is vectorised with numpy; a full 11-on-11 board is a
22x22 distance matrix.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import numpy as np

from ..board import PlayBoard
from ..core.config import get_config
from ..core.entities import (
    BACKFIELD_POSITIONS,
    Entity,
    Team,
    classify_position,
    create_entity,
)
from ..core.events import EventType
from ..core.vec2 import NormalizedPoint, clamp_unit
from ..plays.formations import FormationTemplate, Side


logger = logging.getLogger(__name__)


FIELD_CENTER_X = 0.5
SIDE_TOLERANCE = 1e-6       # Entities this close to the centre line count for neither side
BACKFIELD_OFFSET = 0.02     # An offset back must be this far off centre to count


# =============================================================================
# Strong Side Detection
# =============================================================================

def detect_offensive_strong_side(entities: Iterable[Entity]) -> Optional[Side]:
    """Work out which side the offense is strong to.

    Tight ends decide first. Otherwise the side with more offensive
    entities wins; a tie falls back to an offset backfield.

    Returns:
        Side.LEFT, Side.RIGHT, or None when there is no offense or no lean
    """
    offense = [e for e in entities if classify_position(e.position_label) == Team.OFFENSE]
    if not offense:
        return None

    tight_ends = [e for e in offense if e.position_label.upper() == "TE"]
    if tight_ends:
        mean_x = sum(e.anchor.x for e in tight_ends) / len(tight_ends)
        return Side.RIGHT if mean_x > FIELD_CENTER_X else Side.LEFT

    right = sum(1 for e in offense if e.anchor.x > FIELD_CENTER_X + SIDE_TOLERANCE)
    left = sum(1 for e in offense if e.anchor.x < FIELD_CENTER_X - SIDE_TOLERANCE)
    if right != left:
        return Side.RIGHT if right > left else Side.LEFT

    backs = [e for e in offense if e.position_label.upper() in BACKFIELD_POSITIONS]
    if backs:
        mean_x = sum(e.anchor.x for e in backs) / len(backs)
        if mean_x > FIELD_CENTER_X + BACKFIELD_OFFSET:
            return Side.RIGHT
        if mean_x < FIELD_CENTER_X - BACKFIELD_OFFSET:
            return Side.LEFT

    return None


# =============================================================================
# Slot Resolution
# =============================================================================

def compute_slot_positions(
    template: FormationTemplate,
    center: NormalizedPoint,
) -> list[NormalizedPoint]:
    """Absolute, clamped positions for every slot in the template.

    Offense adds offset_y (deeper behind its line); defense subtracts it so
    the front row stays nearest the offense.
    """
    sign = -1.0 if template.is_defense else 1.0
    return [
        NormalizedPoint(
            clamp_unit(center.x + slot.offset_x),
            clamp_unit(center.y + sign * slot.offset_y),
        )
        for slot in template.slots
    ]


# =============================================================================
# Collision Detection
# =============================================================================

@dataclass
class Collision:
    """A pair of positions closer than the minimum separation.

    `first` is always a new slot index. `second` is another slot index, or
    `existing_id` names the placed entity that was hit.
    """
    first: int
    second: Optional[int]
    distance: float
    existing_id: Optional[str] = None

    def describe(self, template: Optional[FormationTemplate] = None) -> str:
        def name(index: int) -> str:
            if template is None:
                return f"slot {index}"
            slot = template.slots[index]
            return slot.label or slot.position

        other = self.existing_id if self.existing_id else name(self.second)
        return f"{name(self.first)} <-> {other} ({self.distance:.4f})"


@dataclass
class CollisionReport:
    positions: list[NormalizedPoint]
    collisions: list[Collision] = field(default_factory=list)

    @property
    def has_collision(self) -> bool:
        return bool(self.collisions)


def _as_array(points: Iterable[NormalizedPoint]) -> np.ndarray:
    return np.array([(p.x, p.y) for p in points], dtype=float).reshape(-1, 2)


def find_collisions(
    new_positions: list[NormalizedPoint],
    existing: Iterable[Entity] = (),
    min_separation: Optional[float] = None,
) -> list[Collision]:
    """All pairs closer than min_separation.

    Checks new-vs-new (each pair once) and new-vs-existing.
    """
    if min_separation is None:
        min_separation = get_config().min_separation
    existing = list(existing)
    collisions: list[Collision] = []
    if not new_positions:
        return collisions

    new = _as_array(new_positions)

    # New vs new: upper triangle only
    diff = new[:, None, :] - new[None, :, :]
    dist = np.sqrt((diff ** 2).sum(axis=-1))
    rows, cols = np.nonzero(np.triu(dist < min_separation, k=1))
    for i, j in zip(rows.tolist(), cols.tolist()):
        collisions.append(Collision(first=i, second=j, distance=float(dist[i, j])))

    # New vs existing
    if existing:
        placed = _as_array(e.anchor for e in existing)
        diff = new[:, None, :] - placed[None, :, :]
        dist = np.sqrt((diff ** 2).sum(axis=-1))
        rows, cols = np.nonzero(dist < min_separation)
        for i, j in zip(rows.tolist(), cols.tolist()):
            collisions.append(Collision(
                first=i,
                second=None,
                distance=float(dist[i, j]),
                existing_id=existing[j].id,
            ))

    return collisions


def check_formation_collisions(
    template: FormationTemplate,
    center: NormalizedPoint,
    existing: Iterable[Entity] = (),
    min_separation: Optional[float] = None,
) -> CollisionReport:
    """Resolve a template at a centre and report collisions without placing."""
    positions = compute_slot_positions(template, center)
    return CollisionReport(
        positions=positions,
        collisions=find_collisions(positions, existing, min_separation),
    )


# =============================================================================
# Placement
# =============================================================================

def generate_slot_id(index: int) -> str:
    """Id unique across rapid repeated placements: timestamp, slot, random suffix."""
    suffix = "".join(random.choices("abcdefghijklmnopqrstuvwxyz0123456789", k=9))
    return f"player_{int(time.time() * 1000)}_{index}_{suffix}"


class FormationPlacer:
    """Places formation templates onto a play board.

    Usage:
        placer = FormationPlacer(board)
        placer.place_formation(get_formation_by_id("i-formation"), (195, 300))
    """

    def __init__(self, board: PlayBoard, min_separation: Optional[float] = None) -> None:
        self.board = board
        self.min_separation = (
            min_separation if min_separation is not None else get_config().min_separation
        )
        self.last_report: Optional[CollisionReport] = None

    def orient(self, template: FormationTemplate) -> FormationTemplate:
        """Mirror a defensive template toward the offense's strong side."""
        if not (template.is_defense and template.has_strong_side):
            return template
        side = detect_offensive_strong_side(self.board.entities)
        if side is None:
            return template
        oriented = template.with_strong_side(side)
        if oriented is not template:
            logger.info("Mirroring %s toward offensive strong side (%s)", template.id, side.value)
        return oriented

    def place_formation(self, template: FormationTemplate, center_pixel: Any) -> bool:
        """Place a template centred on a pixel position.

        Returns:
            True if every slot was placed, False if the batch was rejected or
            the board has no geometry to convert the pixel position
        """
        geometry = self.board.geometry
        if geometry is None:
            logger.warning("Cannot place %s by pixel: board has no FieldGeometry", template.id)
            return False
        return self.place_formation_at(template, geometry.pixels_to_normalized(center_pixel))

    def place_formation_at(self, template: FormationTemplate, center: Any) -> bool:
        """Place a template centred on a normalized position."""
        center_point = NormalizedPoint.coerce(center)
        if center_point is None:
            logger.warning("place_formation_at: invalid centre %r, using origin", center)
            center_point = NormalizedPoint(0.0, 0.0)
        center_point = center_point.clamped()

        oriented = self.orient(template)
        report = check_formation_collisions(
            oriented, center_point, self.board.entities, self.min_separation
        )
        self.last_report = report

        if report.has_collision:
            for collision in report.collisions:
                logger.warning("Formation %s collision: %s", oriented.id, collision.describe(oriented))
            self.board.event_bus.emit_simple(
                EventType.FORMATION_REJECTED,
                description=f"{oriented.name}: {len(report.collisions)} collision(s)",
                formation_id=oriented.id,
                collisions=[c.describe(oriented) for c in report.collisions],
            )
            return False

        entities = [
            create_entity(
                slot.position,
                position,
                id=generate_slot_id(index),
                label=slot.label,
                group=slot.group,
            )
            for index, (slot, position) in enumerate(zip(oriented.slots, report.positions))
        ]
        self.board.add_entities(entities)

        logger.info("Placed %s (%d players) at %s", oriented.name, len(entities), center_point)
        self.board.event_bus.emit_simple(
            EventType.FORMATION_PLACED,
            description=f"{oriented.name} placed",
            formation_id=oriented.id,
            entity_ids=[e.id for e in entities],
        )
        return True
