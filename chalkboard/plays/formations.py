"""Formation templates.

Preset formations with real football spacing. Slots are offsets from the
formation centre in normalized field units:

    offset_x: + = right on the board
    offset_y: depth away from the line of scrimmage

The placement engine adds offset_y for offense and subtracts it for defense,
so every defensive depth here is measured back from the offense. Defensive
templates keep their front row in the neutral zone (DL_DEPTH) so a defense
dropped on the offense's centre does not land on top of the offensive line.

Templates are immutable. Mirroring and strong-side orientation return new
templates.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..core.errors import UnknownFormationError


# =============================================================================
# Spacing (normalized field units)
# =============================================================================

class Spacing:
    """Spacing constants shared by every template."""
    # Offensive line
    OL_GAP = 0.045
    OL_TO_EDGE = 0.065

    # Backfield depth
    QB_DEPTH = 0.07
    RB_DEPTH = 0.10
    FB_DEPTH = 0.125
    SHOTGUN_DEPTH = 0.08
    PISTOL_DEPTH = 0.06

    # Receivers
    WR_SIDELINE = 0.30
    WR_INSIDE = 0.18
    WR_SLOT = 0.12
    WR_TRIPS_STACK = 0.05
    WR_TRIPS_STAGGER = 0.03

    # Tight end
    TE_INLINE = 0.03
    TE_WING = 0.045

    # Defense
    DL_GAP = 0.05
    DL_DEPTH = 0.03     # Neutral zone
    CB_DEPTH = 0.05
    LB_DEPTH = 0.075
    LB_WIDTH = 0.13
    CB_WIDTH = 0.22
    S_DEPTH = 0.12
    S_WIDTH = 0.16


class FormationType(str, Enum):
    OFFENSE = "offense"
    DEFENSE = "defense"


class Side(str, Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> Side:
        return Side.RIGHT if self == Side.LEFT else Side.LEFT


class PackageType(str, Enum):
    POSITION_GROUP = "position-group"
    DRILL_PACKAGE = "drill-package"
    MICRO_PRESET = "micro-preset"


@dataclass(frozen=True)
class FormationSlot:
    """One position in a formation, relative to the formation centre."""
    position: str
    offset_x: float
    offset_y: float
    label: Optional[str] = None
    group: Optional[str] = None

    def mirrored(self) -> FormationSlot:
        """Flip across the centre line. Depth does not change."""
        return replace(self, offset_x=-self.offset_x)


@dataclass(frozen=True)
class FormationTemplate:
    """A named, reusable set of slots.

    Attributes:
        id: Stable identifier (e.g. "defense-4-3")
        name: Display name
        type: Offense or defense
        slots: Slot definitions in placement order
        has_strong_side: Whether the template is oriented toward a strong side
        strong_side: The side strong-side slots are drawn on
        supports_mirror: Whether the template may be flipped
        package_type: Set for position-group, drill and micro packages
        is_flipped: True for templates produced by mirrored()
        original_id: Id of the template this one was mirrored from
    """
    id: str
    name: str
    type: FormationType
    slots: tuple[FormationSlot, ...]
    has_strong_side: bool = False
    strong_side: Side = Side.RIGHT
    supports_mirror: bool = True
    package_type: Optional[PackageType] = None
    is_flipped: bool = False
    original_id: Optional[str] = None

    @property
    def is_defense(self) -> bool:
        return self.type == FormationType.DEFENSE

    @property
    def is_offense(self) -> bool:
        return self.type == FormationType.OFFENSE

    def __len__(self) -> int:
        return len(self.slots)

    def slot_by_label(self, label: str) -> Optional[FormationSlot]:
        for slot in self.slots:
            if slot.label == label:
                return slot
        return None

    def mirrored(self) -> FormationTemplate:
        """Return the template flipped horizontally.

        Templates that do not support mirroring are returned unchanged.
        Mirroring a flipped template gives back the original slots.
        """
        if not self.supports_mirror:
            return self

        if self.is_flipped and self.original_id is not None:
            new_id = self.original_id
            new_name = self.name.removesuffix(" (Flipped)")
            original_id = None
        else:
            new_id = f"{self.id}-flipped"
            new_name = f"{self.name} (Flipped)"
            original_id = self.id

        return replace(
            self,
            id=new_id,
            name=new_name,
            slots=tuple(slot.mirrored() for slot in self.slots),
            strong_side=self.strong_side.opposite,
            is_flipped=not self.is_flipped,
            original_id=original_id,
        )

    def with_strong_side(self, side: Optional[Side]) -> FormationTemplate:
        """Orient the template so its strong-side slots land on `side`.

        Templates without a strong side, or an undetermined side, are
        returned unchanged.
        """
        if not self.has_strong_side or side is None:
            return self
        if Side(side) != self.strong_side:
            return self.mirrored()
        return self


def formation_with_strong_side(
    template: FormationTemplate,
    side: Optional[Side],
) -> FormationTemplate:
    return template.with_strong_side(side)


def _slot(
    position: str,
    offset_x: float,
    offset_y: float,
    group: Optional[str] = None,
    label: Optional[str] = None,
) -> FormationSlot:
    return FormationSlot(position, offset_x, offset_y, label=label, group=group)


def _offensive_line() -> list[FormationSlot]:
    """Standard five-man line on the line of scrimmage."""
    gap = Spacing.OL_GAP
    return [
        _slot("C", 0, 0, "OL"),
        _slot("LG", -gap, 0, "OL"),
        _slot("RG", gap, 0, "OL"),
        _slot("LT", -gap * 2, 0, "OL"),
        _slot("RT", gap * 2, 0, "OL"),
    ]


def _four_man_front(ends: tuple[str, str] = ("DE1", "DE2")) -> list[FormationSlot]:
    gap, depth = Spacing.DL_GAP, Spacing.DL_DEPTH
    return [
        _slot("DT", -gap, depth, "DL-front", "DT1"),
        _slot("DT", gap, depth, "DL-front", "DT2"),
        _slot("DE", -gap * 2.5, depth, "DL-front", ends[0]),
        _slot("DE", gap * 2.5, depth, "DL-front", ends[1]),
    ]


def _corners() -> list[FormationSlot]:
    return [
        _slot("CB", -Spacing.CB_WIDTH, Spacing.CB_DEPTH, "DB-tier", "CB1"),
        _slot("CB", Spacing.CB_WIDTH, Spacing.CB_DEPTH, "DB-tier", "CB2"),
    ]


def _safeties() -> list[FormationSlot]:
    return [
        _slot("S", -Spacing.S_WIDTH, Spacing.S_DEPTH, "DB-tier", "FS"),
        _slot("S", Spacing.S_WIDTH, Spacing.S_DEPTH, "DB-tier", "SS"),
    ]


def _four_three_backers() -> list[FormationSlot]:
    return [
        _slot("LB", -Spacing.LB_WIDTH, Spacing.LB_DEPTH, "LB-tier", "WILL"),
        _slot("LB", 0, Spacing.LB_DEPTH, "LB-tier", "MIKE"),
        _slot("LB", Spacing.LB_WIDTH, Spacing.LB_DEPTH, "LB-tier", "SAM"),
    ]


def _template(
    id: str,
    name: str,
    type: FormationType,
    slots: list[FormationSlot],
    has_strong_side: bool = False,
    strong_side: Side = Side.RIGHT,
    supports_mirror: bool = True,
    package_type: Optional[PackageType] = None,
) -> FormationTemplate:
    return FormationTemplate(
        id=id,
        name=name,
        type=type,
        slots=tuple(slots),
        has_strong_side=has_strong_side,
        strong_side=strong_side,
        supports_mirror=supports_mirror,
        package_type=package_type,
    )


OFFENSE = FormationType.OFFENSE
DEFENSE = FormationType.DEFENSE
S = Spacing


# =============================================================================
# Offensive Formations
# =============================================================================

def _create_shotgun_2x2() -> FormationTemplate:
    """QB in the gun, two receivers each side, back beside the QB."""
    return _template("shotgun-2x2", "Shotgun (2x2)", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.SHOTGUN_DEPTH, "backfield"),
        _slot("RB", S.OL_GAP, S.SHOTGUN_DEPTH, "backfield"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-left", "WR1"),
        _slot("WR", -S.WR_INSIDE, 0, "WR-left", "WR2"),
        _slot("WR", S.WR_INSIDE, 0, "WR-right", "WR3"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-right", "WR4"),
    ])


def _create_shotgun_trips_right() -> FormationTemplate:
    """Three receivers stacked right, one left."""
    return _template("shotgun-trips-right", "Shotgun Trips Right", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.SHOTGUN_DEPTH, "backfield"),
        _slot("RB", -S.OL_GAP, S.SHOTGUN_DEPTH, "backfield"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-trips", "WR1"),
        _slot("WR", S.WR_INSIDE, -S.WR_TRIPS_STACK, "WR-trips", "WR2"),
        _slot("WR", S.WR_SLOT, -S.WR_TRIPS_STACK * 2, "WR-trips", "WR3"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-single", "WR4"),
    ], has_strong_side=True)


def _create_shotgun_doubles_te() -> FormationTemplate:
    """Inline TE right with two receivers outside him, one receiver left."""
    return _template("shotgun-doubles-te", "Shotgun (Doubles + TE)", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.SHOTGUN_DEPTH, "backfield"),
        _slot("RB", -S.OL_GAP, S.SHOTGUN_DEPTH, "backfield"),
        _slot("TE", S.OL_GAP * 2 + S.TE_INLINE, 0, "TE-inline"),
        _slot("WR", S.WR_INSIDE, 0, "WR-doubles", "WR1"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-doubles", "WR2"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-single", "WR3"),
    ], has_strong_side=True)


def _create_i_formation() -> FormationTemplate:
    """Pro-style I: QB under center, FB and RB stacked, TE right."""
    return _template("i-formation", "I-Formation (Pro Style)", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.QB_DEPTH, "backfield"),
        _slot("FB", 0, S.FB_DEPTH, "backfield"),
        _slot("RB", 0, S.RB_DEPTH, "backfield"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-wide", "WR1"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-wide", "WR2"),
        _slot("TE", S.OL_GAP * 2 + S.TE_INLINE, 0, "TE-inline"),
    ], has_strong_side=True)


def _create_singleback_ace() -> FormationTemplate:
    return _template("singleback-ace", "Singleback (Ace)", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.QB_DEPTH, "backfield"),
        _slot("RB", 0, S.RB_DEPTH, "backfield"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-left", "WR1"),
        _slot("WR", -S.WR_INSIDE, 0, "WR-left", "WR2"),
        _slot("WR", S.WR_INSIDE, 0, "WR-right", "WR3"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-right", "WR4"),
    ])


def _create_singleback_trips_right() -> FormationTemplate:
    """Trips right with the TE on the backside."""
    return _template("singleback-trips-right", "Singleback Trips Right", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.QB_DEPTH, "backfield"),
        _slot("RB", 0, S.RB_DEPTH, "backfield"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-trips", "WR1"),
        _slot("WR", S.WR_INSIDE, -S.WR_TRIPS_STACK, "WR-trips", "WR2"),
        _slot("WR", S.WR_SLOT, -S.WR_TRIPS_STACK * 2, "WR-trips", "WR3"),
        _slot("TE", -S.OL_GAP * 2 - S.TE_INLINE, 0, "TE-inline"),
    ], has_strong_side=True)


def _create_pistol() -> FormationTemplate:
    return _template("pistol", "Pistol", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.PISTOL_DEPTH, "backfield"),
        _slot("RB", 0, S.RB_DEPTH, "backfield"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-left", "WR1"),
        _slot("WR", -S.WR_INSIDE, 0, "WR-left", "WR2"),
        _slot("WR", S.WR_INSIDE, 0, "WR-right", "WR3"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-right", "WR4"),
    ])


def _create_empty_3x2() -> FormationTemplate:
    """QB alone in the gun, trips right and doubles left."""
    return _template("empty-3x2", "Empty (3x2)", OFFENSE, [
        *_offensive_line(),
        _slot("QB", 0, S.SHOTGUN_DEPTH, "backfield"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-trips", "WR1"),
        _slot("WR", S.WR_INSIDE, -S.WR_TRIPS_STACK, "WR-trips", "WR2"),
        _slot("WR", S.WR_SLOT, -S.WR_TRIPS_STACK * 2, "WR-trips", "WR3"),
        _slot("WR", -S.WR_INSIDE, 0, "WR-doubles", "WR4"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-doubles", "WR5"),
    ], has_strong_side=True)


# =============================================================================
# Defensive Formations
# =============================================================================

def _create_defense_4_3() -> FormationTemplate:
    """Four down linemen, three backers, two corners, two safeties."""
    return _template("defense-4-3", "4-3 Defense", DEFENSE, [
        *_four_man_front(),
        *_four_three_backers(),
        *_corners(),
        *_safeties(),
    ], has_strong_side=True)


def _create_defense_3_4() -> FormationTemplate:
    return _template("defense-3-4", "3-4 Defense", DEFENSE, [
        _slot("NT", 0, S.DL_DEPTH, "DL-front", "NT"),
        _slot("DE", -S.DL_GAP * 2, S.DL_DEPTH, "DL-front", "DE1"),
        _slot("DE", S.DL_GAP * 2, S.DL_DEPTH, "DL-front", "DE2"),
        _slot("OLB", -S.LB_WIDTH * 1.5, S.LB_DEPTH, "LB-tier", "OLB1"),
        _slot("ILB", -S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "ILB1"),
        _slot("ILB", S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "ILB2"),
        _slot("OLB", S.LB_WIDTH * 1.5, S.LB_DEPTH, "LB-tier", "OLB2"),
        *_corners(),
        *_safeties(),
    ], has_strong_side=True)


def _create_defense_nickel() -> FormationTemplate:
    """4-2-5 with the nickel back over the middle."""
    return _template("defense-nickel", "Nickel (4-2-5)", DEFENSE, [
        *_four_man_front(),
        _slot("LB", -S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "MIKE"),
        _slot("LB", S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "WILL"),
        *_corners(),
        _slot("CB", 0, S.LB_DEPTH * 0.8, "DB-tier", "NICKEL"),
        *_safeties(),
    ], has_strong_side=True)


def _create_defense_dime() -> FormationTemplate:
    """4-1-6."""
    return _template("defense-dime", "Dime (4-1-6)", DEFENSE, [
        *_four_man_front(),
        _slot("LB", 0, S.LB_DEPTH, "LB-tier", "MIKE"),
        *_corners(),
        _slot("CB", -S.CB_WIDTH * 0.5, S.LB_DEPTH * 0.8, "DB-tier", "NICKEL"),
        _slot("CB", S.CB_WIDTH * 0.5, S.LB_DEPTH * 0.8, "DB-tier", "DIME"),
        *_safeties(),
    ], has_strong_side=True)


def _create_defense_goal_line() -> FormationTemplate:
    """Six-man goal line stack with four backers."""
    return _template("defense-goal-line", "Goal Line Defense", DEFENSE, [
        _slot("DT", -S.DL_GAP * 1.5, S.DL_DEPTH, "DL-front", "DT1"),
        _slot("NT", 0, S.DL_DEPTH, "DL-front", "NT"),
        _slot("DT", S.DL_GAP * 1.5, S.DL_DEPTH, "DL-front", "DT2"),
        _slot("DE", -S.DL_GAP * 3, S.DL_DEPTH, "DL-front", "DE1"),
        _slot("DE", S.DL_GAP * 3, S.DL_DEPTH, "DL-front", "DE2"),
        _slot("DT", -S.DL_GAP * 0.5, S.DL_DEPTH + S.DL_GAP * 0.5, "DL-front", "DT3"),
        _slot("LB", -S.LB_WIDTH * 1.2, S.LB_DEPTH * 0.7, "LB-tier", "LB1"),
        _slot("LB", -S.LB_WIDTH * 0.4, S.LB_DEPTH * 0.7, "LB-tier", "LB2"),
        _slot("LB", S.LB_WIDTH * 0.4, S.LB_DEPTH * 0.7, "LB-tier", "LB3"),
        _slot("LB", S.LB_WIDTH * 1.2, S.LB_DEPTH * 0.7, "LB-tier", "LB4"),
        *_corners(),
    ])


# =============================================================================
# Position-Group Packages
# =============================================================================

POSITION_GROUP = PackageType.POSITION_GROUP
DRILL_PACKAGE = PackageType.DRILL_PACKAGE
MICRO_PRESET = PackageType.MICRO_PRESET


def _create_dl_4_man() -> FormationTemplate:
    return _template(
        "dl-4-man", "4-Man Front", DEFENSE, _four_man_front(ends=("LDE", "RDE")),
        has_strong_side=True, package_type=POSITION_GROUP,
    )


def _create_dl_3_man() -> FormationTemplate:
    return _template("dl-3-man", "3-Man Front", DEFENSE, [
        _slot("DE", -S.DL_GAP * 2, S.DL_DEPTH, "DL-front", "LDE"),
        _slot("NT", 0, S.DL_DEPTH, "DL-front", "NT"),
        _slot("DE", S.DL_GAP * 2, S.DL_DEPTH, "DL-front", "RDE"),
    ], has_strong_side=True, package_type=POSITION_GROUP)


def _create_dl_5_man_bear() -> FormationTemplate:
    return _template("dl-5-man-bear", "5-Man Bear Front", DEFENSE, [
        _slot("DE", -S.DL_GAP * 3, S.DL_DEPTH, "DL-front", "LDE"),
        _slot("DT", -S.DL_GAP * 1.5, S.DL_DEPTH, "DL-front", "DT1"),
        _slot("NT", 0, S.DL_DEPTH, "DL-front", "NT"),
        _slot("DT", S.DL_GAP * 1.5, S.DL_DEPTH, "DL-front", "DT2"),
        _slot("DE", S.DL_GAP * 3, S.DL_DEPTH, "DL-front", "RDE"),
    ], has_strong_side=True, package_type=POSITION_GROUP)


def _create_ol_5_man() -> FormationTemplate:
    return _template("ol-5-man", "5-Man O-Line", OFFENSE, [
        _slot("T", -S.OL_GAP * 2, 0, "OL-block", "LT"),
        _slot("G", -S.OL_GAP, 0, "OL-block", "LG"),
        _slot("C", 0, 0, "OL-block", "C"),
        _slot("G", S.OL_GAP, 0, "OL-block", "RG"),
        _slot("T", S.OL_GAP * 2, 0, "OL-block", "RT"),
    ], supports_mirror=False, package_type=POSITION_GROUP)


def _create_ol_6_man_jumbo() -> FormationTemplate:
    return _template("ol-6-man-jumbo", "6-Man Jumbo", OFFENSE, [
        _slot("T", -S.OL_GAP * 2.5, 0, "OL-block", "LT"),
        _slot("G", -S.OL_GAP * 1.5, 0, "OL-block", "LG"),
        _slot("C", -S.OL_GAP * 0.5, 0, "OL-block", "C"),
        _slot("G", S.OL_GAP * 0.5, 0, "OL-block", "RG"),
        _slot("T", S.OL_GAP * 1.5, 0, "OL-block", "RT"),
        _slot("T", S.OL_GAP * 2.5, 0, "OL-block", "TE/6th"),
    ], has_strong_side=True, package_type=POSITION_GROUP)


def _create_lb_4_3_shell() -> FormationTemplate:
    return _template(
        "lb-4-3-shell", "4-3 LB Shell", DEFENSE, _four_three_backers(),
        has_strong_side=True, package_type=POSITION_GROUP,
    )


def _create_lb_3_4_stack() -> FormationTemplate:
    return _template("lb-3-4-stack", "3-4 LB Stack", DEFENSE, [
        _slot("OLB", -S.LB_WIDTH * 1.5, S.LB_DEPTH, "LB-tier", "OLB1"),
        _slot("ILB", -S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "ILB1"),
        _slot("ILB", S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "ILB2"),
        _slot("OLB", S.LB_WIDTH * 1.5, S.LB_DEPTH, "LB-tier", "OLB2"),
    ], has_strong_side=True, package_type=POSITION_GROUP)


def _create_lb_2_backer_nickel() -> FormationTemplate:
    return _template("lb-2-backer-nickel", "2-Backer Nickel", DEFENSE, [
        _slot("LB", -S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "MIKE"),
        _slot("LB", S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "WILL"),
    ], has_strong_side=True, package_type=POSITION_GROUP)


def _create_db_cbs_only() -> FormationTemplate:
    return _template(
        "db-cbs-only", "Cornerbacks Only", DEFENSE, _corners(),
        package_type=POSITION_GROUP,
    )


def _create_db_safeties_only() -> FormationTemplate:
    return _template(
        "db-safeties-only", "Safeties Only", DEFENSE, _safeties(),
        package_type=POSITION_GROUP,
    )


def _create_db_nickel_group() -> FormationTemplate:
    return _template("db-nickel-group", "Nickel DB Group", DEFENSE, [
        *_corners(),
        _slot("CB", 0, S.LB_DEPTH * 0.8, "DB-tier", "NICKEL"),
    ], package_type=POSITION_GROUP)


def _create_db_dime_group() -> FormationTemplate:
    return _template("db-dime-group", "Dime DB Group", DEFENSE, [
        *_corners(),
        _slot("CB", -S.CB_WIDTH * 0.5, S.LB_DEPTH * 0.8, "DB-tier", "NICKEL"),
        _slot("CB", S.CB_WIDTH * 0.5, S.LB_DEPTH * 0.8, "DB-tier", "DIME"),
    ], package_type=POSITION_GROUP)


# =============================================================================
# Drill Packages (7-on-7 and front seven)
# =============================================================================

def _create_skelly_base() -> FormationTemplate:
    return _template("skelly-base", "Skelly Base", OFFENSE, [
        _slot("QB", 0, S.SHOTGUN_DEPTH, "backfield", "QB"),
        _slot("RB", 0, S.RB_DEPTH, "backfield", "RB"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-cluster", "WR1"),
        _slot("WR", -S.WR_INSIDE, 0, "WR-cluster", "WR2"),
        _slot("WR", S.WR_INSIDE, 0, "WR-cluster", "WR3"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-cluster", "WR4"),
    ], package_type=DRILL_PACKAGE)


def _create_skelly_trips() -> FormationTemplate:
    return _template("skelly-trips", "Trips Skelly", OFFENSE, [
        _slot("QB", 0, S.SHOTGUN_DEPTH, "backfield", "QB"),
        _slot("RB", 0, S.RB_DEPTH, "backfield", "RB"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-cluster", "WR1"),
        _slot("WR", -S.WR_TRIPS_STACK, 0, "WR-cluster", "WR2"),
        _slot("WR", -S.WR_TRIPS_STAGGER, 0, "WR-cluster", "WR3"),
        _slot("TE", S.TE_INLINE, 0, "TE-inline", "TE"),
    ], has_strong_side=True, strong_side=Side.LEFT, package_type=DRILL_PACKAGE)


def _create_skelly_doubles() -> FormationTemplate:
    return _template("skelly-doubles", "Doubles Skelly", OFFENSE, [
        _slot("QB", 0, S.SHOTGUN_DEPTH, "backfield", "QB"),
        _slot("RB", 0, S.RB_DEPTH, "backfield", "RB"),
        _slot("WR", -S.WR_SIDELINE, 0, "WR-cluster", "WR1"),
        _slot("WR", -S.WR_INSIDE, 0, "WR-cluster", "WR2"),
        _slot("WR", S.WR_INSIDE, 0, "WR-cluster", "WR3"),
        _slot("WR", S.WR_SIDELINE, 0, "WR-cluster", "WR4"),
    ], package_type=DRILL_PACKAGE)


def _create_skelly_cover_2() -> FormationTemplate:
    return _template("skelly-cover-2", "Cover 2 Shell", DEFENSE, [
        *_corners(),
        *_safeties(),
        *_four_three_backers(),
    ], has_strong_side=True, package_type=DRILL_PACKAGE)


def _create_skelly_nickel_shell() -> FormationTemplate:
    return _template("skelly-nickel-shell", "Nickel Shell", DEFENSE, [
        *_corners(),
        _slot("CB", 0, S.LB_DEPTH * 0.8, "DB-tier", "NICKEL"),
        *_safeties(),
        _slot("LB", -S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "MIKE"),
        _slot("LB", S.LB_WIDTH * 0.5, S.LB_DEPTH, "LB-tier", "WILL"),
    ], has_strong_side=True, package_type=DRILL_PACKAGE)


def _create_front_7_4_3() -> FormationTemplate:
    return _template("front-7-4-3", "Front 7 (4-3)", DEFENSE, [
        *_four_man_front(ends=("LDE", "RDE")),
        *_four_three_backers(),
    ], has_strong_side=True, package_type=DRILL_PACKAGE)


# =============================================================================
# Micro-Presets (1v1 to 3v3)
# =============================================================================

def _create_micro_wr_vs_cb() -> FormationTemplate:
    return _template("micro-wr-vs-cb", "WR vs CB", OFFENSE, [
        _slot("WR", -S.WR_SIDELINE, 0, "WR-cluster", "WR"),
    ], package_type=MICRO_PRESET)


def _create_micro_2v2_wr_te_vs_lb_s() -> FormationTemplate:
    return _template("micro-2v2-wr-te-vs-lb-s", "WR/TE vs LB/S (2v2)", OFFENSE, [
        _slot("WR", -S.WR_INSIDE, 0, "WR-cluster", "WR"),
        _slot("TE", S.TE_INLINE, 0, "TE-inline", "TE"),
    ], has_strong_side=True, strong_side=Side.LEFT, package_type=MICRO_PRESET)


def _create_micro_slot_vs_nickel() -> FormationTemplate:
    return _template("micro-slot-vs-nickel", "Slot vs Nickel", OFFENSE, [
        _slot("WR", -S.WR_SLOT, 0, "WR-cluster", "SLOT"),
    ], package_type=MICRO_PRESET)


def _create_micro_triangle_fits() -> FormationTemplate:
    return _template("micro-triangle-fits", "Triangle Fits", DEFENSE, [
        _slot("LB", 0, S.LB_DEPTH, "LB-tier", "LB"),
        _slot("S", S.S_WIDTH, S.S_DEPTH, "DB-tier", "S"),
        _slot("CB", S.CB_WIDTH, S.CB_DEPTH, "DB-tier", "CB"),
    ], has_strong_side=True, package_type=MICRO_PRESET)


# =============================================================================
# Catalog
# =============================================================================

OFFENSIVE_FORMATIONS: list[FormationTemplate] = [
    _create_shotgun_2x2(),
    _create_shotgun_trips_right(),
    _create_shotgun_doubles_te(),
    _create_i_formation(),
    _create_singleback_ace(),
    _create_singleback_trips_right(),
    _create_pistol(),
    _create_empty_3x2(),
]

DEFENSIVE_FORMATIONS: list[FormationTemplate] = [
    _create_defense_4_3(),
    _create_defense_3_4(),
    _create_defense_nickel(),
    _create_defense_dime(),
    _create_defense_goal_line(),
]

ALL_FORMATIONS = OFFENSIVE_FORMATIONS + DEFENSIVE_FORMATIONS

DL_PACKAGES = [_create_dl_4_man(), _create_dl_3_man(), _create_dl_5_man_bear()]
OL_PACKAGES = [_create_ol_5_man(), _create_ol_6_man_jumbo()]
LB_PACKAGES = [_create_lb_4_3_shell(), _create_lb_3_4_stack(), _create_lb_2_backer_nickel()]
DB_PACKAGES = [
    _create_db_cbs_only(),
    _create_db_safeties_only(),
    _create_db_nickel_group(),
    _create_db_dime_group(),
]
SKELLY_OFFENSE = [_create_skelly_base(), _create_skelly_trips(), _create_skelly_doubles()]
SKELLY_DEFENSE = [_create_skelly_cover_2(), _create_skelly_nickel_shell()]
FRONT_7_PACKAGES = [_create_front_7_4_3()]
MICRO_PRESETS = [
    _create_micro_wr_vs_cb(),
    _create_micro_2v2_wr_te_vs_lb_s(),
    _create_micro_slot_vs_nickel(),
    _create_micro_triangle_fits(),
]

POSITION_GROUPS = DL_PACKAGES + OL_PACKAGES + LB_PACKAGES + DB_PACKAGES
DRILL_PACKAGES = SKELLY_OFFENSE + SKELLY_DEFENSE + FRONT_7_PACKAGES
ALL_PACKAGES = POSITION_GROUPS + DRILL_PACKAGES + MICRO_PRESETS

FORMATION_LIBRARY: dict[str, FormationTemplate] = {
    template.id: template for template in ALL_FORMATIONS + ALL_PACKAGES
}


def get_formation_by_id(formation_id: str) -> FormationTemplate:
    """Look up a template by id. Flipped ids ("<id>-flipped") are resolved too.

    Raises:
        UnknownFormationError: if no template has that id
    """
    template = FORMATION_LIBRARY.get(formation_id)
    if template is not None:
        return template

    base_id = formation_id.removesuffix("-flipped")
    if base_id != formation_id and base_id in FORMATION_LIBRARY:
        return FORMATION_LIBRARY[base_id].mirrored()

    raise UnknownFormationError(formation_id)


def get_formation_by_name(name: str) -> FormationTemplate:
    """Look up a template by display name (case-insensitive).

    Short names such as "I-Formation" or "4-3" match the first template whose
    name starts with them.
    """
    wanted = name.strip().lower()
    for template in FORMATION_LIBRARY.values():
        if template.name.lower() == wanted:
            return template
    for template in FORMATION_LIBRARY.values():
        if template.name.lower().startswith(wanted):
            return template
    raise UnknownFormationError(name)


def list_formations(
    type: Optional[FormationType] = None,
    include_packages: bool = False,
) -> list[FormationTemplate]:
    """Templates in catalog order, optionally filtered by side of the ball."""
    templates = ALL_FORMATIONS + (ALL_PACKAGES if include_packages else [])
    if type is None:
        return list(templates)
    return [t for t in templates if t.type == FormationType(type)]
