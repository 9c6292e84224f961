"""Tests for formation templates and the catalog."""

import pytest

from chalkboard.core.errors import UnknownFormationError
from chalkboard.plays.formations import (
    ALL_FORMATIONS,
    ALL_PACKAGES,
    DEFENSIVE_FORMATIONS,
    FORMATION_LIBRARY,
    OFFENSIVE_FORMATIONS,
    FormationSlot,
    FormationTemplate,
    FormationType,
    PackageType,
    Side,
    formation_with_strong_side,
    get_formation_by_id,
    get_formation_by_name,
    list_formations,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def four_three() -> FormationTemplate:
    return get_formation_by_id("defense-4-3")


@pytest.fixture
def i_formation() -> FormationTemplate:
    return get_formation_by_id("i-formation")


# =============================================================================
# Catalog
# =============================================================================


class TestCatalog:
    """Tests for the preset catalog."""

    def test_catalog_sizes(self):
        """The catalog should hold 8 offensive and 5 defensive formations."""
        assert len(OFFENSIVE_FORMATIONS) == 8
        assert len(DEFENSIVE_FORMATIONS) == 5
        assert len(ALL_FORMATIONS) == 13

    def test_ids_unique(self):
        """Every formation and package id should be unique in the library."""
        assert len(FORMATION_LIBRARY) == len(ALL_FORMATIONS) + len(ALL_PACKAGES)

    def test_offensive_formations_have_eleven(self):
        """Every offensive formation should field eleven players."""
        for template in OFFENSIVE_FORMATIONS:
            assert len(template) == 11, template.id
            assert template.is_offense

    def test_packages_are_tagged(self):
        """Packages should carry a package type; full formations should not."""
        for template in ALL_PACKAGES:
            assert template.package_type in set(PackageType)
        for template in ALL_FORMATIONS:
            assert template.package_type is None

    def test_four_three_labels(self, four_three):
        """The 4-3 should label its line, backers and secondary."""
        labels = [slot.label for slot in four_three.slots]
        assert sorted(labels) == sorted(
            ["DT1", "DT2", "DE1", "DE2", "WILL", "MIKE", "SAM", "CB1", "CB2", "FS", "SS"]
        )

    def test_defensive_depth_tiers(self, four_three):
        """Line nearest the offense, then corners, backers, safeties."""
        dl = four_three.slot_by_label("DT1").offset_y
        cb = four_three.slot_by_label("CB1").offset_y
        lb = four_three.slot_by_label("MIKE").offset_y
        s = four_three.slot_by_label("FS").offset_y
        assert 0 < dl < cb < lb < s

    def test_i_formation_backfield(self, i_formation):
        """QB, RB and FB stacked on the centre line, FB deepest."""
        backs = {slot.position: slot for slot in i_formation.slots if slot.group == "backfield"}
        assert all(slot.offset_x == 0 for slot in backs.values())
        assert backs["QB"].offset_y < backs["RB"].offset_y < backs["FB"].offset_y
        assert i_formation.has_strong_side


# =============================================================================
# Lookup
# =============================================================================


class TestLookup:
    """Tests for id and name lookup."""

    def test_by_id(self):
        """Formations should be found by id."""
        assert get_formation_by_id("pistol").name == "Pistol"

    def test_by_flipped_id(self, four_three):
        """A -flipped id should resolve to the mirrored template."""
        flipped = get_formation_by_id("defense-4-3-flipped")
        assert flipped.is_flipped
        assert flipped.strong_side == Side.LEFT
        assert flipped.slot_by_label("SAM").offset_x == -four_three.slot_by_label("SAM").offset_x

    def test_unknown_id(self):
        """Unknown ids should raise UnknownFormationError."""
        with pytest.raises(UnknownFormationError):
            get_formation_by_id("wishbone")

    def test_unknown_id_is_key_error(self):
        """UnknownFormationError should also be a KeyError."""
        with pytest.raises(KeyError):
            get_formation_by_id("wishbone")

    def test_by_name(self):
        """Names should match case-insensitively and by short name."""
        assert get_formation_by_name("pistol").id == "pistol"
        assert get_formation_by_name("I-Formation").id == "i-formation"
        assert get_formation_by_name("4-3").id == "defense-4-3"

    def test_unknown_name(self):
        """Unknown names should raise UnknownFormationError."""
        with pytest.raises(UnknownFormationError):
            get_formation_by_name("Wishbone")

    def test_list_formations(self):
        """list_formations should filter by type and optionally include packages."""
        assert len(list_formations()) == 13
        assert len(list_formations(FormationType.DEFENSE)) == 5
        assert len(list_formations("offense")) == 8
        assert len(list_formations(include_packages=True)) == len(FORMATION_LIBRARY)


# =============================================================================
# Mirroring
# =============================================================================


class TestMirroring:
    """Tests for flipping templates across the centre line."""

    def test_mirror_negates_x_only(self, four_three):
        """Mirroring should flip x offsets and keep everything else."""
        flipped = four_three.mirrored()
        for original, mirrored in zip(four_three.slots, flipped.slots):
            assert mirrored.offset_x == -original.offset_x
            assert mirrored.offset_y == original.offset_y
            assert mirrored.label == original.label

    def test_mirror_metadata(self, four_three):
        """A mirrored template should record its source and flipped side."""
        flipped = four_three.mirrored()
        assert flipped.id == "defense-4-3-flipped"
        assert flipped.name == "4-3 Defense (Flipped)"
        assert flipped.original_id == "defense-4-3"
        assert flipped.strong_side == Side.LEFT

    def test_mirror_twice_restores(self, four_three):
        """Mirroring twice should give back the original template."""
        assert four_three.mirrored().mirrored() == four_three

    def test_mirror_unsupported(self):
        """Templates that do not support mirroring should be returned as is."""
        template = FormationTemplate(
            id="fixed",
            name="Fixed",
            type=FormationType.OFFENSE,
            slots=(FormationSlot("QB", 0.1, 0.07),),
            supports_mirror=False,
        )
        assert template.mirrored() is template

    def test_with_strong_side(self, four_three):
        """with_strong_side should only mirror when the side differs."""
        assert four_three.with_strong_side(Side.RIGHT) is four_three
        assert four_three.with_strong_side(None) is four_three
        left = formation_with_strong_side(four_three, Side.LEFT)
        assert left.strong_side == Side.LEFT
        assert left.slot_by_label("SAM").offset_x < 0

    def test_with_strong_side_ignored_without_strong_side(self):
        """Formations without a strong side should never be mirrored."""
        goal_line = get_formation_by_id("defense-goal-line")
        assert not goal_line.has_strong_side
        assert goal_line.with_strong_side(Side.LEFT) is goal_line
