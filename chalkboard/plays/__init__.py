"""Play definitions - formation templates and packages."""

from .formations import (
    Spacing,
    FormationType,
    Side,
    PackageType,
    FormationSlot,
    FormationTemplate,
    FORMATION_LIBRARY,
    OFFENSIVE_FORMATIONS,
    DEFENSIVE_FORMATIONS,
    ALL_PACKAGES,
    formation_with_strong_side,
    get_formation_by_id,
    get_formation_by_name,
    list_formations,
)

__all__ = [
    "Spacing",
    "FormationType",
    "Side",
    "PackageType",
    "FormationSlot",
    "FormationTemplate",
    "FORMATION_LIBRARY",
    "OFFENSIVE_FORMATIONS",
    "DEFENSIVE_FORMATIONS",
    "ALL_PACKAGES",
    "formation_with_strong_side",
    "get_formation_by_id",
    "get_formation_by_name",
    "list_formations",
]
