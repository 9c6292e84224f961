"""Pydantic schemas for the serialized play document.

The persistence collaborator hands the engine an array of entity records
and takes one back after editing:

    [{"id", "positionLabel", "anchor": {"x", "y"},
      "preSnapRoute": [{"x", "y"}, ...]?, "mainRoute": [...]?,
      "label"?, "group"?}, ...]

optionally wrapped as {"entities": [...], "formationIds": [...]}.
Absent optional fields stay absent on the way back out.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from ..core.entities import Entity, RouteSegment, create_entity, create_route_segment
from ..core.errors import PlayDocumentError


logger = logging.getLogger(__name__)


class PointSchema(BaseModel):
    """A normalized field point."""

    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class EntitySchema(BaseModel):
    """Schema for one placed entity."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    position_label: str
    anchor: PointSchema
    pre_snap_route: Optional[list[PointSchema]] = None
    main_route: Optional[list[PointSchema]] = None
    label: Optional[str] = None
    group: Optional[str] = None

    def to_entity(self) -> Entity:
        entity = create_entity(
            self.position_label,
            (self.anchor.x, self.anchor.y),
            id=self.id,
            label=self.label,
            group=self.group,
        )
        return replace(
            entity,
            pre_snap_route=_route_from_schema(self.pre_snap_route),
            main_route=_route_from_schema(self.main_route),
        )

    @classmethod
    def from_entity(cls, entity: Entity) -> EntitySchema:
        return cls(
            id=entity.id,
            position_label=entity.position_label,
            anchor=PointSchema(x=entity.anchor.x, y=entity.anchor.y),
            pre_snap_route=_route_to_schema(entity.pre_snap_route),
            main_route=_route_to_schema(entity.main_route),
            label=entity.label,
            group=entity.group,
        )


class PlayDocumentSchema(BaseModel):
    """Wrapped document: entities plus the formations they came from."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    entities: list[EntitySchema] = Field(default_factory=list)
    formation_ids: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_ids(self) -> PlayDocumentSchema:
        _check_unique(self.entities)
        return self


_entity_list = TypeAdapter(list[EntitySchema])


def _check_unique(entities: list[EntitySchema]) -> None:
    seen: set[str] = set()
    for entity in entities:
        if entity.id in seen:
            raise ValueError(f"duplicate entity id: {entity.id}")
        seen.add(entity.id)


def _route_from_schema(points: Optional[list[PointSchema]]) -> Optional[RouteSegment]:
    if points is None:
        return None
    return create_route_segment([(p.x, p.y) for p in points])


def _route_to_schema(route: Optional[RouteSegment]) -> Optional[list[PointSchema]]:
    if route is None:
        return None
    return [PointSchema(x=p.x, y=p.y) for p in route.points]


def _parse(data: Union[str, bytes, Any]) -> Any:
    if isinstance(data, (str, bytes, bytearray)):
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            raise PlayDocumentError(f"Play document is not valid JSON: {e}") from e
    return data


# =============================================================================
# Loading
# =============================================================================

def load_entities(data: Union[str, bytes, list, dict]) -> list[Entity]:
    """Load entities from a bare array or a wrapped document.

    Raises:
        PlayDocumentError: if the document does not validate
    """
    return load_play_document(data).entities


class PlayDocument:
    """A loaded play: engine entities plus formation ids."""

    def __init__(self, entities: list[Entity], formation_ids: Optional[list[str]] = None):
        self.entities = entities
        self.formation_ids = formation_ids or []

    def __repr__(self) -> str:
        return f"PlayDocument(entities={len(self.entities)}, formations={self.formation_ids})"


def load_play_document(data: Union[str, bytes, list, dict]) -> PlayDocument:
    """Validate and convert a serialized play.

    Raises:
        PlayDocumentError: if the document does not validate
    """
    raw = _parse(data)
    try:
        if isinstance(raw, list):
            schemas = _entity_list.validate_python(raw)
            _check_unique(schemas)
            formation_ids: list[str] = []
        else:
            document = PlayDocumentSchema.model_validate(raw)
            schemas = document.entities
            formation_ids = document.formation_ids
    except ValidationError as e:
        logger.warning("Rejected play document: %d error(s)", e.error_count())
        raise PlayDocumentError(f"Invalid play document: {e}", errors=e.errors()) from e
    except ValueError as e:
        raise PlayDocumentError(f"Invalid play document: {e}") from e

    entities = [schema.to_entity() for schema in schemas]
    logger.debug("Loaded play document with %d entities", len(entities))
    return PlayDocument(entities, formation_ids)


# =============================================================================
# Saving
# =============================================================================

def dump_entities(entities: Iterable[Entity]) -> list[dict[str, Any]]:
    """Serialize entities to the camelCase array form."""
    return [
        EntitySchema.from_entity(entity).model_dump(by_alias=True, exclude_none=True)
        for entity in entities
    ]


def dump_play_document(
    entities: Iterable[Entity],
    formation_ids: Optional[Iterable[str]] = None,
) -> dict[str, Any]:
    """Serialize to the wrapped form."""
    return {
        "entities": dump_entities(entities),
        "formationIds": list(formation_ids or []),
    }
