"""Serialization schemas for play documents."""

from .play_document import (
    EntitySchema,
    PlayDocument,
    PlayDocumentSchema,
    PointSchema,
    dump_entities,
    dump_play_document,
    load_entities,
    load_play_document,
)

__all__ = [
    "EntitySchema",
    "PlayDocument",
    "PlayDocumentSchema",
    "PointSchema",
    "dump_entities",
    "dump_play_document",
    "load_entities",
    "load_play_document",
]
