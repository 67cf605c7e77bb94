"""Entity codecs: document encoding, projections and meta links per kind."""

from __future__ import annotations

from .catalog import build_catalog_registry, catalog_codecs
from .registry import CodecRegistry, EntityCodec, MetaLink, UnknownEntityKindError

__all__ = [
    "CodecRegistry",
    "EntityCodec",
    "MetaLink",
    "UnknownEntityKindError",
    "build_catalog_registry",
    "catalog_codecs",
]
