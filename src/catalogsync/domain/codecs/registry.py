"""Tagged-variant codec registry.

Each entity kind maps to one :class:`EntityCodec` value holding the functions
that encode, decode and project it. The registry is built once and passed to
the services that need it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from catalogsync.domain.paths import catalog_collection, join

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from catalogsync.common.fieldpaths import Document
    from catalogsync.domain.model import AnyCatalogEntity, EntityKind
    from catalogsync.domain.paths import CollectionName
    from catalogsync.domain.ports import DocumentReader, DocumentSnapshot


@dataclass(frozen=True, slots=True)
class MetaLink:
    """Ancestor field that must mirror an entity's metadata projection."""

    document_path: str
    field_path: str


type MetaLinkFunction[E] = Callable[[E, str, DocumentReader], tuple[MetaLink, ...]]


@dataclass(frozen=True, slots=True)
class EntityCodec[E: AnyCatalogEntity]:
    kind: EntityKind
    collection: CollectionName
    encode: Callable[[E], Document]
    decode: Callable[[str, Mapping[str, object]], E]
    meta_links: MetaLinkFunction[E]

    def to_document(self, entity: E) -> Document:
        return self.encode(entity)

    def from_document(self, entity_id: str, data: Mapping[str, object]) -> E:
        return self.decode(entity_id, data)

    def metadata_projection(self, entity: E) -> Document:
        return cast("Document", dict(entity.metadata()))

    def collection_path(self, tenant_id: str) -> str:
        return catalog_collection(tenant_id, self.collection)

    def document_path(self, entity: E, tenant_id: str) -> str:
        return join(self.collection_path(tenant_id), entity.id)


class UnknownEntityKindError(LookupError):
    """No codec is registered for the requested entity kind."""


class CodecRegistry:
    """Dispatch table from :class:`EntityKind` to codec."""

    def __init__(self, codecs: Iterable[EntityCodec[AnyCatalogEntity]]) -> None:
        self._codecs: dict[EntityKind, EntityCodec[AnyCatalogEntity]] = {}
        for codec in codecs:
            if codec.kind in self._codecs:
                raise ValueError(f"Duplicate codec for kind {codec.kind}")
            self._codecs[codec.kind] = codec

    def __contains__(self, kind: object) -> bool:
        return kind in self._codecs

    def for_kind(self, kind: EntityKind) -> EntityCodec[AnyCatalogEntity]:
        try:
            return self._codecs[kind]
        except KeyError as exc:
            raise UnknownEntityKindError(f"No codec registered for {kind!r}") from exc

    def for_entity(self, entity: AnyCatalogEntity) -> EntityCodec[AnyCatalogEntity]:
        return self.for_kind(entity.kind)

    def decode(self, kind: EntityKind, snapshot: DocumentSnapshot) -> AnyCatalogEntity:
        if snapshot.data is None:
            raise ValueError(f"Cannot decode missing document {snapshot.path}")
        return self.for_kind(kind).from_document(snapshot.id, snapshot.data)

    def encode(self, entity: AnyCatalogEntity) -> Document:
        return self.for_entity(entity).to_document(entity)

    def document_path(self, entity: AnyCatalogEntity, tenant_id: str) -> str:
        return self.for_entity(entity).document_path(entity, tenant_id)

    def meta_links(
        self,
        entity: AnyCatalogEntity,
        tenant_id: str,
        reader: DocumentReader,
    ) -> tuple[MetaLink, ...]:
        return self.for_entity(entity).meta_links(entity, tenant_id, reader)
