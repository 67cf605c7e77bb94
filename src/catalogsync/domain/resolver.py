"""Lookup of internal entities by their provider-side identifier."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import ConflictError
from catalogsync.domain.ports import QueryOperator

if TYPE_CHECKING:
    from catalogsync.domain.codecs import CodecRegistry
    from catalogsync.domain.model import AnyCatalogEntity, EntityKind
    from catalogsync.domain.ports import DocumentReader

log = getLogger(__name__)


def linked_object_field(provider: str) -> str:
    return f"linkedObjects.{provider}.linkedObjectId"


class LinkedObjectResolver:
    """Find the single entity of a kind linked to a provider object."""

    def __init__(self, registry: CodecRegistry) -> None:
        self._registry = registry

    def find(
        self,
        provider_object_id: str,
        provider: str,
        kind: EntityKind,
        tenant_id: str,
        reader: DocumentReader,
    ) -> AnyCatalogEntity | None:
        """Return the linked entity, ``None`` when absent.

        Raises :class:`ConflictError` when more than one document carries the
        same provider link.
        """

        codec = self._registry.for_kind(kind)
        collection = codec.collection_path(tenant_id)
        matches = reader.query(
            collection, linked_object_field(provider), QueryOperator.EQUAL, provider_object_id
        )
        if not matches:
            return None
        if len(matches) > 1:
            raise ConflictError(
                codec.collection, provider_object_id, tuple(match.id for match in matches)
            )
        log.debug("Resolved %s %s -> %s", kind, provider_object_id, matches[0].id)
        return self._registry.decode(kind, matches[0])
