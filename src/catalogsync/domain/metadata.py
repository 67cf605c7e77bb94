"""Keep ancestor metadata projections in step with entity writes."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.common.fieldpaths import DELETE_FIELD

if TYPE_CHECKING:
    from catalogsync.domain.codecs import CodecRegistry, MetaLink
    from catalogsync.domain.model import AnyCatalogEntity
    from catalogsync.domain.ports import Transaction

log = getLogger(__name__)


class MetadataPropagator:
    """Write or clear an entity's projection at each of its meta links.

    All writes go through the caller's transaction so they commit together
    with the entity document itself.
    """

    def __init__(self, registry: CodecRegistry) -> None:
        self._registry = registry

    def write(
        self, entity: AnyCatalogEntity, tenant_id: str, txn: Transaction
    ) -> tuple[MetaLink, ...]:
        codec = self._registry.for_entity(entity)
        projection = codec.metadata_projection(entity)
        links = codec.meta_links(entity, tenant_id, txn)
        for link in links:
            txn.update(link.document_path, {link.field_path: projection})
        log.debug("Projected %s %s into %d ancestors", entity.kind, entity.id, len(links))
        return links

    def clear(
        self, entity: AnyCatalogEntity, tenant_id: str, txn: Transaction
    ) -> tuple[MetaLink, ...]:
        links = self._registry.meta_links(entity, tenant_id, txn)
        for link in links:
            txn.update(link.document_path, {link.field_path: DELETE_FIELD})
        log.debug("Cleared %s %s from %d ancestors", entity.kind, entity.id, len(links))
        return links
