"""Reconciliation engine: resolve, decide, then write or cascade-delete."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.metadata import MetadataPropagator
from catalogsync.domain.model import Provider
from catalogsync.domain.reconciliation.cascade import RelationshipCascades
from catalogsync.domain.reconciliation.contracts import SyncDecision, SyncResult
from catalogsync.domain.reconciliation.decide import decide_sync
from catalogsync.domain.resolver import LinkedObjectResolver

if TYPE_CHECKING:
    from catalogsync.domain.codecs import CodecRegistry
    from catalogsync.domain.model import AnyCatalogEntity, EntityKind
    from catalogsync.domain.ports import DocumentStore, Transaction
    from catalogsync.domain.reconciliation.contracts import EntityBuilder

log = getLogger(__name__)


class ReconciliationEngine:
    """Apply provider objects to linked entities, one transaction each."""

    def __init__(
        self,
        store: DocumentStore,
        registry: CodecRegistry,
        *,
        provider: str = Provider.SQUARE,
        resolver: LinkedObjectResolver | None = None,
        propagator: MetadataPropagator | None = None,
        cascades: RelationshipCascades | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.provider = provider
        self.resolver = resolver or LinkedObjectResolver(registry)
        self.propagator = propagator or MetadataPropagator(registry)
        self.cascades = cascades or RelationshipCascades(registry, self.propagator)

    def find(
        self,
        kind: EntityKind,
        provider_object_id: str,
        tenant_id: str,
        txn: Transaction,
    ) -> AnyCatalogEntity | None:
        return self.resolver.find(provider_object_id, self.provider, kind, tenant_id, txn)

    def reconcile[E: AnyCatalogEntity](
        self,
        kind: EntityKind,
        provider_object_id: str,
        *,
        is_source_deleted: bool,
        tenant_id: str,
        build: EntityBuilder[E],
        txn: Transaction | None = None,
    ) -> SyncResult[E]:
        """Reconcile one provider object.

        Without ``txn`` the work runs in its own retried transaction; with one,
        writes are buffered there and the caller commits.
        """

        if txn is None:
            return self.store.run_transaction(
                lambda own: self.reconcile(
                    kind,
                    provider_object_id,
                    is_source_deleted=is_source_deleted,
                    tenant_id=tenant_id,
                    build=build,
                    txn=own,
                )
            )

        existing = self.find(kind, provider_object_id, tenant_id, txn)
        decision = decide_sync(existing, self.provider, is_source_deleted=is_source_deleted)
        log.debug("%s %s: %s", kind, provider_object_id, decision)

        if decision is SyncDecision.SKIP_MISSING:
            return SyncResult(is_sync_active=False, entity=None, decision=decision)
        if decision is SyncDecision.SKIP_INACTIVE:
            return SyncResult(
                is_sync_active=False,
                entity=existing,  # type: ignore[arg-type]
                decision=decision,
            )
        if existing is not None and decision is SyncDecision.DELETE:
            self.remove(existing, tenant_id, txn)
            return SyncResult(is_sync_active=False, entity=None, decision=decision)

        entity = build(existing, txn)  # type: ignore[arg-type]
        if decision is SyncDecision.CREATE:
            entity.link(self.provider, provider_object_id)
        self.save(entity, tenant_id, txn)
        return SyncResult(is_sync_active=True, entity=entity, decision=decision)

    def save(self, entity: AnyCatalogEntity, tenant_id: str, txn: Transaction) -> None:
        """Buffer the entity document and its metadata projections."""

        entity.touch()
        txn.set(self.registry.document_path(entity, tenant_id), self.registry.encode(entity))
        self.propagator.write(entity, tenant_id, txn)

    def remove(self, entity: AnyCatalogEntity, tenant_id: str, txn: Transaction) -> None:
        """Buffer a permanent delete with its cascades and projection clears."""

        # cascades may touch the entity's ancestors; the delete itself goes last
        self.cascades.on_delete(entity, tenant_id, txn)
        self.propagator.clear(entity, tenant_id, txn)
        txn.delete(self.registry.document_path(entity, tenant_id))
        log.info("Deleted %s %s", entity.kind, entity.id)
