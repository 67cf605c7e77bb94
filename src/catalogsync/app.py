"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError as PayloadValidationError

from catalogsync.adapters.sqlalchemy import create_document_store
from catalogsync.adapters.square import CatalogObject, CatalogObjectType, SquareCatalogReconciler
from catalogsync.config import ConfigurationError, get_database_config, get_sync_config
from catalogsync.domain.codecs import build_catalog_registry
from catalogsync.domain.errors import CatalogSyncError
from catalogsync.domain.model import Provider
from catalogsync.domain.reconciliation import ReconciliationEngine, SyncDecision
from catalogsync.domain.semaphore import DistributedSemaphore

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from catalogsync.config import SyncConfig
    from catalogsync.domain.codecs import CodecRegistry
    from catalogsync.domain.ports import DocumentStore

log = getLogger(__name__)

# categories and modifier lists must exist before the items that reference them
RECONCILE_ORDER: tuple[CatalogObjectType, ...] = (
    CatalogObjectType.CATEGORY,
    CatalogObjectType.MODIFIER_LIST,
    CatalogObjectType.TAX,
    CatalogObjectType.SERVICE_CHARGE,
    CatalogObjectType.ITEM,
)


@dataclass(slots=True)
class CatalogSyncResult:
    """Outcome of a batch reconciliation run."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    skipped: int = 0
    # related-only objects (images, variations) and unknown types
    ignored: int = 0
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.deleted + self.skipped

    def record(self, decision: SyncDecision) -> None:
        if decision is SyncDecision.CREATE:
            self.created += 1
        elif decision is SyncDecision.UPDATE:
            self.updated += 1
        elif decision is SyncDecision.DELETE:
            self.deleted += 1
        else:
            self.skipped += 1


@dataclass(slots=True)
class ParsedCatalog:
    """Validated catalog objects plus the payloads that failed validation."""

    objects: list[CatalogObject] = field(default_factory=list)
    rejected: dict[str, str] = field(default_factory=dict)


def _payload_key(payload: object, index: int) -> str:
    if not isinstance(payload, Mapping):
        return f"#{index}"
    raw_id = cast("Mapping[str, object]", payload).get("id")
    if isinstance(raw_id, str) and raw_id:
        return raw_id
    return f"#{index}"


def parse_catalog_objects(payloads: Iterable[object]) -> ParsedCatalog:
    """Validate raw Square catalog object payloads one at a time.

    A payload that fails validation is recorded in ``rejected``, keyed by its
    raw ``id`` or its position, and does not stop the rest of the batch.
    """

    parsed = ParsedCatalog()
    for index, payload in enumerate(payloads):
        try:
            parsed.objects.append(CatalogObject.model_validate(payload))
        except PayloadValidationError as exc:
            key = _payload_key(payload, index)
            log.warning("Rejected catalog object %s: %s error(s)", key, exc.error_count())
            parsed.rejected[key] = str(exc)
    return parsed


def order_for_reconciliation(objects: Iterable[CatalogObject]) -> list[CatalogObject]:
    """Return reconcilable objects in dependency order, keeping input order per type."""

    rank = {object_type.value: index for index, object_type in enumerate(RECONCILE_ORDER)}
    reconcilable = [obj for obj in objects if obj.type in rank]
    return sorted(reconcilable, key=lambda obj: rank[obj.type])


def open_document_store(config: SyncConfig | None = None) -> DocumentStore:
    """Open the configured document store, creating its schema when needed."""

    sync_config = config or get_sync_config()
    return create_document_store(
        get_database_config().uri, max_attempts=sync_config.transaction_attempts
    )


def build_square_reconciler(
    store: DocumentStore,
    *,
    registry: CodecRegistry | None = None,
) -> SquareCatalogReconciler:
    engine = ReconciliationEngine(
        store, registry or build_catalog_registry(), provider=Provider.SQUARE
    )
    return SquareCatalogReconciler(engine)


def reconcile_catalog(
    objects: Sequence[CatalogObject],
    tenant_id: str,
    related_objects: Sequence[CatalogObject] = (),
    *,
    store: DocumentStore | None = None,
    config: SyncConfig | None = None,
    reconciler: SquareCatalogReconciler | None = None,
    rejected: Mapping[str, str] | None = None,
) -> CatalogSyncResult:
    """Reconcile a batch of Square catalog objects for one tenant.

    The tenant semaphore is held for the whole run and released on every exit
    path. Entity-level failures are recorded and the batch continues. Payloads
    rejected during parsing are passed as ``rejected`` and reported as failures.
    Raises :class:`~catalogsync.domain.errors.SemaphoreUnavailableError` when
    another run holds the lock.
    """

    sync_config = config or get_sync_config()
    if sync_config.provider != Provider.SQUARE:
        raise ConfigurationError(
            f"Unsupported catalog provider: {sync_config.provider}",
            setting="CATALOGSYNC_PROVIDER",
        )

    effective_store = store or open_document_store(sync_config)
    effective_reconciler = reconciler or build_square_reconciler(effective_store)
    semaphore = DistributedSemaphore(effective_store)

    ordered = order_for_reconciliation(objects)
    related = [*related_objects, *objects]
    result = CatalogSyncResult(
        ignored=len(objects) - len(ordered), failures=dict(rejected or {})
    )
    log.info(
        "Starting catalog sync for tenant %s: objects=%s, related=%s",
        tenant_id,
        len(ordered),
        len(related_objects),
    )

    with semaphore.hold(tenant_id, sync_config.lock_name):
        for obj in ordered:
            try:
                outcome = effective_reconciler.upsert(obj, tenant_id, related)
            except CatalogSyncError as exc:
                log.warning("Failed to reconcile %s %s: %s", obj.type, obj.id, exc)
                result.failures[obj.id] = str(exc)
                continue
            result.record(outcome.decision)

    log.info(
        "Finished catalog sync for tenant %s: created=%s, updated=%s, deleted=%s, "
        "skipped=%s, failed=%s",
        tenant_id,
        result.created,
        result.updated,
        result.deleted,
        result.skipped,
        len(result.failures),
    )
    return result


def lock_tenant(
    tenant_id: str,
    lock_name: str | None = None,
    *,
    store: DocumentStore | None = None,
) -> bool:
    sync_config = get_sync_config()
    semaphore = DistributedSemaphore(store or open_document_store(sync_config))
    return semaphore.lock(tenant_id, lock_name or sync_config.lock_name)


def release_tenant(
    tenant_id: str,
    lock_name: str | None = None,
    *,
    store: DocumentStore | None = None,
) -> bool:
    sync_config = get_sync_config()
    semaphore = DistributedSemaphore(store or open_document_store(sync_config))
    return semaphore.release(tenant_id, lock_name or sync_config.lock_name)
