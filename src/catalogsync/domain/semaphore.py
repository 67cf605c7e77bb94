"""Per-tenant named lock serialising whole reconciliation runs."""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import SemaphoreUnavailableError
from catalogsync.domain.model import LockName, Semaphore, utc_now
from catalogsync.domain.paths import semaphore_doc

if TYPE_CHECKING:
    from collections.abc import Iterator

    from catalogsync.domain.ports import DocumentStore, Transaction

log = getLogger(__name__)


class DistributedSemaphore:
    """Lock records stored as documents and flipped transactionally.

    The record is created lazily on first use and never deleted.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def lock(self, tenant_id: str, lock_name: str = LockName.CATALOG_UPDATE) -> bool:
        """Acquire the lock; ``False`` when another holder has it."""

        path = semaphore_doc(tenant_id, lock_name)

        def attempt(txn: Transaction) -> bool:
            snapshot = txn.get(path)
            if snapshot.data is not None:
                semaphore = Semaphore.from_document(lock_name, snapshot.data)
                if not semaphore.is_available:
                    return False
                semaphore.is_available = False
                semaphore.updated = utc_now()
            else:
                semaphore = Semaphore(id=lock_name, is_available=False)
            txn.set(path, semaphore.to_document())
            return True

        acquired = self._store.run_transaction(attempt)
        if acquired:
            log.debug("Acquired %s for tenant %s", lock_name, tenant_id)
        else:
            log.info("Semaphore %s for tenant %s is held elsewhere", lock_name, tenant_id)
        return acquired

    def release(self, tenant_id: str, lock_name: str = LockName.CATALOG_UPDATE) -> bool:
        """Mark the lock available. Idempotent; always ``True``."""

        path = semaphore_doc(tenant_id, lock_name)

        def attempt(txn: Transaction) -> bool:
            snapshot = txn.get(path)
            if snapshot.data is not None:
                semaphore = Semaphore.from_document(lock_name, snapshot.data)
                semaphore.is_available = True
                semaphore.updated = utc_now()
            else:
                semaphore = Semaphore(id=lock_name, is_available=True)
            txn.set(path, semaphore.to_document())
            return True

        released = self._store.run_transaction(attempt)
        log.debug("Released %s for tenant %s", lock_name, tenant_id)
        return released

    def is_available(self, tenant_id: str, lock_name: str = LockName.CATALOG_UPDATE) -> bool:
        snapshot = self._store.get(semaphore_doc(tenant_id, lock_name))
        if snapshot.data is None:
            return True
        return Semaphore.from_document(lock_name, snapshot.data).is_available

    @contextmanager
    def hold(self, tenant_id: str, lock_name: str = LockName.CATALOG_UPDATE) -> Iterator[None]:
        if not self.lock(tenant_id, lock_name):
            raise SemaphoreUnavailableError(tenant_id, lock_name)
        try:
            yield
        finally:
            self.release(tenant_id, lock_name)
