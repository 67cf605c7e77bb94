"""Error taxonomy for catalog reconciliation.

Entity-level errors abort only the transaction of the entity being reconciled;
orchestrating callers decide whether the rest of a batch continues.
"""

from __future__ import annotations


class CatalogSyncError(Exception):
    """Base class for reconciliation failures."""


class ValidationError(CatalogSyncError):
    """A provider payload is malformed or lacks a required section."""

    def __init__(self, message: str, *, object_id: str | None = None) -> None:
        super().__init__(message)
        self.object_id = object_id


class MissingDataError(CatalogSyncError):
    """A required sub-structure is absent on a specific provider object."""

    def __init__(self, message: str, *, object_id: str) -> None:
        super().__init__(f"{message} (object {object_id})")
        self.object_id = object_id


class ConflictError(CatalogSyncError):
    """More than one document is linked to the same provider object."""

    def __init__(self, collection: str, linked_object_id: str, document_ids: tuple[str, ...]):
        ids = ", ".join(document_ids)
        super().__init__(
            f"There is more than one {collection} object ({ids}) "
            f"with the same linked id {linked_object_id}"
        )
        self.collection = collection
        self.linked_object_id = linked_object_id
        self.document_ids = document_ids


class TransactionAbortError(CatalogSyncError):
    """The document store gave up on a transaction after repeated conflicts."""


class SemaphoreUnavailableError(CatalogSyncError):
    """A tenant semaphore is currently held by another run."""

    def __init__(self, tenant_id: str, lock_name: str) -> None:
        super().__init__(f"Semaphore {lock_name!r} for tenant {tenant_id} is held")
        self.tenant_id = tenant_id
        self.lock_name = lock_name
