"""Ports for the transactional document store.

Contract consumed by the reconciliation core:

- documents live at slash-separated paths; a document's collection is the
  path without its last segment
- reads inside a transaction observe committed state and are validated at
  commit; writes are buffered and applied atomically in call order
- ``run_transaction`` retries a scoped function on commit conflicts and raises
  :class:`~catalogsync.domain.errors.TransactionAbortError` when it gives up
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, cast, runtime_checkable

from catalogsync.common.fieldpaths import get_field, has_field

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from contextlib import AbstractContextManager

    from catalogsync.common.fieldpaths import Document


class QueryOperator(StrEnum):
    EQUAL = "=="
    ARRAY_CONTAINS = "array-contains"
    EXISTS = "exists"


@dataclass(frozen=True, slots=True)
class DocumentSnapshot:
    """Point-in-time view of a document; ``data`` is ``None`` when absent."""

    path: str
    data: Document | None
    version: int | None = None

    @property
    def id(self) -> str:
        return self.path.rpartition("/")[2]


class TransactionConflict(Exception):  # noqa: N818
    """Commit-time signal that a read document changed; the attempt may be retried."""


def matches_filter(
    data: Mapping[str, object],
    field_path: str,
    op: QueryOperator,
    value: object = None,
) -> bool:
    if op is QueryOperator.EXISTS:
        return has_field(data, field_path)
    current = get_field(data, field_path)
    if op is QueryOperator.EQUAL:
        return has_field(data, field_path) and current == value
    if op is QueryOperator.ARRAY_CONTAINS:
        return isinstance(current, list) and value in cast("list[object]", current)
    raise ValueError(f"Unsupported query operator: {op!r}")


@runtime_checkable
class DocumentReader(Protocol):
    """Read access shared by stores and transactions."""

    def get(self, path: str) -> DocumentSnapshot: ...

    def query(
        self,
        collection: str,
        field_path: str,
        op: QueryOperator = QueryOperator.EQUAL,
        value: object = None,
    ) -> tuple[DocumentSnapshot, ...]: ...


@runtime_checkable
class Transaction(DocumentReader, Protocol):
    """A single attempt at an atomic multi-document write."""

    def set(self, path: str, data: Mapping[str, object]) -> None:
        """Replace the whole document."""
        ...

    def update(self, path: str, fields: Mapping[str, object]) -> None:
        """Apply field-path updates, creating the document when absent."""
        ...

    def delete(self, path: str) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@runtime_checkable
class DocumentStore(DocumentReader, Protocol):
    def transaction(self) -> AbstractContextManager[Transaction]: ...

    def run_transaction[T](
        self,
        fn: Callable[[Transaction], T],
        *,
        max_attempts: int | None = None,
    ) -> T: ...
