"""Document store backed by a single SQLAlchemy table.

Transactions are optimistic: reads record the version they observed, writes
are buffered, and commit re-checks every observed version inside one database
transaction. Each write is guarded by the version its transaction read, so a
concurrent commit landing after validation still fails the guard. A mismatch raises
:class:`TransactionConflict`, which ``run_transaction`` retries.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Literal, cast

from sqlalchemy import create_engine, delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from catalogsync.adapters.sqlalchemy.mappings import create_all_tables, document_table
from catalogsync.common.fieldpaths import apply_field_updates, structural_copy
from catalogsync.config.storage import is_sqlite_memory_uri
from catalogsync.config.sync import DEFAULT_TRANSACTION_ATTEMPTS
from catalogsync.domain.errors import TransactionAbortError
from catalogsync.domain.model import utc_now
from catalogsync.domain.paths import parent_collection
from catalogsync.domain.ports.documents import (
    DocumentSnapshot,
    QueryOperator,
    TransactionConflict,
    matches_filter,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.sql.elements import ColumnElement

    from catalogsync.common.fieldpaths import Document

log = getLogger(__name__)


class TransactionClosedError(RuntimeError):
    """Raised when a transaction is used outside its lifecycle."""


class _WriteKind(StrEnum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(slots=True)
class _PendingWrite:
    kind: _WriteKind
    payload: Document = field(default_factory=dict)


def _fetch_one(conn: Connection, path: str) -> DocumentSnapshot:
    row = conn.execute(
        select(document_table.c.data, document_table.c.version).where(
            document_table.c.path == path
        )
    ).first()
    if row is None:
        return DocumentSnapshot(path=path, data=None)
    return DocumentSnapshot(
        path=path,
        data=structural_copy(cast("Document", row.data)),
        version=cast("int", row.version),
    )


def _equality_clause(field_path: str, value: object) -> ColumnElement[bool] | None:
    """Translate an equality filter into a JSON path comparison, when the value allows it."""

    keys = tuple(field_path.split("."))
    element = document_table.c.data[keys] if len(keys) > 1 else document_table.c.data[keys[0]]
    if isinstance(value, str):
        return element.as_string() == value
    if isinstance(value, int) and not isinstance(value, bool):
        return element.as_integer() == value
    return None


def _fetch_matching(
    conn: Connection,
    collection: str,
    field_path: str,
    op: QueryOperator,
    value: object,
) -> tuple[DocumentSnapshot, ...]:
    statement = (
        select(document_table.c.path, document_table.c.data, document_table.c.version)
        .where(document_table.c.collection == collection)
        .order_by(document_table.c.path)
    )
    if op is QueryOperator.EQUAL:
        clause = _equality_clause(field_path, value)
        if clause is not None:
            statement = statement.where(clause)
    # rows narrowed in SQL are still checked against the exact filter semantics
    snapshots: list[DocumentSnapshot] = []
    for row in conn.execute(statement).all():
        data = cast("Document", row.data)
        if not matches_filter(data, field_path, op, value):
            continue
        snapshots.append(
            DocumentSnapshot(
                path=cast("str", row.path),
                data=structural_copy(data),
                version=cast("int", row.version),
            )
        )
    return tuple(snapshots)


class SqlAlchemyTransaction:
    """One optimistic transaction attempt.

    Use as a context manager; uncommitted work is discarded on exit.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._observed: dict[str, int | None] = {}
        self._writes: list[tuple[str, _PendingWrite]] = []
        self._closed = False

    def __enter__(self) -> SqlAlchemyTransaction:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if not self._closed:
            self.rollback()
        return False  # don't swallow exceptions

    # Reads ---------------------------------------------------------------

    def get(self, path: str) -> DocumentSnapshot:
        self._ensure_open()
        with self._engine.connect() as conn:
            snapshot = _fetch_one(conn, path)
        self._observe(snapshot)
        return snapshot

    def query(
        self,
        collection: str,
        field_path: str,
        op: QueryOperator = QueryOperator.EQUAL,
        value: object = None,
    ) -> tuple[DocumentSnapshot, ...]:
        self._ensure_open()
        with self._engine.connect() as conn:
            snapshots = _fetch_matching(conn, collection, field_path, op, value)
        for snapshot in snapshots:
            self._observe(snapshot)
        return snapshots

    # Writes --------------------------------------------------------------

    def set(self, path: str, data: Mapping[str, object]) -> None:
        self._ensure_open()
        self._writes.append((path, _PendingWrite(_WriteKind.SET, structural_copy(dict(data)))))

    def update(self, path: str, fields: Mapping[str, object]) -> None:
        self._ensure_open()
        self._writes.append((path, _PendingWrite(_WriteKind.UPDATE, dict(fields))))

    def delete(self, path: str) -> None:
        self._ensure_open()
        self._writes.append((path, _PendingWrite(_WriteKind.DELETE)))

    # Lifecycle -----------------------------------------------------------

    def commit(self) -> None:
        self._ensure_open()
        self._closed = True
        try:
            with self._engine.begin() as conn:
                self._validate_observed(conn)
                self._apply_writes(conn)
        except IntegrityError as exc:
            raise TransactionConflict("Concurrent insert of the same document") from exc

    def rollback(self) -> None:
        self._closed = True
        self._writes.clear()
        self._observed.clear()

    # Internals -----------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransactionClosedError("Transaction already committed or rolled back")

    def _observe(self, snapshot: DocumentSnapshot) -> None:
        # first observation wins; later reads must not mask an earlier stale view
        self._observed.setdefault(snapshot.path, snapshot.version)

    def _validate_observed(self, conn: Connection) -> None:
        for path, version in self._observed.items():
            current = conn.execute(
                select(document_table.c.version).where(document_table.c.path == path)
            ).scalar_one_or_none()
            if current != version:
                raise TransactionConflict(f"Document {path} changed during transaction")

    def _apply_writes(self, conn: Connection) -> None:
        grouped: dict[str, list[_PendingWrite]] = {}
        for path, write in self._writes:
            grouped.setdefault(path, []).append(write)

        now = utc_now()
        for path, writes in grouped.items():
            current = _fetch_one(conn, path)
            # observed paths are guarded by the version read, not the one found now
            expected = self._observed[path] if path in self._observed else current.version
            if expected is None and current.version is not None:
                raise TransactionConflict(f"Document {path} was created during commit")
            data = current.data
            for write in writes:
                if write.kind is _WriteKind.SET:
                    data = structural_copy(write.payload)
                elif write.kind is _WriteKind.UPDATE:
                    data = apply_field_updates(data if data is not None else {}, write.payload)
                else:
                    data = None

            if expected is None:
                if data is not None:
                    conn.execute(
                        insert(document_table).values(
                            path=path,
                            collection=parent_collection(path),
                            data=data,
                            version=1,
                            created_at=now,
                            updated_at=now,
                        )
                    )
                continue

            guard = (document_table.c.path == path) & (document_table.c.version == expected)
            if data is None:
                result = conn.execute(delete(document_table).where(guard))
            else:
                result = conn.execute(
                    update(document_table)
                    .where(guard)
                    .values(data=data, version=expected + 1, updated_at=now)
                )
            if result.rowcount != 1:
                raise TransactionConflict(f"Document {path} changed during commit")


class SqlAlchemyDocumentStore:
    """Transactional document store over a SQLAlchemy engine."""

    def __init__(
        self,
        engine: Engine,
        *,
        max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        self.engine = engine
        self.max_attempts = max_attempts

    def get(self, path: str) -> DocumentSnapshot:
        with self.engine.connect() as conn:
            return _fetch_one(conn, path)

    def query(
        self,
        collection: str,
        field_path: str,
        op: QueryOperator = QueryOperator.EQUAL,
        value: object = None,
    ) -> tuple[DocumentSnapshot, ...]:
        with self.engine.connect() as conn:
            return _fetch_matching(conn, collection, field_path, op, value)

    @contextmanager
    def transaction(self) -> Iterator[SqlAlchemyTransaction]:
        with SqlAlchemyTransaction(self.engine) as txn:
            yield txn

    def run_transaction[T](
        self,
        fn: Callable[[SqlAlchemyTransaction], T],
        *,
        max_attempts: int | None = None,
    ) -> T:
        """Run ``fn`` in a fresh transaction and commit, retrying on conflicts.

        Exceptions raised by ``fn`` abort the attempt and propagate unchanged.
        """

        attempts = max_attempts or self.max_attempts
        for attempt in range(1, attempts + 1):
            with self.transaction() as txn:
                result = fn(txn)
                try:
                    txn.commit()
                except TransactionConflict as exc:
                    log.debug("Transaction attempt %s/%s conflicted: %s", attempt, attempts, exc)
                    continue
                return result
        raise TransactionAbortError(f"Transaction aborted after {attempts} conflicting attempts")


def create_document_store(
    database_uri: str,
    *,
    max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
) -> SqlAlchemyDocumentStore:
    """Create an engine for ``database_uri``, ensure the schema and wrap it."""

    if is_sqlite_memory_uri(database_uri):
        engine = create_engine(
            database_uri,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_uri, future=True)
    create_all_tables(engine)
    return SqlAlchemyDocumentStore(engine, max_attempts=max_attempts)


if TYPE_CHECKING:
    from catalogsync.domain.ports.documents import DocumentStore, Transaction

    _txn_check: Transaction = SqlAlchemyTransaction(cast("Engine", object()))
    _store_check: DocumentStore = SqlAlchemyDocumentStore(cast("Engine", object()))
