from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from catalogsync.adapters.sqlalchemy import SqlAlchemyDocumentStore, create_all_tables
from catalogsync.adapters.square import SquareCatalogReconciler
from catalogsync.domain.codecs import CodecRegistry, build_catalog_registry
from catalogsync.domain.reconciliation import ReconciliationEngine

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def document_store(sqlite_engine: Engine) -> SqlAlchemyDocumentStore:
    return SqlAlchemyDocumentStore(sqlite_engine, max_attempts=3)


@pytest.fixture
def registry() -> CodecRegistry:
    return build_catalog_registry()


@pytest.fixture
def reconciliation_engine(
    document_store: SqlAlchemyDocumentStore, registry: CodecRegistry
) -> ReconciliationEngine:
    return ReconciliationEngine(document_store, registry)


@pytest.fixture
def reconciler(reconciliation_engine: ReconciliationEngine) -> SquareCatalogReconciler:
    return SquareCatalogReconciler(reconciliation_engine)
