"""SQLAlchemy-backed document store."""

from __future__ import annotations

from .mappings import create_all_tables, document_table
from .store import (
    SqlAlchemyDocumentStore,
    SqlAlchemyTransaction,
    TransactionClosedError,
    create_document_store,
)

__all__ = [
    "SqlAlchemyDocumentStore",
    "SqlAlchemyTransaction",
    "TransactionClosedError",
    "create_all_tables",
    "create_document_store",
    "document_table",
]
