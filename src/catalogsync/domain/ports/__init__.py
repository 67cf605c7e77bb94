"""Domain port definitions for adapters."""

from __future__ import annotations

from .documents import (
    DocumentReader,
    DocumentSnapshot,
    DocumentStore,
    QueryOperator,
    Transaction,
    TransactionConflict,
    matches_filter,
)

__all__ = [
    "DocumentReader",
    "DocumentSnapshot",
    "DocumentStore",
    "QueryOperator",
    "Transaction",
    "TransactionConflict",
    "matches_filter",
]
