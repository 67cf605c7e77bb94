"""Value types shared by the reconciliation engine and provider adapters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.domain.model import AnyCatalogEntity
    from catalogsync.domain.ports import Transaction


class SyncDecision(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    SKIP_INACTIVE = "skip_inactive"
    SKIP_MISSING = "skip_missing"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class SyncResult[E: AnyCatalogEntity]:
    """Outcome of reconciling one provider object.

    ``is_sync_active`` is ``False`` when nothing was written (skipped) or the
    entity was deleted; ``entity`` then holds the untouched existing entity or
    ``None``.
    """

    is_sync_active: bool
    entity: E | None
    decision: SyncDecision


type EntityBuilder[E: AnyCatalogEntity] = Callable[[E | None, Transaction], E]
