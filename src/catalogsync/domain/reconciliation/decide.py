"""Pure sync decision state machine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.domain.reconciliation.contracts import SyncDecision

if TYPE_CHECKING:
    from catalogsync.domain.model import CatalogEntity


def decide_sync(
    existing: CatalogEntity | None,
    provider: str,
    *,
    is_source_deleted: bool,
) -> SyncDecision:
    """Decide what to do with a provider object given the linked entity.

    An entity whose link was switched off is left alone, even when the
    provider reports the source as deleted.
    """

    if existing is None:
        return SyncDecision.SKIP_MISSING if is_source_deleted else SyncDecision.CREATE
    if not existing.is_sync_active(provider):
        return SyncDecision.SKIP_INACTIVE
    return SyncDecision.DELETE if is_source_deleted else SyncDecision.UPDATE
