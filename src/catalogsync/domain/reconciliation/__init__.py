"""Linked-object reconciliation: decisions, cascades and the engine."""

from __future__ import annotations

from .cascade import RelationshipCascades
from .contracts import EntityBuilder, SyncDecision, SyncResult
from .decide import decide_sync
from .engine import ReconciliationEngine

__all__ = [
    "EntityBuilder",
    "ReconciliationEngine",
    "RelationshipCascades",
    "SyncDecision",
    "SyncResult",
    "decide_sync",
]
