"""References from internal entities to records on an external provider."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class LinkedObjectRef:
    """Provider-side identifier plus the sync-activity flag.

    ``is_sync_active`` is flipped to ``False`` by operators to exempt an entity
    from automated sync permanently.
    """

    linked_object_id: str
    is_sync_active: bool = True
