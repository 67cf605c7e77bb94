"""Base building blocks: identity, timestamps and provider links."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar
from uuid import uuid4

from catalogsync.domain.model.linked_objects import LinkedObjectRef

if TYPE_CHECKING:
    from catalogsync.domain.model.enums import EntityKind


def new_id() -> str:
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class CatalogEntity:
    """Document-backed entity that may be linked to provider records."""

    id: str = field(default_factory=new_id)
    linked_objects: dict[str, LinkedObjectRef] = field(default_factory=dict)
    created: datetime = field(default_factory=utc_now)
    updated: datetime = field(default_factory=utc_now)
    is_deleted: bool = False

    # class-level discriminator; subclasses must override
    KIND: ClassVar[EntityKind]

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    def linked_object(self, provider: str) -> LinkedObjectRef | None:
        return self.linked_objects.get(provider)

    def is_sync_active(self, provider: str) -> bool:
        ref = self.linked_object(provider)
        return ref is not None and ref.is_sync_active

    def link(self, provider: str, linked_object_id: str, *, is_sync_active: bool = True) -> None:
        """Attach (or replace) the single reference held for ``provider``."""
        self.linked_objects[provider] = LinkedObjectRef(linked_object_id, is_sync_active)

    def touch(self, now: datetime | None = None) -> None:
        self.updated = now or utc_now()
