"""Per-tenant named mutual-exclusion record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from catalogsync.domain.model.entity import utc_now


@dataclass(eq=False, kw_only=True)
class Semaphore:
    id: str
    is_available: bool = True
    created: datetime = field(default_factory=utc_now)
    updated: datetime = field(default_factory=utc_now)
    is_deleted: bool = False

    def to_document(self) -> dict[str, object]:
        return {
            "isAvailable": self.is_available,
            "created": self.created.isoformat(),
            "updated": self.updated.isoformat(),
            "isDeleted": self.is_deleted,
        }

    @classmethod
    def from_document(cls, lock_name: str, data: dict[str, object]) -> Semaphore:
        now = utc_now()
        return cls(
            id=lock_name,
            is_available=bool(data.get("isAvailable", True)),
            created=_parse_timestamp(data.get("created")) or now,
            updated=_parse_timestamp(data.get("updated")) or now,
            is_deleted=bool(data.get("isDeleted", False)),
        )


def _parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
