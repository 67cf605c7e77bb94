"""Dotted field-path helpers for nested JSON-like documents.

Documents are plain ``dict`` trees holding JSON-compatible values. A field path
such as ``"products.abc.name"`` addresses nested mapping keys. Updates accept
the sentinels below in place of a value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, cast

if TYPE_CHECKING:
    from collections.abc import Mapping

type Document = dict[str, object]


class _DeleteField:
    _instance: _DeleteField | None = None

    def __new__(cls) -> _DeleteField:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD: Final = _DeleteField()


@dataclass(frozen=True, slots=True)
class ArrayUnion:
    """Append ``value`` to a list field unless already present."""

    value: object


@dataclass(frozen=True, slots=True)
class ArrayRemove:
    """Remove every occurrence of ``value`` from a list field."""

    value: object


def split_path(field_path: str) -> tuple[str, ...]:
    parts = tuple(field_path.split("."))
    if not field_path or any(not part for part in parts):
        raise ValueError(f"Invalid field path: {field_path!r}")
    return parts


def structural_copy[T](value: T) -> T:
    """Return an independent copy of a JSON-like value tree.

    Mappings and lists are rebuilt recursively; scalars are shared.
    """

    if isinstance(value, dict):
        source = cast("dict[object, object]", value)
        return cast("T", {key: structural_copy(item) for key, item in source.items()})
    if isinstance(value, list | tuple):
        items = cast("list[object]", value)
        return cast("T", [structural_copy(item) for item in items])
    return value


def get_field(data: Mapping[str, object], field_path: str) -> object | None:
    """Return the value at ``field_path`` or ``None`` when any segment is missing."""

    current: object = data
    for part in split_path(field_path):
        if not isinstance(current, dict):
            return None
        mapping = cast("dict[str, object]", current)
        if part not in mapping:
            return None
        current = mapping[part]
    return current


def has_field(data: Mapping[str, object], field_path: str) -> bool:
    current: object = data
    for part in split_path(field_path):
        if not isinstance(current, dict):
            return False
        mapping = cast("dict[str, object]", current)
        if part not in mapping:
            return False
        current = mapping[part]
    return True


def apply_field_updates(data: Document, updates: Mapping[str, object]) -> Document:
    """Apply ``updates`` (field path -> value or sentinel) to ``data`` in place.

    Intermediate mappings are created as needed. ``DELETE_FIELD`` on a missing
    path is a no-op.
    """

    for field_path, value in updates.items():
        *parents, leaf = split_path(field_path)
        container = _descend(data, parents, create=value is not DELETE_FIELD)
        if container is None:
            continue
        if value is DELETE_FIELD:
            container.pop(leaf, None)
        elif isinstance(value, ArrayUnion):
            current = _as_list(container.get(leaf))
            if value.value not in current:
                current.append(structural_copy(value.value))
            container[leaf] = current
        elif isinstance(value, ArrayRemove):
            current = _as_list(container.get(leaf))
            container[leaf] = [item for item in current if item != value.value]
        else:
            container[leaf] = structural_copy(value)
    return data


def _descend(data: Document, parents: list[str], *, create: bool) -> Document | None:
    current: Document = data
    for part in parents:
        child = current.get(part)
        if not isinstance(child, dict):
            if not create:
                return None
            child = {}
            current[part] = child
        current = cast("Document", child)
    return current


def _as_list(value: object) -> list[object]:
    if isinstance(value, list):
        return list(cast("list[object]", value))
    return []
