"""Provider-agnostic helpers shared across layers."""

from __future__ import annotations

from .fieldpaths import (
    DELETE_FIELD,
    ArrayRemove,
    ArrayUnion,
    Document,
    apply_field_updates,
    get_field,
    has_field,
    structural_copy,
)

__all__ = [
    "DELETE_FIELD",
    "ArrayRemove",
    "ArrayUnion",
    "Document",
    "apply_field_updates",
    "get_field",
    "has_field",
    "structural_copy",
]
