from __future__ import annotations

import pytest

from catalogsync.common.fieldpaths import (
    DELETE_FIELD,
    ArrayRemove,
    ArrayUnion,
    apply_field_updates,
    get_field,
    has_field,
    split_path,
    structural_copy,
)


def test_split_path_rejects_empty_segments() -> None:
    assert split_path("products.abc.name") == ("products", "abc", "name")
    with pytest.raises(ValueError):
        split_path("products..name")
    with pytest.raises(ValueError):
        split_path("")


def test_get_field_returns_none_for_missing_segments() -> None:
    data: dict[str, object] = {"products": {"p1": {"name": "Latte"}}}

    assert get_field(data, "products.p1.name") == "Latte"
    assert get_field(data, "products.p2.name") is None
    assert get_field(data, "products.p1.name.deeper") is None
    assert has_field(data, "products.p1")
    assert not has_field(data, "products.p2")


def test_structural_copy_is_independent() -> None:
    original: dict[str, object] = {"values": {"a": {"tags": ["x"]}}, "order": ("a", "b")}

    copied = structural_copy(original)
    copied_values = copied["values"]
    assert isinstance(copied_values, dict)
    copied_values["a"]["tags"].append("y")  # type: ignore[index]

    assert original == {"values": {"a": {"tags": ["x"]}}, "order": ("a", "b")}
    assert copied["order"] == ["a", "b"]


def test_apply_field_updates_creates_intermediate_maps() -> None:
    data: dict[str, object] = {}

    apply_field_updates(data, {"products.p1": {"name": "Latte", "isActive": True}})

    assert data == {"products": {"p1": {"name": "Latte", "isActive": True}}}


def test_apply_field_updates_delete_is_noop_when_missing() -> None:
    data: dict[str, object] = {"products": {"p1": {"name": "Latte"}}}

    apply_field_updates(data, {"products.p1": DELETE_FIELD, "categories.c1": DELETE_FIELD})

    assert data == {"products": {}}


def test_array_union_and_remove() -> None:
    data: dict[str, object] = {"productDisplayOrder": ["p1"]}

    apply_field_updates(data, {"productDisplayOrder": ArrayUnion("p2")})
    apply_field_updates(data, {"productDisplayOrder": ArrayUnion("p2")})
    assert data["productDisplayOrder"] == ["p1", "p2"]

    apply_field_updates(data, {"productDisplayOrder": ArrayRemove("p1")})
    assert data["productDisplayOrder"] == ["p2"]

    apply_field_updates(data, {"missing": ArrayUnion("x")})
    assert data["missing"] == ["x"]


def test_apply_field_updates_copies_values() -> None:
    projection = {"name": "Latte"}
    data: dict[str, object] = {}

    apply_field_updates(data, {"products.p1": projection})
    projection["name"] = "Mocha"

    assert get_field(data, "products.p1.name") == "Latte"
