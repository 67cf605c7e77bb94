"""Builders for Square catalog object payloads used across tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalogsync.adapters.square import CatalogObject

if TYPE_CHECKING:
    from collections.abc import Sequence

TENANT_ID = "tenant-1"


def money(amount: int) -> dict[str, object]:
    return {"amount": amount, "currency": "USD"}


def variation_payload(
    variation_id: str,
    *,
    name: str = "Regular",
    ordinal: int | None = None,
    price: int | None = None,
    object_type: str = "ITEM_VARIATION",
) -> dict[str, object]:
    data: dict[str, object] = {"name": name}
    if ordinal is not None:
        data["ordinal"] = ordinal
    if price is not None:
        data["price_money"] = money(price)
    return {"type": object_type, "id": variation_id, "item_variation_data": data}


def modifier_payload(
    modifier_id: str,
    *,
    name: str = "Oat milk",
    ordinal: int | None = None,
    price: int | None = None,
) -> dict[str, object]:
    data: dict[str, object] = {"name": name}
    if ordinal is not None:
        data["ordinal"] = ordinal
    if price is not None:
        data["price_money"] = money(price)
    return {"type": "MODIFIER", "id": modifier_id, "modifier_data": data}


def modifier_list_info(
    modifier_list_id: str,
    *,
    on_by_default: Sequence[str] = (),
    min_selected: int | None = None,
    max_selected: int | None = None,
    enabled: bool | None = None,
) -> dict[str, object]:
    info: dict[str, object] = {
        "modifier_list_id": modifier_list_id,
        "modifier_overrides": [
            {"modifier_id": modifier_id, "on_by_default": True} for modifier_id in on_by_default
        ],
    }
    if min_selected is not None:
        info["min_selected_modifiers"] = min_selected
    if max_selected is not None:
        info["max_selected_modifiers"] = max_selected
    if enabled is not None:
        info["enabled"] = enabled
    return info


def item_payload(
    item_id: str,
    *,
    name: str = "Latte",
    description: str | None = None,
    variations: Sequence[dict[str, object]] | None = None,
    modifier_lists: Sequence[dict[str, object]] = (),
    category_id: str | None = None,
    image_id: str | None = None,
    image_ids: Sequence[str] | None = None,
    product_type: str | None = "REGULAR",
    available_for_pickup: bool | None = None,
    is_deleted: bool = False,
) -> dict[str, object]:
    data: dict[str, object] = {
        "name": name,
        "variations": list(variations)
        if variations is not None
        else [variation_payload(f"{item_id}-var-1", ordinal=1, price=450)],
    }
    if description is not None:
        data["description"] = description
    if modifier_lists:
        data["modifier_list_info"] = list(modifier_lists)
    if category_id is not None:
        data["category_id"] = category_id
    if image_ids is not None:
        data["image_ids"] = list(image_ids)
    if product_type is not None:
        data["product_type"] = product_type
    if available_for_pickup is not None:
        data["available_for_pickup"] = available_for_pickup
    payload: dict[str, object] = {
        "type": "ITEM",
        "id": item_id,
        "is_deleted": is_deleted,
        "item_data": data,
    }
    if image_id is not None:
        payload["image_id"] = image_id
    return payload


def item(item_id: str, **kwargs: object) -> CatalogObject:
    return CatalogObject.model_validate(item_payload(item_id, **kwargs))  # pyright: ignore[reportArgumentType]


def modifier_list(
    list_id: str,
    *,
    name: str = "Milk",
    selection_type: str = "MULTIPLE",
    modifiers: Sequence[dict[str, object]] = (),
    ordinal: int | None = None,
    is_deleted: bool = False,
) -> CatalogObject:
    data: dict[str, object] = {
        "name": name,
        "selection_type": selection_type,
        "modifiers": list(modifiers),
    }
    if ordinal is not None:
        data["ordinal"] = ordinal
    return CatalogObject.model_validate(
        {"type": "MODIFIER_LIST", "id": list_id, "is_deleted": is_deleted, "modifier_list_data": data}
    )


def category(category_id: str, *, name: str = "Coffee", is_deleted: bool = False) -> CatalogObject:
    return CatalogObject.model_validate(
        {
            "type": "CATEGORY",
            "id": category_id,
            "is_deleted": is_deleted,
            "category_data": {"name": name},
        }
    )


def tax(
    tax_id: str,
    *,
    name: str = "Sales tax",
    percentage: str | None = "8.875",
    calculation_phase: str = "TAX_SUBTOTAL_PHASE",
    inclusion_type: str = "ADDITIVE",
    is_deleted: bool = False,
) -> CatalogObject:
    data: dict[str, object] = {
        "name": name,
        "calculation_phase": calculation_phase,
        "inclusion_type": inclusion_type,
    }
    if percentage is not None:
        data["percentage"] = percentage
    return CatalogObject.model_validate(
        {"type": "TAX", "id": tax_id, "is_deleted": is_deleted, "tax_data": data}
    )


def service_charge(
    charge_id: str,
    *,
    name: str = "Service",
    percentage: str | None = None,
    amount: int | None = None,
    calculation_phase: str | None = None,
    taxable: bool | None = None,
    is_deleted: bool = False,
) -> CatalogObject:
    data: dict[str, object] = {"name": name}
    if percentage is not None:
        data["percentage"] = percentage
    if amount is not None:
        data["amount_money"] = money(amount)
    if calculation_phase is not None:
        data["calculation_phase"] = calculation_phase
    if taxable is not None:
        data["taxable"] = taxable
    return CatalogObject.model_validate(
        {
            "type": "SERVICE_CHARGE",
            "id": charge_id,
            "is_deleted": is_deleted,
            "service_charge_data": data,
        }
    )


def image(image_id: str, url: str | None) -> CatalogObject:
    data: dict[str, object] = {"name": image_id}
    if url is not None:
        data["url"] = url
    return CatalogObject.model_validate({"type": "IMAGE", "id": image_id, "image_data": data})
