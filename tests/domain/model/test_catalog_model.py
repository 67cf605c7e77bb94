from __future__ import annotations

from catalogsync.domain.model import (
    CustomizationSet,
    CustomizationSetOption,
    EntityKind,
    LinkedObjectRef,
    Product,
    Provider,
    ServiceCharge,
    ServiceChargeType,
    first_by_display_order,
)


def _option(display_order: int, linked_id: str | None = None) -> CustomizationSetOption:
    linked = {Provider.SQUARE: LinkedObjectRef(linked_id)} if linked_id else {}
    return CustomizationSetOption(
        name=f"option-{display_order}", price=0, display_order=display_order, linked_objects=linked
    )


def test_first_by_display_order_picks_smallest_and_keeps_ties_stable() -> None:
    options = {"b": _option(2), "a": _option(1), "c": _option(1)}

    assert first_by_display_order(options) == ["a"]
    assert first_by_display_order({}) == []


def test_option_ids_linked_to_matches_provider_ids() -> None:
    customization_set = CustomizationSet(
        options={"o1": _option(0, "sq-1"), "o2": _option(1, "sq-2"), "o3": _option(2)}
    )

    assert customization_set.option_ids_linked_to(Provider.SQUARE, {"sq-2", "sq-x"}) == ["o2"]


def test_entity_link_and_sync_activity() -> None:
    product = Product(name="Latte")
    assert product.kind is EntityKind.PRODUCT
    assert not product.is_sync_active(Provider.SQUARE)

    product.link(Provider.SQUARE, "sq-item")
    assert product.is_sync_active(Provider.SQUARE)

    ref = product.linked_object(Provider.SQUARE)
    assert ref is not None
    ref.is_sync_active = False
    assert not product.is_sync_active(Provider.SQUARE)


def test_projections() -> None:
    product = Product(name="Latte", is_active=False)
    charge = ServiceCharge(name="Delivery", value=250.0, type=ServiceChargeType.NUMBER)

    assert product.metadata() == {"name": "Latte", "isActive": False}
    assert charge.metadata() == {"name": "Delivery", "value": 250.0, "type": "number"}
