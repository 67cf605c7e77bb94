"""Derive catalog entities from Square catalog objects.

Each ``normalize_*`` function validates the payload section it needs and
returns a new or updated entity. Nothing here touches the document store:
lookups the product derivation depends on are resolved by the caller and
passed in.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.domain.errors import MissingDataError, ValidationError
from catalogsync.domain.model import (
    Attribute,
    AttributeValue,
    Category,
    CustomizationSet,
    CustomizationSetOption,
    LinkedObjectRef,
    Product,
    ProductCustomizationSetting,
    Provider,
    ServiceCharge,
    ServiceChargeType,
    TaxRate,
    first_by_display_order,
    new_id,
)

from .schema import (
    INCLUSIVE,
    REGULAR_PRODUCT_TYPE,
    TAX_SUBTOTAL_PHASE,
    CatalogObjectType,
    SelectionType,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from catalogsync.domain.model import AttributeMeta, CustomizationSetMeta

    from .schema import (
        CatalogObject,
        CategoryData,
        ItemData,
        ModifierListData,
        ModifierListInfo,
        ServiceChargeData,
        TaxData,
    )

log = getLogger(__name__)

PROVIDER = Provider.SQUARE


def _linked_ids(linked: Iterable[tuple[str, Mapping[str, LinkedObjectRef]]]) -> dict[str, str]:
    """Map provider object id -> internal id for nested values/options."""
    index: dict[str, str] = {}
    for internal_id, refs in linked:
        ref = refs.get(PROVIDER)
        if ref is not None:
            index[ref.linked_object_id] = internal_id
    return index


def _parse_float(raw: str | None, *, what: str, object_id: str) -> float:
    if raw is None:
        return 0.0
    try:
        return float(raw)
    except ValueError as exc:
        raise ValidationError(f"Unparsable {what} {raw!r}", object_id=object_id) from exc


# Attribute -------------------------------------------------------------------


def renumber_display_orders(values: Mapping[str, AttributeValue]) -> None:
    """Shift value display orders so the smallest becomes zero, in place.

    Square ordinals start at 0 or 1 depending on where the item was edited.
    The adjustment is the absolute value of the smallest ordinal, so a
    negative minimum moves further down rather than up to zero. Every value
    left at zero is marked pre-selected.
    """

    if not values:
        return
    adjustment = abs(min(value.display_order for value in values.values()))
    if adjustment > 0:
        for value in values.values():
            value.display_order -= adjustment
    for value in values.values():
        if value.display_order == 0:
            value.is_pre_selected = True


def require_variations(obj: CatalogObject) -> list[CatalogObject]:
    variations = obj.item_data.variations if obj.item_data is not None else None
    if variations is None:
        raise MissingDataError("Variations are missing for item", object_id=obj.id)
    if any(variation.type != CatalogObjectType.ITEM_VARIATION for variation in variations):
        raise ValidationError(
            "Variations are not all of type ITEM_VARIATION", object_id=obj.id
        )
    return variations


def normalize_attribute(obj: CatalogObject, existing: Attribute | None) -> Attribute:
    variations = require_variations(obj)
    known = _linked_ids(
        (value_id, value.linked_objects)
        for value_id, value in (existing.values.items() if existing else ())
    )
    values: dict[str, AttributeValue] = {}
    for variation in variations:
        data = variation.item_variation_data
        if data is None:
            raise MissingDataError("Variation data not found", object_id=variation.id)
        price = data.price_money.amount if data.price_money else None
        values[known.get(variation.id) or new_id()] = AttributeValue(
            name=data.name if data.name is not None else "",
            price=price if price is not None else 0,
            display_order=data.ordinal if data.ordinal is not None else -1,
            linked_objects={PROVIDER: LinkedObjectRef(variation.id)},
        )
    renumber_display_orders(values)

    if existing is None:
        return Attribute(name="", values=values, display_order=0, is_active=True)
    existing.values = values
    existing.display_order = 0
    return existing


# Customization set -------------------------------------------------------------


def require_modifier_list_data(obj: CatalogObject) -> ModifierListData:
    if obj.modifier_list_data is None:
        raise ValidationError("Modifier list data is missing", object_id=obj.id)
    return obj.modifier_list_data


def normalize_customization_set(
    obj: CatalogObject, existing: CustomizationSet | None
) -> CustomizationSet:
    data = require_modifier_list_data(obj)
    known = _linked_ids(
        (option_id, option.linked_objects)
        for option_id, option in (existing.options.items() if existing else ())
    )
    options: dict[str, CustomizationSetOption] = {}
    for modifier in data.modifiers or ():
        modifier_data = modifier.modifier_data
        if modifier_data is None:
            raise MissingDataError("Modifier data not found", object_id=modifier.id)
        price = modifier_data.price_money.amount if modifier_data.price_money else None
        options[known.get(modifier.id) or new_id()] = CustomizationSetOption(
            name=modifier_data.name if modifier_data.name is not None else "",
            price=price if price is not None else 0,
            display_order=modifier_data.ordinal if modifier_data.ordinal is not None else -1,
            linked_objects={PROVIDER: LinkedObjectRef(modifier.id)},
        )

    min_selection, max_selection = -1, -1
    pre_selected: list[str] = []
    if data.selection_type == SelectionType.SINGLE:
        min_selection, max_selection = 0, 1
        pre_selected = first_by_display_order(options)

    target = existing or CustomizationSet()
    target.name = data.name if data.name is not None else ""
    target.options = options
    target.min_selection = min_selection
    target.max_selection = max_selection
    target.display_order = data.ordinal if data.ordinal is not None else -1
    target.pre_selected = pre_selected
    return target


# Category --------------------------------------------------------------------


def require_category_data(obj: CatalogObject) -> CategoryData:
    if obj.category_data is None:
        raise ValidationError("Category data is missing", object_id=obj.id)
    return obj.category_data


def normalize_category(obj: CatalogObject, existing: Category | None) -> Category:
    data = require_category_data(obj)
    name = data.name if data.name is not None else ""
    if existing is None:
        return Category(name=name)
    existing.name = name
    return existing


# Tax rate --------------------------------------------------------------------


def require_tax_data(obj: CatalogObject) -> TaxData:
    if obj.tax_data is None:
        raise ValidationError("Tax data is missing", object_id=obj.id)
    return obj.tax_data


def normalize_tax_rate(obj: CatalogObject, existing: TaxRate | None) -> TaxRate:
    data = require_tax_data(obj)
    target = existing or TaxRate()
    target.name = data.name if data.name is not None else ""
    target.is_calculated_sub_total_phase = data.calculation_phase == TAX_SUBTOTAL_PHASE
    target.is_inclusive = data.inclusion_type == INCLUSIVE
    target.rate = _parse_float(data.percentage, what="tax percentage", object_id=obj.id)
    return target


# Service charge ----------------------------------------------------------------


def require_service_charge_data(obj: CatalogObject) -> ServiceChargeData:
    if obj.service_charge_data is None:
        raise ValidationError("Service charge data is missing", object_id=obj.id)
    return obj.service_charge_data


def normalize_service_charge(obj: CatalogObject, existing: ServiceCharge | None) -> ServiceCharge:
    data = require_service_charge_data(obj)
    target = existing or ServiceCharge()
    target.name = data.name if data.name is not None else ""
    if data.percentage is not None:
        target.type = ServiceChargeType.PERCENTAGE
        target.value = _parse_float(
            data.percentage, what="service charge percentage", object_id=obj.id
        )
    else:
        amount = data.amount_money.amount if data.amount_money else None
        target.type = ServiceChargeType.NUMBER
        target.value = float(amount) if amount is not None else 0.0
    target.is_calculated_sub_total_phase = data.calculation_phase == TAX_SUBTOTAL_PHASE
    target.is_taxable = data.taxable if data.taxable is not None else False
    return target


# Product ---------------------------------------------------------------------


def require_item_data(obj: CatalogObject) -> ItemData:
    """Return ``item_data`` of a sellable item or raise :class:`ValidationError`."""

    data = obj.item_data
    if data is None:
        raise ValidationError("Item data is missing", object_id=obj.id)
    # absent product_type is treated as a regular item
    if data.product_type is not None and data.product_type != REGULAR_PRODUCT_TYPE:
        raise ValidationError(
            f"Unhandled item product type {data.product_type}", object_id=obj.id
        )
    return data


def image_urls(obj: CatalogObject, related_objects: Iterable[CatalogObject]) -> list[str]:
    """Resolve the item's image ids against related IMAGE objects, keeping urls."""

    wanted: list[str] = []
    if obj.image_id:
        wanted.append(obj.image_id)
    if obj.item_data is not None and obj.item_data.image_ids:
        wanted.extend(i for i in obj.item_data.image_ids if i not in wanted)
    if not wanted:
        return []

    images = {
        related.id: related.image_data
        for related in related_objects
        if related.image_data is not None
    }
    urls: list[str] = []
    for image_id in wanted:
        image = images.get(image_id)
        if image is not None and image.url:
            urls.append(image.url)
    return urls


def find_related(
    related_objects: Iterable[CatalogObject], object_id: str
) -> CatalogObject | None:
    for related in related_objects:
        if related.id == object_id:
            return related
    return None


def customization_setting(
    info: ModifierListInfo,
    customization_set: CustomizationSet,
    related_objects: Iterable[CatalogObject],
) -> ProductCustomizationSetting:
    """Build the per-product override for one attached modifier list."""

    on_by_default = {
        override.modifier_id
        for override in info.modifier_overrides or ()
        if override.on_by_default
    }
    setting = ProductCustomizationSetting(
        min_selection=(
            info.min_selected_modifiers if info.min_selected_modifiers is not None else -1
        ),
        max_selection=(
            info.max_selected_modifiers if info.max_selected_modifiers is not None else -1
        ),
        pre_selected=customization_set.option_ids_linked_to(PROVIDER, on_by_default),
        display_order=customization_set.display_order,
        is_active=info.enabled if info.enabled is not None else True,
    )

    modifier_list = find_related(related_objects, info.modifier_list_id)
    if (
        modifier_list is not None
        and modifier_list.modifier_list_data is not None
        and modifier_list.modifier_list_data.selection_type == SelectionType.SINGLE
    ):
        setting.min_selection = 0
        setting.max_selection = 1
        setting.pre_selected = first_by_display_order(customization_set.options)
    return setting


def normalize_product(
    obj: CatalogObject,
    existing: Product | None,
    *,
    attributes: dict[str, AttributeMeta],
    customizations: dict[str, CustomizationSetMeta],
    customizations_setting: dict[str, ProductCustomizationSetting],
    related_objects: Iterable[CatalogObject] = (),
) -> Product:
    data = require_item_data(obj)
    name = data.name if data.name is not None else ""
    description = data.description if data.description is not None else ""
    urls = image_urls(obj, related_objects)

    if existing is None:
        return Product(
            name=name,
            caption="",
            description=description,
            image_urls=urls,
            attributes=attributes,
            customizations=customizations,
            customizations_setting=customizations_setting,
            is_active=data.available_for_pickup if data.available_for_pickup is not None else True,
        )

    # availability is curated in-house once the product exists
    existing.name = name
    existing.description = description
    existing.image_urls = urls
    existing.attributes = attributes
    existing.customizations = customizations
    existing.customizations_setting = customizations_setting
    log.debug("Merged Square item %s into product %s", obj.id, existing.id)
    return existing
