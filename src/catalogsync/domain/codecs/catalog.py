"""Document codecs for the catalog entity kinds.

Documents use camelCase keys. Decoding tolerates missing optional fields so
documents written by older clients still load.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, cast

from catalogsync.domain.codecs.registry import CodecRegistry, EntityCodec, MetaLink
from catalogsync.domain.model import (
    Attribute,
    AttributeMeta,
    AttributeValue,
    Category,
    CustomizationSet,
    CustomizationSetMeta,
    CustomizationSetOption,
    EntityKind,
    LinkedObjectRef,
    Product,
    ProductCustomizationSetting,
    ProductMeta,
    ServiceCharge,
    ServiceChargeType,
    TaxRate,
    utc_now,
)
from catalogsync.domain.paths import (
    CollectionName,
    catalog_collection,
    catalog_doc,
    menu_groups_collection,
)
from catalogsync.domain.ports import QueryOperator

if TYPE_CHECKING:
    from collections.abc import Mapping

    from catalogsync.common.fieldpaths import Document
    from catalogsync.domain.model import AnyCatalogEntity, CatalogEntity
    from catalogsync.domain.ports import DocumentReader


# Field helpers ---------------------------------------------------------------


def _str(data: Mapping[str, object], key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _int(data: Mapping[str, object], key: str, default: int) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return int(value)


def _float(data: Mapping[str, object], key: str, default: float = 0.0) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return float(value)


def _bool(data: Mapping[str, object], key: str, default: bool) -> bool:
    value = data.get(key)
    return value if isinstance(value, bool) else default


def _map(data: Mapping[str, object], key: str) -> dict[str, Mapping[str, object]]:
    value = data.get(key)
    if not isinstance(value, dict):
        return {}
    items = cast("dict[str, object]", value)
    return {k: cast("Mapping[str, object]", v) for k, v in items.items() if isinstance(v, dict)}


def _str_list(data: Mapping[str, object], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in cast("list[object]", value) if isinstance(item, str)]


def _timestamp(data: Mapping[str, object], key: str) -> datetime:
    value = data.get(key)
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return utc_now()


def encode_linked_objects(linked: Mapping[str, LinkedObjectRef]) -> Document:
    return {
        provider: {"linkedObjectId": ref.linked_object_id, "isSyncActive": ref.is_sync_active}
        for provider, ref in linked.items()
    }


def decode_linked_objects(data: Mapping[str, object]) -> dict[str, LinkedObjectRef]:
    linked: dict[str, LinkedObjectRef] = {}
    for provider, raw in _map(data, "linkedObjects").items():
        linked_id = raw.get("linkedObjectId")
        if isinstance(linked_id, str):
            linked[provider] = LinkedObjectRef(linked_id, _bool(raw, "isSyncActive", True))
    return linked


def _encode_base(entity: CatalogEntity) -> Document:
    return {
        "linkedObjects": encode_linked_objects(entity.linked_objects),
        "created": entity.created.isoformat(),
        "updated": entity.updated.isoformat(),
        "isDeleted": entity.is_deleted,
    }


def _base_kwargs(entity_id: str, data: Mapping[str, object]) -> dict[str, object]:
    return {
        "id": entity_id,
        "linked_objects": decode_linked_objects(data),
        "created": _timestamp(data, "created"),
        "updated": _timestamp(data, "updated"),
        "is_deleted": _bool(data, "isDeleted", False),
    }


def _catalog_link(entity: AnyCatalogEntity, collection: CollectionName, tenant_id: str) -> MetaLink:
    return MetaLink(catalog_doc(tenant_id), f"{collection}.{entity.id}")


# Attribute -------------------------------------------------------------------


def encode_attribute(attribute: Attribute) -> Document:
    return {
        "name": attribute.name,
        "values": {
            value_id: {
                "name": value.name,
                "price": value.price,
                "displayOrder": value.display_order,
                "isPreSelected": value.is_pre_selected,
                "isActive": value.is_active,
                "linkedObjects": encode_linked_objects(value.linked_objects),
            }
            for value_id, value in attribute.values.items()
        },
        "displayOrder": attribute.display_order,
        "isActive": attribute.is_active,
        **_encode_base(attribute),
    }


def decode_attribute(entity_id: str, data: Mapping[str, object]) -> Attribute:
    values = {
        value_id: AttributeValue(
            name=_str(raw, "name"),
            price=_int(raw, "price", 0),
            display_order=_int(raw, "displayOrder", -1),
            is_pre_selected=_bool(raw, "isPreSelected", False),
            is_active=_bool(raw, "isActive", True),
            linked_objects=decode_linked_objects(raw),
        )
        for value_id, raw in _map(data, "values").items()
    }
    return Attribute(
        name=_str(data, "name"),
        values=values,
        display_order=_int(data, "displayOrder", 0),
        is_active=_bool(data, "isActive", True),
        **_base_kwargs(entity_id, data),  # pyright: ignore[reportArgumentType]
    )


def attribute_meta_links(
    attribute: Attribute, tenant_id: str, reader: DocumentReader
) -> tuple[MetaLink, ...]:
    links = [_catalog_link(attribute, CollectionName.ATTRIBUTES, tenant_id)]
    owners = reader.query(
        catalog_collection(tenant_id, CollectionName.PRODUCTS),
        f"attributes.{attribute.id}",
        QueryOperator.EXISTS,
    )
    links.extend(MetaLink(owner.path, f"attributes.{attribute.id}") for owner in owners)
    return tuple(links)


# Category --------------------------------------------------------------------


def encode_category(category: Category) -> Document:
    return {
        "name": category.name,
        "products": {pid: dict(meta) for pid, meta in category.products.items()},
        "productDisplayOrder": list(category.product_display_order),
        **_encode_base(category),
    }


def _decode_product_meta(raw: Mapping[str, object]) -> ProductMeta:
    return {"name": _str(raw, "name"), "isActive": _bool(raw, "isActive", True)}


def decode_category(entity_id: str, data: Mapping[str, object]) -> Category:
    return Category(
        name=_str(data, "name"),
        products={pid: _decode_product_meta(raw) for pid, raw in _map(data, "products").items()},
        product_display_order=_str_list(data, "productDisplayOrder"),
        **_base_kwargs(entity_id, data),  # pyright: ignore[reportArgumentType]
    )


def category_meta_links(
    category: Category, tenant_id: str, reader: DocumentReader
) -> tuple[MetaLink, ...]:
    _ = reader
    return (_catalog_link(category, CollectionName.CATEGORIES, tenant_id),)


# Customization set -------------------------------------------------------------


def encode_customization_set(customization_set: CustomizationSet) -> Document:
    return {
        "name": customization_set.name,
        "options": {
            option_id: {
                "name": option.name,
                "price": option.price,
                "displayOrder": option.display_order,
                "linkedObjects": encode_linked_objects(option.linked_objects),
            }
            for option_id, option in customization_set.options.items()
        },
        "minSelection": customization_set.min_selection,
        "maxSelection": customization_set.max_selection,
        "displayOrder": customization_set.display_order,
        "preSelected": list(customization_set.pre_selected),
        **_encode_base(customization_set),
    }


def decode_customization_set(entity_id: str, data: Mapping[str, object]) -> CustomizationSet:
    options = {
        option_id: CustomizationSetOption(
            name=_str(raw, "name"),
            price=_int(raw, "price", 0),
            display_order=_int(raw, "displayOrder", -1),
            linked_objects=decode_linked_objects(raw),
        )
        for option_id, raw in _map(data, "options").items()
    }
    return CustomizationSet(
        name=_str(data, "name"),
        options=options,
        min_selection=_int(data, "minSelection", -1),
        max_selection=_int(data, "maxSelection", -1),
        display_order=_int(data, "displayOrder", -1),
        pre_selected=_str_list(data, "preSelected"),
        **_base_kwargs(entity_id, data),  # pyright: ignore[reportArgumentType]
    )


def customization_set_meta_links(
    customization_set: CustomizationSet, tenant_id: str, reader: DocumentReader
) -> tuple[MetaLink, ...]:
    field_path = f"customizations.{customization_set.id}"
    links = [_catalog_link(customization_set, CollectionName.CUSTOMIZATION_SETS, tenant_id)]
    holders = reader.query(
        catalog_collection(tenant_id, CollectionName.PRODUCTS), field_path, QueryOperator.EXISTS
    )
    links.extend(MetaLink(holder.path, field_path) for holder in holders)
    return tuple(links)


# Product ---------------------------------------------------------------------


def _encode_setting(setting: ProductCustomizationSetting) -> Document:
    return {
        "minSelection": setting.min_selection,
        "maxSelection": setting.max_selection,
        "preSelected": list(setting.pre_selected),
        "displayOrder": setting.display_order,
        "isActive": setting.is_active,
    }


def encode_product(product: Product) -> Document:
    return {
        "name": product.name,
        "caption": product.caption,
        "description": product.description,
        "imageUrls": list(product.image_urls),
        "attributes": {aid: dict(meta) for aid, meta in product.attributes.items()},
        "customizations": {cid: dict(meta) for cid, meta in product.customizations.items()},
        "customizationsSetting": {
            cid: _encode_setting(setting) for cid, setting in product.customizations_setting.items()
        },
        "isActive": product.is_active,
        **_encode_base(product),
    }


def _decode_attribute_meta(raw: Mapping[str, object]) -> AttributeMeta:
    return {
        "name": _str(raw, "name"),
        "isActive": _bool(raw, "isActive", True),
        "displayOrder": _int(raw, "displayOrder", 0),
    }


def _decode_customization_meta(raw: Mapping[str, object]) -> CustomizationSetMeta:
    return {"name": _str(raw, "name")}


def _decode_setting(raw: Mapping[str, object]) -> ProductCustomizationSetting:
    return ProductCustomizationSetting(
        min_selection=_int(raw, "minSelection", -1),
        max_selection=_int(raw, "maxSelection", -1),
        pre_selected=_str_list(raw, "preSelected"),
        display_order=_int(raw, "displayOrder", -1),
        is_active=_bool(raw, "isActive", True),
    )


def decode_product(entity_id: str, data: Mapping[str, object]) -> Product:
    return Product(
        name=_str(data, "name"),
        caption=_str(data, "caption"),
        description=_str(data, "description"),
        image_urls=_str_list(data, "imageUrls"),
        attributes={aid: _decode_attribute_meta(raw) for aid, raw in _map(data, "attributes").items()},
        customizations={
            cid: _decode_customization_meta(raw) for cid, raw in _map(data, "customizations").items()
        },
        customizations_setting={
            cid: _decode_setting(raw) for cid, raw in _map(data, "customizationsSetting").items()
        },
        is_active=_bool(data, "isActive", True),
        **_base_kwargs(entity_id, data),  # pyright: ignore[reportArgumentType]
    )


def product_meta_links(
    product: Product, tenant_id: str, reader: DocumentReader
) -> tuple[MetaLink, ...]:
    field_path = f"products.{product.id}"
    links = [_catalog_link(product, CollectionName.PRODUCTS, tenant_id)]
    for collection in (
        catalog_collection(tenant_id, CollectionName.CATEGORIES),
        menu_groups_collection(tenant_id),
    ):
        members = reader.query(
            collection, "productDisplayOrder", QueryOperator.ARRAY_CONTAINS, product.id
        )
        links.extend(MetaLink(member.path, field_path) for member in members)
    return tuple(links)


# Taxes and charges -------------------------------------------------------------


def encode_tax_rate(tax_rate: TaxRate) -> Document:
    return {
        "name": tax_rate.name,
        "rate": tax_rate.rate,
        "isCalculatedSubTotalPhase": tax_rate.is_calculated_sub_total_phase,
        "isInclusive": tax_rate.is_inclusive,
        **_encode_base(tax_rate),
    }


def decode_tax_rate(entity_id: str, data: Mapping[str, object]) -> TaxRate:
    return TaxRate(
        name=_str(data, "name"),
        rate=_float(data, "rate"),
        is_calculated_sub_total_phase=_bool(data, "isCalculatedSubTotalPhase", False),
        is_inclusive=_bool(data, "isInclusive", False),
        **_base_kwargs(entity_id, data),  # pyright: ignore[reportArgumentType]
    )


def tax_rate_meta_links(
    tax_rate: TaxRate, tenant_id: str, reader: DocumentReader
) -> tuple[MetaLink, ...]:
    _ = reader
    return (_catalog_link(tax_rate, CollectionName.TAX_RATES, tenant_id),)


def encode_service_charge(charge: ServiceCharge) -> Document:
    return {
        "name": charge.name,
        "value": charge.value,
        "type": charge.type.value,
        "isCalculatedSubTotalPhase": charge.is_calculated_sub_total_phase,
        "isTaxable": charge.is_taxable,
        **_encode_base(charge),
    }


def decode_service_charge(entity_id: str, data: Mapping[str, object]) -> ServiceCharge:
    raw_type = _str(data, "type", ServiceChargeType.PERCENTAGE.value)
    try:
        charge_type = ServiceChargeType(raw_type)
    except ValueError:
        charge_type = ServiceChargeType.PERCENTAGE
    return ServiceCharge(
        name=_str(data, "name"),
        value=_float(data, "value"),
        type=charge_type,
        is_calculated_sub_total_phase=_bool(data, "isCalculatedSubTotalPhase", False),
        is_taxable=_bool(data, "isTaxable", False),
        **_base_kwargs(entity_id, data),  # pyright: ignore[reportArgumentType]
    )


def service_charge_meta_links(
    charge: ServiceCharge, tenant_id: str, reader: DocumentReader
) -> tuple[MetaLink, ...]:
    # service charges are not summarised in the catalog root
    _ = (charge, tenant_id, reader)
    return ()


# Registry ---------------------------------------------------------------------


def catalog_codecs() -> tuple[EntityCodec[AnyCatalogEntity], ...]:
    codecs = (
        EntityCodec(
            kind=EntityKind.ATTRIBUTE,
            collection=CollectionName.ATTRIBUTES,
            encode=encode_attribute,
            decode=decode_attribute,
            meta_links=attribute_meta_links,
        ),
        EntityCodec(
            kind=EntityKind.CATEGORY,
            collection=CollectionName.CATEGORIES,
            encode=encode_category,
            decode=decode_category,
            meta_links=category_meta_links,
        ),
        EntityCodec(
            kind=EntityKind.CUSTOMIZATION_SET,
            collection=CollectionName.CUSTOMIZATION_SETS,
            encode=encode_customization_set,
            decode=decode_customization_set,
            meta_links=customization_set_meta_links,
        ),
        EntityCodec(
            kind=EntityKind.PRODUCT,
            collection=CollectionName.PRODUCTS,
            encode=encode_product,
            decode=decode_product,
            meta_links=product_meta_links,
        ),
        EntityCodec(
            kind=EntityKind.TAX_RATE,
            collection=CollectionName.TAX_RATES,
            encode=encode_tax_rate,
            decode=decode_tax_rate,
            meta_links=tax_rate_meta_links,
        ),
        EntityCodec(
            kind=EntityKind.SERVICE_CHARGE,
            collection=CollectionName.SERVICE_CHARGES,
            encode=encode_service_charge,
            decode=decode_service_charge,
            meta_links=service_charge_meta_links,
        ),
    )
    return cast("tuple[EntityCodec[AnyCatalogEntity], ...]", codecs)


def build_catalog_registry() -> CodecRegistry:
    """Return a fresh registry holding every catalog codec."""
    return CodecRegistry(catalog_codecs())
