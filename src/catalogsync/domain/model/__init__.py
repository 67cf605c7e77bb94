"""Public domain model surface."""

from __future__ import annotations

from catalogsync.domain.model.catalog import (
    AnyCatalogEntity,
    Attribute,
    AttributeMeta,
    AttributeValue,
    Category,
    CategoryMeta,
    CustomizationSet,
    CustomizationSetMeta,
    CustomizationSetOption,
    Product,
    ProductCustomizationSetting,
    ProductMeta,
    ServiceCharge,
    ServiceChargeMeta,
    TaxRate,
    TaxRateMeta,
    first_by_display_order,
)
from catalogsync.domain.model.entity import CatalogEntity, new_id, utc_now
from catalogsync.domain.model.enums import EntityKind, LockName, Provider, ServiceChargeType
from catalogsync.domain.model.linked_objects import LinkedObjectRef
from catalogsync.domain.model.semaphore import Semaphore

__all__ = [  # noqa: RUF022
    # base
    "CatalogEntity",
    "AnyCatalogEntity",
    "new_id",
    "utc_now",
    # linked objects
    "LinkedObjectRef",
    # catalog
    "Attribute",
    "AttributeValue",
    "Category",
    "CustomizationSet",
    "CustomizationSetOption",
    "Product",
    "ProductCustomizationSetting",
    "ServiceCharge",
    "TaxRate",
    "first_by_display_order",
    # projections
    "AttributeMeta",
    "CategoryMeta",
    "CustomizationSetMeta",
    "ProductMeta",
    "ServiceChargeMeta",
    "TaxRateMeta",
    # vars
    "Semaphore",
    # enums
    "EntityKind",
    "LockName",
    "Provider",
    "ServiceChargeType",
]
