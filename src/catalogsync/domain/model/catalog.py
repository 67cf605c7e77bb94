"""Catalog entities reconciled from provider payloads.

Metadata projections are the small read-optimised summaries written into
ancestor documents. They are persisted verbatim, hence the camelCase keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, TypedDict

from catalogsync.domain.model.entity import CatalogEntity
from catalogsync.domain.model.enums import EntityKind, ServiceChargeType
from catalogsync.domain.model.linked_objects import LinkedObjectRef


class AttributeMeta(TypedDict):
    name: str
    isActive: bool
    displayOrder: int


class CategoryMeta(TypedDict):
    name: str


class CustomizationSetMeta(TypedDict):
    name: str


class ProductMeta(TypedDict):
    name: str
    isActive: bool


class TaxRateMeta(TypedDict):
    name: str
    rate: float


class ServiceChargeMeta(TypedDict):
    name: str
    value: float
    type: str


# Attribute ------------------------------------------------------------------


@dataclass(slots=True)
class AttributeValue:
    name: str
    price: int
    display_order: int
    is_pre_selected: bool = False
    is_active: bool = True
    linked_objects: dict[str, LinkedObjectRef] = field(default_factory=dict)


@dataclass(eq=False, kw_only=True)
class Attribute(CatalogEntity):
    """A product's variation dimension (e.g. size) and its selectable values."""

    KIND: ClassVar[EntityKind] = EntityKind.ATTRIBUTE

    name: str = ""
    values: dict[str, AttributeValue] = field(default_factory=dict)
    display_order: int = 0
    is_active: bool = True

    def metadata(self) -> AttributeMeta:
        return {"name": self.name, "isActive": self.is_active, "displayOrder": self.display_order}


# Category -------------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class Category(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.CATEGORY

    name: str = ""
    products: dict[str, ProductMeta] = field(default_factory=dict)
    product_display_order: list[str] = field(default_factory=list)

    def metadata(self) -> CategoryMeta:
        return {"name": self.name}


# Customization set -----------------------------------------------------------


@dataclass(slots=True)
class CustomizationSetOption:
    name: str
    # smallest currency unit
    price: int
    display_order: int
    linked_objects: dict[str, LinkedObjectRef] = field(default_factory=dict)


@dataclass(eq=False, kw_only=True)
class CustomizationSet(CatalogEntity):
    """A list of add-on options (provider modifier list)."""

    KIND: ClassVar[EntityKind] = EntityKind.CUSTOMIZATION_SET

    name: str = ""
    options: dict[str, CustomizationSetOption] = field(default_factory=dict)
    min_selection: int = -1
    max_selection: int = -1
    display_order: int = -1
    pre_selected: list[str] = field(default_factory=list)

    def metadata(self) -> CustomizationSetMeta:
        return {"name": self.name}

    def option_ids_linked_to(self, provider: str, linked_object_ids: set[str]) -> list[str]:
        """Return option ids whose provider link is one of ``linked_object_ids``."""
        matched: list[str] = []
        for option_id, option in self.options.items():
            ref = option.linked_objects.get(provider)
            if ref is not None and ref.linked_object_id in linked_object_ids:
                matched.append(option_id)
        return matched


def first_by_display_order(options: dict[str, CustomizationSetOption]) -> list[str]:
    """Return ``[id]`` of the lowest display order option, or ``[]``.

    Ties keep insertion order.
    """

    if not options:
        return []
    ordered = sorted(options.items(), key=lambda item: item[1].display_order)
    return [ordered[0][0]]


# Product --------------------------------------------------------------------


@dataclass(slots=True)
class ProductCustomizationSetting:
    """Per-product override of a customization set's selection rules."""

    min_selection: int
    max_selection: int
    pre_selected: list[str]
    display_order: int
    is_active: bool


@dataclass(eq=False, kw_only=True)
class Product(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.PRODUCT

    name: str = ""
    caption: str = ""
    description: str = ""
    image_urls: list[str] = field(default_factory=list)
    attributes: dict[str, AttributeMeta] = field(default_factory=dict)
    customizations: dict[str, CustomizationSetMeta] = field(default_factory=dict)
    customizations_setting: dict[str, ProductCustomizationSetting] = field(default_factory=dict)
    is_active: bool = True

    def metadata(self) -> ProductMeta:
        return {"name": self.name, "isActive": self.is_active}


# Taxes and charges ------------------------------------------------------------


@dataclass(eq=False, kw_only=True)
class TaxRate(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.TAX_RATE

    name: str = ""
    rate: float = 0.0
    is_calculated_sub_total_phase: bool = False
    is_inclusive: bool = False

    def metadata(self) -> TaxRateMeta:
        return {"name": self.name, "rate": self.rate}


@dataclass(eq=False, kw_only=True)
class ServiceCharge(CatalogEntity):
    KIND: ClassVar[EntityKind] = EntityKind.SERVICE_CHARGE

    name: str = ""
    value: float = 0.0
    type: ServiceChargeType = ServiceChargeType.PERCENTAGE
    is_calculated_sub_total_phase: bool = False
    is_taxable: bool = False

    def metadata(self) -> ServiceChargeMeta:
        return {"name": self.name, "value": self.value, "type": self.type.value}


type AnyCatalogEntity = Attribute | Category | CustomizationSet | Product | TaxRate | ServiceCharge
