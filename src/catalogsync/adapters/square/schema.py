"""Pydantic models describing Square catalog object payloads.

Only the fields the reconciler reads are modelled; everything else is kept as
extra data and reported once per key at debug level.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, field_validator

log = logging.getLogger(__name__)


class CatalogObjectType(StrEnum):
    ITEM = "ITEM"
    ITEM_VARIATION = "ITEM_VARIATION"
    CATEGORY = "CATEGORY"
    MODIFIER_LIST = "MODIFIER_LIST"
    MODIFIER = "MODIFIER"
    TAX = "TAX"
    IMAGE = "IMAGE"
    SERVICE_CHARGE = "SERVICE_CHARGE"


class SelectionType(StrEnum):
    SINGLE = "SINGLE"
    MULTIPLE = "MULTIPLE"


REGULAR_PRODUCT_TYPE = "REGULAR"
TAX_SUBTOTAL_PHASE = "TAX_SUBTOTAL_PHASE"
INCLUSIVE = "INCLUSIVE"


def _number_to_str(value: object) -> object:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


class SquareBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Square %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class Money(SquareBaseModel):
    # smallest currency unit
    amount: int | None = None
    currency: str | None = None


class ItemVariationData(SquareBaseModel):
    item_id: str | None = None
    name: str | None = None
    ordinal: int | None = None
    pricing_type: str | None = None
    price_money: Money | None = None


class ModifierOverride(SquareBaseModel):
    modifier_id: str
    on_by_default: bool | None = None


class ModifierListInfo(SquareBaseModel):
    modifier_list_id: str
    modifier_overrides: list[ModifierOverride] | None = None
    min_selected_modifiers: int | None = None
    max_selected_modifiers: int | None = None
    enabled: bool | None = None


class ItemData(SquareBaseModel):
    name: str | None = None
    description: str | None = None
    abbreviation: str | None = None
    category_id: str | None = None
    tax_ids: list[str] | None = None
    available_for_pickup: bool | None = None
    product_type: str | None = None
    variations: list[CatalogObject] | None = None
    modifier_list_info: list[ModifierListInfo] | None = None
    image_ids: list[str] | None = None


class ModifierData(SquareBaseModel):
    name: str | None = None
    price_money: Money | None = None
    ordinal: int | None = None
    modifier_list_id: str | None = None


class ModifierListData(SquareBaseModel):
    name: str | None = None
    ordinal: int | None = None
    selection_type: str | None = None
    modifiers: list[CatalogObject] | None = None


class CategoryData(SquareBaseModel):
    name: str | None = None


class TaxData(SquareBaseModel):
    name: str | None = None
    calculation_phase: str | None = None
    inclusion_type: str | None = None
    percentage: str | None = None
    enabled: bool | None = None

    _normalize_percentage = field_validator("percentage", mode="before")(_number_to_str)


class ServiceChargeData(SquareBaseModel):
    name: str | None = None
    percentage: str | None = None
    amount_money: Money | None = None
    calculation_phase: str | None = None
    taxable: bool | None = None

    _normalize_percentage = field_validator("percentage", mode="before")(_number_to_str)


class ImageData(SquareBaseModel):
    name: str | None = None
    url: str | None = None
    caption: str | None = None


class CatalogObject(SquareBaseModel):
    """One Square catalog object; exactly one ``*_data`` section is expected."""

    type: str
    id: str
    is_deleted: bool = False
    updated_at: str | None = None
    version: int | None = None
    present_at_all_locations: bool | None = None
    image_id: str | None = None

    item_data: ItemData | None = None
    item_variation_data: ItemVariationData | None = None
    category_data: CategoryData | None = None
    modifier_list_data: ModifierListData | None = None
    modifier_data: ModifierData | None = None
    tax_data: TaxData | None = None
    image_data: ImageData | None = None
    service_charge_data: ServiceChargeData | None = None


ItemData.model_rebuild()
ModifierListData.model_rebuild()
CatalogObject.model_rebuild()
