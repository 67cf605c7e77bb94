"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    SQUARE = "square"
    SYSTEM = "system"


class EntityKind(StrEnum):
    """Discriminator used by the codec registry and cascade handlers."""

    ATTRIBUTE = "attribute"
    CATEGORY = "category"
    CUSTOMIZATION_SET = "customization_set"
    PRODUCT = "product"
    TAX_RATE = "tax_rate"
    SERVICE_CHARGE = "service_charge"


class ServiceChargeType(StrEnum):
    PERCENTAGE = "percentage"
    NUMBER = "number"


class LockName(StrEnum):
    CATALOG_UPDATE = "catalogUpdate"
    LOCATION_UPDATE = "locationUpdate"
