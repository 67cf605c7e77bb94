"""Public interface for the Square catalog adapter."""

from __future__ import annotations

from .reconciler import SquareCatalogReconciler, UnsupportedObjectTypeError
from .schema import CatalogObject, CatalogObjectType, SelectionType
from .translator import (
    customization_setting,
    image_urls,
    normalize_attribute,
    normalize_category,
    normalize_customization_set,
    normalize_product,
    normalize_service_charge,
    normalize_tax_rate,
    renumber_display_orders,
)

__all__ = [
    "CatalogObject",
    "CatalogObjectType",
    "SelectionType",
    "SquareCatalogReconciler",
    "UnsupportedObjectTypeError",
    "customization_setting",
    "image_urls",
    "normalize_attribute",
    "normalize_category",
    "normalize_customization_set",
    "normalize_product",
    "normalize_service_charge",
    "normalize_tax_rate",
    "renumber_display_orders",
]
