"""Document path layout for tenant data.

``tenants/{tenantId}/public|private/<aggregate>/<collection>/<id>``
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

TENANTS: Final[str] = "tenants"


class Environment(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


class CollectionName(StrEnum):
    CATALOG = "catalog"
    ATTRIBUTES = "attributes"
    CATEGORIES = "categories"
    CUSTOMIZATION_SETS = "customizationSets"
    PRODUCTS = "products"
    TAX_RATES = "taxRates"
    SERVICE_CHARGES = "serviceCharges"

    SURFACES = "surfaces"
    MENU_GROUPS = "menuGroups"

    VARS = "vars"
    SEMAPHORES = "semaphores"


def segment(value: str) -> str:
    """Validate a single caller-supplied path segment (tenant id, lock name)."""
    if not value or "/" in value:
        raise ValueError(f"Invalid path segment: {value!r}")
    return value


def join(*parts: str) -> str:
    return "/".join(parts)


def parent_collection(document_path: str) -> str:
    collection, _, _ = document_path.rpartition("/")
    return collection


def document_id(document_path: str) -> str:
    return document_path.rpartition("/")[2]


def tenant_doc(tenant_id: str) -> str:
    return join(TENANTS, segment(tenant_id))


def public_collection(tenant_id: str) -> str:
    return join(tenant_doc(tenant_id), Environment.PUBLIC)


def private_collection(tenant_id: str) -> str:
    return join(tenant_doc(tenant_id), Environment.PRIVATE)


# Singleton aggregate roots


def catalog_doc(tenant_id: str) -> str:
    return join(public_collection(tenant_id), CollectionName.CATALOG)


def surfaces_doc(tenant_id: str) -> str:
    return join(public_collection(tenant_id), CollectionName.SURFACES)


def vars_doc(tenant_id: str) -> str:
    return join(private_collection(tenant_id), CollectionName.VARS)


# Child collections


def catalog_collection(tenant_id: str, name: CollectionName) -> str:
    return join(catalog_doc(tenant_id), name)


def menu_groups_collection(tenant_id: str) -> str:
    return join(surfaces_doc(tenant_id), CollectionName.MENU_GROUPS)


def semaphores_collection(tenant_id: str) -> str:
    return join(vars_doc(tenant_id), CollectionName.SEMAPHORES)


def semaphore_doc(tenant_id: str, lock_name: str) -> str:
    return join(semaphores_collection(tenant_id), segment(lock_name))
