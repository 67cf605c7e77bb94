"""Relationship updates that accompany entity writes and deletes.

Every handler buffers its writes in the caller's transaction.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, cast

from catalogsync.common.fieldpaths import DELETE_FIELD, ArrayRemove, ArrayUnion
from catalogsync.domain.model import Attribute, CustomizationSet, EntityKind, Product
from catalogsync.domain.paths import CollectionName, catalog_collection, menu_groups_collection
from catalogsync.domain.ports import QueryOperator

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.domain.codecs import CodecRegistry
    from catalogsync.domain.metadata import MetadataPropagator
    from catalogsync.domain.model import AnyCatalogEntity, Category
    from catalogsync.domain.ports import Transaction

log = getLogger(__name__)

type DeleteHandler = Callable[[AnyCatalogEntity, str, Transaction], None]


class RelationshipCascades:
    """Per-kind delete cascades plus the product/category membership write."""

    def __init__(self, registry: CodecRegistry, propagator: MetadataPropagator) -> None:
        self._registry = registry
        self._propagator = propagator
        self._delete_handlers: dict[EntityKind, DeleteHandler] = {
            EntityKind.PRODUCT: self._delete_product,
            EntityKind.CUSTOMIZATION_SET: self._delete_customization_set,
        }

    def on_delete(self, entity: AnyCatalogEntity, tenant_id: str, txn: Transaction) -> None:
        handler = self._delete_handlers.get(entity.kind)
        if handler is not None:
            handler(entity, tenant_id, txn)

    def add_product_to_category(
        self,
        product: Product,
        category: Category,
        tenant_id: str,
        txn: Transaction,
    ) -> None:
        """Record ``product`` in the category's map and display order (once)."""

        txn.update(
            self._registry.document_path(category, tenant_id),
            {
                f"products.{product.id}": dict(product.metadata()),
                "productDisplayOrder": ArrayUnion(product.id),
            },
        )
        log.debug("Added product %s to category %s", product.id, category.id)

    # Handlers --------------------------------------------------------------

    def _delete_product(self, entity: AnyCatalogEntity, tenant_id: str, txn: Transaction) -> None:
        product = cast("Product", entity)
        for collection in (
            catalog_collection(tenant_id, CollectionName.CATEGORIES),
            menu_groups_collection(tenant_id),
        ):
            members = txn.query(
                collection, "productDisplayOrder", QueryOperator.ARRAY_CONTAINS, product.id
            )
            for member in members:
                txn.update(
                    member.path,
                    {
                        f"products.{product.id}": DELETE_FIELD,
                        "productDisplayOrder": ArrayRemove(product.id),
                    },
                )

        attribute_codec = self._registry.for_kind(EntityKind.ATTRIBUTE)
        attributes_path = attribute_codec.collection_path(tenant_id)
        for attribute_id in product.attributes:
            snapshot = txn.get(f"{attributes_path}/{attribute_id}")
            if snapshot.data is None:
                continue
            attribute = cast("Attribute", attribute_codec.from_document(attribute_id, snapshot.data))
            self._propagator.clear(attribute, tenant_id, txn)
            txn.delete(snapshot.path)
            log.debug("Deleted attribute %s owned by product %s", attribute_id, product.id)

    def _delete_customization_set(
        self, entity: AnyCatalogEntity, tenant_id: str, txn: Transaction
    ) -> None:
        customization_set = cast("CustomizationSet", entity)
        products = catalog_collection(tenant_id, CollectionName.PRODUCTS)
        holders: dict[str, None] = {}
        for field_path in (
            f"customizations.{customization_set.id}",
            f"customizationsSetting.{customization_set.id}",
        ):
            for snapshot in txn.query(products, field_path, QueryOperator.EXISTS):
                holders.setdefault(snapshot.path)
        for path in holders:
            txn.update(
                path,
                {
                    f"customizations.{customization_set.id}": DELETE_FIELD,
                    f"customizationsSetting.{customization_set.id}": DELETE_FIELD,
                },
            )
