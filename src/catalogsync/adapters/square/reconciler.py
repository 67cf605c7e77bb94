"""Reconcile Square catalog objects into the tenant's catalog documents."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, cast

from catalogsync.domain.errors import MissingDataError
from catalogsync.domain.model import (
    Attribute,
    Category,
    CustomizationSet,
    EntityKind,
    Product,
    ServiceCharge,
    TaxRate,
)

from .schema import CatalogObjectType
from .translator import (
    customization_setting,
    normalize_attribute,
    normalize_category,
    normalize_customization_set,
    normalize_product,
    normalize_service_charge,
    normalize_tax_rate,
    require_category_data,
    require_item_data,
    require_modifier_list_data,
    require_service_charge_data,
    require_tax_data,
    require_variations,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from catalogsync.domain.model import (
        AnyCatalogEntity,
        AttributeMeta,
        CustomizationSetMeta,
        ProductCustomizationSetting,
    )
    from catalogsync.domain.ports import Transaction
    from catalogsync.domain.reconciliation import ReconciliationEngine, SyncResult

    from .schema import CatalogObject

log = getLogger(__name__)


class UnsupportedObjectTypeError(ValueError):
    """The catalog object type is not reconciled into an entity."""


class SquareCatalogReconciler:
    """Entry points for reconciling individual Square catalog objects.

    Every ``upsert_*`` call runs in its own store transaction; on success the
    entity document, its metadata projections and any relationship updates
    are committed together.
    """

    def __init__(self, engine: ReconciliationEngine) -> None:
        self._engine = engine
        self._dispatch: dict[str, Callable[..., SyncResult[AnyCatalogEntity]]] = {
            CatalogObjectType.CATEGORY: self.upsert_category,
            CatalogObjectType.MODIFIER_LIST: self.upsert_customization_set,
            CatalogObjectType.TAX: self.upsert_tax_rate,
            CatalogObjectType.SERVICE_CHARGE: self.upsert_service_charge,
            CatalogObjectType.ITEM: self.upsert_product,
        }

    @property
    def engine(self) -> ReconciliationEngine:
        return self._engine

    def upsert(
        self,
        obj: CatalogObject,
        tenant_id: str,
        related_objects: Sequence[CatalogObject] = (),
    ) -> SyncResult[AnyCatalogEntity]:
        """Reconcile ``obj`` according to its Square type."""

        handler = self._dispatch.get(obj.type)
        if handler is None:
            raise UnsupportedObjectTypeError(f"Unsupported catalog object type {obj.type}")
        if obj.type == CatalogObjectType.ITEM:
            return handler(obj, tenant_id, related_objects)
        return handler(obj, tenant_id)

    # Simple kinds ------------------------------------------------------------

    def upsert_attribute(self, obj: CatalogObject, tenant_id: str) -> SyncResult[Attribute]:
        require_variations(obj)
        return self._engine.reconcile(
            EntityKind.ATTRIBUTE,
            obj.id,
            is_source_deleted=obj.is_deleted,
            tenant_id=tenant_id,
            build=lambda existing, _txn: normalize_attribute(obj, existing),
        )

    def upsert_category(self, obj: CatalogObject, tenant_id: str) -> SyncResult[Category]:
        require_category_data(obj)
        return self._engine.reconcile(
            EntityKind.CATEGORY,
            obj.id,
            is_source_deleted=obj.is_deleted,
            tenant_id=tenant_id,
            build=lambda existing, _txn: normalize_category(obj, existing),
        )

    def upsert_customization_set(
        self, obj: CatalogObject, tenant_id: str
    ) -> SyncResult[CustomizationSet]:
        require_modifier_list_data(obj)
        return self._engine.reconcile(
            EntityKind.CUSTOMIZATION_SET,
            obj.id,
            is_source_deleted=obj.is_deleted,
            tenant_id=tenant_id,
            build=lambda existing, _txn: normalize_customization_set(obj, existing),
        )

    def upsert_tax_rate(self, obj: CatalogObject, tenant_id: str) -> SyncResult[TaxRate]:
        require_tax_data(obj)
        return self._engine.reconcile(
            EntityKind.TAX_RATE,
            obj.id,
            is_source_deleted=obj.is_deleted,
            tenant_id=tenant_id,
            build=lambda existing, _txn: normalize_tax_rate(obj, existing),
        )

    def upsert_service_charge(
        self, obj: CatalogObject, tenant_id: str
    ) -> SyncResult[ServiceCharge]:
        require_service_charge_data(obj)
        return self._engine.reconcile(
            EntityKind.SERVICE_CHARGE,
            obj.id,
            is_source_deleted=obj.is_deleted,
            tenant_id=tenant_id,
            build=lambda existing, _txn: normalize_service_charge(obj, existing),
        )

    # Product -----------------------------------------------------------------

    def upsert_product(
        self,
        obj: CatalogObject,
        tenant_id: str,
        related_objects: Sequence[CatalogObject] = (),
    ) -> SyncResult[Product]:
        """Reconcile an ITEM into a product plus its owned attribute.

        Attached modifier lists must already be reconciled; a missing one
        aborts the whole item. When the item names a linked category the
        product joins that category in the same transaction.
        """

        item_data = require_item_data(obj)

        def build(existing: Product | None, txn: Transaction) -> Product:
            attributes = self._reconcile_owned_attribute(obj, tenant_id, txn)
            customizations, settings = self._resolve_customizations(
                obj, tenant_id, txn, related_objects
            )
            return normalize_product(
                obj,
                existing,
                attributes=attributes,
                customizations=customizations,
                customizations_setting=settings,
                related_objects=related_objects,
            )

        def attempt(txn: Transaction) -> SyncResult[Product]:
            result = self._engine.reconcile(
                EntityKind.PRODUCT,
                obj.id,
                is_source_deleted=obj.is_deleted,
                tenant_id=tenant_id,
                build=build,
                txn=txn,
            )
            if result.is_sync_active and result.entity is not None and item_data.category_id:
                self._join_category(result.entity, item_data.category_id, tenant_id, txn)
            return result

        return self._engine.store.run_transaction(attempt)

    def _reconcile_owned_attribute(
        self, obj: CatalogObject, tenant_id: str, txn: Transaction
    ) -> dict[str, AttributeMeta]:
        result = self._engine.reconcile(
            EntityKind.ATTRIBUTE,
            obj.id,
            is_source_deleted=obj.is_deleted,
            tenant_id=tenant_id,
            build=lambda existing, _txn: normalize_attribute(obj, existing),
            txn=txn,
        )
        if result.entity is None:
            return {}
        attribute = cast("Attribute", result.entity)
        return {attribute.id: attribute.metadata()}

    def _resolve_customizations(
        self,
        obj: CatalogObject,
        tenant_id: str,
        txn: Transaction,
        related_objects: Sequence[CatalogObject],
    ) -> tuple[dict[str, CustomizationSetMeta], dict[str, ProductCustomizationSetting]]:
        customizations: dict[str, CustomizationSetMeta] = {}
        settings: dict[str, ProductCustomizationSetting] = {}
        item_data = require_item_data(obj)
        for info in item_data.modifier_list_info or ():
            found = self._engine.find(
                EntityKind.CUSTOMIZATION_SET, info.modifier_list_id, tenant_id, txn
            )
            if found is None:
                raise MissingDataError(
                    f"Customization set for modifier list {info.modifier_list_id} not found",
                    object_id=obj.id,
                )
            customization_set = cast("CustomizationSet", found)
            customizations[customization_set.id] = customization_set.metadata()
            settings[customization_set.id] = customization_setting(
                info, customization_set, related_objects
            )
        return customizations, settings

    def _join_category(
        self, product: Product, square_category_id: str, tenant_id: str, txn: Transaction
    ) -> None:
        found = self._engine.find(EntityKind.CATEGORY, square_category_id, tenant_id, txn)
        if found is None:
            log.debug(
                "Category %s for product %s is not linked yet", square_category_id, product.id
            )
            return
        self._engine.cascades.add_product_to_category(
            product, cast("Category", found), tenant_id, txn
        )
