from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from catalogsync.domain.errors import ValidationError
from catalogsync.domain.model import (
    Attribute,
    AttributeValue,
    Category,
    CustomizationSet,
    EntityKind,
    Product,
    ProductCustomizationSetting,
    Provider,
)
from catalogsync.domain.paths import CollectionName, catalog_collection, menu_groups_collection
from catalogsync.domain.reconciliation import SyncDecision
from tests.helpers.documents import catalog_documents, catalog_root

if TYPE_CHECKING:
    from catalogsync.adapters.sqlalchemy import SqlAlchemyDocumentStore
    from catalogsync.domain.model import AnyCatalogEntity
    from catalogsync.domain.ports import Transaction
    from catalogsync.domain.reconciliation import EntityBuilder, ReconciliationEngine, SyncResult

TENANT = "t1"


def _category_builder(name: str) -> EntityBuilder[Category]:
    def build(existing: Category | None, _txn: Transaction) -> Category:
        if existing is None:
            return Category(name=name)
        existing.name = name
        return existing

    return build


def _reconcile_category(
    engine: ReconciliationEngine, name: str, *, is_source_deleted: bool = False
) -> SyncResult[Category]:
    return engine.reconcile(
        EntityKind.CATEGORY,
        "sq-cat",
        is_source_deleted=is_source_deleted,
        tenant_id=TENANT,
        build=_category_builder(name),
    )


def test_create_links_entity_and_projects_metadata(
    reconciliation_engine: ReconciliationEngine, document_store: SqlAlchemyDocumentStore
) -> None:
    result = _reconcile_category(reconciliation_engine, "Coffee")

    assert result.decision is SyncDecision.CREATE
    assert result.is_sync_active
    assert result.entity is not None
    stored = catalog_documents(document_store, TENANT, CollectionName.CATEGORIES)
    assert list(stored) == [result.entity.id]
    assert stored[result.entity.id]["linkedObjects"] == {
        "square": {"linkedObjectId": "sq-cat", "isSyncActive": True}
    }
    assert catalog_root(document_store, TENANT)["categories"] == {
        result.entity.id: {"name": "Coffee"}
    }


def test_update_reuses_entity(
    reconciliation_engine: ReconciliationEngine, document_store: SqlAlchemyDocumentStore
) -> None:
    created = _reconcile_category(reconciliation_engine, "Coffee")
    updated = _reconcile_category(reconciliation_engine, "Tea")

    assert updated.decision is SyncDecision.UPDATE
    assert created.entity is not None
    assert updated.entity is not None
    assert updated.entity.id == created.entity.id
    assert updated.entity.created == created.entity.created
    assert updated.entity.updated >= created.entity.updated
    stored = catalog_documents(document_store, TENANT, CollectionName.CATEGORIES)
    assert [doc["name"] for doc in stored.values()] == ["Tea"]
    assert catalog_root(document_store, TENANT)["categories"] == {
        created.entity.id: {"name": "Tea"}
    }


def test_missing_deleted_source_is_skipped(
    reconciliation_engine: ReconciliationEngine, document_store: SqlAlchemyDocumentStore
) -> None:
    result = _reconcile_category(reconciliation_engine, "Coffee", is_source_deleted=True)

    assert result.decision is SyncDecision.SKIP_MISSING
    assert result.entity is None
    assert not result.is_sync_active
    assert catalog_documents(document_store, TENANT, CollectionName.CATEGORIES) == {}
    assert catalog_root(document_store, TENANT) == {}


@pytest.mark.parametrize("is_source_deleted", [False, True])
def test_inactive_link_is_left_untouched(
    reconciliation_engine: ReconciliationEngine,
    document_store: SqlAlchemyDocumentStore,
    is_source_deleted: bool,
) -> None:
    category = Category(id="c1", name="House blend")
    category.link(Provider.SQUARE, "sq-cat", is_sync_active=False)
    path = reconciliation_engine.registry.document_path(category, TENANT)
    with document_store.transaction() as txn:
        txn.set(path, reconciliation_engine.registry.encode(category))
        txn.commit()
    before = document_store.get(path)

    def build(_existing: Category | None, _txn: Transaction) -> Category:
        pytest.fail("builder must not run for an inactive link")

    result = reconciliation_engine.reconcile(
        EntityKind.CATEGORY,
        "sq-cat",
        is_source_deleted=is_source_deleted,
        tenant_id=TENANT,
        build=build,
    )

    assert result.decision is SyncDecision.SKIP_INACTIVE
    assert not result.is_sync_active
    assert result.entity is not None
    assert result.entity.name == "House blend"
    assert document_store.get(path) == before


def test_builder_error_leaves_no_writes(
    reconciliation_engine: ReconciliationEngine, document_store: SqlAlchemyDocumentStore
) -> None:
    def build(_existing: Category | None, txn: Transaction) -> Category:
        txn.set(catalog_collection(TENANT, CollectionName.CATEGORIES) + "/stray", {"name": "x"})
        raise ValidationError("Category data is missing", object_id="sq-cat")

    with pytest.raises(ValidationError):
        reconciliation_engine.reconcile(
            EntityKind.CATEGORY,
            "sq-cat",
            is_source_deleted=False,
            tenant_id=TENANT,
            build=build,
        )

    assert catalog_documents(document_store, TENANT, CollectionName.CATEGORIES) == {}
    assert catalog_root(document_store, TENANT) == {}


def _save(engine: ReconciliationEngine, *entities: AnyCatalogEntity) -> None:
    def attempt(txn: Transaction) -> None:
        for entity in entities:
            engine.save(entity, TENANT, txn)

    engine.store.run_transaction(attempt)


def test_deleting_product_cascades(
    reconciliation_engine: ReconciliationEngine, document_store: SqlAlchemyDocumentStore
) -> None:
    attribute = Attribute(
        id="a1",
        values={"v1": AttributeValue(name="Regular", price=450, display_order=0)},
    )
    attribute.link(Provider.SQUARE, "sq-item")
    product = Product(id="p1", name="Latte", attributes={"a1": attribute.metadata()})
    product.link(Provider.SQUARE, "sq-item")
    category = Category(id="c1", name="Coffee")
    _save(reconciliation_engine, attribute, product, category)

    def join(txn: Transaction) -> None:
        reconciliation_engine.cascades.add_product_to_category(product, category, TENANT, txn)

    document_store.run_transaction(join)
    menu_group = f"{menu_groups_collection(TENANT)}/mg1"
    with document_store.transaction() as txn:
        txn.set(
            menu_group,
            {
                "products": {"p1": {"name": "Latte", "isActive": True}},
                "productDisplayOrder": ["p1"],
            },
        )
        txn.commit()
    categories = catalog_documents(document_store, TENANT, CollectionName.CATEGORIES)
    assert categories["c1"]["productDisplayOrder"] == ["p1"]

    result = reconciliation_engine.reconcile(
        EntityKind.PRODUCT,
        "sq-item",
        is_source_deleted=True,
        tenant_id=TENANT,
        build=lambda existing, _txn: existing,  # pyright: ignore[reportArgumentType]
    )

    assert result.decision is SyncDecision.DELETE
    assert result.entity is None
    assert catalog_documents(document_store, TENANT, CollectionName.PRODUCTS) == {}
    assert catalog_documents(document_store, TENANT, CollectionName.ATTRIBUTES) == {}
    category_doc = catalog_documents(document_store, TENANT, CollectionName.CATEGORIES)["c1"]
    assert category_doc["products"] == {}
    assert category_doc["productDisplayOrder"] == []
    root = catalog_root(document_store, TENANT)
    assert root["products"] == {}
    assert root["attributes"] == {}
    assert root["categories"] == {"c1": {"name": "Coffee"}}
    assert document_store.get(menu_group).data == {"products": {}, "productDisplayOrder": []}


def test_deleting_customization_set_detaches_products(
    reconciliation_engine: ReconciliationEngine, document_store: SqlAlchemyDocumentStore
) -> None:
    customization_set = CustomizationSet(id="cs1", name="Milk")
    customization_set.link(Provider.SQUARE, "sq-list")
    holder = Product(
        id="p1",
        name="Latte",
        customizations={"cs1": customization_set.metadata()},
        customizations_setting={
            "cs1": ProductCustomizationSetting(
                min_selection=0,
                max_selection=1,
                pre_selected=[],
                display_order=0,
                is_active=True,
            )
        },
    )
    bystander = Product(id="p2", name="Espresso")
    _save(reconciliation_engine, customization_set, holder, bystander)

    result = reconciliation_engine.reconcile(
        EntityKind.CUSTOMIZATION_SET,
        "sq-list",
        is_source_deleted=True,
        tenant_id=TENANT,
        build=lambda existing, _txn: existing,  # pyright: ignore[reportArgumentType]
    )

    assert result.decision is SyncDecision.DELETE
    assert catalog_documents(document_store, TENANT, CollectionName.CUSTOMIZATION_SETS) == {}
    products = catalog_documents(document_store, TENANT, CollectionName.PRODUCTS)
    assert products["p1"]["customizations"] == {}
    assert products["p1"]["customizationsSetting"] == {}
    assert products["p2"]["name"] == "Espresso"
    assert catalog_root(document_store, TENANT)["customizationSets"] == {}
