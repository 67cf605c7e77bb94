from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from catalogsync.domain.errors import ConflictError
from catalogsync.domain.model import Category, EntityKind, Provider
from catalogsync.domain.resolver import LinkedObjectResolver

if TYPE_CHECKING:
    from catalogsync.adapters.sqlalchemy import SqlAlchemyDocumentStore
    from catalogsync.domain.codecs import CodecRegistry

TENANT = "t1"


def _store_category(
    store: SqlAlchemyDocumentStore, registry: CodecRegistry, category: Category
) -> None:
    with store.transaction() as txn:
        txn.set(registry.document_path(category, TENANT), registry.encode(category))
        txn.commit()


def test_find_returns_linked_entity(
    document_store: SqlAlchemyDocumentStore, registry: CodecRegistry
) -> None:
    category = Category(id="c1", name="Coffee")
    category.link(Provider.SQUARE, "sq-cat")
    _store_category(document_store, registry, category)
    resolver = LinkedObjectResolver(registry)

    found = resolver.find("sq-cat", Provider.SQUARE, EntityKind.CATEGORY, TENANT, document_store)

    assert isinstance(found, Category)
    assert found.id == "c1"
    assert found.name == "Coffee"


def test_find_returns_none_when_unlinked(
    document_store: SqlAlchemyDocumentStore, registry: CodecRegistry
) -> None:
    resolver = LinkedObjectResolver(registry)

    assert resolver.find("sq-cat", Provider.SQUARE, EntityKind.CATEGORY, TENANT, document_store) is None


def test_find_is_scoped_to_tenant_and_provider(
    document_store: SqlAlchemyDocumentStore, registry: CodecRegistry
) -> None:
    category = Category(id="c1", name="Coffee")
    category.link(Provider.SYSTEM, "sq-cat")
    _store_category(document_store, registry, category)
    resolver = LinkedObjectResolver(registry)

    assert resolver.find("sq-cat", Provider.SQUARE, EntityKind.CATEGORY, TENANT, document_store) is None
    assert resolver.find("sq-cat", Provider.SYSTEM, EntityKind.CATEGORY, "t2", document_store) is None


def test_duplicate_links_raise_conflict(
    document_store: SqlAlchemyDocumentStore, registry: CodecRegistry
) -> None:
    for category_id in ("c1", "c2"):
        category = Category(id=category_id, name="Coffee")
        category.link(Provider.SQUARE, "sq-cat")
        _store_category(document_store, registry, category)
    resolver = LinkedObjectResolver(registry)

    with pytest.raises(ConflictError) as exc:
        resolver.find("sq-cat", Provider.SQUARE, EntityKind.CATEGORY, TENANT, document_store)

    assert exc.value.document_ids == ("c1", "c2")
    assert exc.value.linked_object_id == "sq-cat"
    assert "categories" in str(exc.value)
