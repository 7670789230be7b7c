"""
==============================================================================
Product Repository Tests
==============================================================================

Tests for CRUD over the SQL catalog store, visibility toggling and store
error wrapping.

==============================================================================
"""

import asyncio
from decimal import Decimal

import pytest

from storefront.catalog.models import ProductStatus
from storefront.catalog.repository import ProductRepository
from storefront.core.exceptions import AppException, StoreError
from storefront.core.result import attempt
from storefront.db.catalog_store import CatalogStore


pytestmark = pytest.mark.anyio


class BrokenStore(CatalogStore):
    """Catalog store whose every call fails like a dropped connection."""

    async def get_all(self, where=None):
        raise ConnectionError("network unreachable")

    async def get(self, document_id):
        raise ConnectionError("network unreachable")

    async def insert(self, document):
        raise ConnectionError("network unreachable")

    async def update(self, document_id, fields):
        raise ConnectionError("network unreachable")

    async def delete(self, document_id):
        raise ConnectionError("network unreachable")

    async def ping(self):
        return False


class TestProductRepository:
    """Tests against the in-memory SQL store."""

    async def test_create_and_get(self, repository, product_factory):
        product_id = await repository.create(product_factory())

        product = await repository.get_by_id(product_id)

        assert product is not None
        assert product.id == product_id
        assert product.name == "Ceramic Mug"
        assert product.price == Decimal("9.99")
        assert product.status == ProductStatus.IN_STOCK

    async def test_create_ignores_draft_id(self, repository, product_factory):
        product_id = await repository.create(product_factory(id="chosen"))
        assert product_id != "chosen"

    async def test_get_missing_returns_none(self, repository):
        assert await repository.get_by_id("missing") is None

    async def test_list_all_in_insert_order(self, repository, mug, shirt):
        await repository.create(mug)
        await repository.create(shirt)

        products = await repository.list_all()

        assert [p.name for p in products] == ["Ceramic Mug", "Linen Shirt"]

    async def test_list_visible_is_subset(self, repository, mug, shirt):
        await repository.create(mug)
        await repository.create(shirt)

        everything = await repository.list_all()
        visible = await repository.list_all(only_visible=True)

        assert [p.name for p in visible] == ["Ceramic Mug"]
        assert {p.id for p in visible} <= {p.id for p in everything}
        assert all(p.is_visible for p in visible)

    async def test_update_partial(self, repository, mug):
        product_id = await repository.create(mug)

        await repository.update(product_id, {
            "price": Decimal("12.00"),
            "status": ProductStatus.OUT_OF_STOCK,
            "is_visible": False,
        })

        product = await repository.get_by_id(product_id)
        assert product.price == Decimal("12.00")
        assert product.status == ProductStatus.OUT_OF_STOCK
        assert product.is_visible is False
        assert product.name == "Ceramic Mug"

    async def test_update_missing_raises_not_found(self, repository):
        with pytest.raises(StoreError) as exc_info:
            await repository.update("missing", {"name": "x"})

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Failed to update product with ID missing"

    async def test_delete(self, repository, mug):
        product_id = await repository.create(mug)

        await repository.delete(product_id)

        assert await repository.get_by_id(product_id) is None

    async def test_delete_missing_raises_not_found(self, repository):
        with pytest.raises(StoreError) as exc_info:
            await repository.delete("missing")
        assert exc_info.value.status_code == 404

    async def test_malformed_documents_are_skipped(self, repository, catalog_store, mug):
        await repository.create(mug)
        await catalog_store.insert({"name": "No price"})

        products = await repository.list_all()

        assert [p.name for p in products] == ["Ceramic Mug"]


class TestToggleVisibility:
    """Tests for the read-modify-write visibility flip."""

    async def test_toggle_flips_stored_value(self, repository, shirt):
        product_id = await repository.create(shirt)

        product = await repository.toggle_visibility(product_id)

        assert product.is_visible is True
        assert (await repository.get_by_id(product_id)).is_visible is True

    async def test_toggle_missing_product(self, repository):
        with pytest.raises(AppException) as exc_info:
            await repository.toggle_visibility("missing")
        assert exc_info.value.code == "PRODUCT_NOT_FOUND"

    async def test_concurrent_toggles_do_not_lose_flips(self, repository, mug):
        """Toggles on the same product are serialized."""
        product_id = await repository.create(mug)

        await asyncio.gather(*(repository.toggle_visibility(product_id) for _ in range(4)))

        assert (await repository.get_by_id(product_id)).is_visible is True
        assert repository._locks == {}

    async def test_missing_ids_leave_no_locks(self, repository):
        for i in range(50):
            with pytest.raises(AppException):
                await repository.toggle_visibility(f"missing-{i}")
            with pytest.raises(StoreError):
                await repository.update(f"missing-{i}", {"name": "Mug"})

        assert repository._locks == {}


class TestStoreErrors:
    """Tests for wrapping transport failures."""

    @pytest.fixture
    def broken_repository(self):
        return ProductRepository(BrokenStore())

    async def test_list_all_failure(self, broken_repository):
        with pytest.raises(StoreError) as exc_info:
            await broken_repository.list_all()

        assert exc_info.value.message == "Failed to fetch products"
        assert exc_info.value.status_code == 502

    async def test_get_failure(self, broken_repository):
        with pytest.raises(StoreError, match="Failed to fetch product with ID p1"):
            await broken_repository.get_by_id("p1")

    async def test_create_failure(self, broken_repository, mug):
        with pytest.raises(StoreError, match="Failed to add product"):
            await broken_repository.create(mug)

    async def test_update_failure(self, broken_repository):
        with pytest.raises(StoreError, match="Failed to update product with ID p1"):
            await broken_repository.update("p1", {"name": "x"})

    async def test_delete_failure(self, broken_repository):
        with pytest.raises(StoreError, match="Failed to delete product with ID p1"):
            await broken_repository.delete("p1")

    async def test_attempt_returns_failed_result(self, broken_repository):
        result = await attempt(broken_repository.list_all())

        assert not result.ok
        assert result.value is None
        assert result.message == "Failed to fetch products"
        with pytest.raises(StoreError):
            result.unwrap()
