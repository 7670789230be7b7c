"""
==============================================================================
Product Repository Module
==============================================================================

Typed product access on top of the Catalog Store.

Every store failure is logged and re-raised as StoreError with a short
human-readable message. There is no retry and no timeout here.

Concurrency:
-----------
Writes to the same product id are serialized in-process with one
asyncio.Lock per id, so a visibility toggle is a read-modify-write that
cannot lose a flip to a concurrent toggle. A lock is dropped once no
caller holds or waits on it. Writers in other processes still resolve
as last-write-wins at the store.

==============================================================================
"""

from __future__ import annotations

import asyncio
import enum
import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from pydantic import ValidationError

from storefront.catalog.models import Product
from storefront.core.exceptions import StoreError, product_not_found
from storefront.db.catalog_store import CatalogStore, DocumentNotFound


# Module logger
logger = logging.getLogger(__name__)

# Document field aliases accepted by update()
_FIELD_ALIASES = {
    "image_url": "imageUrl",
    "is_visible": "isVisible",
}


class ProductRepository:
    """
    Product CRUD over a CatalogStore.

    Example:
        >>> repo = ProductRepository(store)
        >>> product_id = await repo.create(draft)
        >>> await repo.update(product_id, {"is_visible": False})
        >>> visible = await repo.list_all(only_visible=True)
    """

    def __init__(self, store: CatalogStore) -> None:
        self._store = store
        # product id -> (lock, holders and waiters)
        self._locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def _lock(self, product_id: str) -> AsyncIterator[None]:
        lock, users = self._locks.get(product_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[product_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[product_id]
            if users == 1:
                del self._locks[product_id]
            else:
                self._locks[product_id] = (lock, users - 1)

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def list_all(self, only_visible: bool = False) -> List[Product]:
        """
        Get all products.

        Args:
            only_visible: Filter at the store on isVisible == True

        Raises:
            StoreError: If the store call fails
        """
        where = ("isVisible", True) if only_visible else None

        try:
            documents = await self._store.get_all(where)
        except Exception as e:
            logger.error(f"Error getting products: {e}")
            raise StoreError("Failed to fetch products") from e

        products = []
        for document_id, data in documents:
            product = self._parse(document_id, data)
            if product is not None:
                products.append(product)

        return products

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        """
        Get a single product.

        Returns:
            Product, or None if it does not exist

        Raises:
            StoreError: If the store call fails
        """
        try:
            data = await self._store.get(product_id)
        except Exception as e:
            logger.error(f"Error getting product with ID {product_id}: {e}")
            raise StoreError(f"Failed to fetch product with ID {product_id}") from e

        if data is None:
            return None

        return self._parse(product_id, data)

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create(self, draft: Product) -> str:
        """
        Insert a new product.

        Args:
            draft: Product without id (any id present is ignored)

        Returns:
            Store-assigned product id
        """
        try:
            product_id = await self._store.insert(draft.to_document())
        except Exception as e:
            logger.error(f"Error adding product: {e}")
            raise StoreError("Failed to add product") from e

        logger.info(f"✅ Product created: {product_id} ({draft.name})")
        return product_id

    async def update(self, product_id: str, fields: Dict[str, Any]) -> None:
        """
        Partially update a product.

        Args:
            product_id: Product id
            fields: Document fields (snake_case or stored camelCase keys)

        Raises:
            StoreError: 404 if the product does not exist, 502 otherwise
        """
        document = self._to_document_fields(fields)

        async with self._lock(product_id):
            await self._write(product_id, document)

        logger.info(f"Product updated: {product_id} ({', '.join(sorted(document))})")

    async def delete(self, product_id: str) -> None:
        """
        Delete a product.

        Raises:
            StoreError: 404 if the product does not exist, 502 otherwise
        """
        async with self._lock(product_id):
            try:
                await self._store.delete(product_id)
            except DocumentNotFound as e:
                logger.warning(f"Delete of missing product {product_id}")
                raise StoreError(
                    f"Failed to delete product with ID {product_id}",
                    status_code=404,
                    details={"product_id": product_id, "reason": "not_found"}
                ) from e
            except Exception as e:
                logger.error(f"Error deleting product with ID {product_id}: {e}")
                raise StoreError(f"Failed to delete product with ID {product_id}") from e

        logger.info(f"🗑️ Product deleted: {product_id}")

    async def toggle_visibility(self, product_id: str) -> Product:
        """
        Flip a product's visibility from its stored value.

        Returns:
            The product as stored after the flip

        Raises:
            AppException: PRODUCT_NOT_FOUND if the product does not exist
            StoreError: If a store call fails
        """
        async with self._lock(product_id):
            product = await self.get_by_id(product_id)
            if product is None:
                raise product_not_found(product_id)

            updated = product.model_copy(update={"is_visible": not product.is_visible})
            await self._write(product_id, {"isVisible": updated.is_visible})

        logger.info(
            f"Product visibility {'enabled' if updated.is_visible else 'disabled'}: "
            f"{product_id}"
        )
        return updated

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _write(self, product_id: str, document: Dict[str, Any]) -> None:
        try:
            await self._store.update(product_id, document)
        except DocumentNotFound as e:
            logger.warning(f"Update of missing product {product_id}")
            raise StoreError(
                f"Failed to update product with ID {product_id}",
                status_code=404,
                details={"product_id": product_id, "reason": "not_found"}
            ) from e
        except Exception as e:
            logger.error(f"Error updating product with ID {product_id}: {e}")
            raise StoreError(f"Failed to update product with ID {product_id}") from e

    @staticmethod
    def _to_document_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
        """Map field names to stored keys and values to JSON types."""
        document = {}
        for key, value in fields.items():
            if key == "id":
                continue
            if isinstance(value, enum.Enum):
                value = value.value
            elif isinstance(value, Decimal):
                value = str(value)
            document[_FIELD_ALIASES.get(key, key)] = value
        return document

    @staticmethod
    def _parse(product_id: str, data: Dict[str, Any]) -> Optional[Product]:
        try:
            return Product.from_document(product_id, data)
        except ValidationError as e:
            logger.warning(f"Skipping malformed product document {product_id}: {e}")
            return None
