"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides in-memory catalog store, repository, blob store and client
fixtures.

==============================================================================
"""

import os
import tempfile

# Settings are cached on first use; point them at throwaway storage
# before the application module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BLOB_BACKEND", "local")
os.environ.setdefault("MEDIA_DIRECTORY", tempfile.mkdtemp(prefix="storefront-media-"))
os.environ.setdefault("SEED_DEMO_DATA", "false")

import pytest
from decimal import Decimal
from typing import Any, Callable, Dict, Generator, List, Optional

from fastapi.testclient import TestClient

from storefront.main import app
from storefront.catalog.models import Product, ProductStatus
from storefront.catalog.repository import ProductRepository
from storefront.core.dependencies import get_blob_store
from storefront.core.exceptions import UploadError
from storefront.db.catalog_store import SqlCatalogStore
from storefront.db.database import DatabaseManager
from storefront.storage.blob_store import BlobStore, ImageFile


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ============================================================================
# STORE FIXTURES
# ============================================================================

class FakeBlobStore(BlobStore):
    """Blob store recording uploads; set ``error`` to make uploads fail."""

    def __init__(self) -> None:
        self.uploads: List[ImageFile] = []
        self.error: Optional[UploadError] = None

    async def upload(self, image: ImageFile) -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append(image)
        return f"https://cdn.test/products/{image.filename}"


@pytest.fixture(scope="function")
def db_manager() -> Generator[DatabaseManager, None, None]:
    """Fresh in-memory database for each test."""
    manager = DatabaseManager("sqlite://")
    manager.create_tables()
    try:
        yield manager
    finally:
        manager.dispose()


@pytest.fixture
def catalog_store(db_manager: DatabaseManager) -> SqlCatalogStore:
    return SqlCatalogStore(db_manager)


@pytest.fixture
def repository(catalog_store: SqlCatalogStore) -> ProductRepository:
    return ProductRepository(catalog_store)


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


# ============================================================================
# PRODUCT FIXTURES
# ============================================================================

def make_product(**overrides: Any) -> Product:
    """Build a valid product; keyword arguments override fields."""
    data: Dict[str, Any] = {
        "id": "",
        "name": "Ceramic Mug",
        "price": Decimal("9.99"),
        "image_url": "https://cdn.test/products/mug.jpg",
        "status": ProductStatus.IN_STOCK,
        "excerpt": "Stoneware mug",
        "is_visible": True,
        "category": "home",
    }
    data.update(overrides)
    return Product(**data)


@pytest.fixture
def product_factory() -> Callable[..., Product]:
    return make_product


@pytest.fixture
def mug() -> Product:
    return make_product(id="mug")


@pytest.fixture
def shirt() -> Product:
    return make_product(
        id="shirt",
        name="Linen Shirt",
        price=Decimal("19.99"),
        image_url="https://cdn.test/products/shirt.jpg",
        status=ProductStatus.OUT_OF_STOCK,
        excerpt="Relaxed fit",
        is_visible=False,
        category="clothing",
    )


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def client(blob_store: FakeBlobStore) -> Generator[TestClient, None, None]:
    """
    Create test client.

    The lifespan builds a fresh in-memory catalog per client; uploads go
    to the fake blob store.
    """
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def create_product(client: TestClient) -> Callable[..., Dict[str, Any]]:
    """Create products through the admin form endpoint."""

    def _create(**fields: Any) -> Dict[str, Any]:
        form = {
            "name": "Ceramic Mug",
            "price": "9.99",
            "status": "In Stock",
            "excerpt": "Stoneware mug",
            "isVisible": "true",
            "imageUrl": "https://cdn.test/products/mug.jpg",
            "category": "home",
        }
        form.update({key: str(value) for key, value in fields.items()})
        response = client.post("/api/v1/products", data=form)
        assert response.status_code == 201, response.text
        return response.json()["product"]

    return _create


@pytest.fixture
def catalog(create_product) -> Dict[str, Dict[str, Any]]:
    """Mug (visible, home) and Shirt (hidden, clothing, out of stock)."""
    return {
        "mug": create_product(),
        "shirt": create_product(
            name="Linen Shirt",
            price="19.99",
            status="Out of Stock",
            isVisible="false",
            imageUrl="https://cdn.test/products/shirt.jpg",
            category="clothing",
        ),
    }
