"""
==============================================================================
Catalog Initialization Module
==============================================================================

Table creation and optional demo data for the catalog document store.

Initialization Flow:
-------------------
1. Create tables
2. Seed demo products if enabled and the catalog is empty
3. Verify the connection

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from storefront.db.database import DatabaseManager
from storefront.db.models import ProductDocument


# Module logger
logger = logging.getLogger(__name__)


DEMO_PRODUCTS: List[Dict[str, Any]] = [
    {
        "name": "Ceramic Mug",
        "price": "9.99",
        "imageUrl": "https://res.cloudinary.com/demo/image/upload/mug.jpg",
        "status": "In Stock",
        "excerpt": "Stoneware mug, 350ml, dishwasher safe.",
        "isVisible": True,
        "category": "home",
    },
    {
        "name": "Linen Shirt",
        "price": "19.99",
        "imageUrl": "https://res.cloudinary.com/demo/image/upload/shirt.jpg",
        "status": "Out of Stock",
        "excerpt": "Relaxed fit linen shirt.",
        "isVisible": False,
        "category": "clothing",
    },
    {
        "name": "Wireless Earbuds",
        "price": "59.00",
        "imageUrl": "https://res.cloudinary.com/demo/image/upload/earbuds.jpg",
        "status": "In Stock",
        "excerpt": "Bluetooth 5.3 earbuds with charging case.",
        "isVisible": True,
        "category": "electronics",
    },
    {
        "name": "Trail Running Shoes",
        "price": "89.50",
        "imageUrl": "https://res.cloudinary.com/demo/image/upload/shoes.jpg",
        "status": "In Stock",
        "excerpt": "Lightweight shoes with a grippy outsole.",
        "isVisible": True,
        "category": "sports",
    },
]


class CatalogInitializer:
    """
    Catalog store setup operations.

    Example:
        >>> initializer = CatalogInitializer(DatabaseManager("sqlite://"))
        >>> initializer.initialize(seed=True)
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self._db_manager = db_manager

    def create_tables(self) -> None:
        """Create catalog tables (idempotent)."""
        logger.info("Creating catalog tables...")
        self._db_manager.create_tables()

    def is_empty(self) -> bool:
        """Check if the catalog holds no documents."""
        with self._db_manager.session_scope() as session:
            return session.query(ProductDocument).first() is None

    def seed_demo_products(self) -> int:
        """
        Insert the demo products into an empty catalog.

        Returns:
            Number of inserted documents
        """
        if not self.is_empty():
            logger.info("Catalog already has products, skipping demo data")
            return 0

        with self._db_manager.session_scope() as session:
            for document in DEMO_PRODUCTS:
                session.add(ProductDocument(data=dict(document)))

        logger.info(f"✅ Seeded {len(DEMO_PRODUCTS)} demo products")
        return len(DEMO_PRODUCTS)

    def initialize(self, seed: bool = False) -> None:
        """
        Perform full catalog initialization.

        Args:
            seed: Insert demo products when the catalog is empty
        """
        self.create_tables()

        if seed:
            self.seed_demo_products()

        if self._db_manager.verify_connection():
            logger.info("✅ Catalog store connection verified")
        else:
            logger.warning("⚠️ Catalog store connection check failed")
