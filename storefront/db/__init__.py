"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy infrastructure behind the catalog document store.

Architecture:
------------
├── database.py       - DatabaseManager class, session factory
├── models.py         - ProductDocument ORM model
├── catalog_store.py  - CatalogStore port and SqlCatalogStore
└── init_db.py        - CatalogInitializer for setup and demo data

==============================================================================
"""

from .database import DatabaseManager, Base
from .models import ProductDocument
from .catalog_store import CatalogStore, SqlCatalogStore, DocumentNotFound
from .init_db import CatalogInitializer, DEMO_PRODUCTS

__all__ = [
    "DatabaseManager",
    "Base",
    "ProductDocument",
    "CatalogStore",
    "SqlCatalogStore",
    "DocumentNotFound",
    "CatalogInitializer",
    "DEMO_PRODUCTS",
]
