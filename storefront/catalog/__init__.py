"""
==============================================================================
Catalog Package - Product Management
==============================================================================

Product models, repository access and the in-memory catalog view.

Classes:
--------
- Product: Pydantic model for products
- ProductRepository: Typed CRUD over the Catalog Store
- CatalogView: Observable filtered/sorted product list

==============================================================================
"""

from .models import CatalogStats, Product, ProductStatus
from .repository import ProductRepository
from .catalog import (
    ALL_CATEGORIES,
    CatalogView,
    FilterState,
    SortDirection,
    SortKey,
    apply_filters,
    compute_stats,
    matches,
    price_bounds,
    sort_products,
    toggle_sort,
)

__all__ = [
    "ALL_CATEGORIES",
    "CatalogStats",
    "CatalogView",
    "FilterState",
    "Product",
    "ProductRepository",
    "ProductStatus",
    "SortDirection",
    "SortKey",
    "apply_filters",
    "compute_stats",
    "matches",
    "price_bounds",
    "sort_products",
    "toggle_sort",
]
