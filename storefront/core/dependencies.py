"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for the stores, the cart registry and catalog queries.

The long-lived components are built once in the application lifespan and
kept on ``app.state``; the functions here hand them to the routers. Tests
replace them through ``app.dependency_overrides``.

Dependency Hierarchy:
--------------------
                    ┌─────────────────┐
                    │   app.state     │
                    └────────┬────────┘
                             │
        ┌────────────────────┼────────────────────┐
        │                    │                    │
┌───────▼───────┐   ┌───────▼───────┐   ┌───────▼───────┐
│get_repository │   │get_blob_store │   │get_cart_regist│
└───────┬───────┘   └───────┬───────┘   └───────────────┘
        │                   │
        └─────────┬─────────┘
          ┌───────▼────────┐
          │get_form_service│
          └────────────────┘

Usage Examples:
--------------
    @router.get("/products")
    async def list_products(
        repository: ProductRepository = Depends(get_repository),
        filters: FilterState = Depends(get_filter_state),
    ):
        ...

==============================================================================
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import Depends, Query, Request
from pydantic import ValidationError

from storefront.cart.cart import CartRegistry
from storefront.catalog.catalog import ALL_CATEGORIES, FilterState, SortKey
from storefront.catalog.repository import ProductRepository
from storefront.config import Settings, get_settings
from storefront.core import exceptions
from storefront.db.catalog_store import CatalogStore
from storefront.schemas.product import field_errors
from storefront.services.product_form import ProductFormService
from storefront.storage.blob_store import BlobStore
from storefront.utils.validators import ImageFileValidator


# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION COMPONENTS
# =============================================================================

def get_settings_dep() -> Settings:
    """FastAPI dependency returning the cached settings."""
    return get_settings()


def get_catalog_store(request: Request) -> CatalogStore:
    """Catalog Store built at startup."""
    return request.app.state.catalog_store


def get_repository(request: Request) -> ProductRepository:
    """
    Shared product repository.

    A single instance serves every request so its per-product locks
    serialize concurrent updates.
    """
    return request.app.state.repository


def get_blob_store(request: Request) -> BlobStore:
    """Blob Store selected by the ``blob_backend`` setting."""
    return request.app.state.blob_store


def get_cart_registry(request: Request) -> CartRegistry:
    """In-memory carts keyed by session id."""
    return request.app.state.carts


def get_form_service(
    repository: ProductRepository = Depends(get_repository),
    blob_store: BlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings_dep)
) -> ProductFormService:
    """Product form service bound to the shared stores."""
    return ProductFormService(
        repository,
        blob_store,
        image_validator=ImageFileValidator(settings.max_upload_bytes),
        excerpt_max_length=settings.excerpt_max_length,
    )


# =============================================================================
# CATALOG QUERY PARAMETERS
# =============================================================================

def get_filter_state(
    q: Optional[str] = Query(None, description="Name contains (case-insensitive)"),
    category: Optional[str] = Query(None, description="Category or 'all'"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    visible_only: bool = Query(False)
) -> FilterState:
    """
    Build the catalog filter from query parameters.

    Returns:
        FilterState with unset parameters left unbounded
    """
    return FilterState(
        query=q or "",
        category=category or ALL_CATEGORIES,
        min_price=min_price,
        max_price=max_price,
        visible_only=visible_only,
    )


def get_sort_keys(
    sort: List[str] = Query(
        default=[],
        description="Repeatable 'field:asc|desc'; first key has highest priority"
    )
) -> List[SortKey]:
    """
    Parse repeatable ``sort`` parameters.

    Raises:
        AppException: INVALID_SORT on an unknown column or direction
    """
    keys: List[SortKey] = []
    for param in sort:
        try:
            keys.append(SortKey.parse(param))
        except ValidationError as e:
            reason = next(iter(field_errors(e).values()), "Invalid sort")
            logger.debug(f"Rejected sort '{param}': {reason}")
            raise exceptions.invalid_sort(param, reason) from e
    return keys
