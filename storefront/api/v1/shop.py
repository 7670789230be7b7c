"""
==============================================================================
Storefront Endpoints
==============================================================================

Public product listing: visible products only, filtered by name and
category.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from storefront.catalog.catalog import ALL_CATEGORIES, FilterState, apply_filters
from storefront.catalog.repository import ProductRepository
from storefront.core.dependencies import get_repository
from storefront.core.result import attempt
from storefront.schemas.product import ProductListResponse


router = APIRouter(prefix="/shop", tags=["Shop"])


@router.get("/products", response_model=ProductListResponse)
async def list_shop_products(
    q: Optional[str] = Query(None, description="Name contains (case-insensitive)"),
    category: Optional[str] = Query(None, description="Category or 'all'"),
    repository: ProductRepository = Depends(get_repository)
):
    """
    List products shown in the storefront.

    Hidden products are filtered out by the Catalog Store query, so
    ``total`` counts visible products only.
    """
    result = await attempt(repository.list_all(only_visible=True))
    if not result.ok:
        return result.error.to_response()

    filters = FilterState(query=q or "", category=category or ALL_CATEGORIES)
    products = apply_filters(result.value, filters)

    return ProductListResponse(
        total=len(result.value),
        filtered=len(products),
        products=products
    )
