"""
==============================================================================
Product Catalog Endpoints
==============================================================================

Admin endpoints for browsing, filtering and editing the product catalog.

Reads go through the shared ProductRepository; create/edit go through the
ProductFormService (upload → validate → persist). Store and upload
failures come back as a failed Result and are rendered as error responses.

==============================================================================
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from storefront.catalog.catalog import (
    ALL_CATEGORIES,
    CatalogView,
    FilterState,
    SortKey,
    price_bounds,
)
from storefront.catalog.repository import ProductRepository
from storefront.config import Settings
from storefront.core import exceptions
from storefront.core.dependencies import (
    get_filter_state,
    get_form_service,
    get_repository,
    get_settings_dep,
    get_sort_keys,
)
from storefront.core.result import attempt
from storefront.schemas.common import MessageResponse
from storefront.schemas.product import (
    CategoriesResponse,
    PriceRangeResponse,
    ProductListResponse,
    ProductResponse,
    StatsResponse,
)
from storefront.services.product_form import ProductFormService
from storefront.storage.blob_store import ImageFile


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


class ProductController:
    """Controller for product catalog operations."""

    def __init__(self, repository: ProductRepository):
        self._repository = repository

    async def list_products(self, filters: FilterState, sort_keys: List[SortKey]):
        """List products with filters, sort and whole-catalog statistics."""
        result = await attempt(self._repository.list_all())
        if not result.ok:
            return result.error.to_response()

        view = CatalogView(result.value, filters)
        view.set_sort(sort_keys)
        products = view.results

        return ProductListResponse(
            total=len(view.products),
            filtered=len(products),
            products=products,
            stats=view.stats
        )

    async def get_stats(self):
        """Get catalog statistics."""
        result = await attempt(self._repository.list_all())
        if not result.ok:
            return result.error.to_response()
        return StatsResponse(stats=CatalogView(result.value).stats)

    async def get_price_range(self, visible_only: bool):
        """Get the whole-number price range of the catalog."""
        result = await attempt(self._repository.list_all(only_visible=visible_only))
        if not result.ok:
            return result.error.to_response()
        low, high = price_bounds(result.value)
        return PriceRangeResponse(min_price=low, max_price=high)

    async def get_product(self, product_id: str):
        """Get a product by id."""
        result = await attempt(self._repository.get_by_id(product_id))
        if not result.ok:
            return result.error.to_response()
        if result.value is None:
            raise exceptions.product_not_found(product_id)
        return ProductResponse(product=result.value)

    async def toggle_visibility(self, product_id: str):
        """Flip a product's storefront visibility."""
        result = await attempt(self._repository.toggle_visibility(product_id))
        if not result.ok:
            return result.error.to_response()

        product = result.value
        state = "visible" if product.is_visible else "hidden"
        logger.info(f"👁️ Product {product_id} is now {state}")
        return ProductResponse(product=product)

    async def delete_product(self, product_id: str):
        """Delete a product."""
        result = await attempt(self._repository.delete(product_id))
        if not result.ok:
            return result.error.to_response()
        return MessageResponse(message="Product deleted")


async def _to_image_file(upload: Optional[UploadFile]) -> Optional[ImageFile]:
    """Read an uploaded file; an empty file part means no new image."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return ImageFile(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        content=content
    )


def get_product_form_fields(
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    product_status: Optional[str] = Form(None, alias="status"),
    excerpt: Optional[str] = Form(None),
    is_visible: Optional[str] = Form(None, alias="isVisible"),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    category: Optional[str] = Form(None)
) -> Dict[str, Any]:
    """Collect submitted form fields, leaving out the ones not sent."""
    fields = {
        "name": name,
        "price": price,
        "status": product_status,
        "excerpt": excerpt,
        "isVisible": is_visible,
        "imageUrl": image_url,
        "category": category,
    }
    return {key: value for key, value in fields.items() if value is not None}


# =============================================================================
# ROUTES
# =============================================================================

@router.get("", response_model=ProductListResponse)
async def list_products(
    filters: FilterState = Depends(get_filter_state),
    sort_keys: List[SortKey] = Depends(get_sort_keys),
    repository: ProductRepository = Depends(get_repository)
):
    """
    List products.

    Filters combine with AND; ``sort`` may be repeated, the first key
    having the highest priority. Without ``sort`` the stored order is kept.
    """
    controller = ProductController(repository)
    return await controller.list_products(filters, sort_keys)


@router.get("/stats", response_model=StatsResponse)
async def get_catalog_stats(repository: ProductRepository = Depends(get_repository)):
    """Get total, in stock, out of stock and visible counts."""
    controller = ProductController(repository)
    return await controller.get_stats()


@router.get("/categories", response_model=CategoriesResponse)
async def get_categories(settings: Settings = Depends(get_settings_dep)):
    """Get selectable categories."""
    return CategoriesResponse(categories=[ALL_CATEGORIES, *settings.category_list])


@router.get("/price-range", response_model=PriceRangeResponse)
async def get_price_range(
    visible_only: bool = Query(False),
    repository: ProductRepository = Depends(get_repository)
):
    """Get the initial price slider range."""
    controller = ProductController(repository)
    return await controller.get_price_range(visible_only)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    repository: ProductRepository = Depends(get_repository)
):
    """Get a single product."""
    controller = ProductController(repository)
    return await controller.get_product(product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    fields: Dict[str, Any] = Depends(get_product_form_fields),
    image: Optional[UploadFile] = File(None),
    service: ProductFormService = Depends(get_form_service)
):
    """
    Create a product from a multipart form.

    An ``image`` file, if sent, is uploaded first and its URL replaces
    ``imageUrl``.
    """
    result = await service.submit(fields, image=await _to_image_file(image))
    if not result.ok:
        return result.error.to_response()
    return ProductResponse(product=result.value)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    fields: Dict[str, Any] = Depends(get_product_form_fields),
    image: Optional[UploadFile] = File(None),
    service: ProductFormService = Depends(get_form_service)
):
    """
    Edit a product from a multipart form.

    Fields not sent keep their stored values.
    """
    result = await service.submit(
        fields,
        image=await _to_image_file(image),
        product_id=product_id
    )
    if not result.ok:
        return result.error.to_response()
    return ProductResponse(product=result.value)


@router.patch("/{product_id}/visibility", response_model=ProductResponse)
async def toggle_product_visibility(
    product_id: str,
    repository: ProductRepository = Depends(get_repository)
):
    """Show or hide a product in the storefront."""
    controller = ProductController(repository)
    return await controller.toggle_visibility(product_id)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    repository: ProductRepository = Depends(get_repository)
):
    """Delete a product."""
    controller = ProductController(repository)
    return await controller.delete_product(product_id)
