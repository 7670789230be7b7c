"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Product: Product form contract and catalog responses
- Cart: Cart requests and responses

==============================================================================
"""

from .common import MessageResponse
from .product import (
    CategoriesResponse,
    PriceRangeResponse,
    ProductForm,
    ProductListResponse,
    ProductResponse,
    StatsResponse,
    field_errors,
)
from .cart import CartItemAdd, CartLine, CartQuantityUpdate, CartResponse

__all__ = [
    # Common
    "MessageResponse",
    # Product
    "CategoriesResponse",
    "PriceRangeResponse",
    "ProductForm",
    "ProductListResponse",
    "ProductResponse",
    "StatsResponse",
    "field_errors",
    # Cart
    "CartItemAdd",
    "CartLine",
    "CartQuantityUpdate",
    "CartResponse",
]
