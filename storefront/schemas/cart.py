"""
==============================================================================
Cart Schemas Module
==============================================================================

Request and response schemas for cart operations.

==============================================================================
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from storefront.cart.cart import Cart
from storefront.catalog.models import Product


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class CartItemAdd(BaseModel):
    """Add a product to the cart."""
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(default=1)

    @field_validator("product_id")
    @classmethod
    def strip_product_id(cls, v: str) -> str:
        return v.strip()


class CartQuantityUpdate(BaseModel):
    """Set a cart line quantity."""
    quantity: int


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class CartLine(BaseModel):
    """Cart line with its line total."""
    product: Product
    quantity: int
    line_total: Decimal


class CartResponse(BaseModel):
    """Full cart state."""
    success: bool = True
    session_id: str
    items: List[CartLine]
    item_count: int
    total: Decimal
    message: Optional[str] = None

    @classmethod
    def from_cart(cls, cart: Cart, message: Optional[str] = None) -> "CartResponse":
        return cls(
            session_id=cart.session_id,
            items=[
                CartLine(
                    product=item.product,
                    quantity=item.quantity,
                    line_total=item.line_total,
                )
                for item in cart.items
            ],
            item_count=cart.item_count,
            total=cart.total,
            message=message,
        )
