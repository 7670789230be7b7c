"""
==============================================================================
Product Models Module
==============================================================================

Pydantic models for catalog products.

Stored documents use camelCase keys (``imageUrl``, ``isVisible``); the
models accept both those aliases and the snake_case field names.

==============================================================================
"""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductStatus(str, enum.Enum):
    """
    Product stock status.

    The enum inherits from str to enable JSON serialization.
    """

    IN_STOCK = "In Stock"
    OUT_OF_STOCK = "Out of Stock"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value


class Product(BaseModel):
    """
    Product record as held by the Catalog Store.

    ``id`` is empty only for a draft that has not been persisted yet.
    Records read back from the store are not re-validated against the
    form rules (a legacy document may carry a zero price); see
    ``storefront.schemas.product.ProductForm`` for the write contract.

    Attributes:
        id: Opaque store-assigned identifier
        name: Product display name
        price: Unit price
        image_url: Public URL of the product image
        status: Stock status
        excerpt: Short description
        is_visible: Shown in the storefront
        category: Optional category slug
    """

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )

    id: str = Field(default="", description="Store-assigned identifier")
    name: str = Field(..., description="Product name")
    price: Decimal = Field(..., description="Unit price")
    image_url: str = Field(default="", alias="imageUrl", description="Image URL")
    status: ProductStatus = Field(default=ProductStatus.IN_STOCK)
    excerpt: str = Field(default="", description="Short description")
    is_visible: bool = Field(default=True, alias="isVisible")
    category: Optional[str] = Field(default=None, description="Category slug")

    @property
    def is_draft(self) -> bool:
        """Check if the product has not been persisted yet."""
        return not self.id

    @property
    def in_stock(self) -> bool:
        """Check if the product is in stock."""
        return self.status == ProductStatus.IN_STOCK

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a store document (without the id)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    @classmethod
    def from_document(cls, product_id: str, data: Dict[str, Any]) -> "Product":
        """Build a product from a stored document and its id."""
        return cls.model_validate({**data, "id": product_id})


class CatalogStats(BaseModel):
    """Derived counts over a product list."""

    total: int = 0
    in_stock: int = 0
    out_of_stock: int = 0
    visible: int = 0
