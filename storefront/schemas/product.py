"""
==============================================================================
Product Schemas Module
==============================================================================

Product form validation contract and catalog response schemas.

Form Rules:
----------
- name: required (surrounding whitespace stripped)
- price: at least 0.01
- status: "In Stock" or "Out of Stock"
- excerpt: at most ``excerpt_max_length`` characters (validation
  context, 500 by default)
- isVisible: boolean
- imageUrl: required before the product can be saved
- category: optional, blank means none

Defaults match an empty "Add Product" form, so a missing field reports
the same message as an empty one.

==============================================================================
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional, Type

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from storefront.catalog.models import CatalogStats, Product, ProductStatus


DEFAULT_EXCERPT_MAX_LENGTH = 500
MIN_PRICE = Decimal("0.01")


# =============================================================================
# FORM SCHEMA
# =============================================================================

class ProductForm(BaseModel):
    """Create/edit form of a product."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", validate_default=True)

    name: str = Field(default="")
    price: Decimal = Field(default=Decimal("0"))
    status: ProductStatus = Field(default=ProductStatus.IN_STOCK)
    excerpt: str = Field(default="")
    is_visible: bool = Field(default=True, alias="isVisible")
    image_url: str = Field(default="", alias="imageUrl")
    category: Optional[str] = Field(default=None)

    @field_validator("name", "image_url", "excerpt", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product name is required")
        return v

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        if not v.is_finite() or v < MIN_PRICE:
            raise ValueError("Price must be greater than 0")
        return v

    @field_validator("excerpt")
    @classmethod
    def validate_excerpt(cls, v: str, info: ValidationInfo) -> str:
        limit = (info.context or {}).get("excerpt_max_length", DEFAULT_EXCERPT_MAX_LENGTH)
        if len(v) > limit:
            raise ValueError(f"Description must be less than {limit} characters")
        return v

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product image is required")
        return v

    @field_validator("category")
    @classmethod
    def blank_category(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    def to_product(self, product_id: str = "") -> Product:
        """Build the product record (a draft when id is empty)."""
        return Product(
            id=product_id,
            name=self.name,
            price=self.price,
            image_url=self.image_url,
            status=self.status,
            excerpt=self.excerpt,
            is_visible=self.is_visible,
            category=self.category,
        )


def field_errors(
    exc: ValidationError,
    model: Optional[Type[BaseModel]] = None
) -> Dict[str, str]:
    """
    Flatten a pydantic ValidationError into ``{field: message}``.

    With ``model`` given, fields are keyed by their stored alias even when
    the input was missing or sent under the Python field name.
    Only the first message per field is kept.
    """
    model_fields = model.model_fields if model is not None else {}
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("form",)
        field = str(loc[0])
        info = model_fields.get(field)
        if info is not None and info.alias:
            field = info.alias
        message = error["msg"]
        if error["type"] == "value_error" and "error" in error.get("ctx", {}):
            message = str(error["ctx"]["error"])
        errors.setdefault(field, message)
    return errors


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ProductResponse(BaseModel):
    """Single product response."""
    success: bool = True
    product: Product


class ProductListResponse(BaseModel):
    """Filtered product list with catalog statistics."""
    success: bool = True
    total: int = Field(ge=0)
    filtered: int = Field(ge=0)
    products: List[Product]
    stats: Optional[CatalogStats] = None


class StatsResponse(BaseModel):
    """Catalog statistics response."""
    success: bool = True
    stats: CatalogStats


class PriceRangeResponse(BaseModel):
    """Whole-number price range covering the catalog."""
    success: bool = True
    min_price: Decimal
    max_price: Decimal


class CategoriesResponse(BaseModel):
    """Selectable categories, "all" first."""
    success: bool = True
    categories: List[str]
