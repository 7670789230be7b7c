"""
==============================================================================
Catalog View Module
==============================================================================

In-memory filtering, sorting and statistics over a loaded product list.

Features:
---------
- Conjunctive filters: category, name substring, price range, visibility
- Stable multi-key sorting with a neutral (unsorted) state
- Derived stock/visibility counts
- CatalogView: observable holder of the list and the active filters

Everything is recomputed from scratch on each read; catalogs are small
and every derivation is O(n) (sorting O(n log n)).

Price Range:
-----------
Bounds are inclusive and applied literally. An inverted range
(min > max) therefore matches nothing.

==============================================================================
"""

from __future__ import annotations

import enum
import logging
import math
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, field_validator

from storefront.catalog.models import CatalogStats, Product, ProductStatus
from storefront.core.observable import Observable


# Module logger
logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

# Initial slider range when there is nothing to derive it from
DEFAULT_PRICE_RANGE: Tuple[Decimal, Decimal] = (Decimal(0), Decimal(1000))


# =============================================================================
# FILTERS
# =============================================================================

class FilterState(BaseModel):
    """
    Ephemeral filter selection.

    Attributes:
        query: Case-insensitive substring of the product name
        category: Category slug or "all"
        min_price: Inclusive lower bound (None = unbounded)
        max_price: Inclusive upper bound (None = unbounded)
        visible_only: Only products shown in the storefront
    """

    query: str = Field(default="")
    category: str = Field(default=ALL_CATEGORIES)
    min_price: Optional[Decimal] = Field(default=None)
    max_price: Optional[Decimal] = Field(default=None)
    visible_only: bool = Field(default=False)

    @field_validator("query", mode="before")
    @classmethod
    def default_query(cls, v: Any) -> str:
        return v or ""

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Any) -> str:
        return (v or ALL_CATEGORIES).strip() or ALL_CATEGORIES

    @property
    def is_inverted(self) -> bool:
        """Check if the price range can match nothing."""
        return (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        )

    @property
    def is_default(self) -> bool:
        """Check if no filter narrows the list."""
        return self == FilterState()


def matches(product: Product, filters: FilterState) -> bool:
    """Check a product against every active predicate."""
    if filters.category != ALL_CATEGORIES and product.category != filters.category:
        return False

    if filters.query and filters.query.lower() not in product.name.lower():
        return False

    if filters.min_price is not None and product.price < filters.min_price:
        return False

    if filters.max_price is not None and product.price > filters.max_price:
        return False

    if filters.visible_only and not product.is_visible:
        return False

    return True


def apply_filters(products: Iterable[Product], filters: FilterState) -> List[Product]:
    """
    Filter products, keeping their original order.

    Args:
        products: Loaded products
        filters: Active filter state

    Returns:
        Products satisfying all predicates
    """
    if filters.is_inverted:
        logger.debug(
            f"Inverted price range {filters.min_price} > {filters.max_price}"
        )
    return [p for p in products if matches(p, filters)]


# =============================================================================
# SORTING
# =============================================================================

class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        return self.value


SORTABLE_FIELDS = {
    "name": "name",
    "price": "price",
    "status": "status",
    "category": "category",
    "isVisible": "is_visible",
    "is_visible": "is_visible",
}


class SortKey(BaseModel):
    """One column of a multi-key sort."""

    field: str
    direction: SortDirection = SortDirection.ASC

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        if v not in SORTABLE_FIELDS:
            raise ValueError(
                f"Cannot sort by '{v}'. Sortable: name, price, status, category, isVisible"
            )
        return SORTABLE_FIELDS[v]

    @classmethod
    def parse(cls, param: str) -> "SortKey":
        """
        Parse ``field`` or ``field:asc|desc``.

        Raises:
            ValueError: If the field or direction is unknown
        """
        field, _, direction = param.partition(":")
        return cls(field=field.strip(), direction=(direction.strip() or "asc").lower())


def _sort_value(product: Product, field: str) -> Tuple[bool, Any]:
    value = getattr(product, field)
    if isinstance(value, ProductStatus):
        value = value.value
    if isinstance(value, str):
        value = value.casefold()
    # Missing values sort first ascending
    return (value is not None, value if value is not None else "")


def sort_products(products: Sequence[Product], sort_keys: Sequence[SortKey]) -> List[Product]:
    """
    Stable multi-key sort.

    The first key has the highest priority. No keys keeps the original
    order.
    """
    result = list(products)
    for key in reversed(sort_keys):
        result.sort(
            key=lambda p, f=key.field: _sort_value(p, f),
            reverse=key.direction == SortDirection.DESC,
        )
    return result


def toggle_sort(sort_keys: Sequence[SortKey], field: str) -> List[SortKey]:
    """
    Cycle one column through ascending → descending → unsorted.

    A column not yet sorted is appended with the lowest priority; a
    column already sorted keeps its position until it is removed.
    """
    target = SortKey(field=field).field
    result: List[SortKey] = []
    found = False

    for key in sort_keys:
        if key.field != target:
            result.append(key)
            continue
        found = True
        if key.direction == SortDirection.ASC:
            result.append(SortKey(field=target, direction=SortDirection.DESC))

    if not found:
        result.append(SortKey(field=target, direction=SortDirection.ASC))

    return result


# =============================================================================
# STATISTICS
# =============================================================================

def compute_stats(products: Iterable[Product]) -> CatalogStats:
    """Count products by stock status and visibility."""
    stats = CatalogStats()
    for product in products:
        stats.total += 1
        if product.status == ProductStatus.IN_STOCK:
            stats.in_stock += 1
        elif product.status == ProductStatus.OUT_OF_STOCK:
            stats.out_of_stock += 1
        if product.is_visible:
            stats.visible += 1
    return stats


def price_bounds(products: Sequence[Product]) -> Tuple[Decimal, Decimal]:
    """
    Whole-number range covering every price (floor of min, ceil of max).

    Returns:
        (low, high), or DEFAULT_PRICE_RANGE for an empty list
    """
    if not products:
        return DEFAULT_PRICE_RANGE
    prices = [p.price for p in products]
    return Decimal(math.floor(min(prices))), Decimal(math.ceil(max(prices)))


# =============================================================================
# OBSERVABLE VIEW
# =============================================================================

class CatalogView(Observable):
    """
    Loaded product list plus the active filters and sort.

    Mutations notify subscribers; ``results`` and ``stats`` are derived on
    every access.

    Example:
        >>> view = CatalogView()
        >>> view.subscribe(lambda v: print(len(v.results)))
        >>> view.load(products)
        >>> view.set_filters(FilterState(category="home"))
    """

    def __init__(
        self,
        products: Optional[Iterable[Product]] = None,
        filters: Optional[FilterState] = None
    ) -> None:
        super().__init__()
        self._products: List[Product] = list(products or [])
        self._filters = filters or FilterState()
        self._sort_keys: List[SortKey] = []

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def sort_keys(self) -> List[SortKey]:
        return list(self._sort_keys)

    @property
    def results(self) -> List[Product]:
        """Filtered and sorted products."""
        return sort_products(apply_filters(self._products, self._filters), self._sort_keys)

    @property
    def stats(self) -> CatalogStats:
        """Statistics over the whole loaded list."""
        return compute_stats(self._products)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def load(self, products: Iterable[Product]) -> None:
        self._products = list(products)
        self._notify()

    def set_filters(self, filters: FilterState) -> None:
        self._filters = filters
        self._notify()

    def clear_filters(self) -> None:
        self.set_filters(FilterState())

    def set_sort(self, sort_keys: Iterable[SortKey]) -> None:
        self._sort_keys = list(sort_keys)
        self._notify()

    def toggle_sort(self, field: str) -> None:
        self.set_sort(toggle_sort(self._sort_keys, field))

    def upsert(self, product: Product) -> None:
        """Replace the product with the same id, or append it."""
        for index, existing in enumerate(self._products):
            if existing.id == product.id:
                self._products[index] = product
                break
        else:
            self._products.append(product)
        self._notify()

    def remove(self, product_id: str) -> None:
        before = len(self._products)
        self._products = [p for p in self._products if p.id != product_id]
        if len(self._products) != before:
            self._notify()
