"""
==============================================================================
Shopping Cart Module
==============================================================================

Per-session shopping cart held in memory.

Rules:
-----
- One line per product id; adding an existing product merges quantities
- Lines keep first-add order
- Quantities never drop below 1: set_quantity(..., 0) is rejected and
  removal is always an explicit remove()

Snapshot Pricing:
----------------
A line stores the Product as it was when first added. The total is
computed from that captured price, so later catalog price edits do not
change carts already holding the product. This is intended point-in-time
pricing, not a stale cache.

==============================================================================
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from storefront.catalog.models import Product
from storefront.core.exceptions import invalid_quantity
from storefront.core.observable import Observable
from storefront.utils.validators import QuantityValidator


# Module logger
logger = logging.getLogger(__name__)


class CartItem(BaseModel):
    """One cart line: a product snapshot and a quantity >= 1."""

    product: Product
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


class Cart(Observable):
    """
    Ordered cart lines keyed by product id.

    Example:
        >>> cart = Cart()
        >>> cart.add(mug, 2)
        >>> cart.add(mug, 3)
        >>> cart.item_count
        5
        >>> cart.remove(mug.id)
        >>> cart.is_empty
        True
    """

    def __init__(self, session_id: str = "") -> None:
        super().__init__()
        self.session_id = session_id
        # dicts keep insertion order, which is the first-add order
        self._items: Dict[str, CartItem] = {}
        self._validator = QuantityValidator()

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    @property
    def item_count(self) -> int:
        """Sum of quantities across all lines."""
        return sum(item.quantity for item in self._items.values())

    @property
    def total(self) -> Decimal:
        """Sum of snapshot price times quantity."""
        return sum((item.line_total for item in self._items.values()), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self._items

    def get(self, product_id: str) -> Optional[CartItem]:
        return self._items.get(product_id)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def add(self, product: Product, quantity: int = 1) -> CartItem:
        """
        Add a product, merging with an existing line.

        The snapshot of an existing line is kept; only its quantity grows.

        Raises:
            AppException: INVALID_QUANTITY if quantity < 1 or the merged
                quantity exceeds the per-line maximum
        """
        is_valid, error = self._validator.validate(quantity)
        if not is_valid:
            logger.debug(f"Rejected add of {product.id}: {error}")
            raise invalid_quantity(quantity, error)

        existing = self._items.get(product.id)
        if existing is not None:
            merged = existing.quantity + quantity
            is_valid, error = self._validator.validate(merged)
            if not is_valid:
                logger.debug(f"Rejected add of {product.id}: {error}")
                raise invalid_quantity(merged, error)
            item = existing.model_copy(update={"quantity": merged})
        else:
            item = CartItem(product=product.model_copy(), quantity=quantity)

        self._items[product.id] = item
        self._notify()
        return item

    def remove(self, product_id: str) -> bool:
        """
        Remove a line.

        Returns:
            True if a line was removed, False if absent
        """
        if self._items.pop(product_id, None) is None:
            return False
        self._notify()
        return True

    def set_quantity(self, product_id: str, quantity: int) -> bool:
        """
        Set a line's quantity.

        Returns:
            False (and no change) when quantity is invalid or the product
            is not in the cart
        """
        item = self._items.get(product_id)
        if item is None or not self._validator.is_valid(quantity):
            return False

        self._items[product_id] = item.model_copy(update={"quantity": quantity})
        self._notify()
        return True

    def clear(self) -> None:
        if self._items:
            self._items.clear()
            self._notify()


class CartRegistry:
    """
    One cart per browsing session.

    Carts are created on first access and live until dropped. Only
    event-loop code touches the registry, so it needs no lock.
    """

    def __init__(self) -> None:
        self._carts: Dict[str, Cart] = {}

    def get(self, session_id: str) -> Cart:
        cart = self._carts.get(session_id)
        if cart is None:
            cart = Cart(session_id)
            self._carts[session_id] = cart
            logger.debug(f"Created cart for session {session_id}")
        return cart

    def drop(self, session_id: str) -> bool:
        return self._carts.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._carts)
