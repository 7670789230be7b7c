"""
==============================================================================
Cart Endpoints
==============================================================================

Session carts held in process memory.

Endpoints:
---------
- GET    /cart/{session_id}                        Current cart
- POST   /cart/{session_id}/items                  Add a product (merges)
- PUT    /cart/{session_id}/items/{product_id}     Set a line quantity
- DELETE /cart/{session_id}/items/{product_id}     Remove a line
- DELETE /cart/{session_id}                        Empty the cart

Prices are snapshotted when a product is first added; later catalog
edits do not change the cart total.

==============================================================================
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from storefront.cart.cart import Cart, CartRegistry
from storefront.catalog.repository import ProductRepository
from storefront.core import exceptions
from storefront.core.dependencies import get_cart_registry, get_repository
from storefront.core.result import attempt
from storefront.schemas.cart import CartItemAdd, CartQuantityUpdate, CartResponse
from storefront.utils.validators import QuantityValidator


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart", tags=["Cart"])


class CartController:
    """Controller for cart operations of one session."""

    def __init__(self, cart: Cart, repository: Optional[ProductRepository] = None):
        self._cart = cart
        self._repository = repository
        self._quantity_validator = QuantityValidator()

    def get_cart(self) -> CartResponse:
        return CartResponse.from_cart(self._cart)

    async def add_item(self, request: CartItemAdd):
        """
        Add a visible product to the cart.

        Raises:
            AppException: PRODUCT_NOT_FOUND if missing or hidden,
                INVALID_QUANTITY if quantity < 1
        """
        result = await attempt(self._repository.get_by_id(request.product_id))
        if not result.ok:
            return result.error.to_response()

        product = result.value
        if product is None or not product.is_visible:
            raise exceptions.product_not_found(request.product_id)

        self._cart.add(product, request.quantity)
        logger.info(
            f"🛒 {product.name} x{request.quantity} added to cart {self._cart.session_id}"
        )
        return CartResponse.from_cart(self._cart, f"{product.name} added to your cart")

    def set_quantity(self, product_id: str, quantity: int) -> CartResponse:
        """
        Set a line quantity.

        Raises:
            AppException: CART_ITEM_NOT_FOUND or INVALID_QUANTITY
        """
        if product_id not in self._cart:
            raise exceptions.cart_item_not_found(product_id)

        if not self._cart.set_quantity(product_id, quantity):
            _, error = self._quantity_validator.validate(quantity)
            raise exceptions.invalid_quantity(quantity, error)

        return CartResponse.from_cart(self._cart)

    def remove_item(self, product_id: str) -> CartResponse:
        """Remove a line; removing an absent product changes nothing."""
        if not self._cart.remove(product_id):
            logger.debug(f"Product {product_id} not in cart {self._cart.session_id}")
        return CartResponse.from_cart(self._cart)

    def clear(self) -> CartResponse:
        self._cart.clear()
        return CartResponse.from_cart(self._cart, "Cart cleared")


@router.get("/{session_id}", response_model=CartResponse)
async def get_cart(
    session_id: str,
    carts: CartRegistry = Depends(get_cart_registry)
):
    """Get the cart of a session (created empty on first access)."""
    return CartController(carts.get(session_id)).get_cart()


@router.post("/{session_id}/items", response_model=CartResponse)
async def add_cart_item(
    session_id: str,
    request: CartItemAdd,
    carts: CartRegistry = Depends(get_cart_registry),
    repository: ProductRepository = Depends(get_repository)
):
    """Add a product; adding it again increases the quantity."""
    controller = CartController(carts.get(session_id), repository)
    return await controller.add_item(request)


@router.put("/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    session_id: str,
    product_id: str,
    request: CartQuantityUpdate,
    carts: CartRegistry = Depends(get_cart_registry)
):
    """Set a line quantity (at least 1)."""
    controller = CartController(carts.get(session_id))
    return controller.set_quantity(product_id, request.quantity)


@router.delete("/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    session_id: str,
    product_id: str,
    carts: CartRegistry = Depends(get_cart_registry)
):
    """Remove a product from the cart."""
    controller = CartController(carts.get(session_id))
    return controller.remove_item(product_id)


@router.delete("/{session_id}", response_model=CartResponse)
async def clear_cart(
    session_id: str,
    carts: CartRegistry = Depends(get_cart_registry)
):
    """Empty the cart and forget the session."""
    response = CartController(carts.get(session_id)).clear()
    carts.drop(session_id)
    return response
