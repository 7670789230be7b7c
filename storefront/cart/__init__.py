"""
Cart Package - per-session shopping carts.
"""

from .cart import Cart, CartItem, CartRegistry

__all__ = [
    "Cart",
    "CartItem",
    "CartRegistry",
]
