"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- products: Admin product catalog
- shop: Public storefront listing
- cart: Session carts

==============================================================================
"""

from . import cart, health, products, shop

__all__ = ["cart", "health", "products", "shop"]
