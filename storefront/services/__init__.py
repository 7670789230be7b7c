"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes sitting between the API routers and the repositories.

    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Form protocol, validation
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   Repository    │  ← Catalog Store / Blob Store
    └─────────────────┘

==============================================================================
"""

from .product_form import ProductFormService

__all__ = [
    "ProductFormService",
]
