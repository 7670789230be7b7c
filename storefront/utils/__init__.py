"""
==============================================================================
Utilities Package
==============================================================================

Modules:
--------
- validators: Image file and cart quantity validation

==============================================================================
"""

from .validators import ImageFileValidator, QuantityValidator

__all__ = [
    "ImageFileValidator",
    "QuantityValidator",
]
