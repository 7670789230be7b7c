"""
==============================================================================
Validation Utilities Module
==============================================================================

Validation classes for uploaded product images and cart quantities.

Validation Rules for Images:
---------------------------
- Content type: image/jpeg, image/png, image/gif, image/webp
- Size: 1 byte up to the configured maximum (10 MB by default)

==============================================================================
"""

from __future__ import annotations

from typing import Optional, Tuple

from storefront.storage.blob_store import ImageFile


class ImageFileValidator:
    """
    Validator for image files selected for upload.

    Example:
        >>> validator = ImageFileValidator(max_bytes=10 * 1024 * 1024)
        >>> is_valid, error = validator.validate(image)
    """

    ALLOWED_CONTENT_TYPES = frozenset({
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    })

    DEFAULT_MAX_BYTES = 10 * 1024 * 1024

    def __init__(self, max_bytes: Optional[int] = None) -> None:
        self.max_bytes = max_bytes or self.DEFAULT_MAX_BYTES

    def validate(self, image: ImageFile) -> Tuple[bool, Optional[str]]:
        """
        Validate an image file.

        Args:
            image: Selected file

        Returns:
            Tuple of (is_valid, error_message)
        """
        content_type = (image.content_type or "").split(";")[0].strip().lower()

        if content_type not in self.ALLOWED_CONTENT_TYPES:
            return False, f"Unsupported file type '{content_type or 'unknown'}'"

        if image.size == 0:
            return False, "File is empty"

        if image.size > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            return False, f"File is larger than {limit_mb:g}MB"

        return True, None

    def is_valid(self, image: ImageFile) -> bool:
        """Quick validation check."""
        is_valid, _ = self.validate(image)
        return is_valid


class QuantityValidator:
    """
    Validator for cart quantities.
    """

    MIN_QUANTITY = 1
    MAX_QUANTITY = 9999

    def validate(self, qty: int) -> Tuple[bool, Optional[str]]:
        """
        Validate a quantity value.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if qty < self.MIN_QUANTITY:
            return False, f"Quantity must be at least {self.MIN_QUANTITY}"

        if qty > self.MAX_QUANTITY:
            return False, f"Quantity cannot exceed {self.MAX_QUANTITY}"

        return True, None

    def is_valid(self, qty: int) -> bool:
        """Quick validation check."""
        is_valid, _ = self.validate(qty)
        return is_valid
