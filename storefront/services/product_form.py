"""
==============================================================================
Product Form Service Module
==============================================================================

Create/edit submission of a product.

Submission Protocol:
-------------------
1. If a new image file was selected, check it and upload it to the Blob
   Store; its URL becomes the form's imageUrl. Failures are UploadError.
2. Validate the fully assembled form. Failures are ProductValidationError
   with one message per field; nothing reaches the store.
3. Create or update through the repository. Failures are StoreError.
4. Return the resulting Product (with the store id on create).

Every step reports through a Result. A failed step leaves the stored
product untouched, so the caller can keep the form open and resubmit.
An image uploaded in step 1 is not deleted when a later step fails.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from storefront.catalog.models import Product
from storefront.catalog.repository import ProductRepository
from storefront.core.exceptions import (
    AppException,
    ProductValidationError,
    invalid_image,
    product_not_found,
)
from storefront.core.result import Result
from storefront.schemas.product import (
    DEFAULT_EXCERPT_MAX_LENGTH,
    ProductForm,
    field_errors,
)
from storefront.storage.blob_store import BlobStore, ImageFile
from storefront.utils.validators import ImageFileValidator


# Module logger
logger = logging.getLogger(__name__)


class ProductFormService:
    """
    Runs the upload → validate → persist protocol of the product form.

    Attributes:
        _repository: Product repository
        _blob_store: Image storage
        _image_validator: File type/size checks before upload
        _excerpt_max_length: Longest accepted description

    Example:
        >>> service = ProductFormService(repository, blob_store)
        >>> result = await service.submit({"name": "Mug", "price": "9.99"}, image=file)
        >>> if result.ok:
        ...     print(result.value.id)
        ... else:
        ...     print(result.error.message)
    """

    def __init__(
        self,
        repository: ProductRepository,
        blob_store: BlobStore,
        image_validator: Optional[ImageFileValidator] = None,
        excerpt_max_length: int = DEFAULT_EXCERPT_MAX_LENGTH
    ) -> None:
        self._repository = repository
        self._blob_store = blob_store
        self._image_validator = image_validator or ImageFileValidator()
        self._excerpt_max_length = excerpt_max_length

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self, fields: Mapping[str, Any]) -> ProductForm:
        """
        Validate assembled form fields.

        Raises:
            ProductValidationError: With per-field messages
        """
        try:
            return ProductForm.model_validate(
                dict(fields),
                context={"excerpt_max_length": self._excerpt_max_length},
            )
        except ValidationError as e:
            errors = field_errors(e, ProductForm)
            logger.info(f"Product form rejected: {errors}")
            raise ProductValidationError(errors) from e

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    async def submit(
        self,
        fields: Mapping[str, Any],
        image: Optional[ImageFile] = None,
        product_id: Optional[str] = None
    ) -> Result[Product]:
        """
        Submit the form.

        Args:
            fields: Submitted form fields (camelCase or snake_case keys)
            image: Newly selected image file, if any
            product_id: Existing product for edits, None to create

        Returns:
            Result with the saved Product, or the failing step's error
        """
        try:
            product = await self._submit(_form_keys(fields), image, product_id)
        except AppException as e:
            logger.warning(f"Product form submission failed [{e.code}]: {e.message}")
            return Result.failure(e)
        return Result.success(product)

    async def _submit(
        self,
        fields: Dict[str, Any],
        image: Optional[ImageFile],
        product_id: Optional[str]
    ) -> Product:
        submitted = set(fields)

        if product_id:
            existing = await self._repository.get_by_id(product_id)
            if existing is None:
                raise product_not_found(product_id)
            # Fields not submitted keep their stored values
            fields = {**existing.model_dump(by_alias=True, exclude={"id"}), **fields}

        # 1. Upload
        if image is not None:
            fields["imageUrl"] = await self._upload(image)
            submitted.add("imageUrl")

        # 2. Validate
        form = self.validate(fields)

        # 3. Persist
        if product_id:
            # Only submitted fields are written; the merged snapshot may be
            # stale after the upload.
            document = form.to_product(product_id).to_document()
            await self._repository.update(
                product_id,
                {key: value for key, value in document.items() if key in submitted}
            )
            logger.info(f"✅ Product updated via form: {product_id}")

            stored = await self._repository.get_by_id(product_id)
            if stored is None:
                raise product_not_found(product_id)
            return stored

        new_id = await self._repository.create(form.to_product())
        logger.info(f"✅ Product added via form: {new_id}")
        return form.to_product(new_id)

    async def _upload(self, image: ImageFile) -> str:
        is_valid, error = self._image_validator.validate(image)
        if not is_valid:
            logger.info(f"Image {image.filename} rejected: {error}")
            raise invalid_image(error, image.filename)

        return await self._blob_store.upload(image)


_FORM_ALIASES = {
    "image_url": "imageUrl",
    "is_visible": "isVisible",
}


def _form_keys(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalize submitted keys to the stored camelCase names."""
    return {_FORM_ALIASES.get(key, key): value for key, value in fields.items()}
