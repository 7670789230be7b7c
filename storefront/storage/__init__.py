"""
==============================================================================
Storage Package - Product Images
==============================================================================

Blob Store port and its Cloudinary / local filesystem backends.

==============================================================================
"""

from .blob_store import (
    BlobStore,
    CloudinaryBlobStore,
    ImageFile,
    LocalBlobStore,
)

__all__ = [
    "BlobStore",
    "CloudinaryBlobStore",
    "ImageFile",
    "LocalBlobStore",
]
