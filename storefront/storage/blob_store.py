"""
==============================================================================
Blob Store Module
==============================================================================

Image storage returning stable public URLs.

Backends:
--------
- CloudinaryBlobStore: unsigned multipart upload (file + upload_preset)
  to the Cloudinary image upload endpoint; the URL is the response's
  ``secure_url``.
- LocalBlobStore: writes ``<folder>/<timestamp>_<name>`` under a media
  directory and returns ``<public_url>/<folder>/<file>``.

Both resolve the URL within the call; there is no job polling.
Every failure is raised as UploadError.

==============================================================================
"""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import httpx
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from storefront.core.exceptions import UploadError


# Module logger
logger = logging.getLogger(__name__)


class ImageFile(BaseModel):
    """Binary image payload selected for upload."""

    filename: str = Field(..., min_length=1)
    content_type: str = Field(default="application/octet-stream")
    content: bytes = Field(default=b"")

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lowercase file extension without the dot."""
        if "." not in self.filename:
            return ""
        return self.filename.rsplit(".", 1)[-1].lower()


class BlobStore(ABC):
    """Asynchronous blob upload port."""

    @abstractmethod
    async def upload(self, image: ImageFile) -> str:
        """
        Upload an image and return its public URL.

        Raises:
            UploadError: If the upload fails
        """


# =============================================================================
# CLOUDINARY
# =============================================================================

class CloudinaryBlobStore(BlobStore):
    """
    Unsigned Cloudinary uploads through httpx.

    Attributes:
        _upload_url: Image upload endpoint of the cloud
        _upload_preset: Unsigned upload preset identifier
        _timeout: Request timeout in seconds
        _transport: Optional httpx transport (tests use MockTransport)
    """

    def __init__(
        self,
        upload_url: str,
        upload_preset: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self._upload_url = upload_url
        self._upload_preset = upload_preset
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def upload(self, image: ImageFile) -> str:
        files = {"file": (image.filename, image.content, image.content_type)}
        data = {"upload_preset": self._upload_preset}

        try:
            async with self._client() as client:
                response = await client.post(self._upload_url, data=data, files=files)
        except httpx.HTTPError as e:
            logger.error(f"Error uploading to Cloudinary: {e}")
            raise UploadError(
                "Failed to upload image to Cloudinary",
                details={"reason": str(e) or e.__class__.__name__}
            ) from e

        if response.status_code >= 400:
            message = _cloudinary_error_message(response)
            logger.error(
                f"Cloudinary rejected upload of {image.filename} "
                f"({response.status_code}): {message}"
            )
            raise UploadError(
                f"Failed to upload image: {message}",
                details={"status_code": response.status_code}
            )

        try:
            url = response.json()["secure_url"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Unexpected Cloudinary response: {response.text[:200]}")
            raise UploadError("Image upload returned no URL") from e

        logger.info(f"✅ Uploaded {image.filename} → {url}")
        return url


def _cloudinary_error_message(response: httpx.Response) -> str:
    """Extract the error message of a Cloudinary error body."""
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP {response.status_code}"


# =============================================================================
# LOCAL FILESYSTEM
# =============================================================================

_WHITESPACE = re.compile(r"\s+")


class LocalBlobStore(BlobStore):
    """
    Blob store writing files to a local media directory.

    Example:
        >>> store = LocalBlobStore(Path("storage/media"), "/media")
        >>> await store.upload(ImageFile(filename="my mug.png", content=b"..."))
        '/media/products/1718000000000_my_mug.png'
    """

    def __init__(self, root: Path, public_url: str, folder: str = "products") -> None:
        self._root = Path(root)
        self._public_url = public_url.rstrip("/")
        self._folder = folder.strip("/")

    @staticmethod
    def build_filename(filename: str, timestamp_ms: Optional[int] = None) -> str:
        """Build a unique stored filename: ``<ms timestamp>_<name>``."""
        stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        safe_name = _WHITESPACE.sub("_", Path(filename).name)
        return f"{stamp}_{safe_name}"

    async def upload(self, image: ImageFile) -> str:
        name = self.build_filename(image.filename)
        target = self._root / self._folder / name

        try:
            await run_in_threadpool(self._write, target, image.content)
        except OSError as e:
            logger.error(f"Error writing {target}: {e}")
            raise UploadError(
                "Failed to upload file",
                details={"reason": e.strerror or str(e)}
            ) from e

        url = f"{self._public_url}/{self._folder}/{name}"
        logger.info(f"✅ Stored {image.filename} → {url}")
        return url

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
