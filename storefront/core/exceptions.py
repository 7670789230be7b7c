"""
Application Exception Handling

AppException base class for all application errors with FastAPI integration,
plus the store, upload and validation error families.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Product not found", "PRODUCT_NOT_FOUND", 404)
        raise StoreError("Failed to add product")

    Error Codes:
        Catalog Store:
            - STORE_ERROR (502)
            - PRODUCT_NOT_FOUND (404)

        Blob Store:
            - UPLOAD_ERROR (502)
            - INVALID_IMAGE (400)

        Cart:
            - INVALID_QUANTITY (400)
            - CART_ITEM_NOT_FOUND (404)

        General:
            - VALIDATION_ERROR (422)
            - INVALID_SORT (400)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "PRODUCT_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict

    def to_response(self) -> JSONResponse:
        """Render the exception as a JSON error response."""
        return JSONResponse(status_code=self.status_code, content=self.to_dict())


class StoreError(AppException):
    """A Catalog Store call failed (network, permission, not found)."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, "STORE_ERROR", status_code, details)


class UploadError(AppException):
    """A Blob Store upload failed or the file was rejected before upload."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        details: Optional[Dict[str, Any]] = None,
        code: str = "UPLOAD_ERROR"
    ):
        super().__init__(message, code, status_code, details)


class ProductValidationError(AppException):
    """
    Field-level validation failure of a product form.

    The offending fields are carried in ``field_errors`` and rendered
    under ``details.fields`` so a client can show them next to the input.
    """

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            "Please correct the highlighted fields",
            "VALIDATION_ERROR",
            422,
            {"fields": self.field_errors}
        )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return exc.to_response()


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def product_not_found(product_id: Optional[str] = None) -> AppException:
    """Create product not found exception."""
    details = {"product_id": product_id} if product_id else {}
    return AppException("Product not found", "PRODUCT_NOT_FOUND", 404, details)


def invalid_image(reason: str, filename: Optional[str] = None) -> UploadError:
    """Create rejected image file exception."""
    details = {"reason": reason}
    if filename:
        details["filename"] = filename
    return UploadError(
        f"Failed to upload image: {reason}",
        400,
        details,
        code="INVALID_IMAGE"
    )


def invalid_quantity(
    quantity: int,
    reason: str = "Quantity must be at least 1"
) -> AppException:
    """Create invalid cart quantity exception."""
    return AppException(
        reason,
        "INVALID_QUANTITY",
        400,
        {"quantity": quantity}
    )


def cart_item_not_found(product_id: str) -> AppException:
    """Create cart item not found exception."""
    return AppException(
        "Product is not in the cart",
        "CART_ITEM_NOT_FOUND",
        404,
        {"product_id": product_id}
    )


def invalid_sort(param: str, reason: str) -> AppException:
    """Create unknown sort column exception."""
    return AppException(reason, "INVALID_SORT", 400, {"sort": param})
