"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

This package provides:
- Custom exception handling with consistent error responses
- Result wrapper for operations that may fail
- Observable base class for change notification
- FastAPI dependencies wiring the stores into the routers

Modules:
--------
- exceptions: AppException classes and error factory functions
- result: Result wrapper and attempt()
- observable: Subscribe/notify base class
- dependencies: FastAPI dependency injection functions

Usage:
------
    from storefront.core import AppException, Result, attempt

    # Or use exception factory functions via module
    from storefront.core import exceptions
    raise exceptions.product_not_found(product_id)

==============================================================================
"""

from .exceptions import (
    AppException,
    ProductValidationError,
    StoreError,
    UploadError,
    register_exception_handlers,
)
from .result import Result, attempt
from .observable import Observable

__all__ = [
    # Exceptions
    "AppException",
    "ProductValidationError",
    "StoreError",
    "UploadError",
    "register_exception_handlers",
    # Result
    "Result",
    "attempt",
    # Observable
    "Observable",
]
