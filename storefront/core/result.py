"""
==============================================================================
Result Wrapper Module
==============================================================================

Explicit success/failure outcome for catalog and upload operations.

Callers branch on ``result.ok`` instead of wrapping every store call in
its own try/except. Only AppException subclasses are captured; anything
else is a programming error and propagates.

Usage:
------
    result = await attempt(repository.list_all())
    if not result.ok:
        return result.error.to_response()
    products = result.value

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Awaitable, Generic, Optional, TypeVar

from storefront.core.exceptions import AppException


# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


class Result(Generic[T]):
    """
    Outcome of an operation: either a value or an AppException.

    Attributes:
        ok: True when the operation succeeded
        value: Operation value (None on failure)
        error: The captured AppException (None on success)
    """

    __slots__ = ("ok", "value", "error")

    def __init__(
        self,
        ok: bool,
        value: Optional[T] = None,
        error: Optional[AppException] = None
    ) -> None:
        self.ok = ok
        self.value = value
        self.error = error

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        """Create a successful result."""
        return cls(True, value=value)

    @classmethod
    def failure(cls, error: AppException) -> "Result[T]":
        """Create a failed result."""
        return cls(False, error=error)

    def unwrap(self) -> T:
        """
        Return the value or raise the captured error.

        Raises:
            AppException: If the result is a failure
        """
        if not self.ok:
            raise self.error
        return self.value

    @property
    def message(self) -> Optional[str]:
        """Human-readable error message of a failed result."""
        return self.error.message if self.error else None

    def __repr__(self) -> str:
        if self.ok:
            return f"Result(ok=True, value={self.value!r})"
        return f"Result(ok=False, error={self.error.code}: {self.error.message!r})"


async def attempt(operation: Awaitable[T]) -> Result[T]:
    """
    Await an operation and capture application errors as a Result.

    Args:
        operation: Awaitable store/upload call

    Returns:
        Successful Result with the awaited value, or failed Result
    """
    try:
        return Result.success(await operation)
    except AppException as exc:
        logger.warning(f"Operation failed [{exc.code}]: {exc.message}")
        return Result.failure(exc)
