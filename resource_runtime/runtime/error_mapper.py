"""
Maps internal failures onto the three caller-visible error categories.

Every request-time error leaving the pipeline is a RequestError; anything
else is coerced to `internal` with the action phrase of the failing step.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from resource_runtime.errors import (
    ErrorCategory,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    RequestError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ERROR_BY_CATEGORY = {
    ErrorCategory.invalid_argument: InvalidArgumentError,
    ErrorCategory.not_found: NotFoundError,
    ErrorCategory.internal: InternalError,
}


def error_message(exc: BaseException) -> str:
    """Message of an exception without the category prefix of request errors."""

    if isinstance(exc, RequestError):
        return exc.message
    return str(exc) or type(exc).__name__


def wrap(category: ErrorCategory, action: str, exc: BaseException) -> RequestError:
    return _ERROR_BY_CATEGORY[category](f"{action}: {error_message(exc)}")


def map_exception(exc: BaseException, action: str) -> RequestError:
    if isinstance(exc, RequestError):
        return exc
    return wrap(ErrorCategory.internal, action, exc)


def coerce_unexpected(action: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorate a pipeline entry point so that no unclassified exception escapes.

    asyncio.CancelledError is a BaseException and passes through untouched.
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await fn(*args, **kwargs)
            except RequestError:
                raise
            except Exception as exc:
                logger.exception("Unexpected failure during %s", action)
                raise map_exception(exc, action) from exc

        return wrapper

    return decorator


__all__ = [
    "coerce_unexpected",
    "error_message",
    "map_exception",
    "wrap",
]
