from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

from resource_runtime.errors import ErrorCategory
from resource_runtime.runtime.error_mapper import wrap


async def call_handler(fn: Callable[..., Any], *args: Any) -> Any:
    """
    Call a handler and return its result.

    Coroutine functions run on the event loop; plain callables run in a worker
    thread so a blocking handler never stalls concurrent requests.
    """

    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    result = await asyncio.to_thread(fn, *args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def invoke(action: str, fn: Callable[..., Any], *args: Any) -> Any:
    """
    Run a handler or hook; any failure becomes an internal error prefixed
    with `action`.
    """

    try:
        return await call_handler(fn, *args)
    except Exception as exc:
        raise wrap(ErrorCategory.internal, action, exc) from exc
