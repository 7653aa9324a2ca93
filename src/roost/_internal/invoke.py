"""Calling user code that may or may not be a coroutine function.

Handlers, middleware, hooks, and the custom response builder are all
accepted as ``def`` or ``async def``. The dispatcher calls every one of
them through ``invoke``.
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* with the given arguments and return its result.

    An awaitable result (a coroutine, a future) is awaited first, so::

        await invoke(lambda request, response: response.text("/"), request, state)
        await invoke(load_and_render, request, state)  # async def

    behave the same to the caller.
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result
