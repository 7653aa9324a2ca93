"""Shared type aliases used across roost modules.

Every user callable may be ``def`` or ``async def``; ``invoke`` awaits
whatever comes back.
"""

from collections.abc import Callable
from typing import Any, TypeAlias

# (request, response)
Handler: TypeAlias = Callable[..., Any]

# (request, response) for auto-continue, (request, response, next) for explicit control
MiddlewareFn: TypeAlias = Callable[..., Any]

# next() or next(False)
NextFn: TypeAlias = Callable[..., None]

# (request, response, failure)
ErrorHandler: TypeAlias = Callable[..., Any]

# (state) -> the host's native response value
ResponseBuilder: TypeAlias = Callable[..., Any]
