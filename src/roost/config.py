"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, no string-key
dict lookups.
"""

from __future__ import annotations

from dataclasses import dataclass

from roost._internal.types import ResponseBuilder


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(base_path="/v1", raise_on_no_route=True)

    Only the main router's configuration is consulted while a request
    is dispatched; sub-routers use theirs for ``base_path`` alone.
    """

    base_path: str = "/"

    # Receives the finalized ResponseState and returns the host's native
    # response value, replacing the built one.
    custom_response_builder: ResponseBuilder | None = None

    # Not found
    raise_on_no_route: bool = False
    not_found_body: str = "Not Found"

    # Handler failures
    error_body: str = "Internal Server Error"

    # Seconds to wait for an explicit-control middleware to call next()
    # after it returns. None waits indefinitely.
    middleware_timeout: float | None = None
