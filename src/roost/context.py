"""Request-scoped context via ContextVar.

Provides ``request_var``: the ``Request`` currently being dispatched in
this task. The dispatcher sets it before the first middleware runs and
resets it after the response is finalized, so code called from a
handler can reach the request without having it passed down.

Thread safety:
    ``ContextVar`` is task-local under asyncio. No locks needed.
"""

from contextvars import ContextVar

from roost.http.request import Request

request_var: ContextVar[Request] = ContextVar("roost_request")
"""The current request. Set by the dispatcher for the length of a dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return request_var.get()
