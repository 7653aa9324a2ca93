"""Roost — request routing and middleware dispatch for edge handlers.

Finds the handler for a request across a tree of mounted routers, runs the
matching middleware in registration order, and hands back one immutable
response artifact for the host runtime to send.

Basic usage::

    from roost import IncomingRequest, Router

    router = Router()

    @router.get("/count/:value")
    def count(request, response):
        response.text(f"/count/{request.params['value']}")

    served = await router.serve_request(IncomingRequest("https://x/count/42"))
    served.response.text  # "/count/42"
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "AutoContinue",
    "ConfigurationError",
    "ExplicitControl",
    "FinalizeMisuse",
    "HTTPError",
    "HandlerFailure",
    "IncomingRequest",
    "Method",
    "NoRouteMatched",
    "Redirect",
    "Request",
    "Response",
    "ResponseKind",
    "ResponseState",
    "RoostError",
    "Router",
    "RouterConfig",
    "ServedResponse",
    "auto_continue",
    "explicit_control",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from roost.routing.router import Router

        return Router

    if name == "RouterConfig":
        from roost.config import RouterConfig

        return RouterConfig

    if name in ("IncomingRequest", "Request"):
        from roost.http import request as _req

        return getattr(_req, name)

    if name in ("Redirect", "Response", "ResponseKind", "ResponseState", "ServedResponse"):
        from roost.http import response as _resp

        return getattr(_resp, name)

    if name in ("AutoContinue", "ExplicitControl", "Method", "auto_continue", "explicit_control"):
        from roost.routing import route as _route

        return getattr(_route, name)

    if name == "get_request":
        from roost.context import get_request

        return get_request

    if name in (
        "ConfigurationError",
        "FinalizeMisuse",
        "HTTPError",
        "HandlerFailure",
        "NoRouteMatched",
        "RoostError",
    ):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
