"""Route, RouteMatch, and the target / middleware tagged variants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from roost._internal.types import Handler, MiddlewareFn
from roost.routing.pattern import PathMatcher


class Method(StrEnum):
    """HTTP methods a route can be registered for. ``ANY`` matches all."""

    ANY = "ANY"
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    OPTIONS = "OPTIONS"
    HEAD = "HEAD"
    DELETE = "DELETE"


# -- Middleware forms --


@dataclass(frozen=True, slots=True)
class AutoContinue:
    """Middleware that continues once it returns.

    ``fn(request, response)``, sync or async. The only way to stop the
    chain from an auto-continue middleware is to raise.
    """

    fn: MiddlewareFn


@dataclass(frozen=True, slots=True)
class ExplicitControl:
    """Middleware that decides when, and whether, the chain advances.

    ``fn(request, response, next)``, sync or async. The chain waits until
    ``next()`` is called; ``next(False)`` aborts it.
    """

    fn: MiddlewareFn


Middleware: TypeAlias = AutoContinue | ExplicitControl


def auto_continue(fn: MiddlewareFn) -> AutoContinue:
    """Tag *fn* as auto-continue middleware. Usable as a decorator."""
    return AutoContinue(fn)


def explicit_control(fn: MiddlewareFn) -> ExplicitControl:
    """Tag *fn* as explicit-control middleware. Usable as a decorator::

        @explicit_control
        async def require_token(request, response, next):
            if "authorization" not in request.headers:
                response.set_status(401).text("Unauthorized")
                next(False)
                return
            next()
    """
    return ExplicitControl(fn)


# -- Route targets --


@dataclass(frozen=True, slots=True)
class HandlerTarget:
    """A terminal handler: ``fn(request, response)``."""

    fn: Handler


@dataclass(frozen=True, slots=True)
class MiddlewareTarget:
    """A middleware step in one of its two explicit forms."""

    middleware: Middleware


@dataclass(frozen=True, slots=True)
class SubRouterTarget:
    """A mounted router, referenced by its node id in the route tree."""

    node_id: int


RouteTarget: TypeAlias = HandlerTarget | MiddlewareTarget | SubRouterTarget


@dataclass(frozen=True, slots=True)
class Route:
    """An immutable registration record.

    ``raw_path`` is kept so the pattern can be rebuilt whenever the owning
    node's base path changes. ``sequence`` is drawn from the tree's shared
    counter and orders middleware across every router in the tree.
    """

    method: Method
    raw_path: str
    pattern: PathMatcher
    target: RouteTarget
    is_middleware: bool
    sequence: int
    node_id: int

    @property
    def is_sub_router(self) -> bool:
        return isinstance(self.target, SubRouterTarget)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A route that matched a request, with its extracted parameters."""

    route: Route
    params: dict[str, str]
