"""Roost exception hierarchy.

Shared across routing, dispatch, and response code so every module
raises and catches the same types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roost.routing.route import Route


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when routes or routers are registered incorrectly.

    Always raised at registration, mount, or main-assignment time and
    never retried.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(RoostError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NoRouteMatched(HTTPError):  # noqa: N818
    """404 — no terminal handler matched the request.

    Recovered by the dispatcher with a default 404 unless the main router
    is configured with ``raise_on_no_route=True``.
    """

    method: str
    path: str

    def __init__(self, method: str, path: str) -> None:
        super().__init__(status=404, detail=f"No route matches {method} {path!r}")
        # HTTPError is frozen; the subclass keeps these in its instance dict
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "path", path)


class HandlerFailure(RoostError):  # noqa: N818
    """A middleware or terminal handler raised.

    The dispatcher catches the original exception, wraps it, and stops
    the chain. The wrapped exception is also chained as ``__cause__``.
    """

    def __init__(self, route: Route, original: BaseException) -> None:
        self.route = route
        self.original = original
        self.__cause__ = original
        super().__init__(
            f"{route.method} {route.raw_path!r} failed: "
            f"{type(original).__name__}: {original}"
        )


class FinalizeMisuse(RoostError):  # noqa: N818
    """``finalize()`` was called twice, or the response is incomplete.

    A redirect needs a target URL and a custom response needs an
    override value.
    """
