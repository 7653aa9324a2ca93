"""Request context — what the router knows about one incoming request.

Metadata (method, url, path, headers, query) is fixed when the context is
built. ``params`` and ``route`` are filled in by the dispatcher once the
terminal handler is chosen; ``locals`` is a per-request bag for passing
data from middleware to later middleware and the handler.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from roost.http.headers import Headers
from roost.http.query import QueryParams
from roost.routing.pattern import normalize_request_path

if TYPE_CHECKING:
    from roost.errors import HandlerFailure
    from roost.routing.route import Route


@dataclass(frozen=True, slots=True)
class IncomingRequest:
    """A minimal inbound request for hosts without their own request type.

    Any object exposing ``method``, ``url``, ``headers`` and optionally
    ``body`` works as well, as does a mapping with those keys.
    """

    url: str
    method: str = "GET"
    headers: Iterable[tuple[str, str]] | Mapping[str, str] = ()
    body: Any = None


def _read(incoming: Any, name: str, default: Any = None) -> Any:
    if isinstance(incoming, Mapping):
        return incoming.get(name, default)
    return getattr(incoming, name, default)


@dataclass(slots=True)
class Request:
    """A request as seen by middleware and handlers.

    ``path`` is normalized to end with ``/`` so it compares equal to the
    normalized patterns routes are compiled from.
    """

    method: str
    url: str
    path: str
    headers: Headers
    query: QueryParams
    body: Any = None

    # Opaque host data passed to ``serve_request``
    extra: Any = None

    incoming: Any = field(default=None, repr=False)

    locals: dict[str, Any] = field(default_factory=dict)

    # Set by the dispatcher
    params: dict[str, str] = field(default_factory=dict)
    route: Route | None = field(default=None, repr=False)
    error: HandlerFailure | None = field(default=None, repr=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @classmethod
    def from_incoming(cls, incoming: Any, extra: Any = None) -> Request:
        """Build a request context from the host's inbound request.

        The method defaults to ``GET`` and is upper-cased; header names are
        lower-cased; the query string is split off the path.
        """
        url = _read(incoming, "url", "") or "/"
        parts = urlsplit(url)
        return cls(
            method=(_read(incoming, "method") or "GET").upper(),
            url=url,
            path=normalize_request_path(parts.path),
            headers=Headers(_read(incoming, "headers") or ()),
            query=QueryParams(parts.query),
            body=_read(incoming, "body"),
            extra=extra,
            incoming=incoming,
        )
