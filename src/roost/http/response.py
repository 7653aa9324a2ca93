"""Response state and the immutable values it finalizes into.

Handlers and middleware mutate a ``ResponseState`` through chainable
setters. The dispatcher finalizes it exactly once into a
``FinalizedResponse`` whose ``response`` is one of:

- ``Response``  — status, status text, headers, body
- ``Redirect``  — target URL and status
- the caller's custom override value, untouched
"""

from __future__ import annotations

import asyncio
import json as json_module
import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from roost.errors import FinalizeMisuse

if TYPE_CHECKING:
    from roost.errors import HandlerFailure
    from roost.http.request import Request
    from roost.routing.route import Route

logger = logging.getLogger("roost.server")


def reason_phrase(status: int) -> str:
    """The standard reason phrase for *status*, or ``""`` if unknown."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


class ResponseKind(Enum):
    """Which of the three mutually exclusive response shapes is active."""

    NORMAL = "normal"
    REDIRECT = "redirect"
    CUSTOM = "custom"


# -- Finalized values --


@dataclass(frozen=True, slots=True)
class Response:
    """A finalized normal response."""

    body: str | bytes | None = None
    status: int = 200
    status_text: str = "OK"
    headers: tuple[tuple[str, str], ...] = ()

    def header(self, name: str) -> str | None:
        """Return the value of header *name* (case-insensitive), or None."""
        name = name.lower()
        for key, value in self.headers:
            if key == name:
                return value
        return None

    @property
    def content_type(self) -> str | None:
        return self.header("content-type")

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if self.body is None:
            return b""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body or ""


@dataclass(frozen=True, slots=True)
class Redirect:
    """A finalized redirect response."""

    url: str
    status: int = 302

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return (("location", self.url),)


@dataclass(frozen=True, slots=True)
class FinalizedResponse:
    """The one-time result of ``ResponseState.finalize()``."""

    response: Any
    tasks: tuple[asyncio.Future[Any], ...] = ()


@dataclass(frozen=True, slots=True)
class ServedResponse:
    """What ``Router.serve_request`` hands back to the host.

    The host returns ``response`` to its runtime and keeps ``tasks``
    running after the response is sent, e.g. with ``wait_tasks()``.
    """

    response: Any
    tasks: tuple[asyncio.Future[Any], ...]
    request: Request
    state: ResponseState

    @property
    def status(self) -> int | None:
        """Status of the built response, when it has one."""
        return getattr(self.response, "status", None)

    async def wait_tasks(self) -> None:
        """Wait for every deferred task. Failures are logged, not raised."""
        if not self.tasks:
            return
        results = await asyncio.gather(*self.tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                logger.warning("Deferred task failed: %r", result, exc_info=result)


# -- Mutable state --


class ResponseState:
    """Mutable accumulator for one request's response.

    Every setter returns ``self`` so calls chain::

        response.set_status(201).set_header("x-id", "42").json({"ok": True})

    Body setters make the response NORMAL and drop any redirect or custom
    override; ``redirect_to`` and ``custom`` drop the body. Only one kind
    is ever active.
    """

    __slots__ = (
        "_finalized",
        "body",
        "custom_response",
        "error",
        "headers",
        "kind",
        "redirect_status",
        "redirect_url",
        "route",
        "status",
        "status_text",
        "tasks",
    )

    def __init__(self) -> None:
        self.kind = ResponseKind.NORMAL
        self.status = 200
        self.status_text = "OK"
        self.headers: dict[str, str] = {}
        self.body: str | bytes | None = None
        self.redirect_url: str | None = None
        self.redirect_status = 302
        self.custom_response: Any = None
        self.tasks: list[asyncio.Future[Any]] = []
        self.route: Route | None = None
        self.error: HandlerFailure | None = None
        self._finalized: FinalizedResponse | None = None

    def __repr__(self) -> str:
        return f"<ResponseState {self.kind.value} {self.status} {self.status_text!r}>"

    # -- Status and headers --

    def set_status(self, status: int, text: str | None = None) -> ResponseState:
        """Set the status code; the status text defaults to its reason phrase."""
        self.status = status
        self.status_text = text if text is not None else reason_phrase(status)
        return self

    def set_status_text(self, text: str) -> ResponseState:
        self.status_text = text
        return self

    def set_header(self, name: str, value: str) -> ResponseState:
        self.headers[name.lower()] = value
        return self

    def set_headers(self, headers: Mapping[str, str]) -> ResponseState:
        for name, value in headers.items():
            self.set_header(name, value)
        return self

    def set_content_type(self, content_type: str) -> ResponseState:
        return self.set_header("content-type", content_type)

    # -- Body (NORMAL) --

    def text(self, text: str) -> ResponseState:
        """Send *text* as a ``text/plain`` body."""
        self._as_normal()
        self.body = text
        return self.set_content_type("text/plain")

    def json(self, data: Any) -> ResponseState:
        """Serialize *data* as compact JSON and set ``application/json``."""
        self._as_normal()
        self.body = json_module.dumps(data, separators=(",", ":"))
        return self.set_content_type("application/json")

    def raw(self, body: str | bytes | None, content_type: str) -> ResponseState:
        """Send *body* as-is with the given content type."""
        self._as_normal()
        self.body = body
        return self.set_content_type(content_type)

    def _as_normal(self) -> None:
        self.kind = ResponseKind.NORMAL
        self.redirect_url = None
        self.redirect_status = 302
        self.custom_response = None

    # -- REDIRECT / CUSTOM --

    def redirect_to(self, url: str, status: int = 302) -> ResponseState:
        """Make this a redirect to *url* (302 unless given)."""
        self.kind = ResponseKind.REDIRECT
        self.redirect_url = url
        self.redirect_status = status
        self.body = None
        self.custom_response = None
        return self

    def custom(self, value: Any) -> ResponseState:
        """Return *value* as the response, bypassing every other field."""
        self.kind = ResponseKind.CUSTOM
        self.custom_response = value
        self.body = None
        self.redirect_url = None
        return self

    # -- Deferred work --

    def add_tasks(self, *tasks: Awaitable[Any]) -> ResponseState:
        """Schedule background work that outlives the response.

        Coroutines are wrapped in tasks on the running loop immediately,
        so they keep running even if the chain is aborted afterwards.
        """
        for task in tasks:
            self.tasks.append(asyncio.ensure_future(task))
        return self

    # -- Finalize --

    def reset(self) -> ResponseState:
        """Drop status, headers, and body back to defaults. Tasks are kept."""
        self._as_normal()
        self.status = 200
        self.status_text = "OK"
        self.headers = {}
        self.body = None
        return self

    @property
    def is_finalized(self) -> bool:
        return self._finalized is not None

    def finalize(self) -> FinalizedResponse:
        """Build the immutable response. May only be called once.

        Raises ``FinalizeMisuse`` on a second call, for a redirect without
        a target URL, or for a custom response without an override value.
        """
        if self._finalized is not None:
            msg = "finalize() was already called for this response."
            raise FinalizeMisuse(msg)

        match self.kind:
            case ResponseKind.NORMAL:
                response: Any = Response(
                    body=self.body,
                    status=self.status,
                    status_text=self.status_text,
                    headers=tuple(self.headers.items()),
                )
            case ResponseKind.REDIRECT:
                if not self.redirect_url:
                    msg = "A redirect response needs a target URL."
                    raise FinalizeMisuse(msg)
                response = Redirect(url=self.redirect_url, status=self.redirect_status)
            case ResponseKind.CUSTOM:
                if self.custom_response is None:
                    msg = "A custom response needs an override value."
                    raise FinalizeMisuse(msg)
                response = self.custom_response

        self._finalized = FinalizedResponse(response=response, tasks=tuple(self.tasks))
        return self._finalized
