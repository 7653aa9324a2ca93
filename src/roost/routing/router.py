"""Router — the registration API and the request entry point.

A ``Router`` is a handle onto one node of a route tree. Routers compose by
mounting; the top-level router that serves requests is the main router
and is the only one whose configuration and hooks apply at request time.

Usage::

    router = Router()
    api = Router()

    @api.get("/time")
    def time(request, response):
        response.json({"ok": True})

    router.use("/api", api)
    served = await router.serve_request(IncomingRequest("https://x/api/time"))
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from roost._internal.types import ErrorHandler, Handler, ResponseBuilder
from roost.config import RouterConfig
from roost.errors import ConfigurationError
from roost.http.request import Request
from roost.http.response import ResponseState, ServedResponse
from roost.routing.pattern import normalize
from roost.routing.route import (
    AutoContinue,
    ExplicitControl,
    HandlerTarget,
    Method,
    MiddlewareTarget,
    Route,
)
from roost.routing.tree import RouterNode, RouteTree
from roost.server.dispatcher import dispatch

_DEFAULT_MIDDLEWARE_PATH = "/*"
_DEFAULT_MOUNT_PATH = "/"


class Router:
    """A set of routes under a base path, composable by mounting.

    Handlers are called as ``handler(request, response)``; middleware as
    described on ``AutoContinue`` and ``ExplicitControl``. Both may be sync
    or async.
    """

    __slots__ = ("_node",)

    def __init__(self, config: RouterConfig | None = None, **overrides: Any) -> None:
        config = config or RouterConfig()
        if overrides:
            config = replace(config, **overrides)
        self._node = RouteTree().new_node(normalize("/", config.base_path), config)

    @classmethod
    def _for_node(cls, node: RouterNode) -> Router:
        router = cls.__new__(cls)
        router._node = node
        return router

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Router):
            return NotImplemented
        return self._node is other._node

    def __hash__(self) -> int:
        return id(self._node)

    def __repr__(self) -> str:
        return f"<Router base_path={self.base_path!r} routes={len(self.routes)}>"

    # -- Introspection --

    @property
    def config(self) -> RouterConfig:
        return self._node.config

    @property
    def base_path(self) -> str:
        return self._node.base_path

    @property
    def routes(self) -> list[Route]:
        """This router's own routes, in registration order."""
        return list(self._node.routes)

    @property
    def node(self) -> RouterNode:
        return self._node

    @property
    def tree(self) -> RouteTree:
        return self._node.tree

    @property
    def is_main(self) -> bool:
        return self._node.is_main

    # -- Terminal handlers --

    def route(
        self,
        path: str,
        handler: Handler | None = None,
        *,
        method: Method | str = Method.GET,
    ) -> Any:
        """Register a terminal handler for *method* and *path*.

        Without *handler*, returns a decorator::

            @router.route("/users/:id", method="DELETE")
            async def delete_user(request, response): ...
        """
        try:
            method = Method(str(method).upper())
        except ValueError:
            msg = f"Unsupported HTTP method {method!r}."
            raise ConfigurationError(msg) from None

        if handler is None:

            def decorator(fn: Handler) -> Handler:
                self.route(path, fn, method=method)
                return fn

            return decorator

        if isinstance(handler, Router):
            msg = f"Cannot register a router as the handler for {method} {path!r}; use mount() or use()."
            raise ConfigurationError(msg)
        if isinstance(handler, (AutoContinue, ExplicitControl)):
            msg = f"Middleware for {path!r} must be registered with use()."
            raise ConfigurationError(msg)
        if not callable(handler):
            msg = f"Handler for {method} {path!r} is not callable: {handler!r}"
            raise ConfigurationError(msg)

        self.tree.register(self._node, method, path, HandlerTarget(handler), is_middleware=False)
        return handler

    def get(self, path: str, handler: Handler | None = None) -> Any:
        return self.route(path, handler, method=Method.GET)

    def post(self, path: str, handler: Handler | None = None) -> Any:
        return self.route(path, handler, method=Method.POST)

    def put(self, path: str, handler: Handler | None = None) -> Any:
        return self.route(path, handler, method=Method.PUT)

    def patch(self, path: str, handler: Handler | None = None) -> Any:
        return self.route(path, handler, method=Method.PATCH)

    def options(self, path: str, handler: Handler | None = None) -> Any:
        return self.route(path, handler, method=Method.OPTIONS)

    def head(self, path: str, handler: Handler | None = None) -> Any:
        return self.route(path, handler, method=Method.HEAD)

    def delete(self, path: str, handler: Handler | None = None) -> Any:
        return self.route(path, handler, method=Method.DELETE)

    def any(self, path: str, handler: Handler | None = None) -> Any:
        """Register a terminal handler that accepts every method."""
        return self.route(path, handler, method=Method.ANY)

    # -- Middleware and mounting --

    def use(self, path_or_handler: Any, handler: Any = None) -> Any:
        """Register middleware or mount a router.

        Forms::

            router.use(middleware)            # path "/*"
            router.use("/admin/*", middleware)
            router.use("/api", sub_router)    # same as mount()
            router.use(sub_router)            # mounted at "/"

            @router.use("/*")
            def stamp(request, response): ...

        A plain callable is registered as ``AutoContinue``. Wrap it with
        ``explicit_control`` to receive a ``next`` callback instead.
        """
        if handler is None:
            if isinstance(path_or_handler, str):
                path = path_or_handler

                def decorator(fn: Any) -> Any:
                    self.use(path, fn)
                    return fn

                return decorator
            handler = path_or_handler
            path = _DEFAULT_MOUNT_PATH if isinstance(handler, Router) else _DEFAULT_MIDDLEWARE_PATH
        else:
            path = path_or_handler

        if isinstance(handler, Router):
            self.mount(path, handler)
            return handler

        if isinstance(handler, (AutoContinue, ExplicitControl)):
            middleware = handler
        elif callable(handler):
            middleware = AutoContinue(handler)
        else:
            msg = f"Middleware for {path!r} is not callable: {handler!r}"
            raise ConfigurationError(msg)

        self.tree.register(self._node, Method.ANY, path, MiddlewareTarget(middleware), is_middleware=True)
        return handler

    def use_bulk(self, entries: Iterable[Mapping[str, Any]]) -> None:
        """Apply ``use`` to each ``{"path"?: ..., "handler": ...}`` entry, in order."""
        for entry in entries:
            if "handler" not in entry:
                msg = f"Bulk entry {dict(entry)!r} has no 'handler'."
                raise ConfigurationError(msg)
            path = entry.get("path")
            if path:
                self.use(path, entry["handler"])
            else:
                self.use(entry["handler"])

    def mount(self, path: str, router: Router) -> Router:
        """Attach *router* under *path*, rebasing all of its routes.

        Mounting again moves the router: the old mount is removed and
        every pattern beneath it is rebuilt against the new base path.
        """
        if not isinstance(router, Router):
            msg = f"mount() needs a Router, got {router!r}; use use() for middleware."
            raise ConfigurationError(msg)
        self.tree.mount(self._node, path, router._node)
        return router

    def set_custom_response_builder(self, builder: ResponseBuilder | None) -> Router:
        """Replace the custom response builder in this router's configuration.

        Consulted on the main router only. Returns the router so calls chain.
        """
        self._node.config = replace(self._node.config, custom_response_builder=builder)
        return self

    # -- Hooks --

    def on_error(self, handler: ErrorHandler) -> ErrorHandler:
        """Register the hook that turns a handler failure into a response.

        Called as ``handler(request, response, failure)``. Consulted on the
        main router only.
        """
        self._node.error_handler = handler
        return handler

    def on_not_found(self, handler: Handler) -> Handler:
        """Register the hook that fills the response when no route matches.

        Called as ``handler(request, response)``. Consulted on the main
        router only.
        """
        self._node.not_found_handler = handler
        return handler

    # -- Main router --

    def assign_main(self) -> None:
        """Mark this router as the main router of its tree."""
        self.tree.assign_main(self._node)

    def find_main(self) -> Router:
        """Return the main router of this tree, walking up from this router."""
        return Router._for_node(self.tree.find_main(self._node))

    # -- Serving --

    async def serve_request(self, incoming: Any, extra: Any = None) -> ServedResponse:
        """Route *incoming* through the tree and return the built artifact.

        The first call on an unassigned tree makes this router the main
        router. *extra* is passed through as ``request.extra``.
        """
        tree = self.tree
        if not tree.has_main():
            tree.assign_main(self._node)
        main = tree.find_main(self._node)
        request = Request.from_incoming(incoming, extra)
        return await dispatch(main, request, ResponseState())
