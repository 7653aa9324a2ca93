"""Dispatcher — match a request against a route tree and run the chain.

The only component that walks the tree at request time. Collects every
matching route depth-first, picks the terminal handler, runs middleware
in registration order with abort semantics, then finalizes the response.
"""

import asyncio
import logging

from roost._internal.invoke import invoke
from roost._internal.types import NextFn
from roost.context import request_var
from roost.errors import HandlerFailure, NoRouteMatched
from roost.http.request import Request
from roost.http.response import Response, ResponseState, ServedResponse, reason_phrase
from roost.routing.route import (
    AutoContinue,
    ExplicitControl,
    HandlerTarget,
    Method,
    Middleware,
    MiddlewareTarget,
    RouteMatch,
    SubRouterTarget,
)
from roost.routing.tree import RouterNode
from roost.server.errors import handle_failure, handle_not_found

logger = logging.getLogger("roost.server")


def find_matches(node: RouterNode, request: Request) -> list[RouteMatch]:
    """Collect matching routes under *node*, depth-first.

    A mounted router is never matched itself; its routes are searched in
    its place. Discovery order is not execution order: middleware is
    sorted by sequence before it runs.
    """
    tree = node.tree
    matches: list[RouteMatch] = []
    for route in node.routes:
        match route.target:
            case SubRouterTarget(node_id=child_id):
                matches.extend(find_matches(tree.node(child_id), request))
            case _:
                if route.method is not Method.ANY and route.method != request.method:
                    continue
                result = route.pattern.match(request.path)
                if result.matched:
                    matches.append(RouteMatch(route=route, params=result.params))
    return matches


async def run_middleware(
    middleware: Middleware,
    request: Request,
    state: ResponseState,
    *,
    timeout: float | None = None,
) -> bool:
    """Run one middleware step. Returns False if it aborted the chain.

    An explicit-control middleware that returns without calling ``next``
    is waited on for up to *timeout* seconds, or indefinitely when
    *timeout* is None. Running out raises ``TimeoutError``.
    """
    match middleware:
        case AutoContinue(fn=fn):
            await invoke(fn, request, state)
            return True
        case ExplicitControl(fn=fn):
            decision: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

            def resolve(proceed: bool = True) -> None:
                # Only the first call decides
                if not decision.done():
                    decision.set_result(bool(proceed))

            next_step: NextFn = resolve

            await invoke(fn, request, state, next_step)
            if not decision.done():
                logger.warning(
                    "Middleware %s returned without calling next() for %s %s; waiting",
                    getattr(fn, "__qualname__", fn),
                    request.method,
                    request.path,
                )
            return await asyncio.wait_for(decision, timeout)


async def _run_chain(main: RouterNode, request: Request, state: ResponseState) -> None:
    matches = find_matches(main, request)

    terminal = next((m for m in matches if not m.route.is_middleware), None)
    if terminal is None:
        await handle_not_found(NoRouteMatched(request.method, request.path), request, state, main)
        return

    request.params = terminal.params
    request.route = terminal.route
    state.route = terminal.route

    steps = sorted(
        (
            (m.route, m.route.target.middleware)
            for m in matches
            if isinstance(m.route.target, MiddlewareTarget)
        ),
        key=lambda step: step[0].sequence,
    )
    for route, middleware in steps:
        try:
            proceed = await run_middleware(
                middleware, request, state, timeout=main.config.middleware_timeout
            )
        except Exception as exc:
            await handle_failure(HandlerFailure(route, exc), request, state, main)
            return
        if not proceed:
            logger.debug(
                "Middleware #%d (%s) aborted %s %s",
                route.sequence,
                route.pattern.pattern,
                request.method,
                request.path,
            )
            return

    handler: HandlerTarget = terminal.route.target  # type: ignore[assignment]
    try:
        await invoke(handler.fn, request, state)
    except Exception as exc:
        await handle_failure(HandlerFailure(terminal.route, exc), request, state, main)


async def dispatch(main: RouterNode, request: Request, state: ResponseState) -> ServedResponse:
    """Process one request from the main router and build the artifact.

    The current request is available through ``roost.context.get_request()``
    while middleware and handlers run.
    """
    token = request_var.set(request)
    try:
        await _run_chain(main, request, state)
    finally:
        request_var.reset(token)
    return await finish_response(main, request, state)


async def finish_response(main: RouterNode, request: Request, state: ResponseState) -> ServedResponse:
    """Finalize *state* and apply the main router's custom response builder.

    A builder that raises is logged and replaced by a plain-text 500.
    """
    finalized = state.finalize()
    response = finalized.response
    builder = main.config.custom_response_builder
    if builder is not None:
        try:
            response = await invoke(builder, state)
        except Exception:
            logger.exception("Custom response builder failed for %s %s", request.method, request.path)
            response = Response(
                body=main.config.error_body,
                status=500,
                status_text=reason_phrase(500),
                headers=(("content-type", "text/plain"),),
            )
    return ServedResponse(response=response, tasks=finalized.tasks, request=request, state=state)
