"""Recovery paths for requests that did not end in a handler's response.

Maps ``NoRouteMatched`` and ``HandlerFailure`` onto the response state,
using the main router's hooks when registered or sensible defaults.
"""

import logging

from roost._internal.invoke import invoke
from roost.config import RouterConfig
from roost.errors import HandlerFailure, NoRouteMatched
from roost.http.request import Request
from roost.http.response import ResponseState
from roost.routing.tree import RouterNode

logger = logging.getLogger("roost.server")


def default_not_found(state: ResponseState, config: RouterConfig) -> None:
    """Plain-text 404."""
    state.reset().set_status(404).text(config.not_found_body)


def default_internal_error(state: ResponseState, config: RouterConfig) -> None:
    """Plain-text 500."""
    state.reset().set_status(500).text(config.error_body)


async def handle_not_found(
    exc: NoRouteMatched,
    request: Request,
    state: ResponseState,
    main: RouterNode,
) -> None:
    """Fill *state* for a request no terminal handler matched.

    Re-raises *exc* when the main router has ``raise_on_no_route`` set.
    """
    logger.debug("%s", exc)
    if main.config.raise_on_no_route:
        raise exc

    if main.not_found_handler is not None:
        try:
            await invoke(main.not_found_handler, request, state)
        except Exception:
            logger.exception("Not-found handler failed for %s %s", request.method, request.path)
        else:
            return

    default_not_found(state, main.config)


async def handle_failure(
    failure: HandlerFailure,
    request: Request,
    state: ResponseState,
    main: RouterNode,
) -> None:
    """Record *failure* on the request and response, then recover.

    Order of recovery:
    1. the main router's error handler, called as ``(request, response, failure)``;
    2. with a custom response builder configured, nothing; the builder
       sees ``state.error`` and decides;
    3. a plain-text 500.

    A failing error handler falls through to the 500.
    """
    logger.error("%s", failure, exc_info=failure.original)
    request.error = failure
    state.error = failure

    if main.error_handler is not None:
        try:
            await invoke(main.error_handler, request, state, failure)
        except Exception:
            logger.exception("Error handler failed while handling %s", failure)
        else:
            return
    elif main.config.custom_response_builder is not None:
        return

    default_internal_error(state, main.config)
