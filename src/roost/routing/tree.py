"""Route tree — an arena of router nodes addressed by integer id.

Each ``RouteTree`` is one registration session: it owns its nodes and the
sequence counter every route in the tree draws from. Routes refer to
mounted routers by node id and nodes refer to their parent by id, so no
route or node owns another node.

Mounting a router that was built in another tree transplants its whole
subtree into this arena. The transplanted routes take fresh sequence
numbers (in their original relative order), so their middleware orders
at the point of the mount.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from roost._internal.types import ErrorHandler, Handler
from roost.config import RouterConfig
from roost.errors import ConfigurationError
from roost.routing.pattern import compile_pattern, normalize
from roost.routing.route import Method, Route, RouteTarget, SubRouterTarget

logger = logging.getLogger("roost.routing")


@dataclass(slots=True, eq=False)
class RouterNode:
    """One router's state inside a tree.

    ``tree`` and ``id`` change when the node is transplanted into another
    tree; everything else describing the node travels with it.
    """

    id: int
    tree: RouteTree = field(repr=False)
    base_path: str
    config: RouterConfig
    routes: list[Route] = field(default_factory=list)
    parent: int | None = None
    is_main: bool = False
    error_handler: ErrorHandler | None = field(default=None, repr=False)
    not_found_handler: Handler | None = field(default=None, repr=False)


class RouteTree:
    """Arena of ``RouterNode`` records plus the shared sequence counter."""

    __slots__ = ("_next_id", "_nodes", "_sequence")

    def __init__(self) -> None:
        self._nodes: dict[int, RouterNode] = {}
        self._next_id = itertools.count()
        self._sequence = itertools.count()

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[RouterNode]:
        return iter(self._nodes.values())

    def node(self, node_id: int) -> RouterNode:
        return self._nodes[node_id]

    def new_node(self, base_path: str, config: RouterConfig) -> RouterNode:
        node = RouterNode(id=next(self._next_id), tree=self, base_path=base_path, config=config)
        self._nodes[node.id] = node
        return node

    def next_sequence(self) -> int:
        return next(self._sequence)

    # -- Registration --

    def register(
        self,
        node: RouterNode,
        method: Method,
        raw_path: str,
        target: RouteTarget,
        *,
        is_middleware: bool,
    ) -> Route:
        """Compile *raw_path* against the node's base path and append a route."""
        route = Route(
            method=method,
            raw_path=raw_path,
            pattern=compile_pattern(normalize(node.base_path, raw_path)),
            target=target,
            is_middleware=is_middleware,
            sequence=self.next_sequence(),
            node_id=node.id,
        )
        node.routes.append(route)
        logger.debug(
            "Registered #%d %s %s (node %d)",
            route.sequence,
            method,
            route.pattern.pattern,
            node.id,
        )
        return route

    def rebase(self, node: RouterNode, base_path: str) -> None:
        """Give *node* a new base path and rebuild every pattern beneath it.

        Patterns are recompiled from each route's raw path, never edited in
        place. Mounted sub-routers are rebased recursively.
        """
        node.base_path = base_path
        node.routes = [
            replace(route, pattern=compile_pattern(normalize(base_path, route.raw_path)))
            for route in node.routes
        ]
        for route in node.routes:
            if isinstance(route.target, SubRouterTarget):
                child = self._nodes[route.target.node_id]
                self.rebase(child, normalize(base_path, route.raw_path))

    # -- Mounting --

    def mount(self, parent: RouterNode, raw_path: str, child: RouterNode) -> Route:
        """Attach *child* beneath *parent* at *raw_path*."""
        if child.is_main:
            msg = "Cannot mount the main router under another router."
            raise ConfigurationError(msg)
        if child.tree is self and self.is_ancestor(child, parent):
            msg = "Cannot mount a router into itself or one of its own sub-routers."
            raise ConfigurationError(msg)

        child.tree.detach(child)
        if child.tree is not self:
            self.adopt(child)

        child.parent = parent.id
        self.rebase(child, normalize(parent.base_path, raw_path))
        logger.debug("Mounted node %d at %s", child.id, child.base_path)
        return self.register(
            parent, Method.ANY, raw_path, SubRouterTarget(child.id), is_middleware=True
        )

    def detach(self, node: RouterNode) -> None:
        """Remove the mount route pointing at *node* from its current parent."""
        if node.parent is None:
            return
        parent = self._nodes[node.parent]
        parent.routes = [
            route
            for route in parent.routes
            if not (isinstance(route.target, SubRouterTarget) and route.target.node_id == node.id)
        ]
        node.parent = None

    def adopt(self, root: RouterNode) -> None:
        """Transplant *root* and its subtree from its tree into this one."""
        source = root.tree
        moved = list(source.subtree(root))
        new_ids = {node.id: next(self._next_id) for node in moved}

        old_routes = sorted(
            (route for node in moved for route in node.routes),
            key=lambda route: route.sequence,
        )
        new_sequences = {route.sequence: self.next_sequence() for route in old_routes}

        for node in moved:
            del source._nodes[node.id]
            node.id = new_ids[node.id]
            node.tree = self
            if node.parent is not None:
                node.parent = new_ids[node.parent]
            node.routes = [
                replace(
                    route,
                    sequence=new_sequences[route.sequence],
                    node_id=node.id,
                    target=(
                        SubRouterTarget(new_ids[route.target.node_id])
                        if isinstance(route.target, SubRouterTarget)
                        else route.target
                    ),
                )
                for route in node.routes
            ]
            self._nodes[node.id] = node

    # -- Traversal --

    def subtree(self, node: RouterNode) -> Iterator[RouterNode]:
        """Yield *node* and every node mounted beneath it, depth-first."""
        yield node
        for route in node.routes:
            if isinstance(route.target, SubRouterTarget):
                yield from self.subtree(self._nodes[route.target.node_id])

    def is_ancestor(self, candidate: RouterNode, node: RouterNode) -> bool:
        """True if *candidate* is *node* or one of its parents."""
        current: RouterNode | None = node
        while current is not None:
            if current is candidate:
                return True
            current = self._nodes[current.parent] if current.parent is not None else None
        return False

    def root_of(self, node: RouterNode) -> RouterNode:
        while node.parent is not None:
            node = self._nodes[node.parent]
        return node

    # -- Main router --

    def assign_main(self, node: RouterNode) -> None:
        """Mark *node* as the tree's main router.

        Raises ``ConfigurationError`` if another node is already main or
        *node* is mounted under another router.
        """
        if node.is_main:
            return
        if any(other.is_main for other in self._nodes.values()):
            msg = (
                "Cannot assign a main router when there is already another "
                "router in this tree considered the main one."
            )
            raise ConfigurationError(msg)
        if node.parent is not None:
            msg = "Only a top-level router can be the main router."
            raise ConfigurationError(msg)
        node.is_main = True
        logger.debug("Node %d assigned as main router", node.id)

    def find_main(self, node: RouterNode) -> RouterNode:
        """Walk up to the root and require it to be the main router."""
        root = self.root_of(node)
        if not root.is_main:
            msg = "Reached a top-level router that was not declared as the main router."
            raise ConfigurationError(msg)
        return root

    def has_main(self) -> bool:
        return any(node.is_main for node in self._nodes.values())
