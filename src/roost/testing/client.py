"""Async test client for roost routers.

Sends requests through ``Router.serve_request`` directly and returns the
same ``ServedResponse`` a host would receive. No HTTP involved.
"""

from __future__ import annotations

import json as json_module
from typing import Any

from roost.http.request import IncomingRequest
from roost.http.response import ServedResponse
from roost.routing.router import Router


class TestClient:
    __test__ = False  # Tell pytest this is not a test class
    """Async test client for roost routers.

    Usage::

        async with TestClient(router) as client:
            served = await client.get("/")
            assert served.response.status == 200

    Leaving the ``async with`` block waits for every deferred task the
    served requests scheduled.
    """

    __slots__ = ("base_url", "router", "served")

    def __init__(self, router: Router, *, base_url: str = "https://example.com") -> None:
        self.router = router
        self.base_url = base_url.rstrip("/")
        self.served: list[ServedResponse] = []

    async def __aenter__(self) -> TestClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        for served in self.served:
            await served.wait_tasks()

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: Any = None,
        extra: Any = None,
    ) -> ServedResponse:
        """Send a request with any method."""
        incoming = IncomingRequest(
            url=f"{self.base_url}{path}",
            method=method,
            headers=tuple((headers or {}).items()),
            body=body,
        )
        served = await self.router.serve_request(incoming, extra)
        self.served.append(served)
        return served

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> ServedResponse:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: Any = None,
        json: Any = None,
    ) -> ServedResponse:
        """Send a POST request. ``json`` is serialized and sets the content type."""
        merged = dict(headers or {})
        if json is not None:
            body = json_module.dumps(json)
            merged.setdefault("content-type", "application/json")
        return await self.request("POST", path, headers=merged, body=body)

    async def put(
        self, path: str, *, headers: dict[str, str] | None = None, body: Any = None
    ) -> ServedResponse:
        """Send a PUT request."""
        return await self.request("PUT", path, headers=headers, body=body)

    async def patch(
        self, path: str, *, headers: dict[str, str] | None = None, body: Any = None
    ) -> ServedResponse:
        """Send a PATCH request."""
        return await self.request("PATCH", path, headers=headers, body=body)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> ServedResponse:
        """Send a DELETE request."""
        return await self.request("DELETE", path, headers=headers)
