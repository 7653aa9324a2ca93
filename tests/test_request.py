"""Tests for roost.http.request."""

from types import SimpleNamespace

from roost.http.request import IncomingRequest, Request


class TestFromIncoming:
    def test_basic_fields(self) -> None:
        incoming = IncomingRequest(
            url="https://example.com/users/7?tab=posts",
            method="post",
            headers=(("Content-Type", "application/json"),),
            body='{"a":1}',
        )
        request = Request.from_incoming(incoming)

        assert request.method == "POST"
        assert request.url == "https://example.com/users/7?tab=posts"
        assert request.path == "/users/7/"
        assert request.query.get("tab") == "posts"
        assert request.headers["content-type"] == "application/json"
        assert request.content_type == "application/json"
        assert request.body == '{"a":1}'
        assert request.incoming is incoming

    def test_method_defaults_to_get(self) -> None:
        request = Request.from_incoming({"url": "https://example.com/"})
        assert request.method == "GET"

    def test_root_path(self) -> None:
        assert Request.from_incoming(IncomingRequest("https://example.com")).path == "/"

    def test_path_keeps_trailing_slash(self) -> None:
        assert Request.from_incoming(IncomingRequest("https://example.com/a/")).path == "/a/"

    def test_mapping_input(self) -> None:
        request = Request.from_incoming(
            {"url": "https://example.com/x", "method": "delete", "headers": {"X-Token": "t"}}
        )
        assert request.method == "DELETE"
        assert request.headers.get("x-token") == "t"

    def test_object_with_attributes(self) -> None:
        native = SimpleNamespace(url="https://example.com/y", method="PUT", headers=[])
        request = Request.from_incoming(native)
        assert request.method == "PUT"
        assert request.path == "/y/"
        assert request.body is None

    def test_extra_is_passed_through(self) -> None:
        env = {"KV": object()}
        request = Request.from_incoming(IncomingRequest("https://example.com/"), env)
        assert request.extra is env

    def test_dispatcher_fields_start_empty(self) -> None:
        request = Request.from_incoming(IncomingRequest("https://example.com/"))
        assert request.locals == {}
        assert request.params == {}
        assert request.route is None
        assert request.error is None

    def test_locals_are_per_request(self) -> None:
        first = Request.from_incoming(IncomingRequest("https://example.com/"))
        second = Request.from_incoming(IncomingRequest("https://example.com/"))
        first.locals["hasTouched"] = True
        assert second.locals == {}
