"""Tests for roost.http.headers."""

import pytest

from roost.http.headers import Headers


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        headers = Headers([("Content-Type", "text/plain")])
        assert headers["content-type"] == "text/plain"
        assert headers["CONTENT-TYPE"] == "text/plain"
        assert "Content-Type" in headers

    def test_from_mapping(self) -> None:
        headers = Headers({"X-Token": "abc"})
        assert headers.raw == (("x-token", "abc"),)

    def test_missing(self) -> None:
        headers = Headers()
        assert headers.get("x-missing") is None
        assert headers.get("x-missing", "fallback") == "fallback"
        with pytest.raises(KeyError):
            headers["x-missing"]

    def test_repeated_header(self) -> None:
        headers = Headers([("Accept", "text/html"), ("accept", "application/json")])
        assert headers["accept"] == "application/json"
        assert headers.get_list("Accept") == ["text/html", "application/json"]
        assert len(headers) == 1
        assert list(headers) == ["accept"]

    def test_non_string_key_not_contained(self) -> None:
        assert 1 not in Headers([("a", "b")])

    def test_repr(self) -> None:
        assert repr(Headers([("A", "1")])) == "Headers({'a': '1'})"
