"""Tests for roost.http.query."""

from roost.http.query import QueryParams


class TestQueryParams:
    def test_first_value_wins(self) -> None:
        query = QueryParams("tag=a&tag=b&page=2")
        assert query["tag"] == "a"
        assert query.get_list("tag") == ["a", "b"]
        assert query.get("page") == "2"

    def test_blank_values_kept(self) -> None:
        query = QueryParams("flag=&other")
        assert query.get("flag") == ""
        assert "other" in query

    def test_missing(self) -> None:
        query = QueryParams()
        assert query.get("nope") is None
        assert query.get("nope", "x") == "x"
        assert query.get_list("nope") == []
        assert len(query) == 0

    def test_percent_decoding(self) -> None:
        assert QueryParams("q=hello%20world")["q"] == "hello world"

    def test_raw(self) -> None:
        assert QueryParams("a=1&b=2").raw == "a=1&b=2"

    def test_iteration(self) -> None:
        assert list(QueryParams("a=1&b=2")) == ["a", "b"]

    def test_pairs_keep_order_and_repeats(self) -> None:
        assert QueryParams("b=2&a=1&b=3").pairs == (("b", "2"), ("a", "1"), ("b", "3"))
