"""Query string of the incoming URL, parsed once.

Pairs are kept in the order they appear so repeated keys survive; the
mapping view answers with the first value for a key.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Immutable query parameters.

    ``QueryParams("tag=a&tag=b")["tag"]`` is ``"a"``; ``get_list("tag")``
    is ``["a", "b"]``. Blank values are kept as ``""``.
    """

    __slots__ = ("_pairs", "_raw")

    _pairs: tuple[tuple[str, str], ...]
    _raw: str

    def __init__(self, query_string: str = "") -> None:
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(
            self, "_pairs", tuple(parse_qsl(query_string, keep_blank_values=True))
        )

    def __getitem__(self, key: str) -> str:
        for name, value in self._pairs:
            if name == key:
                return value
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name for name, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(name for name, _ in self._pairs))

    def __repr__(self) -> str:
        return f"QueryParams({self._raw!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in order."""
        return [value for name, value in self._pairs if name == key]

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        return self._pairs

    @property
    def raw(self) -> str:
        """The query string as received, without the leading ``?``."""
        return self._raw
