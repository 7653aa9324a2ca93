"""Immutable, case-insensitive request headers.

Names are lower-cased once at construction; values are kept as given.
Implements ``Mapping[str, str]`` plus ``get_list`` for repeated headers.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable request headers with lower-cased names.

    ``__getitem__`` returns the last value sent for a name, so a repeated
    header behaves like a plain dict built from the pairs.
    ``get_list`` returns every value in the order received.
    """

    __slots__ = ("_pairs",)

    _pairs: tuple[tuple[str, str], ...]

    def __init__(self, pairs: Iterable[tuple[str, str]] | Mapping[str, str] = ()) -> None:
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        object.__setattr__(
            self, "_pairs", tuple((str(name).lower(), str(value)) for name, value in items)
        )

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower()
        for name, value in reversed(self._pairs):
            if name == key_lower:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(name == key_lower for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._pairs:
            if name not in seen:
                seen.add(name)
                yield name

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key* (e.g. multiple ``Accept`` lines)."""
        key_lower = key.lower()
        return [value for name, value in self._pairs if name == key_lower]

    @property
    def raw(self) -> tuple[tuple[str, str], ...]:
        """The (lower-cased name, value) pairs in the order received."""
        return self._pairs
