"""Path patterns: normalization, parsing, and compiled matchers.

Pattern syntax::

    "/users"              literal
    "/users/:id"          named parameter, one path segment
    "/files/*"            wildcard, any remaining text (params["_"])
    "/posts(/:slug)/"     optional group, may nest
    "/a\\:b"              escaped literal ":"

Patterns are normalized against a base path before compiling, and request
paths are normalized the same way before matching, so ``/test`` and
``/test/`` are equivalent.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import unquote

from roost.errors import ConfigurationError

# A normalized path ending in one of these never gets a trailing slash
NO_APPEND_SLASH_SUFFIXES: tuple[str, ...] = ("*", ")", "?")

WILDCARD_PARAM = "_"

_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def normalize(base_path: str, input_path: str) -> str:
    """Join *input_path* onto *base_path* and apply the trailing-slash policy.

    One leading ``/`` of *input_path* is dropped before joining. The result
    gets a trailing ``/`` unless it already ends with ``/``, ``*``, ``)``
    or ``?``::

        normalize("/", "/test")      -> "/test/"
        normalize("/api/", "time")   -> "/api/time/"
        normalize("/", "/*")         -> "/*"
    """
    tail = input_path[1:] if input_path.startswith("/") else input_path
    fixed = f"{base_path}{tail}"
    if not fixed.endswith("/") and not fixed.endswith(NO_APPEND_SLASH_SUFFIXES):
        fixed += "/"
    return fixed


def normalize_request_path(path: str) -> str:
    """Give a request path the same trailing slash registered patterns carry."""
    if not path:
        return "/"
    if not path.endswith("/"):
        return path + "/"
    return path


@dataclass(frozen=True, slots=True)
class PatternToken:
    """A parsed piece of a path pattern.

    Literal:   ``/users/``  (kind="literal", value="/users/")
    Param:     ``:id``      (kind="param", value="id")
    Wildcard:  ``*``        (kind="wildcard", value="_")
    Optional:  ``(/:slug)`` (kind="optional", children=(...))
    """

    kind: Literal["literal", "param", "wildcard", "optional"]
    value: str = ""
    children: tuple[PatternToken, ...] = ()


def parse_pattern(pattern: str) -> tuple[PatternToken, ...]:
    """Parse a pattern string into tokens.

    Raises ``ConfigurationError`` for unbalanced parentheses, a ``:``
    without a name, a dangling escape, a repeated parameter name, or more
    than one wildcard.
    """
    tokens, _ = _parse_group(pattern, 0, nested=False)

    seen: set[str] = set()
    for name in _param_names(tokens):
        if name in seen:
            if name == WILDCARD_PARAM:
                msg = f"Pattern {pattern!r} has more than one wildcard."
            else:
                msg = f"Pattern {pattern!r} uses parameter {name!r} more than once."
            raise ConfigurationError(msg)
        seen.add(name)
    return tokens


def _parse_group(pattern: str, pos: int, *, nested: bool) -> tuple[tuple[PatternToken, ...], int]:
    tokens: list[PatternToken] = []
    literal: list[str] = []

    def flush() -> None:
        if literal:
            tokens.append(PatternToken("literal", "".join(literal)))
            literal.clear()

    while pos < len(pattern):
        char = pattern[pos]
        if char == "\\":
            if pos + 1 >= len(pattern):
                msg = f"Pattern {pattern!r} ends with a dangling escape."
                raise ConfigurationError(msg)
            literal.append(pattern[pos + 1])
            pos += 2
        elif char == ":":
            flush()
            end = pos + 1
            while end < len(pattern) and pattern[end] in _NAME_CHARS:
                end += 1
            name = pattern[pos + 1 : end]
            if not name:
                msg = f"Pattern {pattern!r} has ':' without a parameter name at position {pos}."
                raise ConfigurationError(msg)
            tokens.append(PatternToken("param", name))
            pos = end
        elif char == "*":
            flush()
            tokens.append(PatternToken("wildcard", WILDCARD_PARAM))
            pos += 1
        elif char == "(":
            flush()
            children, pos = _parse_group(pattern, pos + 1, nested=True)
            tokens.append(PatternToken("optional", children=children))
        elif char == ")":
            if not nested:
                msg = f"Pattern {pattern!r} has an unmatched ')' at position {pos}."
                raise ConfigurationError(msg)
            flush()
            return tuple(tokens), pos + 1
        else:
            literal.append(char)
            pos += 1

    if nested:
        msg = f"Pattern {pattern!r} has an unclosed '('."
        raise ConfigurationError(msg)
    flush()
    return tuple(tokens), pos


def _param_names(tokens: tuple[PatternToken, ...]) -> list[str]:
    names: list[str] = []
    for token in tokens:
        if token.kind in ("param", "wildcard"):
            names.append(token.value)
        elif token.kind == "optional":
            names.extend(_param_names(token.children))
    return names


def _to_regex(tokens: tuple[PatternToken, ...], names: list[str]) -> str:
    parts: list[str] = []
    for token in tokens:
        if token.kind == "literal":
            parts.append(re.escape(token.value))
        elif token.kind == "param":
            parts.append(f"(?P<p{len(names)}>[^/]+)")
            names.append(token.value)
        elif token.kind == "wildcard":
            parts.append(f"(?P<p{len(names)}>.*?)")
            names.append(token.value)
        else:
            parts.append(f"(?:{_to_regex(token.children, names)})?")
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class PathMatch:
    """Result of testing one path against a ``PathMatcher``."""

    matched: bool
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PathMatcher:
    """A compiled, normalized path pattern.

    Parameter values are percent-decoded. Parameters inside an optional
    group that did not match are absent from ``params``.
    """

    pattern: str
    regex: re.Pattern[str]
    param_names: tuple[str, ...]

    def match(self, path: str) -> PathMatch:
        """Test *path* (already normalized) against this pattern."""
        m = self.regex.fullmatch(path)
        if m is None:
            return PathMatch(matched=False)
        params: dict[str, str] = {}
        for index, name in enumerate(self.param_names):
            value = m.group(f"p{index}")
            if value is not None:
                params[name] = unquote(value)
        return PathMatch(matched=True, params=params)


def compile_pattern(pattern: str) -> PathMatcher:
    """Compile a normalized pattern into a ``PathMatcher``.

    Patterns ending in ``*``, ``)`` or ``?`` carry no trailing slash, while
    request paths always do; those patterns tolerate one trailing ``/`` so
    ``"/files/*"`` matches ``"/files/a/b/"`` with ``params["_"] == "a/b"``.
    """
    tokens = parse_pattern(pattern)
    names: list[str] = []
    source = _to_regex(tokens, names)
    if not pattern.endswith("/"):
        source += "/?"
    return PathMatcher(pattern=pattern, regex=re.compile(source), param_names=tuple(names))
