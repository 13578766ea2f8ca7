"""
Path expressions over in-memory JSON documents.

A deliberately small interpreter for the subset of JSONPath that overlay
files use. The grammar is closed:

    path      := "$" segment*
    segment   := "." name | ".*" | ".." name | "..*" | ".." bracket | bracket
    bracket   := "[" ( int | "*" | quoted | "?(@." name "==" literal ")" ) "]"
    literal   := quoted | number | true | false | null

Examples
--------
    $.info.version
    $.methods[0].examples
    $.methods[?(@.name=='eth_getLogs')].examples[0]
    $..schema

``resolve()`` returns every matching location as a :class:`Match` holding the
parent container and the key/index inside it, so callers can mutate the
document in place. A match with ``parent is None`` is the document root.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator, List, NoReturn, Optional, Tuple, Union

from ..errors import NoMatchError, PathSyntaxError

Key = Union[str, int]

_INT_RE = re.compile(r"-?\d+")
_NUMBER_RE = re.compile(r"-?\d+(\.\d+)?([eE][+-]?\d+)?")
_FIELD_RE = re.compile(r"[A-Za-z0-9_$-]+")


# ---- Segments ----------------------------------------------------------------


@dataclass(frozen=True)
class Child:
    name: str


@dataclass(frozen=True)
class Index:
    index: int


@dataclass(frozen=True)
class Wildcard:
    pass


@dataclass(frozen=True)
class Filter:
    """``[?(@.field==literal)]``"""

    field: str
    literal: Any


@dataclass(frozen=True)
class Descendant:
    """Applies ``inner`` to the current node and every node below it."""

    inner: "Segment"


Segment = Union[Child, Index, Wildcard, Filter, Descendant]


# ---- Parser ------------------------------------------------------------------


class _Parser:
    def __init__(self, expression: str) -> None:
        self.expr = expression
        self.pos = 0

    def error(self, reason: str) -> NoReturn:
        raise PathSyntaxError(self.expr, self.pos, reason)

    def at_end(self) -> bool:
        return self.pos >= len(self.expr)

    def peek(self) -> str:
        return self.expr[self.pos] if not self.at_end() else ""

    def expect(self, token: str) -> None:
        if not self.expr.startswith(token, self.pos):
            self.error(f"expected {token!r}")
        self.pos += len(token)

    def skip_ws(self) -> None:
        while self.peek() == " ":
            self.pos += 1

    def parse(self) -> Tuple[Segment, ...]:
        if not self.expr.startswith("$"):
            self.error("path must start with '$'")
        self.pos = 1
        segments: List[Segment] = []
        while not self.at_end():
            if self.expr.startswith("..", self.pos):
                self.pos += 2
                if self.at_end():
                    self.error("expected a selector after '..'")
                inner = self.bracket() if self.peek() == "[" else self.dotted()
                segments.append(Descendant(inner))
            elif self.peek() == ".":
                self.pos += 1
                segments.append(self.dotted())
            elif self.peek() == "[":
                segments.append(self.bracket())
            else:
                self.error(f"unexpected character {self.peek()!r}")
        return tuple(segments)

    def dotted(self) -> Segment:
        if self.peek() == "*":
            self.pos += 1
            return Wildcard()
        start = self.pos
        while not self.at_end() and self.expr[self.pos] not in ".[]":
            self.pos += 1
        name = self.expr[start:self.pos]
        if not name:
            self.error("empty key segment")
        return Child(name)

    def bracket(self) -> Segment:
        self.expect("[")
        ch = self.peek()
        segment: Segment
        if ch == "*":
            self.pos += 1
            segment = Wildcard()
        elif ch in ("'", '"'):
            segment = Child(self.quoted())
        elif ch == "?":
            segment = self.filter()
        else:
            m = _INT_RE.match(self.expr, self.pos)
            if not m:
                self.error("expected an index, '*', a quoted key or a filter")
            self.pos = m.end()
            segment = Index(int(m.group(0)))
        self.expect("]")
        return segment

    def filter(self) -> Filter:
        self.expect("?(")
        self.skip_ws()
        self.expect("@.")
        m = _FIELD_RE.match(self.expr, self.pos)
        if not m:
            self.error("expected a field name after '@.'")
        self.pos = m.end()
        self.skip_ws()
        self.expect("==")
        self.skip_ws()
        literal = self.literal()
        self.skip_ws()
        self.expect(")")
        return Filter(m.group(0), literal)

    def literal(self) -> Any:
        if self.peek() in ("'", '"'):
            return self.quoted()
        for word, value in (("true", True), ("false", False), ("null", None)):
            if self.expr.startswith(word, self.pos):
                self.pos += len(word)
                return value
        m = _NUMBER_RE.match(self.expr, self.pos)
        if not m:
            self.error("expected a string, number, true, false or null")
        self.pos = m.end()
        text = m.group(0)
        return float(text) if any(c in text for c in ".eE") else int(text)

    def quoted(self) -> str:
        quote = self.expr[self.pos]
        self.pos += 1
        out: List[str] = []
        while not self.at_end():
            ch = self.expr[self.pos]
            if ch == "\\" and self.pos + 1 < len(self.expr):
                out.append(self.expr[self.pos + 1])
                self.pos += 2
                continue
            if ch == quote:
                self.pos += 1
                return "".join(out)
            out.append(ch)
            self.pos += 1
        self.error("unterminated string")


@lru_cache(maxsize=512)
def parse_path(expression: str) -> Tuple[Segment, ...]:
    """Parse ``expression`` into segments. Raises :class:`PathSyntaxError`."""
    if not isinstance(expression, str):
        raise PathSyntaxError(repr(expression), 0, "path must be a string")
    return _Parser(expression).parse()


# ---- Evaluation --------------------------------------------------------------


@dataclass(frozen=True)
class Match:
    """A resolved location: ``parent[key] is value``. Root has ``parent=None``."""

    parent: Any
    key: Optional[Key]
    value: Any
    path: str

    @property
    def is_root(self) -> bool:
        return self.parent is None


def _join(path: str, key: Key) -> str:
    return f"{path}[{key}]" if isinstance(key, int) else f"{path}[{key!r}]"


def _children(match: Match) -> Iterator[Match]:
    value = match.value
    if isinstance(value, dict):
        for k, child in value.items():
            yield Match(value, k, child, _join(match.path, k))
    elif isinstance(value, list):
        for i, child in enumerate(value):
            yield Match(value, i, child, _join(match.path, i))


def _walk(match: Match) -> Iterator[Match]:
    yield match
    for child in _children(match):
        yield from _walk(child)


def _literal_equals(value: Any, literal: Any) -> bool:
    # JSON true/1 are distinct values
    if isinstance(value, bool) or isinstance(literal, bool):
        return type(value) is type(literal) and value == literal
    return value == literal


def _step(match: Match, segment: Segment) -> Iterator[Match]:
    value = match.value
    if isinstance(segment, Child):
        if isinstance(value, dict) and segment.name in value:
            yield Match(value, segment.name, value[segment.name], _join(match.path, segment.name))
    elif isinstance(segment, Index):
        if isinstance(value, list):
            i = segment.index + len(value) if segment.index < 0 else segment.index
            if 0 <= i < len(value):
                yield Match(value, i, value[i], _join(match.path, i))
    elif isinstance(segment, Wildcard):
        yield from _children(match)
    elif isinstance(segment, Filter):
        for child in _children(match):
            item = child.value
            if isinstance(item, dict) and segment.field in item and _literal_equals(item[segment.field], segment.literal):
                yield child
    elif isinstance(segment, Descendant):
        for node in _walk(match):
            yield from _step(node, segment.inner)


def find(document: Any, expression: str) -> List[Match]:
    """Like :func:`resolve` but returns an empty list instead of raising."""
    current = [Match(None, None, document, "$")]
    for segment in parse_path(expression):
        nxt: List[Match] = []
        seen = set()
        for match in current:
            for found in _step(match, segment):
                ident = (id(found.parent), found.key)
                if ident in seen:
                    continue
                seen.add(ident)
                nxt.append(found)
        current = nxt
        if not current:
            break
    return current


def resolve(document: Any, expression: str) -> List[Match]:
    """
    Resolve ``expression`` against ``document``.

    Raises :class:`NoMatchError` when nothing matches; overlay authors are
    expected to target existing nodes.
    """
    matches = find(document, expression)
    if not matches:
        raise NoMatchError(expression)
    return matches


__all__ = [
    "Child",
    "Index",
    "Wildcard",
    "Filter",
    "Descendant",
    "Segment",
    "Match",
    "parse_path",
    "find",
    "resolve",
]
