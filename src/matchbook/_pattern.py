"""Structural patterns: parse a shape description, test it, extract bindings.

A pattern is parsed once into an AST by a recursive-descent parser and
then walked for every test. The same walk serves as the guard and as the
extractor, so the two can never disagree about what matched::

    >>> p = Pattern.parse("Point(x, 0)")
    >>> p.names
    ('x',)

Grammar::

    pattern  := primary [ "as" NAME ]
    primary  := literal | "_" | NAME | CLASS "(" [ args ] ")" | "[" [ items ] "]"
    args     := arg ( "," arg )* [ "," ]
    arg      := pattern | NAME "=" pattern
    items    := item ( "," item )* [ "," ]
    item     := pattern | "*" NAME
    literal  := integer | float | string | True | False | None
    CLASS    := NAME ( "." NAME )*

Arity mismatches, missing attributes and wrong discriminators are
non-matches. Syntax problems and duplicate bound names are
PatternSyntaxError at parse time.
"""

from __future__ import annotations

import ast
import datetime
import functools
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from matchbook._errors import NotAppliedError, PatternSyntaxError

if TYPE_CHECKING:
    from matchbook._types import Bindings

logger = logging.getLogger(__name__)

MAX_PATTERN_LENGTH = 8192
MAX_PATTERN_DEPTH = 32
_PARSE_CACHE_SIZE = 256

# Builtins whose single positional sub-pattern matches the whole value.
_SELF_MATCHING = (bool, bytearray, bytes, dict, float, frozenset, int, list, set, str, tuple)

# Positional parts for types that predate __match_args__.
_POSITIONAL_PARTS: dict[type, tuple[str, ...]] = {
    datetime.date: ("year", "month", "day"),
    datetime.time: ("hour", "minute", "second"),
    complex: ("real", "imag"),
}

_CONSTANTS = {"True": True, "False": False, "None": None}


# ═══════════════════════════════════════════════════════════════════════════════
# AST
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LiteralNode:
    value: Any


@dataclass(frozen=True, slots=True)
class CaptureNode:
    name: str


@dataclass(frozen=True, slots=True)
class WildcardNode:
    pass


@dataclass(frozen=True, slots=True)
class ClassNode:
    """Discriminator plus positional and keyword sub-patterns."""

    name: str
    positional: tuple[Node, ...] = ()
    keywords: tuple[tuple[str, Node], ...] = ()


@dataclass(frozen=True, slots=True)
class SequenceNode:
    """List/tuple shape. ``star`` is the index of the starred item, if any."""

    items: tuple[Node, ...]
    star: int | None = None
    star_name: str | None = None


@dataclass(frozen=True, slots=True)
class AsNode:
    pattern: Node
    name: str


type Node = LiteralNode | CaptureNode | WildcardNode | ClassNode | SequenceNode | AsNode


# ═══════════════════════════════════════════════════════════════════════════════
# Tokenizer
# ═══════════════════════════════════════════════════════════════════════════════

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?)
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)
  | (?P<op>[()\[\],=*])
    """,
    re.VERBOSE,
)


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    text: str
    position: int


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise PatternSyntaxError(f"unexpected character {text[pos]!r}", text, pos)
        kind = m.lastgroup
        if kind != "ws":
            tokens.append(_Token(kind, m.group(), pos))
        pos = m.end()
    tokens.append(_Token("end", "", len(text)))
    return tokens


# ═══════════════════════════════════════════════════════════════════════════════
# Parser
# ═══════════════════════════════════════════════════════════════════════════════


class _Parser:
    """Recursive-descent parser producing a Node tree and the bound names."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0
        self.names: list[str] = []

    def parse(self) -> Node:
        node = self._pattern(depth=1)
        tok = self._peek()
        if tok.kind != "end":
            self._fail(f"unexpected {tok.text!r}", tok)
        return node

    # ── Token helpers ──────────────────────────────────────────────────────

    def _peek(self, offset: int = 0) -> _Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def _next(self) -> _Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _at(self, text: str) -> bool:
        tok = self._peek()
        return tok.kind == "op" and tok.text == text

    def _expect(self, text: str) -> None:
        tok = self._peek()
        if not self._at(text):
            found = "end of pattern" if tok.kind == "end" else repr(tok.text)
            self._fail(f"expected {text!r}, found {found}", tok)
        self._next()

    def _fail(self, reason: str, tok: _Token) -> None:
        raise PatternSyntaxError(reason, self.text, tok.position)

    def _bind(self, name: str, tok: _Token) -> None:
        if name in self.names:
            self._fail(f"name {name!r} is bound more than once", tok)
        self.names.append(name)

    # ── Grammar ────────────────────────────────────────────────────────────

    def _pattern(self, depth: int) -> Node:
        if depth > MAX_PATTERN_DEPTH:
            self._fail(f"pattern nesting exceeds maximum depth {MAX_PATTERN_DEPTH}", self._peek())
        node = self._primary(depth)
        tok = self._peek()
        if tok.kind == "name" and tok.text == "as":
            self._next()
            name_tok = self._next()
            if name_tok.kind != "name" or not _is_capture_name(name_tok.text):
                self._fail("expected a name after 'as'", name_tok)
            self._bind(name_tok.text, name_tok)
            node = AsNode(node, name_tok.text)
        return node

    def _primary(self, depth: int) -> Node:
        tok = self._peek()
        if tok.kind == "number" or tok.kind == "string":
            self._next()
            try:
                return LiteralNode(ast.literal_eval(tok.text))
            except (ValueError, SyntaxError) as e:
                reason = f"invalid literal {tok.text}"
                raise PatternSyntaxError(reason, self.text, tok.position) from e
        if self._at("["):
            return self._sequence(depth)
        if tok.kind != "name":
            found = "end of pattern" if tok.kind == "end" else repr(tok.text)
            self._fail(f"expected a pattern, found {found}", tok)
        self._next()
        if self._at("("):
            return self._class(tok, depth)
        if tok.text in _CONSTANTS:
            return LiteralNode(_CONSTANTS[tok.text])
        if tok.text == "_":
            return WildcardNode()
        if not _is_capture_name(tok.text):
            self._fail(f"{tok.text!r} cannot be bound; dotted names need '(...)'", tok)
        self._bind(tok.text, tok)
        return CaptureNode(tok.text)

    def _class(self, name_tok: _Token, depth: int) -> Node:
        if name_tok.text in _CONSTANTS or name_tok.text == "_":
            self._fail(f"{name_tok.text!r} is not a class name", name_tok)
        self._expect("(")
        positional: list[Node] = []
        keywords: list[tuple[str, Node]] = []
        while not self._at(")"):
            tok = self._peek()
            if tok.kind == "name" and self._peek(1).kind == "op" and self._peek(1).text == "=":
                if not _is_capture_name(tok.text) or tok.text == "_":
                    self._fail(f"invalid keyword {tok.text!r}", tok)
                if any(k == tok.text for k, _ in keywords):
                    self._fail(f"keyword {tok.text!r} repeated", tok)
                self._next()
                self._next()
                keywords.append((tok.text, self._pattern(depth + 1)))
            else:
                if keywords:
                    self._fail("positional pattern follows keyword pattern", tok)
                positional.append(self._pattern(depth + 1))
            if not self._at(")"):
                self._expect(",")
        self._expect(")")
        return ClassNode(name_tok.text, tuple(positional), tuple(keywords))

    def _sequence(self, depth: int) -> Node:
        self._expect("[")
        items: list[Node] = []
        star: int | None = None
        star_name: str | None = None
        while not self._at("]"):
            tok = self._peek()
            if self._at("*"):
                if star is not None:
                    self._fail("multiple starred names in sequence pattern", tok)
                self._next()
                name_tok = self._next()
                if name_tok.kind != "name" or not _is_capture_name(name_tok.text):
                    self._fail("expected a name after '*'", name_tok)
                star = len(items)
                if name_tok.text != "_":
                    self._bind(name_tok.text, name_tok)
                    star_name = name_tok.text
            else:
                items.append(self._pattern(depth + 1))
            if not self._at("]"):
                self._expect(",")
        self._expect("]")
        return SequenceNode(tuple(items), star, star_name)


def _is_capture_name(text: str) -> bool:
    return "." not in text and text not in _CONSTANTS and text != "as"


# ═══════════════════════════════════════════════════════════════════════════════
# Matching
# ═══════════════════════════════════════════════════════════════════════════════


def _match(node: Node, value: Any, bindings: Bindings) -> bool:
    """Walk node against value, recording captures into bindings."""
    match node:
        case WildcardNode():
            return True
        case CaptureNode(name=name):
            bindings[name] = value
            return True
        case LiteralNode(value=expected):
            if expected is None or isinstance(expected, bool):
                return value is expected
            return bool(value == expected)
        case AsNode(pattern=inner, name=name):
            if not _match(inner, value, bindings):
                return False
            bindings[name] = value
            return True
        case ClassNode():
            return _match_class(node, value, bindings)
        case SequenceNode():
            return _match_sequence(node, value, bindings)
    return False  # pragma: no cover


def _match_class(node: ClassNode, value: Any, bindings: Bindings) -> bool:
    if not _has_discriminator(type(value), node.name):
        return False
    if node.positional:
        parts = _positional_parts(value)
        if parts is None or len(parts) != len(node.positional):
            return False
        for sub, part in zip(node.positional, parts, strict=True):
            if not _match(sub, part, bindings):
                return False
    for attr, sub in node.keywords:
        try:
            part = getattr(value, attr)
        except AttributeError:
            return False
        if not _match(sub, part, bindings):
            return False
    return True


def _match_sequence(node: SequenceNode, value: Any, bindings: Bindings) -> bool:
    if not isinstance(value, (list, tuple)):
        return False
    items = node.items
    if node.star is None:
        if len(value) != len(items):
            return False
        return all(_match(sub, part, bindings) for sub, part in zip(items, value, strict=True))
    head, tail = items[: node.star], items[node.star :]
    if len(value) < len(items):
        return False
    rest_end = len(value) - len(tail)
    if not all(_match(sub, part, bindings) for sub, part in zip(head, value, strict=False)):
        return False
    if not all(
        _match(sub, part, bindings) for sub, part in zip(tail, value[rest_end:], strict=True)
    ):
        return False
    if node.star_name is not None:
        bindings[node.star_name] = list(value[len(head) : rest_end])
    return True


def _has_discriminator(cls: type, name: str) -> bool:
    return any(
        name in (c.__name__, c.__qualname__, f"{c.__module__}.{c.__qualname__}")
        for c in cls.__mro__
    )


def _positional_parts(value: Any) -> tuple[Any, ...] | None:
    """Sub-values addressed by positional slots, or None if the value has none."""
    for cls in type(value).__mro__:
        attrs = _POSITIONAL_PARTS.get(cls)
        if attrs is not None:
            return tuple(getattr(value, a) for a in attrs)
    match_args = getattr(type(value), "__match_args__", None)
    if isinstance(match_args, tuple):
        try:
            return tuple(getattr(value, a) for a in match_args)
        except AttributeError:
            return None
    if isinstance(value, _SELF_MATCHING):
        return (value,)
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Pattern:
    """A parsed structural pattern.

    Construct with Pattern.parse(); parsing is memoized per distinct text.
    A Pattern is itself a Guard (it has ``matches``), and ``guard()``
    returns a dedicated PatternGuard for composition.
    """

    text: str
    root: Node
    names: tuple[str, ...]

    @classmethod
    def parse(cls, text: str) -> Pattern:
        """Parse pattern text.

        Raises:
            PatternSyntaxError: malformed text, duplicate bound names,
                or text/nesting beyond MAX_PATTERN_LENGTH/MAX_PATTERN_DEPTH.
        """
        return _parse_cached(text)

    def guard(self) -> PatternGuard:
        return PatternGuard(self)

    def matches(self, value: Any, /) -> bool:
        return _match(self.root, value, {})

    def extract(self, value: Any) -> Bindings:
        """Return a fresh name -> sub-value mapping.

        Raises:
            NotAppliedError: If the value does not match the pattern.
        """
        bindings: Bindings = {}
        if not _match(self.root, value, bindings):
            raise NotAppliedError(value, f"{value!r} does not match pattern {self.text!r}")
        return bindings


@dataclass(frozen=True, slots=True)
class PatternGuard:
    """Guard testing whether a value has a pattern's shape."""

    pattern: Pattern

    def matches(self, value: Any, /) -> bool:
        return self.pattern.matches(value)


@functools.lru_cache(maxsize=_PARSE_CACHE_SIZE)
def _parse_cached(text: str) -> Pattern:
    if not isinstance(text, str):
        msg = f"pattern must be a string, got {type(text).__name__}"
        raise TypeError(msg)
    if len(text) > MAX_PATTERN_LENGTH:
        raise PatternSyntaxError(
            f"pattern length {len(text)} exceeds maximum {MAX_PATTERN_LENGTH}", text[:64] + "..."
        )
    parser = _Parser(text)
    root = parser.parse()
    logger.debug("parsed pattern %r, bound names %s", text, parser.names)
    return Pattern(text=text, root=root, names=tuple(parser.names))
