"""Domain types for parsed comprehensions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Span:
    """Half-open character range in the DSL source, with 1-based line/column of its start."""

    start: int
    end: int
    line: int = 1
    column: int = 1

    @classmethod
    def at(cls, source: str, start: int, end: int | None = None) -> Span:
        """Build a span for ``source[start:end]``, computing line and column."""
        if end is None:
            end = start
        line = source.count("\n", 0, start) + 1
        column = start - (source.rfind("\n", 0, start) + 1) + 1
        return cls(start, end, line, column)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class SourceCategory(enum.Enum):
    """Shape of a bind source, as far as binding policy is concerned."""

    GENERAL = "general"
    ARRAY = "array"


@dataclass(frozen=True)
class Expression:
    """Verbatim host-language code taken from the DSL source.

    ``atomic`` is true when the code can be followed by a method call
    without being parenthesised first.
    """

    code: str
    span: Span | None = field(default=None, compare=False)
    atomic: bool = True

    def grouped(self) -> str:
        return self.code if self.atomic else f"({self.code})"


# --- Patterns ---


@dataclass(frozen=True)
class IdentifierPattern:
    name: str
    mutable: bool = False
    by_ref: bool = False
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class WildcardPattern:
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class RestPattern:
    """The ``..`` element of a tuple or struct pattern."""

    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class TuplePattern:
    """A tuple pattern, or a tuple-struct pattern when ``path`` is set."""

    elements: tuple[Pattern, ...]
    path: str | None = None


@dataclass(frozen=True)
class FieldPattern:
    name: str
    pattern: Pattern
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class StructPattern:
    path: str
    fields: tuple[FieldPattern, ...] = ()
    has_rest: bool = False


@dataclass(frozen=True)
class ReferencePattern:
    inner: Pattern
    mutable: bool = False


Pattern = Union[
    IdentifierPattern,
    WildcardPattern,
    RestPattern,
    TuplePattern,
    StructPattern,
    ReferencePattern,
]


@dataclass(frozen=True)
class Binding:
    """A name introduced by a pattern."""

    name: str
    mutable: bool = False
    by_ref: bool = False
    span: Span | None = field(default=None, compare=False)


# --- Sentences ---


@dataclass(frozen=True)
class BindSentence:
    """``let [mut] pattern [: type] <- source;``"""

    pattern: Pattern
    source: Expression
    mutable: bool = False
    type_annotation: str | None = None
    category: SourceCategory = SourceCategory.GENERAL
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class GuardSentence:
    """``if condition;``"""

    condition: Expression
    span: Span | None = field(default=None, compare=False)


@dataclass(frozen=True)
class StatementSentence:
    """An ordinary statement, passed through verbatim.

    ``pattern`` holds the declared pattern of a plain ``let`` statement.
    """

    code: str
    span: Span | None = field(default=None, compare=False)
    pattern: Pattern | None = field(default=None, compare=False)


@dataclass(frozen=True)
class BlockSentence:
    """A ``{ ... }`` or ``unsafe { ... }`` block, passed through verbatim."""

    code: str
    unsafe: bool = False
    span: Span | None = field(default=None, compare=False)


Sentence = Union[BindSentence, GuardSentence, StatementSentence, BlockSentence]


@dataclass(frozen=True)
class Comprehension:
    """One parsed DSL occurrence: ordered sentences plus an optional yield expression."""

    sentences: tuple[Sentence, ...] = ()
    yield_expr: Expression | None = None
