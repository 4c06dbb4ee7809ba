"""Token-tree helpers, binding name validation and grouping checks."""

from __future__ import annotations

import re
from collections.abc import Sequence

from lark import Token, Tree

from pymdo._errors import (
    ERR_MSG_INVALID_PATTERN,
    ERR_MSG_KEYWORD_BINDING,
    MalformedPatternError,
)
from pymdo._types import Span

Item = Token | Tree
"""A top-level element of a token tree: a single token or a delimited group."""

GROUP_KINDS = ("paren", "bracket", "brace")

RUST_KEYWORDS: set[str] = {
    "as", "async", "await", "break", "const", "continue", "crate", "dyn",
    "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
    "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
    "self", "Self", "static", "struct", "super", "trait", "true", "type",
    "unsafe", "use", "where", "while",
    # reserved for future use
    "abstract", "become", "box", "do", "final", "macro", "override",
    "priv", "try", "typeof", "unsized", "virtual", "yield",
}

# Keywords that start an expression which cannot take a postfix call as written
_PREFIX_KEYWORDS = {
    "async", "break", "continue", "for", "if", "let", "loop", "match",
    "move", "return", "unsafe", "while", "yield",
}

# Punctuation that keeps a postfix chain intact
_POSTFIX_PUNCT = {".", "::", "?"}

# Keywords that are values on their own
_VALUE_KEYWORDS = {"true", "false", "self", "Self"}

_LITERAL_TYPES = {"NUMBER", "STRING", "RAW_STRING", "CHAR"}

IDENTIFIER_RE = re.compile(r"^(?:r#)?[^\W\d]\w*$")


def item_start(item: Item) -> int:
    if isinstance(item, Token):
        return item.start_pos
    return item_start(item.children[0])


def item_end(item: Item) -> int:
    if isinstance(item, Token):
        return item.end_pos
    return item_end(item.children[-1])


def items_span(source: str, items: Sequence[Item]) -> Span:
    return Span.at(source, item_start(items[0]), item_end(items[-1]))


def items_text(source: str, items: Sequence[Item]) -> str:
    return source[item_start(items[0]):item_end(items[-1])]


def is_group(item: Item, kind: str | None = None) -> bool:
    if not isinstance(item, Tree):
        return False
    return item.data in GROUP_KINDS if kind is None else item.data == kind


def is_punct(item: Item, *values: str) -> bool:
    return isinstance(item, Token) and item.type == "PUNCT" and item.value in values


def is_keyword(item: Item, *names: str) -> bool:
    return isinstance(item, Token) and item.type == "NAME" and item.value in names


def find_punct(items: Sequence[Item], *values: str, start: int = 0) -> int | None:
    """Index of the first top-level punctuation token among ``values``."""
    for index in range(start, len(items)):
        if is_punct(items[index], *values):
            return index
    return None


def is_atomic(items: Sequence[Item]) -> bool:
    """Whether the expression can take ``.method()`` without parentheses.

    Paths, calls, macro invocations, field and method chains, indexing,
    literals and struct literals qualify. Anything with a prefix or binary
    operator, a range, a cast, a closure, a leading block or a leading
    keyword does not.
    """
    if not items or is_group(items[0], "brace"):
        return False
    if is_keyword(items[0], *_PREFIX_KEYWORDS):
        return False
    for index, item in enumerate(items):
        if isinstance(item, Tree):
            continue
        if item.type == "NAME" and item.value == "as":
            return False
        if item.type != "PUNCT" or item.value in _POSTFIX_PUNCT:
            continue
        # macro invocation: name!(...)
        if (
            item.value == "!"
            and index > 0
            and is_name(items[index - 1])
            and index + 1 < len(items)
            and is_group(items[index + 1])
        ):
            continue
        return False
    return True


def is_name(item: Item) -> bool:
    return isinstance(item, Token) and item.type == "NAME"


def _is_operand_token(item: Item) -> bool:
    if not isinstance(item, Token):
        return False
    if item.type in _LITERAL_TYPES:
        return True
    return item.type == "NAME" and (
        item.value not in RUST_KEYWORDS or item.value in _VALUE_KEYWORDS
    )


def ends_operand(item: Item) -> bool:
    """Whether ``item`` can be the last token of an operand."""
    return is_group(item) or is_punct(item, "?") or _is_operand_token(item)


def starts_operand(item: Item) -> bool:
    """Whether ``item`` begins a new operand when it follows another one.

    Groups are excluded: after an operand, parentheses are a call,
    brackets an index and braces a struct literal or a block body.
    """
    return _is_operand_token(item)


def validate_binding_name(name: str, span: Span | None = None) -> None:
    """Validate an identifier introduced by a pattern."""
    if not IDENTIFIER_RE.match(name):
        raise MalformedPatternError(
            ERR_MSG_INVALID_PATTERN,
            f"binding name '{name}' is not an identifier",
            span=span,
        )
    if name in RUST_KEYWORDS:
        raise MalformedPatternError(
            ERR_MSG_KEYWORD_BINDING,
            f"binding name '{name}' is a reserved keyword",
            span=span,
        )
