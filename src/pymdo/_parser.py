"""Comprehension parser: DSL text to ``Comprehension``.

The Lark grammar yields a flat list of top-level token trees. Sentences
are delimited over that list: at a top-level ``;``, or at the closing
brace of a block-like expression, the way Rust splits statements.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from lark import Token
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from pymdo._errors import (
    ERR_MSG_EMPTY_CONDITION,
    ERR_MSG_EMPTY_PATTERN,
    ERR_MSG_EMPTY_SOURCE,
    ERR_MSG_EMPTY_TYPE,
    ERR_MSG_MISSING_ARROW,
    ERR_MSG_MISSING_OPERATOR,
    ERR_MSG_MISSING_SEMICOLON,
    ERR_MSG_STRAY_ARROW,
    ERR_MSG_TRAILING_SYNTAX,
    ERR_MSG_UNEXPECTED_CHARACTER,
    ERR_MSG_UNEXPECTED_END,
    ERR_MSG_UNEXPECTED_TOKEN,
    MalformedPatternError,
    MissingArrowError,
    TrailingSyntaxError,
    UnexpectedTokenError,
)
from pymdo._grammar import token_tree_parser
from pymdo._patterns import parse_pattern
from pymdo._types import (
    BindSentence,
    BlockSentence,
    Comprehension,
    Expression,
    GuardSentence,
    IdentifierPattern,
    Pattern,
    Sentence,
    SourceCategory,
    Span,
    StatementSentence,
)
from pymdo._utils import (
    Item,
    ends_operand,
    find_punct,
    is_atomic,
    is_group,
    is_keyword,
    is_name,
    is_punct,
    item_end,
    item_start,
    items_span,
    items_text,
    starts_operand,
)

logger = logging.getLogger(__name__)

# Block-like expressions whose statement form ends at the brace of their body
_BRACED_KEYWORDS = ("match", "while", "for")

# Keywords that take a brace right after them
_BLOCK_KEYWORDS = ("unsafe", "loop")

# Punctuation that can begin the statement after a block-like expression
_STATEMENT_START_PUNCT = ("-", "!", "*", "&", "&&", "|", "||", "..", "..=", "<", "::", "#")

# Punctuation that continues a block-like expression as a postfix chain
_BLOCK_POSTFIX_PUNCT = (".", "?")

# Contextual keywords that precede a name in item definitions
_CONTEXTUAL_KEYWORDS = ("union",)

# A top-level `let` is part of the expression when it follows one of these
_LET_CONDITION_PREFIX = ("if", "while")
_LET_CONDITION_OPERATORS = ("&&", "||")


@dataclass(frozen=True)
class _Segment:
    """Top-level items of one sentence, plus whether a `;` terminated it."""

    items: Sequence[Item]
    terminated: bool


class Parser:
    """Parses the DSL text of a single comprehension occurrence."""

    def __init__(self, source: str, array_sources: Iterable[str] | None = None) -> None:
        self._source = source
        self._array_sources = frozenset(array_sources or ())

    def parse(self) -> Comprehension:
        items = self._token_trees()
        sentences: list[Sentence] = []
        yield_expr: Expression | None = None

        for segment in self._segments(items):
            if segment.terminated:
                sentences.append(self._sentence(segment.items))
            else:
                yield_expr = self._yield_expression(segment.items)

        logger.debug(
            "parsed comprehension with %d sentence(s), yield=%s",
            len(sentences),
            yield_expr is not None,
        )
        return Comprehension(sentences=tuple(sentences), yield_expr=yield_expr)

    # ---- Token trees ----

    def _token_trees(self) -> list[Item]:
        source = self._source
        try:
            tree = token_tree_parser().parse(source)
        except UnexpectedCharacters as exc:
            raise UnexpectedTokenError(
                ERR_MSG_UNEXPECTED_CHARACTER,
                f"unexpected character {exc.char!r} at line {exc.line}, column {exc.column}",
                wrapped=exc,
                span=Span.at(source, exc.pos_in_stream, exc.pos_in_stream + 1),
            ) from exc
        except UnexpectedToken as exc:
            token = exc.token
            if token.type == "$END":
                raise UnexpectedTokenError(
                    ERR_MSG_UNEXPECTED_END,
                    "input ends inside an unclosed delimiter",
                    wrapped=exc,
                    span=Span.at(source, len(source)),
                ) from exc
            raise UnexpectedTokenError(
                ERR_MSG_UNEXPECTED_TOKEN,
                f"unexpected '{token}' at line {token.line}, column {token.column}",
                wrapped=exc,
                span=Span.at(source, token.start_pos, token.end_pos),
            ) from exc
        except UnexpectedEOF as exc:
            raise UnexpectedTokenError(
                ERR_MSG_UNEXPECTED_END,
                "input ends inside an unclosed delimiter",
                wrapped=exc,
                span=Span.at(source, len(source)),
            ) from exc
        return list(tree.children)

    # ---- Sentence boundaries ----

    def _segments(self, items: Sequence[Item]) -> Iterator[_Segment]:
        index, count = 0, len(items)
        while index < count:
            if is_punct(items[index], ";"):
                index += 1
                continue

            end = _block_like_end(items, index)
            if end is not None and not (
                end < count and is_punct(items[end], *_BLOCK_POSTFIX_PUNCT)
            ):
                if end < count:
                    self._check_block_follower(items[end])
                if end < count and is_punct(items[end], ";"):
                    yield _Segment(items[index:end], terminated=True)
                    index = end + 1
                else:
                    # a block-like expression ends its statement without `;`,
                    # unless it is the last thing in the comprehension
                    yield _Segment(items[index:end], terminated=end < count)
                    index = end
                continue

            semi = find_punct(items, ";", start=index)
            if semi is None:
                yield _Segment(items[index:], terminated=False)
                return
            yield _Segment(items[index:semi], terminated=True)
            index = semi + 1

    # ---- Sentences ----

    def _sentence(self, items: Sequence[Item]) -> Sentence:
        first = items[0]
        if is_keyword(first, "let"):
            return self._let_sentence(items)

        span = items_span(self._source, items)
        if is_group(first, "brace") and len(items) == 1:
            return BlockSentence(code=self._text(items), unsafe=False, span=span)
        if is_keyword(first, "unsafe") and len(items) == 2 and is_group(items[1], "brace"):
            return BlockSentence(code=self._text(items[1:]), unsafe=True, span=span)

        self._check_trailing_syntax(items)
        self._check_stray_arrow(items)

        if is_keyword(first, "if") and _block_like_end(items, 0) is None:
            if len(items) == 1:
                raise UnexpectedTokenError(
                    ERR_MSG_EMPTY_CONDITION,
                    "guard sentence has no condition",
                    span=Span.at(self._source, item_end(first)),
                )
            return GuardSentence(condition=self._expression(items[1:]), span=span)

        return StatementSentence(code=self._text(items), span=span)

    def _let_sentence(self, items: Sequence[Item]) -> Sentence:
        source = self._source
        span = items_span(source, items)
        arrow = find_punct(items, "<-")
        equals = find_punct(items, "=")

        if arrow is None or (equals is not None and equals < arrow):
            # plain `let` statement: `let pattern [: type] [= expr [else { .. }]];`
            head_end = equals if equals is not None else len(items)
            self._check_trailing_syntax(items[head_end:])
            self._check_stray_arrow(items)
            try:
                pattern, _ = self._binding(items, 1, head_end)
            except MalformedPatternError as exc:
                raise MissingArrowError(
                    ERR_MSG_MISSING_ARROW,
                    f"'{self._text(items)}' is neither a `<-` binding nor a `let` statement",
                    wrapped=exc,
                    span=span,
                ) from exc
            return StatementSentence(code=self._text(items), span=span, pattern=pattern)

        pattern, type_annotation = self._binding(items, 1, arrow)
        source_items = items[arrow + 1:]
        if not source_items:
            raise UnexpectedTokenError(
                ERR_MSG_EMPTY_SOURCE,
                f"binding '{self._text(items)}' has no source expression",
                span=Span.at(source, item_end(items[arrow])),
            )
        self._check_trailing_syntax(source_items)
        self._check_stray_arrow(source_items)

        return BindSentence(
            pattern=pattern,
            source=self._expression(source_items),
            mutable=isinstance(pattern, IdentifierPattern) and pattern.mutable,
            type_annotation=type_annotation,
            category=self._source_category(source_items),
            span=span,
        )

    def _binding(
        self, items: Sequence[Item], start: int, end: int
    ) -> tuple[Pattern, str | None]:
        """Parse ``items[start:end]`` as ``pattern [: type]``."""
        if start >= end:
            anchor = item_end(items[start - 1])
            raise MalformedPatternError(
                ERR_MSG_EMPTY_PATTERN,
                f"no pattern after `let` in '{self._text(items)}'",
                span=Span.at(self._source, anchor),
            )

        colon = find_punct(items[:end], ":", start=start)
        type_annotation = None
        if colon is not None:
            if colon + 1 >= end:
                raise MalformedPatternError(
                    ERR_MSG_EMPTY_TYPE,
                    f"type annotation in '{self._text(items)}' is empty",
                    span=Span.at(self._source, item_end(items[colon])),
                )
            type_annotation = self._text(items[colon + 1:end])
            end = colon
            if start >= end:
                raise MalformedPatternError(
                    ERR_MSG_EMPTY_PATTERN,
                    f"no pattern before the type annotation in '{self._text(items)}'",
                    span=Span.at(self._source, item_start(items[colon])),
                )

        pattern = parse_pattern(
            self._source, item_start(items[start]), item_end(items[end - 1])
        )
        return pattern, type_annotation

    def _yield_expression(self, items: Sequence[Item]) -> Expression:
        first = items[0]
        unterminated_sentence = is_keyword(first, "let") or (
            is_keyword(first, "if") and _block_like_end(items, 0) is None
        )
        if unterminated_sentence:
            raise UnexpectedTokenError(
                ERR_MSG_MISSING_SEMICOLON,
                f"'{self._text(items)}' must end with `;`",
                span=Span.at(self._source, item_end(items[-1])),
            )
        self._check_trailing_syntax(items)
        self._check_stray_arrow(items)
        return self._expression(items)

    # ---- Checks ----

    def _check_stray_arrow(self, items: Sequence[Item]) -> None:
        arrow = find_punct(items, "<-")
        if arrow is not None:
            token = items[arrow]
            raise UnexpectedTokenError(
                ERR_MSG_STRAY_ARROW,
                f"unexpected `<-` at line {token.line}, column {token.column}",
                span=Span.at(self._source, token.start_pos, token.end_pos),
            )

    def _check_block_follower(self, item: Item) -> None:
        """Reject an operator continuing a block-like statement."""
        if is_punct(item, ";", *_STATEMENT_START_PUNCT):
            return
        is_operator = isinstance(item, Token) and item.type == "PUNCT"
        if is_operator or is_keyword(item, "as", "else"):
            raise UnexpectedTokenError(
                ERR_MSG_UNEXPECTED_TOKEN,
                f"unexpected '{item}' at line {item.line}, column {item.column} "
                "after a block-like statement",
                span=Span.at(self._source, item.start_pos, item.end_pos),
            )

    def _check_trailing_syntax(self, items: Sequence[Item]) -> None:
        self._check_trailing_let(items)
        for index in range(1, len(items)):
            previous, item = items[index - 1], items[index]
            if not (ends_operand(previous) and starts_operand(item)):
                continue
            if is_keyword(previous, *_CONTEXTUAL_KEYWORDS):
                continue
            raise TrailingSyntaxError(
                ERR_MSG_MISSING_OPERATOR,
                f"'{item}' at line {item.line}, column {item.column} "
                f"follows '{self._text(items[:index])}' without an operator or `;`",
                span=Span.at(self._source, item.start_pos, item.end_pos),
            )

    def _check_trailing_let(self, items: Sequence[Item]) -> None:
        for index in range(1, len(items)):
            if not is_keyword(items[index], "let"):
                continue
            previous = items[index - 1]
            if is_keyword(previous, *_LET_CONDITION_PREFIX) or is_punct(
                previous, *_LET_CONDITION_OPERATORS
            ):
                continue
            token = items[index]
            raise TrailingSyntaxError(
                ERR_MSG_TRAILING_SYNTAX,
                f"`let` at line {token.line}, column {token.column} follows "
                f"'{self._text(items[:index])}' without a `;`",
                span=Span.at(self._source, token.start_pos, token.end_pos),
            )

    # ---- Helpers ----

    def _text(self, items: Sequence[Item]) -> str:
        return items_text(self._source, items)

    def _expression(self, items: Sequence[Item]) -> Expression:
        return Expression(
            code=self._text(items),
            span=items_span(self._source, items),
            atomic=is_atomic(items),
        )

    def _source_category(self, items: Sequence[Item]) -> SourceCategory:
        if len(items) == 1 and is_name(items[0]) and items[0].value in self._array_sources:
            return SourceCategory.ARRAY
        return SourceCategory.GENERAL


def _block_like_end(items: Sequence[Item], index: int) -> int | None:
    """Index just past the block-like expression starting at ``index``, if any."""
    first = items[index]
    if is_group(first, "brace"):
        return index + 1
    if is_keyword(first, *_BLOCK_KEYWORDS):
        if index + 1 < len(items) and is_group(items[index + 1], "brace"):
            return index + 2
        return None
    if is_keyword(first, "if"):
        return _if_chain_end(items, index)
    if is_keyword(first, *_BRACED_KEYWORDS):
        brace = _body_brace(items, index)
        return None if brace is None else brace + 1
    return None


def _if_chain_end(items: Sequence[Item], index: int) -> int | None:
    brace = _body_brace(items, index)
    if brace is None:
        return None
    after = brace + 1
    if after < len(items) and is_keyword(items[after], "else"):
        if after + 1 < len(items) and is_group(items[after + 1], "brace"):
            return after + 2
        if after + 1 < len(items) and is_keyword(items[after + 1], "if"):
            return _if_chain_end(items, after + 1)
        return None
    return after


def _body_brace(items: Sequence[Item], index: int) -> int | None:
    """Index of the body brace of the keyword expression at ``index``.

    The body is the first top-level brace after a complete operand of the
    head, so ``if x == unsafe { y }`` has no body of its own. Returns None
    when a `;` comes first.
    """
    start = _head_start(items, index)
    if start is None:
        return None
    for position in range(start + 1, len(items)):
        item = items[position]
        if is_punct(item, ";"):
            return None
        previous = items[position - 1]
        if is_group(item, "brace") and (ends_operand(previous) or is_punct(previous, "..")):
            return position
    return None


def _head_start(items: Sequence[Item], index: int) -> int | None:
    """Index where the head expression of a keyword expression begins.

    ``for PAT in`` and ``if let PAT =`` are skipped, since their patterns
    may hold braces of their own.
    """
    start = index + 1
    if is_keyword(items[index], "for"):
        marker = _find_before_semicolon(items, start, lambda item: is_keyword(item, "in"))
    elif start < len(items) and is_keyword(items[start], "let"):
        marker = _find_before_semicolon(items, start, lambda item: is_punct(item, "="))
    else:
        return start
    return None if marker is None else marker + 1


def _find_before_semicolon(items: Sequence[Item], start: int, predicate) -> int | None:
    for index in range(start, len(items)):
        if is_punct(items[index], ";"):
            return None
        if predicate(items[index]):
            return index
    return None


def parse(source: str, *, array_sources: Iterable[str] | None = None) -> Comprehension:
    """Parse the DSL text of one comprehension occurrence.

    Args:
        source: The comprehension body, without the surrounding macro braces.
        array_sources: Names of fixed-size arrays; binding from one of them
            is classified as an array source.

    Returns:
        The parsed ``Comprehension``.

    Raises:
        ParseError: If the text is not a valid comprehension.
    """
    return Parser(source, array_sources).parse()
