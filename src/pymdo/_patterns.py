"""Binding pattern parsing, extraction and rendering.

Patterns are parsed with their own Lark grammar, built into pattern
dataclasses, and decomposed into the ordered names they bind. The
desugarer renders the same patterns back as closure parameters.
"""

from __future__ import annotations

from lark import Token, Transformer
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedToken,
    VisitError,
)

from pymdo._errors import (
    ERR_MSG_DUPLICATE_BINDING,
    ERR_MSG_INVALID_PATTERN,
    ERR_MSG_MISPLACED_REST,
    MalformedPatternError,
)
from pymdo._grammar import pattern_parser
from pymdo._types import (
    Binding,
    FieldPattern,
    IdentifierPattern,
    Pattern,
    ReferencePattern,
    RestPattern,
    Span,
    StructPattern,
    TuplePattern,
    WildcardPattern,
)
from pymdo._utils import validate_binding_name


class PatternBuilder(Transformer):
    """Transforms a pattern parse tree into pattern dataclasses.

    Token positions are relative to the parsed slice; ``offset`` maps
    them back into the full DSL source.
    """

    def __init__(self, source: str, offset: int = 0) -> None:
        super().__init__()
        self._source = source
        self._offset = offset

    def _span(self, token: Token) -> Span:
        return Span.at(
            self._source,
            self._offset + token.start_pos,
            self._offset + token.end_pos,
        )

    def ident_pattern(self, children: list) -> IdentifierPattern:
        name = children[-1]
        return IdentifierPattern(
            name=str(name),
            mutable=any(c.type == "MUT" for c in children[:-1]),
            by_ref=any(c.type == "REF" for c in children[:-1]),
            span=self._span(name),
        )

    def wildcard(self, children: list) -> WildcardPattern:
        return WildcardPattern(span=self._span(children[0]))

    def rest(self, children: list) -> RestPattern:
        return RestPattern(span=self._span(children[0]))

    def ref_pattern(self, children: list) -> ReferencePattern:
        amp, inner = children
        return ReferencePattern(inner=inner, mutable=amp.type == "AMP_MUT")

    def tuple_pattern(self, children: list) -> Pattern:
        elements = _without_commas(children)
        trailing_comma = bool(children) and _is_comma(children[-1])
        # `(p)` is a parenthesized pattern, `(p,)` a one-element tuple
        if len(elements) == 1 and not trailing_comma and not isinstance(elements[0], RestPattern):
            return elements[0]
        return TuplePattern(elements=tuple(elements))

    def tuple_struct_pattern(self, children: list) -> TuplePattern:
        path, *rest = children
        return TuplePattern(elements=tuple(_without_commas(rest)), path=path)

    def struct_pattern(self, children: list) -> StructPattern:
        path, *rest = children
        entries = _without_commas(rest)
        fields = tuple(e for e in entries if isinstance(e, FieldPattern))
        rests = [e for e in entries if isinstance(e, RestPattern)]
        if len(rests) > 1 or (rests and not isinstance(entries[-1], RestPattern)):
            raise MalformedPatternError(
                ERR_MSG_MISPLACED_REST,
                f"struct pattern '{path}' has a misplaced `..`",
                span=rests[-1].span,
            )
        return StructPattern(path=path, fields=fields, has_rest=bool(rests))

    def field(self, children: list) -> FieldPattern:
        name, pattern = children
        return FieldPattern(name=str(name), pattern=pattern, span=self._span(name))

    def shorthand_field(self, children: list) -> FieldPattern:
        ident = self.ident_pattern(children)
        return FieldPattern(name=ident.name, pattern=ident, span=ident.span)

    def path(self, children: list) -> str:
        return "::".join(str(c) for c in children)


def _is_comma(child: object) -> bool:
    return isinstance(child, Token) and child.type == "COMMA"


def _without_commas(children: list) -> list:
    return [c for c in children if not _is_comma(c)]


def parse_pattern(source: str, start: int, end: int) -> Pattern:
    """Parse ``source[start:end]`` as a binding pattern and validate it.

    Raises:
        MalformedPatternError: If the text is not a supported pattern.
    """
    text = source[start:end]
    try:
        tree = pattern_parser().parse(text)
    except UnexpectedCharacters as exc:
        raise MalformedPatternError(
            ERR_MSG_INVALID_PATTERN,
            f"unexpected character {exc.char!r} in pattern '{text}'",
            wrapped=exc,
            span=Span.at(source, start + exc.pos_in_stream, start + exc.pos_in_stream + 1),
        ) from exc
    except UnexpectedToken as exc:
        pos = exc.token.start_pos if exc.token.type != "$END" else None
        if pos is None:
            span = Span.at(source, end)
            detail = f"pattern '{text}' ends unexpectedly"
        else:
            span = Span.at(source, start + pos, start + exc.token.end_pos)
            detail = f"unexpected token '{exc.token}' in pattern '{text}'"
        raise MalformedPatternError(
            ERR_MSG_INVALID_PATTERN, detail, wrapped=exc, span=span,
        ) from exc
    except UnexpectedEOF as exc:
        raise MalformedPatternError(
            ERR_MSG_INVALID_PATTERN,
            f"pattern '{text}' ends unexpectedly",
            wrapped=exc,
            span=Span.at(source, end),
        ) from exc

    try:
        pattern = PatternBuilder(source, start).transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, MalformedPatternError):
            raise exc.orig_exc from None
        raise
    extract_bindings(pattern)
    return pattern


def extract_bindings(pattern: Pattern) -> list[Binding]:
    """Return the names bound by ``pattern`` in depth-first order.

    Wildcards and ``..`` bind nothing. A name bound twice, a keyword
    used as a name, or more than one ``..`` in a tuple is rejected.

    Raises:
        MalformedPatternError: If the pattern shape is unsupported.
    """
    bindings: list[Binding] = []
    _collect(pattern, bindings)

    seen: set[str] = set()
    for binding in bindings:
        if binding.name in seen:
            raise MalformedPatternError(
                ERR_MSG_DUPLICATE_BINDING,
                f"identifier '{binding.name}' is bound more than once in the same pattern",
                span=binding.span,
            )
        seen.add(binding.name)
    return bindings


def _collect(pattern: Pattern, out: list[Binding]) -> None:
    if isinstance(pattern, IdentifierPattern):
        validate_binding_name(pattern.name, pattern.span)
        out.append(Binding(pattern.name, pattern.mutable, pattern.by_ref, pattern.span))
    elif isinstance(pattern, (WildcardPattern, RestPattern)):
        return
    elif isinstance(pattern, TuplePattern):
        rests = [e for e in pattern.elements if isinstance(e, RestPattern)]
        if len(rests) > 1:
            raise MalformedPatternError(
                ERR_MSG_MISPLACED_REST,
                "tuple pattern has more than one `..`",
                span=rests[1].span,
            )
        for element in pattern.elements:
            _collect(element, out)
    elif isinstance(pattern, StructPattern):
        for field_pattern in pattern.fields:
            _collect(field_pattern.pattern, out)
    elif isinstance(pattern, ReferencePattern):
        _collect(pattern.inner, out)
    else:
        raise MalformedPatternError(
            ERR_MSG_INVALID_PATTERN,
            f"unsupported pattern node {type(pattern).__name__}",
        )


def render_pattern(pattern: Pattern) -> str:
    """Render a pattern as closure parameter text."""
    if isinstance(pattern, IdentifierPattern):
        prefix = ("ref " if pattern.by_ref else "") + ("mut " if pattern.mutable else "")
        return prefix + pattern.name
    if isinstance(pattern, WildcardPattern):
        return "_"
    if isinstance(pattern, RestPattern):
        return ".."
    if isinstance(pattern, TuplePattern):
        inner = ", ".join(render_pattern(e) for e in pattern.elements)
        if pattern.path is not None:
            return f"{pattern.path}({inner})"
        if len(pattern.elements) == 1 and not isinstance(pattern.elements[0], RestPattern):
            return f"({inner},)"
        return f"({inner})"
    if isinstance(pattern, StructPattern):
        parts = [_render_field(f) for f in pattern.fields]
        if pattern.has_rest:
            parts.append("..")
        if not parts:
            return f"{pattern.path} {{}}"
        return f"{pattern.path} {{ {', '.join(parts)} }}"
    if isinstance(pattern, ReferencePattern):
        return ("&mut " if pattern.mutable else "&") + render_pattern(pattern.inner)
    raise MalformedPatternError(
        ERR_MSG_INVALID_PATTERN,
        f"cannot render pattern node {type(pattern).__name__}",
    )


def _render_field(field_pattern: FieldPattern) -> str:
    inner = field_pattern.pattern
    if isinstance(inner, IdentifierPattern) and inner.name == field_pattern.name:
        return render_pattern(inner)
    return f"{field_pattern.name}: {render_pattern(inner)}"
