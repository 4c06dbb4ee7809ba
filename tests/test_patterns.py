"""Pattern parsing, binding extraction and rendering tests."""

import pytest

from pymdo._errors import MalformedPatternError
from pymdo._patterns import extract_bindings, parse_pattern, render_pattern
from pymdo._types import (
    FieldPattern,
    IdentifierPattern,
    ReferencePattern,
    RestPattern,
    StructPattern,
    TuplePattern,
    WildcardPattern,
)


def _parse(text):
    return parse_pattern(text, 0, len(text))


def _names(text):
    return [(b.name, b.mutable, b.by_ref) for b in extract_bindings(_parse(text))]


class TestParsePattern:
    def test_identifier(self):
        assert _parse("x") == IdentifierPattern("x")

    def test_ref_mut_identifier(self):
        assert _parse("ref mut x") == IdentifierPattern("x", mutable=True, by_ref=True)

    def test_wildcard(self):
        assert _parse("_") == WildcardPattern()

    def test_parenthesized(self):
        assert _parse("(x)") == IdentifierPattern("x")

    def test_one_tuple(self):
        assert _parse("(x,)") == TuplePattern((IdentifierPattern("x"),))

    def test_unit(self):
        assert _parse("()") == TuplePattern(())

    def test_tuple_struct(self):
        assert _parse("Some(x)") == TuplePattern((IdentifierPattern("x"),), path="Some")

    def test_struct(self):
        assert _parse("geo::Point { x, y: _, .. }") == StructPattern(
            path="geo::Point",
            fields=(
                FieldPattern("x", IdentifierPattern("x")),
                FieldPattern("y", WildcardPattern()),
            ),
            has_rest=True,
        )

    def test_references(self):
        assert _parse("&(a, &mut b)") == ReferencePattern(
            TuplePattern(
                (IdentifierPattern("a"), ReferencePattern(IdentifierPattern("b"), mutable=True))
            )
        )

    def test_rest_in_tuple(self):
        assert _parse("(a, ..)") == TuplePattern((IdentifierPattern("a"), RestPattern()))

    def test_raw_identifier(self):
        assert _parse("r#type") == IdentifierPattern("r#type")


class TestExtractBindings:
    def test_depth_first_order(self):
        assert _names("(a, (mut b, _), P { x, y: ref z, .. })") == [
            ("a", False, False),
            ("b", True, False),
            ("x", False, False),
            ("z", False, True),
        ]

    def test_wildcards_bind_nothing(self):
        assert _names("(_, ..)") == []

    def test_deep_nesting(self):
        text = "(" * 20 + "x" + ",)" * 20
        assert _names(text) == [("x", False, False)]


class TestMalformedPatterns:
    @pytest.mark.parametrize(
        "text",
        [
            "1",
            "x @ Some(_)",
            "0..5",
            "(a, a)",
            "(.., a, ..)",
            "P { .., a }",
            "fn",
            "self",
            "x y",
            "(a",
            "mut",
        ],
    )
    def test_rejected(self, text):
        with pytest.raises(MalformedPatternError):
            _parse(text)

    def test_duplicate_span_points_at_second(self):
        with pytest.raises(MalformedPatternError) as exc_info:
            _parse("(a, b, a)")
        assert exc_info.value.span.start == 7

    def test_offset_span(self):
        source = "let (1) <- x;"
        with pytest.raises(MalformedPatternError) as exc_info:
            parse_pattern(source, 4, 7)
        assert exc_info.value.span.start == 5


class TestRenderPattern:
    @pytest.mark.parametrize(
        "text",
        [
            "x",
            "mut x",
            "ref x",
            "_",
            "(a, mut b)",
            "(a,)",
            "(..)",
            "()",
            "Some(x)",
            "Wrapper(..)",
            "Point { x, y: _, .. }",
            "Empty {}",
            "&x",
            "&mut (a, b)",
            "P { inner: Q { v } }",
        ],
    )
    def test_canonical_text_is_stable(self, text):
        assert render_pattern(_parse(text)) == text

    def test_parenthesized_identifier_unwrapped(self):
        assert render_pattern(_parse("( x )")) == "x"

    def test_whitespace_normalized(self):
        assert render_pattern(_parse("( a ,b , )")) == "(a, b)"
