"""Parser tests: sentence splitting and classification."""

import dataclasses

import pytest

from pymdo import parse
from pymdo._parser import _Segment
from pymdo._types import (
    BindSentence,
    BlockSentence,
    GuardSentence,
    IdentifierPattern,
    SourceCategory,
    StatementSentence,
    TuplePattern,
)


class TestSentenceKinds:
    def test_bind(self):
        comp = parse("let x <- Some(1); x")
        (bind,) = comp.sentences
        assert isinstance(bind, BindSentence)
        assert bind.pattern == IdentifierPattern("x")
        assert bind.source.code == "Some(1)"
        assert bind.source.atomic
        assert bind.category == SourceCategory.GENERAL
        assert comp.yield_expr.code == "x"

    def test_mutable_bind(self):
        (bind,) = parse("let mut x <- a;").sentences
        assert bind.mutable
        assert bind.pattern == IdentifierPattern("x", mutable=True)

    def test_destructuring_bind_is_not_mutable(self):
        (bind,) = parse("let (mut a, b) <- p;").sentences
        assert not bind.mutable
        assert isinstance(bind.pattern, TuplePattern)

    def test_type_annotation(self):
        (bind,) = parse("let x: Vec<(u8, u8)> <- a;").sentences
        assert bind.type_annotation == "Vec<(u8, u8)>"
        assert bind.pattern == IdentifierPattern("x")

    def test_guard(self):
        (guard,) = parse("if x > 1;").sentences
        assert isinstance(guard, GuardSentence)
        assert guard.condition.code == "x > 1"

    def test_let_statement(self):
        (stmt,) = parse("let y = 2;").sentences
        assert isinstance(stmt, StatementSentence)
        assert stmt.code == "let y = 2"
        assert stmt.pattern == IdentifierPattern("y")

    def test_less_than_negative_is_not_an_arrow(self):
        (stmt,) = parse("let y = a < -b;").sentences
        assert isinstance(stmt, StatementSentence)

    def test_plain_statement(self):
        (stmt,) = parse("v.push(1);").sentences
        assert isinstance(stmt, StatementSentence)
        assert stmt.pattern is None

    def test_block(self):
        (block,) = parse("{ a(); };").sentences
        assert block == BlockSentence("{ a(); }")

    def test_unsafe_block(self):
        (block,) = parse("unsafe { a() } 1").sentences
        assert block == BlockSentence("{ a() }", unsafe=True)


class TestSplitting:
    def test_order_preserved(self):
        comp = parse("let a <- x; if a; let b = a; b.go(); let c <- y; c")
        kinds = [type(s).__name__ for s in comp.sentences]
        assert kinds == [
            "BindSentence",
            "GuardSentence",
            "StatementSentence",
            "StatementSentence",
            "BindSentence",
        ]

    def test_empty_statements_skipped(self):
        comp = parse(";; let x <- a;;; x")
        assert len(comp.sentences) == 1

    def test_no_yield(self):
        assert parse("let x <- a;").yield_expr is None

    def test_empty_source(self):
        comp = parse("")
        assert comp.sentences == ()
        assert comp.yield_expr is None

    def test_nested_semicolons_stay_inside_groups(self):
        (bind,) = parse("let x <- f({ a; b }); x").sentences
        assert bind.source.code == "f({ a; b })"

    def test_block_like_statement_ends_at_brace(self):
        comp = parse("while go() { step(); } done")
        assert comp.sentences[0].code == "while go() { step(); }"
        assert comp.yield_expr.code == "done"

    def test_loop_followed_by_semicolon(self):
        comp = parse("loop { break; }; 1")
        assert comp.sentences[0].code == "loop { break; }"
        assert comp.yield_expr.code == "1"

    def test_multiline_source_keeps_text(self):
        (bind,) = parse("let x <- foo(\n    1,\n    2,\n);").sentences
        assert bind.source.code == "foo(\n    1,\n    2,\n)"


class TestSourceCategory:
    def test_array_literal_is_general(self):
        (bind,) = parse("let x <- [1, 2];").sentences
        assert bind.category == SourceCategory.GENERAL

    def test_declared_array(self):
        (bind,) = parse("let x <- arr;", array_sources={"arr"}).sentences
        assert bind.category == SourceCategory.ARRAY

    def test_indexed_array_is_general(self):
        (bind,) = parse("let x <- arr[0];", array_sources={"arr"}).sentences
        assert bind.category == SourceCategory.GENERAL

    def test_range_is_general(self):
        (bind,) = parse("let x <- 0..3;").sentences
        assert bind.category == SourceCategory.GENERAL
        assert not bind.source.atomic


class TestLexing:
    def test_string_with_arrow_and_semicolon(self):
        comp = parse('let s <- lookup("a <- b; c"); s')
        assert comp.sentences[0].source.code == 'lookup("a <- b; c")'

    def test_raw_string(self):
        comp = parse('let s <- f(r#"x"; y"#); s')
        assert comp.sentences[0].source.code == 'f(r#"x"; y"#)'

    def test_char_literals(self):
        comp = parse("let c <- find(';'); c")
        assert comp.sentences[0].source.code == "find(';')"

    def test_lifetime_label(self):
        comp = parse("'outer: loop { break 'outer; }; 1")
        assert comp.sentences[0].code == "'outer: loop { break 'outer; }"

    def test_spans(self):
        comp = parse("let a <- x;\n  let b <- y;")
        span = comp.sentences[1].span
        assert (span.line, span.column) == (2, 3)
        assert str(span) == "2:3"


class TestBlockLikeBoundaries:
    def test_unsafe_block_in_guard_condition(self):
        comp = parse("let x <- xs; if x == unsafe { y }; x")
        guard = comp.sentences[1]
        assert isinstance(guard, GuardSentence)
        assert guard.condition.code == "x == unsafe { y }"

    def test_block_condition(self):
        comp = parse("if { ready } { go(); } 1")
        assert comp.sentences[0].code == "if { ready } { go(); }"
        assert comp.yield_expr.code == "1"

    def test_struct_pattern_in_if_let(self):
        comp = parse("if let S { a } = s { use_it(a); } 1")
        assert comp.sentences[0].code == "if let S { a } = s { use_it(a); }"

    def test_struct_pattern_in_for(self):
        comp = parse("for P { a } in ps { go(a); } 1")
        assert comp.sentences[0].code == "for P { a } in ps { go(a); }"

    def test_open_range_body(self):
        comp = parse("for i in 0.. { break; } 1")
        assert comp.sentences[0].code == "for i in 0.. { break; }"

    def test_method_call_on_block_like_expression(self):
        comp = parse("let x <- a; match x { _ => 1 }.max(0)")
        assert comp.yield_expr.code == "match x { _ => 1 }.max(0)"

    def test_prefix_operator_starts_next_sentence(self):
        comp = parse("{ a } -1")
        assert isinstance(comp.sentences[0], BlockSentence)
        assert comp.yield_expr.code == "-1"


class TestSegment:
    def test_segment_is_frozen(self):
        segment = _Segment(items=(), terminated=True)
        assert dataclasses.is_dataclass(segment)
        with pytest.raises(dataclasses.FrozenInstanceError):
            segment.terminated = False
