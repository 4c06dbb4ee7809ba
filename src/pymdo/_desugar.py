"""Desugarer: turns a parsed comprehension into nested bind calls."""

from __future__ import annotations

import logging
from io import StringIO

from pymdo._constants import DEFAULT_MAX_NESTING_DEPTH, DEFAULT_MAX_OUTPUT_LENGTH
from pymdo._errors import (
    ERR_MSG_GUARD_NOT_SUPPORTED,
    GuardNotSupportedInFlavorError,
    MaxDepthExceededError,
    MaxOutputLengthExceededError,
)
from pymdo._patterns import render_pattern
from pymdo._types import (
    BindSentence,
    BlockSentence,
    Comprehension,
    GuardSentence,
    Sentence,
    StatementSentence,
)
from pymdo.flavor._base import Flavor

logger = logging.getLogger(__name__)

_UNIT = "()"


def _is_pass_through(sentence: Sentence) -> bool:
    return isinstance(sentence, (StatementSentence, BlockSentence))


class Desugarer:
    """Emits the expression for one comprehension through a flavor.

    Each bind or guard opens a closure holding the rest of the
    comprehension; statements and blocks stay in the block they appear in.
    Instances are single-use.
    """

    def __init__(
        self,
        flavor: Flavor,
        max_depth: int = DEFAULT_MAX_NESTING_DEPTH,
        max_output_length: int = DEFAULT_MAX_OUTPUT_LENGTH,
    ) -> None:
        self._w = StringIO()
        self._flavor = flavor
        self._max_depth = max_depth
        self._max_output_length = max_output_length
        self._depth = 0
        self._comprehension = Comprehension()

    @property
    def result(self) -> str:
        return self._w.getvalue()

    def _check_limits(self) -> None:
        if self._depth > self._max_depth:
            raise MaxDepthExceededError(
                "maximum nesting depth exceeded",
                f"depth {self._depth} exceeds limit {self._max_depth}",
            )
        if self._w.tell() > self._max_output_length:
            raise MaxOutputLengthExceededError(
                "maximum output length exceeded",
                f"output length exceeds limit {self._max_output_length}",
            )

    # ---- Top-level entry ----

    def visit(self, comprehension: Comprehension) -> None:
        self._comprehension = comprehension
        sentences = comprehension.sentences
        if sentences and _is_pass_through(sentences[0]):
            self._write_block(0)
        else:
            self._write_chain(0)
        self._check_limits()
        logger.debug(
            "desugared %d sentence(s) with %s into %d characters",
            len(sentences),
            self._flavor.name,
            self._w.tell(),
        )

    # ---- Emission ----

    def _write_block(self, index: int) -> None:
        self._w.write("{ ")
        self._write_chain(index)
        self._w.write(" }")

    def _write_chain(self, index: int) -> None:
        sentences = self._comprehension.sentences
        while index < len(sentences):
            sentence = sentences[index]
            if isinstance(sentence, BindSentence):
                self._write_bind(sentence, index + 1)
                return
            if isinstance(sentence, GuardSentence):
                self._write_guard(sentence, index + 1)
                return
            self._write_pass_through(sentence)
            index += 1
        self._flavor.write_wrap(self._w, self._write_yield)

    def _write_pass_through(self, sentence: Sentence) -> None:
        if isinstance(sentence, BlockSentence):
            if sentence.unsafe:
                self._w.write("unsafe ")
            self._w.write(sentence.code)
        else:
            self._w.write(sentence.code)
        self._w.write("; ")

    def _write_yield(self) -> None:
        yield_expr = self._comprehension.yield_expr
        self._w.write(_UNIT if yield_expr is None else yield_expr.code)

    def _write_bind(self, sentence: BindSentence, rest: int) -> None:
        param = render_pattern(sentence.pattern)
        if sentence.type_annotation is not None:
            param = f"{param}: {sentence.type_annotation}"

        def write_source() -> None:
            self._w.write(sentence.source.grouped())

        self._nested(
            lambda write_body: self._flavor.write_bind(
                self._w, write_source, param, sentence.category, write_body
            ),
            rest,
        )

    def _write_guard(self, sentence: GuardSentence, rest: int) -> None:
        if not self._flavor.supports_guards():
            raise GuardNotSupportedInFlavorError(
                ERR_MSG_GUARD_NOT_SUPPORTED,
                f"guard 'if {sentence.condition.code}' used with the "
                f"{self._flavor.name} flavor",
                span=sentence.span,
            )

        def write_condition() -> None:
            self._w.write(sentence.condition.code)

        self._nested(
            lambda write_body: self._flavor.write_guard(
                self._w, write_condition, write_body
            ),
            rest,
        )

    def _nested(self, write_call, rest: int) -> None:
        """Write a closure-taking call whose body is the rest of the chain."""
        self._depth += 1
        try:
            self._check_limits()
            write_call(lambda: self._write_block(rest))
        finally:
            self._depth -= 1
