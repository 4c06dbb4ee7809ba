"""Exception hierarchy for comprehension expansion."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from pymdo._types import Span


class ExpansionError(Exception):
    """Base exception for comprehension parse and desugar errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details that may quote the offending DSL text. The span
    locates the failure in the DSL source for the invocation harness.
    """

    kind: ClassVar[str] = "ExpansionError"

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
        span: Span | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped
        self.span = span

    def internal(self) -> str:
        return self.internal_details


class ParseError(ExpansionError):
    """Raised when the DSL text does not form a valid comprehension."""

    kind = "ParseError"


class UnexpectedTokenError(ParseError):
    """Raised on a character, token or delimiter the grammar does not allow."""

    kind = "UnexpectedToken"


class MissingArrowError(ParseError):
    """Raised when a `let` sentence is neither a bind nor a plain statement."""

    kind = "MissingArrow"


class MalformedPatternError(ParseError):
    """Raised when a binding pattern is invalid or unsupported."""

    kind = "MalformedPattern"


class TrailingSyntaxError(ParseError):
    """Raised when tokens follow an expression without a separating `;`."""

    kind = "TrailingSyntax"


class DesugarError(ExpansionError):
    """Raised when a parsed comprehension cannot be desugared."""

    kind = "DesugarError"


class GuardNotSupportedInFlavorError(DesugarError):
    """Raised when a guard sentence is used with a flavor that has no filter."""

    kind = "GuardNotSupportedInFlavor"


class MaxDepthExceededError(ExpansionError):
    """Raised when closure nesting exceeds the configured limit."""

    kind = "MaxDepthExceeded"


class MaxOutputLengthExceededError(ExpansionError):
    """Raised when the generated expression exceeds the configured length."""

    kind = "MaxOutputLengthExceeded"


# Sanitized user-facing error message constants
ERR_MSG_UNEXPECTED_CHARACTER = "unexpected character"
ERR_MSG_UNEXPECTED_TOKEN = "unexpected token"
ERR_MSG_UNEXPECTED_END = "unexpected end of input"
ERR_MSG_STRAY_ARROW = "`<-` is only allowed after the pattern of a `let` binding"
ERR_MSG_EMPTY_SOURCE = "expected an expression after `<-`"
ERR_MSG_EMPTY_CONDITION = "expected a condition after `if`"
ERR_MSG_MISSING_SEMICOLON = "expected `;` at the end of the sentence"
ERR_MSG_MISSING_ARROW = "expected `<-` or `=` after the `let` pattern"
ERR_MSG_INVALID_PATTERN = "invalid pattern"
ERR_MSG_EMPTY_PATTERN = "expected a pattern after `let`"
ERR_MSG_EMPTY_TYPE = "expected a type after `:`"
ERR_MSG_KEYWORD_BINDING = "a keyword cannot be used as a binding name"
ERR_MSG_DUPLICATE_BINDING = "identifier is bound more than once in the same pattern"
ERR_MSG_MISPLACED_REST = "`..` can appear only once and, in struct patterns, only last"
ERR_MSG_TRAILING_SYNTAX = "unexpected `let`; a `;` is probably missing before it"
ERR_MSG_MISSING_OPERATOR = "unexpected expression; an operator or `;` is probably missing before it"
ERR_MSG_GUARD_NOT_SUPPORTED = "guard sentences are only supported by the sequence flavor"
