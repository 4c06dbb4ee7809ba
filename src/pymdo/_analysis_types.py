"""Domain types for scope analysis."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from pymdo._types import Binding, Span


class DiagnosticKind(enum.StrEnum):
    """Non-fatal findings about the names a comprehension binds."""

    SHADOWED_BINDING = "shadowed_binding"
    REFERENCE_BINDING = "reference_binding"
    DISCARDED_VALUE = "discarded_value"


class ScopeKind(enum.StrEnum):
    BIND = "bind"
    LET = "let"


@dataclass(frozen=True)
class BindingScope:
    """Names introduced by one sentence, visible to every later sentence."""

    sentence_index: int
    kind: ScopeKind
    bindings: tuple[Binding, ...] = ()
    by_reference: bool = False

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(b.name for b in self.bindings)


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    name: str = ""
    span: Span | None = field(default=None, compare=False)
