"""Scope analysis for parsed comprehensions.

Walks the sentences in order, recording which names each one brings into
scope and flagging shadowed names, names bound by reference and bound
values that are thrown away.
"""

from __future__ import annotations

from pymdo._analysis_types import BindingScope, Diagnostic, DiagnosticKind, ScopeKind
from pymdo._patterns import extract_bindings
from pymdo._types import BindSentence, Binding, Comprehension, StatementSentence
from pymdo.flavor._base import Flavor


class ScopeAnalyzer:
    """Collects binding scopes and diagnostics. Does NOT generate code."""

    def __init__(self, flavor: Flavor) -> None:
        self._flavor = flavor
        self._scopes: list[BindingScope] = []
        self._diagnostics: list[Diagnostic] = []
        self._visible: dict[str, Binding] = {}

    @property
    def scopes(self) -> list[BindingScope]:
        return list(self._scopes)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return list(self._diagnostics)

    @property
    def visible(self) -> list[str]:
        """Names in scope at the yield expression, in binding order."""
        return list(self._visible)

    def visit(self, comprehension: Comprehension) -> None:
        for index, sentence in enumerate(comprehension.sentences):
            if isinstance(sentence, BindSentence):
                self._visit_bind(index, sentence)
            elif isinstance(sentence, StatementSentence) and sentence.pattern is not None:
                bindings = tuple(extract_bindings(sentence.pattern))
                self._enter(BindingScope(index, ScopeKind.LET, bindings))

    def _visit_bind(self, index: int, sentence: BindSentence) -> None:
        bindings = tuple(extract_bindings(sentence.pattern))
        by_reference = self._flavor.requires_reference_binding(sentence.category)

        if not bindings:
            self._diagnostics.append(
                Diagnostic(
                    DiagnosticKind.DISCARDED_VALUE,
                    f"values of '{sentence.source.code}' are bound to no name",
                    span=sentence.span,
                )
            )
        if by_reference:
            for binding in bindings:
                self._diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.REFERENCE_BINDING,
                        f"'{binding.name}' is bound to a reference into "
                        f"'{sentence.source.code}'",
                        name=binding.name,
                        span=binding.span,
                    )
                )
        self._enter(BindingScope(index, ScopeKind.BIND, bindings, by_reference))

    def _enter(self, scope: BindingScope) -> None:
        for binding in scope.bindings:
            if binding.name in self._visible:
                previous = self._visible.pop(binding.name)
                self._diagnostics.append(
                    Diagnostic(
                        DiagnosticKind.SHADOWED_BINDING,
                        f"'{binding.name}' shadows the binding at {previous.span}",
                        name=binding.name,
                        span=binding.span,
                    )
                )
            self._visible[binding.name] = binding
        self._scopes.append(scope)


def analyze_scopes(comprehension: Comprehension, flavor: Flavor) -> ScopeAnalyzer:
    """Run scope analysis over a parsed comprehension."""
    analyzer = ScopeAnalyzer(flavor)
    analyzer.visit(comprehension)
    return analyzer
