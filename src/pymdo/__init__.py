"""pymdo - Expand do-notation comprehensions into nested monadic bind calls."""

from __future__ import annotations

__version__ = "0.1.0"

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from pymdo._analysis import analyze_scopes
from pymdo._analysis_types import BindingScope, Diagnostic, DiagnosticKind
from pymdo._desugar import Desugarer
from pymdo._errors import (
    DesugarError,
    ExpansionError,
    GuardNotSupportedInFlavorError,
    MalformedPatternError,
    MaxDepthExceededError,
    MaxOutputLengthExceededError,
    MissingArrowError,
    ParseError,
    TrailingSyntaxError,
    UnexpectedTokenError,
)
from pymdo._parser import parse
from pymdo._types import Comprehension
from pymdo.flavor import (
    FallibleFlavor,
    Flavor,
    OptionalFlavor,
    SequenceFlavor,
    get_flavor,
)

__all__ = [
    "analyze",
    "expand",
    "parse",
    "get_flavor",
    "AnalysisResult",
    "BindingScope",
    "Comprehension",
    "Diagnostic",
    "DiagnosticKind",
    "ExpansionError",
    "ParseError",
    "UnexpectedTokenError",
    "MissingArrowError",
    "MalformedPatternError",
    "TrailingSyntaxError",
    "DesugarError",
    "GuardNotSupportedInFlavorError",
    "MaxDepthExceededError",
    "MaxOutputLengthExceededError",
    "Flavor",
    "FallibleFlavor",
    "OptionalFlavor",
    "SequenceFlavor",
]

logger = logging.getLogger(__name__)


def _resolve_flavor(flavor: Flavor | str) -> Flavor:
    if isinstance(flavor, Flavor):
        return flavor
    return get_flavor(flavor)


def _desugar(
    flavor: Flavor,
    comprehension: Comprehension,
    max_depth: int | None,
    max_output_length: int | None,
) -> str:
    kwargs: dict[str, Any] = {}
    if max_depth is not None:
        kwargs["max_depth"] = max_depth
    if max_output_length is not None:
        kwargs["max_output_length"] = max_output_length

    desugarer = Desugarer(flavor, **kwargs)
    desugarer.visit(comprehension)
    return desugarer.result


def expand(
    flavor: Flavor | str,
    source: str,
    *,
    array_sources: Iterable[str] | None = None,
    max_depth: int | None = None,
    max_output_length: int | None = None,
) -> str:
    """Expand a comprehension into a single host-language expression.

    Args:
        flavor: Flavor instance, flavor name or macro name.
        source: The comprehension text of one macro occurrence.
        array_sources: Names of fixed-size arrays bound from in ``source``.
        max_depth: Maximum closure nesting. Defaults to 64.
        max_output_length: Maximum expression length. Defaults to 1000000.

    Returns:
        The generated expression text.

    Raises:
        ExpansionError: If parsing or desugaring fails.
        ValueError: If the flavor name is unknown.
    """
    flavor = _resolve_flavor(flavor)
    comprehension = parse(source, array_sources=array_sources)
    expression = _desugar(flavor, comprehension, max_depth, max_output_length)
    logger.debug("expanded %s comprehension to %d characters", flavor.name, len(expression))
    return expression


@dataclass(frozen=True)
class AnalysisResult:
    """Result of comprehension analysis."""

    expression: str
    scopes: list[BindingScope] = field(default_factory=list)
    visible: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def analyze(
    flavor: Flavor | str,
    source: str,
    *,
    array_sources: Iterable[str] | None = None,
    max_depth: int | None = None,
    max_output_length: int | None = None,
) -> AnalysisResult:
    """Expand a comprehension and report the names it binds.

    Args:
        flavor: Flavor instance, flavor name or macro name.
        source: The comprehension text of one macro occurrence.
        array_sources: Names of fixed-size arrays bound from in ``source``.
        max_depth: Maximum closure nesting.
        max_output_length: Maximum expression length.

    Returns:
        AnalysisResult with the expression, per-sentence scopes, the names
        visible to the yield expression and any diagnostics.

    Raises:
        ExpansionError: If parsing or desugaring fails.
    """
    flavor = _resolve_flavor(flavor)
    comprehension = parse(source, array_sources=array_sources)

    # Pass 1: generate the expression
    expression = _desugar(flavor, comprehension, max_depth, max_output_length)

    # Pass 2: scopes and diagnostics
    analyzer = analyze_scopes(comprehension, flavor)

    return AnalysisResult(
        expression=expression,
        scopes=analyzer.scopes,
        visible=analyzer.visible,
        diagnostics=analyzer.diagnostics,
    )
