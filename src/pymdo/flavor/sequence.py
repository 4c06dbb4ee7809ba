"""Sequence flavor: chains `Iterator::flat_map` over lazy iterators."""

from __future__ import annotations

from io import StringIO

from pymdo._types import SourceCategory
from pymdo.flavor._base import Flavor, FlavorName, WriteFunc

# Source categories iterated by reference rather than consumed
_REFERENCE_CATEGORIES = frozenset({SourceCategory.ARRAY})


class SequenceFlavor(Flavor):
    """Produces every combination of bound values, in nesting order.

    Guards filter the stream: a failed condition contributes an empty
    iterator, so the remainder runs only for values that pass.
    """

    @property
    def name(self) -> FlavorName:
        return FlavorName.SEQUENCE

    def macro_name(self) -> str:
        return "iter"

    def write_bind(
        self,
        w: StringIO,
        write_source: WriteFunc,
        param: str,
        category: SourceCategory,
        write_body: WriteFunc,
    ) -> None:
        write_source()
        if self.requires_reference_binding(category):
            w.write(".iter().flat_map(")
        else:
            w.write(".into_iter().flat_map(")
        self._write_closure(w, param, write_body)
        w.write(")")

    def write_wrap(self, w: StringIO, write_value: WriteFunc) -> None:
        w.write("::core::iter::once(")
        write_value()
        w.write(")")

    def write_guard(
        self, w: StringIO, write_condition: WriteFunc, write_body: WriteFunc
    ) -> None:
        w.write("(if ")
        write_condition()
        w.write(
            " { ::core::option::Option::Some(()) }"
            " else { ::core::option::Option::None })"
        )
        w.write(".into_iter().flat_map(")
        self._write_closure(w, "()", write_body)
        w.write(")")

    def supports_guards(self) -> bool:
        return True

    def requires_reference_binding(self, category: SourceCategory) -> bool:
        return category in _REFERENCE_CATEGORIES
