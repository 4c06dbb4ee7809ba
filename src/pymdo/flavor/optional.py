"""Optional-value flavor: chains `Option::and_then`."""

from __future__ import annotations

from io import StringIO

from pymdo._errors import ERR_MSG_GUARD_NOT_SUPPORTED, GuardNotSupportedInFlavorError
from pymdo._types import SourceCategory
from pymdo.flavor._base import Flavor, FlavorName, WriteFunc


class OptionalFlavor(Flavor):
    """Short-circuits on the first absent value."""

    @property
    def name(self) -> FlavorName:
        return FlavorName.OPTIONAL

    def macro_name(self) -> str:
        return "option"

    def write_bind(
        self,
        w: StringIO,
        write_source: WriteFunc,
        param: str,
        category: SourceCategory,
        write_body: WriteFunc,
    ) -> None:
        write_source()
        w.write(".and_then(")
        self._write_closure(w, param, write_body)
        w.write(")")

    def write_wrap(self, w: StringIO, write_value: WriteFunc) -> None:
        w.write("::core::option::Option::Some(")
        write_value()
        w.write(")")

    def write_guard(
        self, w: StringIO, write_condition: WriteFunc, write_body: WriteFunc
    ) -> None:
        raise GuardNotSupportedInFlavorError(
            ERR_MSG_GUARD_NOT_SUPPORTED,
            "the optional flavor has no filtering operation",
        )

    def supports_guards(self) -> bool:
        return False

    def requires_reference_binding(self, category: SourceCategory) -> bool:
        return False
