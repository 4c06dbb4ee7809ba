"""Abstract base class for comprehension flavors."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Callable
from io import StringIO

from pymdo._types import SourceCategory


class FlavorName(enum.StrEnum):
    OPTIONAL = "optional"
    FALLIBLE = "fallible"
    SEQUENCE = "sequence"


WriteFunc = Callable[[], None]
"""Callback that writes a sub-expression to the shared StringIO buffer."""


class Flavor(ABC):
    """Abstract base class defining the monadic flavor interface.

    All wrapper-type-specific code lives behind this interface.
    Methods receive a StringIO writer and callback functions for sub-expressions.
    """

    @property
    @abstractmethod
    def name(self) -> FlavorName: ...

    @abstractmethod
    def macro_name(self) -> str: ...

    # --- Emission ---

    @abstractmethod
    def write_bind(
        self,
        w: StringIO,
        write_source: WriteFunc,
        param: str,
        category: SourceCategory,
        write_body: WriteFunc,
    ) -> None: ...

    @abstractmethod
    def write_wrap(self, w: StringIO, write_value: WriteFunc) -> None: ...

    @abstractmethod
    def write_guard(
        self, w: StringIO, write_condition: WriteFunc, write_body: WriteFunc
    ) -> None: ...

    # --- Capabilities ---

    @abstractmethod
    def supports_guards(self) -> bool: ...

    @abstractmethod
    def requires_reference_binding(self, category: SourceCategory) -> bool: ...

    # --- Shared helpers ---

    def _write_closure(self, w: StringIO, param: str, write_body: WriteFunc) -> None:
        w.write(f"move |{param}| ")
        write_body()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
