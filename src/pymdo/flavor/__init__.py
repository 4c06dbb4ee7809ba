"""Monadic flavors for comprehension desugaring."""

from pymdo.flavor._base import Flavor, FlavorName
from pymdo.flavor.fallible import FallibleFlavor
from pymdo.flavor.optional import OptionalFlavor
from pymdo.flavor.sequence import SequenceFlavor

__all__ = [
    "Flavor",
    "FlavorName",
    "FallibleFlavor",
    "OptionalFlavor",
    "SequenceFlavor",
    "get_flavor",
]

_REGISTRY: dict[str, type[Flavor]] = {
    FlavorName.OPTIONAL: OptionalFlavor,
    FlavorName.FALLIBLE: FallibleFlavor,
    FlavorName.SEQUENCE: SequenceFlavor,
}

# Macro names the invocation harness uses for each flavor
_MACRO_ALIASES: dict[str, str] = {
    "option": FlavorName.OPTIONAL,
    "result": FlavorName.FALLIBLE,
    "iter": FlavorName.SEQUENCE,
}


def get_flavor(name: str) -> Flavor:
    """Get a flavor instance by name.

    Args:
        name: Flavor name ("optional", "fallible", "sequence") or the
            matching macro name ("option", "result", "iter").

    Returns:
        A Flavor instance.

    Raises:
        ValueError: If the flavor name is unknown.
    """
    cls = _REGISTRY.get(_MACRO_ALIASES.get(name, name))
    if cls is None:
        raise ValueError(
            f"unknown flavor: {name!r}. "
            f"Available: {', '.join(sorted([*_REGISTRY, *_MACRO_ALIASES]))}"
        )
    return cls()
