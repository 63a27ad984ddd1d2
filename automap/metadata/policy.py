"""Declarative mapping policy markers.

Markers are attached to annotations with ``typing.Annotated``::

    @dataclass
    class User:
        id: Annotated[int, Groups("read", "admin")]
        password: Annotated[str, Ignore()]
        parent: Annotated[User | None, MaxDepth(2)] = None

A discriminator is attached to the base class of a polymorphic family,
once its subclasses exist::

    Pet.__discriminator__ = Discriminator("type", {"cat": Cat, "dog": Dog})
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class Groups:
    """Visibility groups of a property."""

    def __init__(self, *names: str) -> None:
        self.names = frozenset(names)

    def __repr__(self) -> str:
        return f"Groups({', '.join(sorted(self.names))})"


@dataclass(frozen=True)
class MaxDepth:
    """Maximum nesting depth for a recursive property."""

    depth: int


@dataclass(frozen=True)
class Ignore:
    """Exclude the property from every mapping."""


@dataclass(frozen=True)
class MapToContext:
    """Bind a getter parameter to a key of ``map_to_accessor_parameter``."""

    key: str


@dataclass(frozen=True)
class Discriminator:
    """Selects the concrete subclass of a polymorphic family.

    Args:
        property_name: Name of the property carrying the discriminator value.
        mapping: Discriminator value -> concrete subclass.
    """

    property_name: str
    mapping: Mapping[Any, type] = field(default_factory=dict)

    def resolve(self, value: Any) -> type | None:
        """Return the subclass registered for a discriminator value."""
        try:
            return self.mapping.get(value)
        except TypeError:
            return None

    def value_for(self, cls: type) -> Any:
        for value, subclass in self.mapping.items():
            if subclass is cls:
                return value
        return None


def discriminator_of(cls: type) -> Discriminator | None:
    """Return the discriminator declared on a class or its bases."""
    for klass in cls.__mro__:
        candidate = klass.__dict__.get("__discriminator__")
        if isinstance(candidate, Discriminator):
            return candidate
    return None
