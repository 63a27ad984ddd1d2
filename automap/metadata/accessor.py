"""Read accessors and write mutators.

An accessor knows how to read one property from a source value; a mutator
knows how to write one property into a target value. Both are frozen and
shared by every plan that references the property.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from automap.core.enums import ReadCapability, WriteCapability
from automap.core.exceptions import MissingContextParameterError, TypeMismatchError

if TYPE_CHECKING:
    from automap.core.configuration import MapperContext


def force_set(target: Any, name: str, value: Any) -> None:
    """Assign an attribute bypassing setters and frozen guards."""
    try:
        object.__setattr__(target, name, value)
    except AttributeError:
        if name.startswith("_"):
            raise
        object.__setattr__(target, "_" + name, value)


@dataclass(frozen=True)
class ContextParameter:
    """A getter parameter bound to ``MapperContext.map_to_accessor_parameter``."""

    name: str
    key: str
    has_default: bool


@dataclass(frozen=True)
class ReadAccessor:
    """Read path for a single property."""

    capability: ReadCapability
    name: str
    is_method: bool = False
    parameters: tuple[ContextParameter, ...] = ()

    def is_present(self, source: Any) -> bool:
        """Bag keys may be absent; other accessors always exist."""
        if self.capability is not ReadCapability.KEY:
            return True
        if isinstance(source, Mapping):
            return self.name in source
        return hasattr(source, self.name)

    def read(self, source: Any, context: MapperContext) -> Any:
        if self.capability is ReadCapability.KEY:
            if isinstance(source, Mapping):
                return source[self.name]
            return getattr(source, self.name)
        if not self.is_method:
            return getattr(source, self.name)
        kwargs: dict[str, Any] = {}
        for parameter in self.parameters:
            if parameter.key in context.map_to_accessor_parameter:
                kwargs[parameter.name] = context.map_to_accessor_parameter[parameter.key]
            elif not parameter.has_default:
                raise MissingContextParameterError(self.name, parameter.key)
        return getattr(source, self.name)(**kwargs)


@dataclass(frozen=True)
class WriteMutator:
    """Write path for a single property."""

    capability: WriteCapability
    name: str
    is_method: bool = False
    remover: str | None = None

    def write(self, target: Any, value: Any) -> None:
        capability = self.capability
        if capability is WriteCapability.KEY:
            if isinstance(target, MutableMapping):
                target[self.name] = value
            else:
                setattr(target, self.name, value)
        elif capability is WriteCapability.ADDER_REMOVER:
            if value is None:
                return
            if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                raise TypeMismatchError(
                    f"Adder '{self.name}' expects an iterable, got {type(value).__name__}",
                    value,
                )
            adder = getattr(target, self.name)
            for item in value:
                if item is not None:
                    adder(item)
        elif capability is WriteCapability.SETTER and self.is_method:
            getattr(target, self.name)(value)
        elif capability in (WriteCapability.REFLECTION, WriteCapability.CONSTRUCTOR):
            force_set(target, self.name, value)
        else:
            setattr(target, self.name, value)
