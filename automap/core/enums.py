"""Mapping enumerations."""

from __future__ import annotations

from enum import Enum


class ConstructorStrategy(Enum):
    """How target instances are created."""

    NEVER = "never"
    ALWAYS = "always"
    AUTO = "auto"


class TypeKind(Enum):
    """Shape of a described type."""

    OBJECT = "object"
    DICT = "dict"
    NAMESPACE = "namespace"


class ReadCapability(Enum):
    """How a property value is read from a source."""

    FIELD = "field"
    GETTER = "getter"
    REFLECTION = "reflection"
    KEY = "key"


class WriteCapability(Enum):
    """How a property value is written to a target."""

    FIELD = "field"
    SETTER = "setter"
    CONSTRUCTOR = "constructor"
    ADDER_REMOVER = "adder_remover"
    REFLECTION = "reflection"
    KEY = "key"


class SlotBinding(Enum):
    """Where a constructor parameter takes its value from."""

    MAPPED = "mapped"
    CONTEXT = "context"
    DEFAULT = "default"
