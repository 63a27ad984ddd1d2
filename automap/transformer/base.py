"""Transformer protocols.

A transformer converts one property value from its source shape to its
target shape. Factories inspect a (source type, target type) pair at
compile time and return a transformer, or None to let the next factory
try. Transformers never receive None values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from automap.metadata.types import is_any, isclass

if TYPE_CHECKING:
    from automap.core.configuration import MapperContext
    from automap.mapping.executor import MappingCall
    from automap.transformer.registry import TransformerRegistry


class Transformer(Protocol):
    """Converts a single non-None value."""

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        """Return the target-shaped counterpart of value."""
        ...


class TransformerFactory(Protocol):
    """Produces transformers for type pairs it understands."""

    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        """Return a transformer, or None if the pair is not handled."""
        ...


class PassthroughTransformer:
    """Returns the value unchanged."""

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        return value

    def __repr__(self) -> str:
        return "PassthroughTransformer()"


PASSTHROUGH = PassthroughTransformer()


class PassthroughTransformerFactory:
    """Last resort: untyped targets, and sources already of the target type."""

    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        if is_any(target_type) or is_any(source_type):
            return PASSTHROUGH
        if isclass(source_type) and isclass(target_type):
            if issubclass(source_type, target_type):
                return PASSTHROUGH
        return None
