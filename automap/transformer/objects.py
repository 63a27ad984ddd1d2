"""Nested object and discriminated object transformers.

Both recurse through the executor via ``MappingCall.map_nested``; the nested
plan is picked from the runtime type of the value, so a property declared
as a base class still maps every field of the subclass instance it holds.
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from automap.core.exceptions import TypeMismatchError
from automap.metadata.policy import Discriminator, discriminator_of
from automap.metadata.types import (
    is_any,
    is_bag_type,
    is_structured,
    isclass,
    type_name,
)
from automap.transformer.base import Transformer

if TYPE_CHECKING:
    from automap.core.configuration import MapperContext
    from automap.mapping.executor import MappingCall
    from automap.transformer.registry import TransformerRegistry


def _bag_class(target: Any) -> type:
    if isclass(target) and issubclass(target, types.SimpleNamespace):
        return target
    return dict


def is_mappable(value: Any) -> bool:
    """Whether a runtime value can be mapped property by property."""
    return (
        isinstance(value, (Mapping, types.SimpleNamespace)) or is_structured(type(value))
    )


def resolve_subtype(discriminator: Discriminator, base: type, value: Any) -> type:
    """Pick the concrete class of a polymorphic target for a source value."""
    source_class = type(value)
    for subclass in discriminator.mapping.values():
        if source_class is subclass:
            return subclass
    if isinstance(value, Mapping):
        found = value.get(discriminator.property_name)
    else:
        found = getattr(value, discriminator.property_name, None)
    subclass = discriminator.resolve(found) if found is not None else None
    if subclass is None and found is None:
        source_discriminator = discriminator_of(source_class)
        if source_discriminator is not None:
            subclass = discriminator.resolve(source_discriminator.value_for(source_class))
    if subclass is not None and issubclass(subclass, base):
        return subclass
    return base


class NestedObjectTransformer:
    """Maps a nested structured value or bag into the target type."""

    def __init__(self, target: Any) -> None:
        self.target = target
        self.bag = is_bag_type(target)

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        if not is_mappable(value):
            raise TypeMismatchError(
                f"Cannot map {type(value).__name__} value into {type_name(self.target)}", value
            )
        if self.bag:
            bag_class = _bag_class(self.target)
            if isinstance(value, Mapping):
                return dict(value) if bag_class is dict else bag_class(**value)
            if isinstance(value, types.SimpleNamespace):
                content = vars(value)
                return dict(content) if bag_class is dict else bag_class(**content)
            return call.map_nested(value, bag_class, context)
        return call.map_nested(value, self.target, context)

    def __repr__(self) -> str:
        return f"NestedObjectTransformer({type_name(self.target)})"


class DiscriminatedObjectTransformer:
    """Maps into the subclass selected by the target's discriminator."""

    def __init__(self, target: type, discriminator: Discriminator) -> None:
        self.target = target
        self.discriminator = discriminator

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        if not is_mappable(value):
            raise TypeMismatchError(
                f"Cannot map {type(value).__name__} value into {type_name(self.target)}", value
            )
        subclass = resolve_subtype(self.discriminator, self.target, value)
        return call.map_nested(value, subclass, context)

    def __repr__(self) -> str:
        return f"DiscriminatedObjectTransformer({type_name(self.target)})"


class DiscriminatedObjectTransformerFactory:
    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        if not is_structured(target_type):
            return None
        discriminator = discriminator_of(target_type)
        if discriminator is None:
            return None
        return DiscriminatedObjectTransformer(target_type, discriminator)


class NestedObjectTransformerFactory:
    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        if not (is_structured(target_type) or is_bag_type(target_type)):
            return None
        if is_any(source_type) or is_structured(source_type) or is_bag_type(source_type):
            return NestedObjectTransformer(target_type)
        return None
