"""Transformer registry.

Resolves the transformer for a (source type, target type) pair. Custom
factories are consulted first, in registration order, then the built-ins:

    scalar/value -> date/time -> enum -> union -> discriminated object
    -> nested object -> collection -> passthrough

Optional types are unwrapped before lookup (None never reaches a
transformer) and a source union is treated as untyped, so its values are
checked one by one.
"""

from __future__ import annotations

import logging
from typing import Any

from automap.core.exceptions import TypeMismatchError
from automap.metadata.types import (
    is_any,
    is_datetime,
    is_nullable,
    is_union,
    type_name,
    unwrap_optional,
)
from automap.transformer.base import (
    PassthroughTransformerFactory,
    Transformer,
    TransformerFactory,
)
from automap.transformer.composite import CollectionTransformerFactory, UnionTransformerFactory
from automap.transformer.objects import (
    DiscriminatedObjectTransformerFactory,
    NestedObjectTransformerFactory,
)
from automap.transformer.scalar import EnumTransformerFactory, ScalarTransformerFactory
from automap.transformer.temporal import DateTimeTransformerFactory

logger = logging.getLogger(__name__)


def builtin_factories() -> list[TransformerFactory]:
    return [
        ScalarTransformerFactory(),
        DateTimeTransformerFactory(),
        EnumTransformerFactory(),
        UnionTransformerFactory(),
        DiscriminatedObjectTransformerFactory(),
        NestedObjectTransformerFactory(),
        CollectionTransformerFactory(),
        PassthroughTransformerFactory(),
    ]


class TransformerRegistry:
    """Ordered chain of transformer factories.

    Args:
        strict_types: Reject declared-incompatible type pairs instead of
            coercing values.
        factories: Custom factories, consulted before the built-ins.
    """

    def __init__(
        self,
        strict_types: bool = False,
        factories: list[TransformerFactory] | tuple[TransformerFactory, ...] = (),
    ) -> None:
        self.strict_types = strict_types
        self._custom: list[TransformerFactory] = list(factories)
        self._builtin = builtin_factories()

    def add_factory(self, factory: TransformerFactory) -> None:
        """Register a custom factory after the previously registered ones."""
        self._custom.append(factory)

    @property
    def factories(self) -> list[TransformerFactory]:
        return [*self._custom, *self._builtin]

    def resolve(self, source_type: Any, target_type: Any) -> Transformer | None:
        """Find the transformer for a type pair.

        Returns:
            The first transformer produced by the factory chain, or None.

        Raises:
            TypeMismatchError: If the declared types can never be compatible
                (strict types, or a nullable date into a non-nullable one).
        """
        source = unwrap_optional(source_type)
        target = unwrap_optional(target_type)
        if (
            is_datetime(source)
            and is_datetime(target)
            and is_nullable(source_type)
            and not is_nullable(target_type)
        ):
            raise TypeMismatchError(
                f"Cannot map nullable {type_name(source)} to non-nullable {type_name(target)}"
            )
        if is_union(source):
            source = Any
        for factory in self.factories:
            transformer = factory.get_transformer(source, target, self)
            if transformer is not None:
                return transformer
        if self.strict_types and not is_any(target):
            raise TypeMismatchError(
                f"No transformer maps {type_name(source)} to {type_name(target)}"
            )
        logger.debug("No transformer for %s -> %s", type_name(source), type_name(target))
        return None
