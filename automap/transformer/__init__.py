"""Transformer layer - value conversion between property types."""

from __future__ import annotations

from automap.transformer.base import (
    PASSTHROUGH,
    PassthroughTransformer,
    PassthroughTransformerFactory,
    Transformer,
    TransformerFactory,
)
from automap.transformer.composite import (
    CollectionTransformer,
    CollectionTransformerFactory,
    UnionTransformer,
    UnionTransformerFactory,
)
from automap.transformer.objects import (
    DiscriminatedObjectTransformer,
    DiscriminatedObjectTransformerFactory,
    NestedObjectTransformer,
    NestedObjectTransformerFactory,
)
from automap.transformer.registry import TransformerRegistry
from automap.transformer.scalar import (
    CoerceTransformer,
    EnumFromValueTransformer,
    EnumToValueTransformer,
    EnumTransformerFactory,
    ScalarTransformerFactory,
)
from automap.transformer.temporal import (
    DateTimeToDateTimeTransformer,
    DateTimeToStringTransformer,
    DateTimeTransformerFactory,
    StringToDateTimeTransformer,
)

__all__ = [
    "Transformer",
    "TransformerFactory",
    "TransformerRegistry",
    "PASSTHROUGH",
    "PassthroughTransformer",
    "PassthroughTransformerFactory",
    "CoerceTransformer",
    "ScalarTransformerFactory",
    "EnumFromValueTransformer",
    "EnumToValueTransformer",
    "EnumTransformerFactory",
    "DateTimeToDateTimeTransformer",
    "DateTimeToStringTransformer",
    "StringToDateTimeTransformer",
    "DateTimeTransformerFactory",
    "UnionTransformer",
    "UnionTransformerFactory",
    "CollectionTransformer",
    "CollectionTransformerFactory",
    "NestedObjectTransformer",
    "NestedObjectTransformerFactory",
    "DiscriminatedObjectTransformer",
    "DiscriminatedObjectTransformerFactory",
]
