"""automap - object-graph mapping between classes, models and dicts."""

from __future__ import annotations

from automap.core.configuration import Configuration, MapperContext
from automap.core.enums import ConstructorStrategy
from automap.core.exceptions import (
    AutoMapError,
    CircularReferenceError,
    InvalidMappingError,
    MappingError,
    MetadataError,
    MissingConstructorArgumentsError,
    MissingContextParameterError,
    PlanCompilationError,
    ReadOnlyTargetError,
    TargetConstructionError,
    TypeMismatchError,
    UninitializedPropertyError,
)
from automap.core.version import VERSION
from automap.mapper import AutoMapper
from automap.mapping.plan import MappingPlan
from automap.mapping.protocol import NameConverter, PropertyListener, PropertyMetadataEvent
from automap.mapping.provider import EarlyReturn, Provider
from automap.metadata.policy import Discriminator, Groups, Ignore, MapToContext, MaxDepth
from automap.transformer.base import Transformer, TransformerFactory
from automap.transformer.registry import TransformerRegistry

__version__ = VERSION

__all__ = [
    # Mapper
    "AutoMapper",
    "MappingPlan",
    # Configuration
    "Configuration",
    "MapperContext",
    "ConstructorStrategy",
    # Policy
    "Groups",
    "MaxDepth",
    "Ignore",
    "MapToContext",
    "Discriminator",
    # Extension points
    "Transformer",
    "TransformerFactory",
    "TransformerRegistry",
    "Provider",
    "EarlyReturn",
    "NameConverter",
    "PropertyListener",
    "PropertyMetadataEvent",
    # Exceptions
    "AutoMapError",
    "MetadataError",
    "MappingError",
    "InvalidMappingError",
    "PlanCompilationError",
    "MissingConstructorArgumentsError",
    "CircularReferenceError",
    "ReadOnlyTargetError",
    "TargetConstructionError",
    "TypeMismatchError",
    "UninitializedPropertyError",
    "MissingContextParameterError",
    "__version__",
]
