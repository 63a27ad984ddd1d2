"""Mapping layer - plan compilation, caching and execution."""

from __future__ import annotations

from automap.mapping.cache import PlanCache
from automap.mapping.compiler import PlanCompiler
from automap.mapping.executor import MappingCall, MappingExecutor
from automap.mapping.plan import (
    ConstructorPlan,
    ConstructorSlot,
    GroupFilter,
    MappingPlan,
    PropertyStep,
)
from automap.mapping.protocol import NameConverter, PropertyListener, PropertyMetadataEvent
from automap.mapping.provider import EarlyReturn, Provider

__all__ = [
    "PlanCompiler",
    "PlanCache",
    "MappingExecutor",
    "MappingCall",
    "MappingPlan",
    "PropertyStep",
    "GroupFilter",
    "ConstructorPlan",
    "ConstructorSlot",
    "NameConverter",
    "PropertyListener",
    "PropertyMetadataEvent",
    "Provider",
    "EarlyReturn",
]
