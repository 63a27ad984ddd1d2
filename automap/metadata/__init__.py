"""Metadata layer - uniform descriptors over Python types."""

from __future__ import annotations

from automap.metadata.accessor import ContextParameter, ReadAccessor, WriteMutator
from automap.metadata.descriptor import (
    ConstructorParameter,
    PropertyDescriptor,
    TypeDescriptor,
    TypeDescriptorFactory,
)
from automap.metadata.policy import Discriminator, Groups, Ignore, MapToContext, MaxDepth

__all__ = [
    "TypeDescriptorFactory",
    "TypeDescriptor",
    "PropertyDescriptor",
    "ConstructorParameter",
    "ReadAccessor",
    "WriteMutator",
    "ContextParameter",
    "Groups",
    "MaxDepth",
    "Ignore",
    "MapToContext",
    "Discriminator",
]
