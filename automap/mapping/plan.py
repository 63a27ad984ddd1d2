"""Mapping plan data classes.

Frozen dataclasses representing compiled, validated mapping plans.
Produced by PlanCompiler, cached by PlanCache and interpreted by
MappingExecutor. A published plan is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from automap.core.enums import ConstructorStrategy, SlotBinding, TypeKind, WriteCapability
from automap.metadata.accessor import ReadAccessor, WriteMutator
from automap.metadata.policy import Discriminator
from automap.transformer.base import Transformer


@dataclass(frozen=True)
class GroupFilter:
    """Group visibility of a property on both sides of a mapping."""

    source_groups: frozenset[str] | None = None
    target_groups: frozenset[str] | None = None
    disabled: bool = False

    def allows(self, groups: frozenset[str] | None) -> bool:
        if self.disabled:
            return True
        if self.source_groups is None and self.target_groups is None:
            return groups is None
        if groups is None:
            return False
        for side in (self.source_groups, self.target_groups):
            if side is not None and not side & groups:
                return False
        return True


@dataclass(frozen=True)
class PropertyStep:
    """Mapping of one source property onto one target property."""

    source_name: str
    target_name: str
    read: ReadAccessor
    write: WriteMutator
    transformer: Transformer | None
    groups: GroupFilter = field(default_factory=GroupFilter)
    max_depth: int | None = None
    nullable: bool = True
    constructor_slot: bool = False

    @property
    def constructor_only(self) -> bool:
        return self.write.capability is WriteCapability.CONSTRUCTOR


@dataclass(frozen=True)
class ConstructorSlot:
    """A constructor parameter and where its value comes from."""

    name: str
    keyword: str
    binding: SlotBinding
    has_default: bool = False
    nullable: bool = True
    positional_only: bool = False


@dataclass(frozen=True)
class ConstructorPlan:
    """How the target instance is created."""

    strategy: ConstructorStrategy
    use_constructor: bool
    slots: tuple[ConstructorSlot, ...] = ()
    allocatable: bool = True
    immutable: bool = False
    pydantic: bool = False

    @property
    def has_no_argument_path(self) -> bool:
        """Whether an instance can be obtained without mapped arguments."""
        return self.allocatable or all(slot.has_default for slot in self.slots)


@dataclass(frozen=True)
class MappingPlan:
    """Compiled, validated mapping plan for a (source, target) pair."""

    source: type
    target: type
    source_kind: TypeKind
    target_kind: TypeKind
    steps: tuple[PropertyStep, ...] = ()
    constructor: ConstructorPlan | None = None
    ignored: dict[str, str] = field(default_factory=dict)
    discriminator: Discriminator | None = None
    discriminator_value: tuple[str, Any] | None = None
    provider: Any = None
    immutable: bool = False
    fingerprint: tuple[Any, ...] = ()

    @property
    def target_is_bag(self) -> bool:
        return self.target_kind is not TypeKind.OBJECT

    def step(self, target_name: str) -> PropertyStep | None:
        for candidate in self.steps:
            if candidate.target_name == target_name:
                return candidate
        return None
