"""Mapping plan compiler.

Turns a (source type, target type) pair into a frozen MappingPlan:
properties are matched by name, each pair gets its transformer from the
registry, ignored and inaccessible properties are recorded, and the
constructor strategy is settled.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from automap.core.configuration import Configuration
from automap.core.enums import (
    ConstructorStrategy,
    ReadCapability,
    SlotBinding,
    WriteCapability,
)
from automap.core.exceptions import InvalidMappingError, PlanCompilationError
from automap.mapping.plan import (
    ConstructorPlan,
    ConstructorSlot,
    GroupFilter,
    MappingPlan,
    PropertyStep,
)
from automap.mapping.protocol import NameConverter, PropertyListener, PropertyMetadataEvent
from automap.mapping.provider import Provider
from automap.metadata.accessor import ReadAccessor, WriteMutator
from automap.metadata.descriptor import PropertyDescriptor, TypeDescriptor, TypeDescriptorFactory
from automap.metadata.types import bag_counterpart, type_name
from automap.transformer.registry import TransformerRegistry

logger = logging.getLogger(__name__)

NOT_READABLE = "not accessible: no read path on source"
NOT_WRITABLE = "not accessible: no write path on target"
IGNORED = "ignored by policy"
NO_TRANSFORMER = "no compatible transformer"


def plan_fingerprint(
    source: TypeDescriptor, target: TypeDescriptor, configuration: Configuration
) -> tuple[Any, ...]:
    return (source.fingerprint, target.fingerprint, *configuration.fingerprint())


class PlanCompiler:
    """Compiles MappingPlans.

    Args:
        descriptors: Source of TypeDescriptors.
        transformers: Transformer registry.
        configuration: Static mapper configuration.
        providers: Registered providers, consulted in order.
        name_converter: Optional bag key converter.
        property_listener: Optional callback run once per property.
    """

    def __init__(
        self,
        descriptors: TypeDescriptorFactory,
        transformers: TransformerRegistry,
        configuration: Configuration,
        providers: Sequence[Provider] = (),
        name_converter: NameConverter | None = None,
        property_listener: PropertyListener | None = None,
    ) -> None:
        self._descriptors = descriptors
        self._transformers = transformers
        self._configuration = configuration
        self._providers = providers
        self._name_converter = name_converter
        self._listener = property_listener

    def compile(self, source_type: type, target_type: type) -> MappingPlan:
        """Compile and validate the mapping into a MappingPlan.

        Raises:
            InvalidMappingError: If both sides are dynamic bags.
            PlanCompilationError: If the target cannot be instantiated under
                the configured constructor strategy.
            TypeMismatchError: If a property pair is declared incompatible.
        """
        source = self._descriptors.describe(source_type)
        target = self._descriptors.describe(target_type)
        if source.is_dynamic_bag and target.is_dynamic_bag:
            raise InvalidMappingError(
                f"Cannot map {source.name} to {target.name}: both are dynamic bags"
            )

        steps: list[PropertyStep] = []
        ignored: dict[str, str] = {}
        constructor_names = {parameter.name for parameter in target.constructor}
        for name, source_prop, target_prop in self._pairs(source, target):
            reason = self._accessibility(source_prop, target_prop)
            if reason is not None:
                ignored[name] = reason
                continue
            step, reason = self._step(source, target, name, source_prop, target_prop)
            if step is None:
                ignored[name] = reason or IGNORED
                continue
            if step.target_name in constructor_names:
                step = replace(step, constructor_slot=True)
            steps.append(step)

        for name, reason in ignored.items():
            logger.debug("%s -> %s: %s ignored (%s)", source.name, target.name, name, reason)

        plan = MappingPlan(
            source=source.type_,
            target=target.type_,
            source_kind=source.kind,
            target_kind=target.kind,
            steps=tuple(steps),
            constructor=self._constructor(target, steps),
            ignored=ignored,
            discriminator=self._discriminator(target),
            discriminator_value=self._discriminator_value(source, target, steps),
            provider=self._provider(source, target),
            immutable=target.immutable,
            fingerprint=plan_fingerprint(source, target, self._configuration),
        )
        logger.debug(
            "Compiled plan %s -> %s: %d steps, %d ignored",
            source.name,
            target.name,
            len(plan.steps),
            len(plan.ignored),
        )
        return plan

    # --- Property matching ---

    def _key(self, name: str) -> str:
        if self._name_converter is None:
            return name
        return self._name_converter.normalize(name)

    def _pairs(
        self, source: TypeDescriptor, target: TypeDescriptor
    ) -> list[tuple[str, PropertyDescriptor, PropertyDescriptor]]:
        if target.is_dynamic_bag:
            return [
                (
                    prop.name,
                    prop,
                    PropertyDescriptor(
                        name=prop.name,
                        declared_type=bag_counterpart(prop.declared_type),
                        write=WriteMutator(WriteCapability.KEY, self._key(prop.name)),
                    ),
                )
                for prop in source.properties
            ]
        if source.is_dynamic_bag:
            return [
                (
                    prop.name,
                    PropertyDescriptor(
                        name=prop.name,
                        read=ReadAccessor(ReadCapability.KEY, self._key(prop.name)),
                    ),
                    prop,
                )
                for prop in target.properties
            ]
        pairs = []
        for prop in target.properties:
            source_prop = source.get(prop.name)
            if source_prop is not None:
                pairs.append((prop.name, source_prop, prop))
        return pairs

    @staticmethod
    def _accessibility(
        source_prop: PropertyDescriptor, target_prop: PropertyDescriptor
    ) -> str | None:
        if source_prop.read is None:
            return NOT_READABLE
        if target_prop.write is None:
            return NOT_WRITABLE
        return None

    def _step(
        self,
        source: TypeDescriptor,
        target: TypeDescriptor,
        name: str,
        source_prop: PropertyDescriptor,
        target_prop: PropertyDescriptor,
    ) -> tuple[PropertyStep | None, str | None]:
        event = PropertyMetadataEvent(
            source_type=source.type_,
            target_type=target.type_,
            source_property=source_prop.name,
            target_property=target_prop.name,
            source_groups=source_prop.groups,
            target_groups=target_prop.groups,
            max_depth=target_prop.max_depth
            if target_prop.max_depth is not None
            else source_prop.max_depth,
            ignored=source_prop.ignored or target_prop.ignored,
            ignore_reason=IGNORED if source_prop.ignored or target_prop.ignored else None,
        )
        if self._listener is not None:
            self._listener(event)
        if event.ignored:
            return None, event.ignore_reason or IGNORED

        transformer = self._transformers.resolve(
            source_prop.declared_type, target_prop.declared_type
        )
        if transformer is None:
            return None, NO_TRANSFORMER

        return (
            PropertyStep(
                source_name=source_prop.read.name,
                target_name=name,
                read=source_prop.read,
                write=target_prop.write,
                transformer=transformer,
                groups=GroupFilter(
                    source_groups=event.source_groups,
                    target_groups=event.target_groups,
                    disabled=event.disable_groups_check,
                ),
                max_depth=event.max_depth,
                nullable=target_prop.nullable,
            ),
            None,
        )

    # --- Construction ---

    def _constructor(
        self, target: TypeDescriptor, steps: list[PropertyStep]
    ) -> ConstructorPlan | None:
        if target.is_dynamic_bag:
            return None
        strategy = self._configuration.constructor_strategy
        mapped = {step.target_name for step in steps}
        slots = []
        for parameter in target.constructor:
            if parameter.name in mapped:
                binding = SlotBinding.MAPPED
            elif parameter.has_default:
                binding = SlotBinding.DEFAULT
            else:
                binding = SlotBinding.CONTEXT
            slots.append(
                ConstructorSlot(
                    name=parameter.name,
                    keyword=parameter.keyword,
                    binding=binding,
                    has_default=parameter.has_default,
                    nullable=parameter.nullable,
                    positional_only=parameter.positional_only,
                )
            )

        if strategy is ConstructorStrategy.AUTO and not all(
            slot.binding is not SlotBinding.CONTEXT or slot.nullable for slot in slots
        ):
            logger.debug(
                "%s: constructor arguments %s must come from the context, "
                "falling back to allocation when they are missing",
                target.name,
                [slot.name for slot in slots if slot.binding is SlotBinding.CONTEXT],
            )
        constructor = ConstructorPlan(
            strategy=strategy,
            use_constructor=strategy is not ConstructorStrategy.NEVER,
            slots=tuple(slots),
            allocatable=target.allocatable,
            immutable=target.immutable,
            pydantic=target.is_pydantic,
        )
        if strategy is ConstructorStrategy.NEVER and not constructor.has_no_argument_path:
            raise PlanCompilationError(
                f"{target.name} cannot be instantiated without calling its constructor"
            )
        return constructor

    # --- Polymorphism and providers ---

    @staticmethod
    def _discriminator(target: TypeDescriptor) -> Any:
        if target.is_dynamic_bag or target.discriminator is None:
            return None
        subclasses = target.discriminator.mapping.values()
        if any(sub is not target.type_ and issubclass(sub, target.type_) for sub in subclasses):
            return target.discriminator
        return None

    def _discriminator_value(
        self, source: TypeDescriptor, target: TypeDescriptor, steps: list[PropertyStep]
    ) -> tuple[str, Any] | None:
        if not target.is_dynamic_bag or source.discriminator is None:
            return None
        name = source.discriminator.property_name
        if any(step.target_name == name for step in steps):
            return None
        value = source.discriminator.value_for(source.type_)
        if value is None:
            return None
        return self._key(name), value

    def _provider(self, source: TypeDescriptor, target: TypeDescriptor) -> Provider | None:
        for provider in self._providers:
            if provider.supports(source.type_, target.type_):
                logger.debug(
                    "%s -> %s: instances supplied by %s",
                    source.name,
                    target.name,
                    type_name(type(provider)),
                )
                return provider
        return None

