"""Plan executor.

Interprets MappingPlans against concrete values. Every top-level call gets
its own MappingCall, holding the identity map that breaks reference cycles
and the depth counters of MaxDepth properties.

Execution of one plan:

1. read every included property (groups, allowed/ignored attributes,
   skip flags and depth limits are evaluated here),
2. create the target (provider, constructor or allocation) and register
   it in the identity map,
3. transform the remaining values and write them.

Nothing is written to a target to populate until every value has been
read and transformed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from automap.core.configuration import MapperContext
from automap.core.enums import ConstructorStrategy, SlotBinding, WriteCapability
from automap.core.exceptions import (
    CircularReferenceError,
    MissingConstructorArgumentsError,
    PlanCompilationError,
    ReadOnlyTargetError,
    TargetConstructionError,
    UninitializedPropertyError,
)
from automap.mapping.plan import ConstructorPlan, MappingPlan, PropertyStep
from automap.mapping.provider import EarlyReturn
from automap.metadata.accessor import force_set
from automap.metadata.types import type_name
from automap.transformer.objects import resolve_subtype

logger = logging.getLogger(__name__)

_IN_PROGRESS = object()

ReferenceKey = tuple[int, type]


class MappingCall:
    """State shared by every nested mapping of one top-level call."""

    def __init__(self, executor: MappingExecutor) -> None:
        self.executor = executor
        self.references: dict[ReferenceKey, Any] = {}
        self.counts: dict[ReferenceKey, int] = {}
        self.depths: dict[tuple[type, str], int] = {}
        # Plans are resolved once per pair and call.
        self.plans: dict[tuple[type, type], MappingPlan] = {}
        # Keeps sources alive so their ids stay unique during the call.
        self._sources: list[Any] = []

    def map_nested(self, value: Any, target: type, context: MapperContext) -> Any:
        """Map a nested value, sharing this call's identity map."""
        return self.executor.map_value(value, target, context, self)

    def register(self, key: ReferenceKey, source: Any, target: Any) -> None:
        if key not in self.references:
            self._sources.append(source)
        self.references[key] = target

    def forget(self, key: ReferenceKey) -> None:
        """Drop a reference whose target could not be built."""
        if self.references.get(key) is _IN_PROGRESS:
            del self.references[key]


class MappingExecutor:
    """Executes plans.

    Args:
        plans: Returns the compiled plan of a (source type, target type) pair.
    """

    def __init__(self, plans: Callable[[type, type], MappingPlan]) -> None:
        self._plans = plans

    def map_value(
        self, source: Any, target: type, context: MapperContext, call: MappingCall
    ) -> Any:
        pair = (type(source), target)
        plan = call.plans.get(pair)
        if plan is None:
            plan = call.plans[pair] = self._plans(*pair)
        return self.execute(plan, source, context, call)

    def execute(
        self, plan: MappingPlan, source: Any, context: MapperContext, call: MappingCall
    ) -> Any:
        """Run a plan against a source value.

        Raises:
            CircularReferenceError: If the source is re-entered beyond the
                configured limit, or while its target is still being built.
            MissingConstructorArgumentsError: If the target constructor cannot
                be satisfied.
            ReadOnlyTargetError: If an immutable target must be populated.
        """
        populate = context.target_to_populate
        if plan.discriminator is not None and populate is None:
            subclass = resolve_subtype(plan.discriminator, plan.target, source)
            if subclass is not plan.target:
                return self.map_value(source, subclass, context, call)

        key: ReferenceKey = (id(source), plan.target)
        if key in call.references:
            reused = self._reenter(key, source, context, call)
            if reused is not _IN_PROGRESS:
                return reused
        call.register(key, source, _IN_PROGRESS)
        try:
            return self._build(plan, source, populate, key, context, call)
        except Exception:
            call.forget(key)
            raise

    def _build(
        self,
        plan: MappingPlan,
        source: Any,
        populate: Any,
        key: ReferenceKey,
        context: MapperContext,
        call: MappingCall,
    ) -> Any:
        if plan.provider is not None and populate is None:
            provided = plan.provider.provide(plan.target, source, context)
            if isinstance(provided, EarlyReturn):
                call.register(key, source, provided.value)
                return provided.value
            populate = provided

        values = self._read(plan, source, context, call)

        if populate is not None:
            return self._populate(plan, populate, values, key, source, context, call)
        if plan.target_is_bag:
            target = plan.target()
            call.register(key, source, target)
            if plan.discriminator_value is not None:
                name, value = plan.discriminator_value
                _write_key(target, name, value)
            self._write(values, target, context, call, plan)
            return target
        return self._create(plan, values, key, source, context, call)

    def _reenter(
        self, key: ReferenceKey, source: Any, context: MapperContext, call: MappingCall
    ) -> Any:
        """Decide what to do with an already seen source.

        Returns the value to use, or the in-progress marker to map the
        source again.
        """
        existing = call.references[key]
        handler = context.circular_reference_handler
        limit = context.circular_reference_limit
        reference = f"{type_name(type(source))} -> {type_name(key[1])}"
        if limit is None:
            if handler is not None:
                return handler(source, context)
            if existing is _IN_PROGRESS:
                raise CircularReferenceError(reference, None)
            return existing
        count = call.counts.get(key, 0)
        if count >= limit:
            if handler is not None:
                return handler(source, context)
            raise CircularReferenceError(reference, limit)
        call.counts[key] = count + 1
        logger.debug("Re-entering %s (%d/%d)", reference, count + 1, limit)
        return _IN_PROGRESS

    # --- Read phase ---

    def _read(
        self, plan: MappingPlan, source: Any, context: MapperContext, call: MappingCall
    ) -> list[tuple[PropertyStep, Any]]:
        values = []
        for step in plan.steps:
            if not step.groups.allows(context.groups):
                continue
            if not context.is_allowed_attribute(step.target_name):
                continue
            if step.max_depth is not None:
                if call.depths.get((plan.target, step.target_name), 0) >= step.max_depth:
                    continue
            if not step.read.is_present(source):
                continue
            try:
                value = step.read.read(source, context)
            except AttributeError as e:
                if context.skip_uninitialized_values:
                    continue
                if isinstance(e, UninitializedPropertyError):
                    raise
                raise UninitializedPropertyError(
                    type_name(type(source)), step.source_name
                ) from e
            if value is None and context.skip_null_values:
                continue
            values.append((step, value))
        return values

    # --- Transform and write phase ---

    def _transform(
        self,
        plan: MappingPlan,
        step: PropertyStep,
        value: Any,
        context: MapperContext,
        call: MappingCall,
    ) -> Any:
        if value is None or step.transformer is None:
            return value
        child = context.for_property(step.target_name)
        if step.max_depth is None:
            return step.transformer.transform(value, child, call)
        depth_key = (plan.target, step.target_name)
        depth = call.depths.get(depth_key, 0)
        call.depths[depth_key] = depth + 1
        try:
            return step.transformer.transform(value, child, call)
        finally:
            call.depths[depth_key] = depth

    def _write(
        self,
        values: list[tuple[PropertyStep, Any]],
        target: Any,
        context: MapperContext,
        call: MappingCall,
        plan: MappingPlan,
    ) -> None:
        for step, value in values:
            step.write.write(target, self._transform(plan, step, value, context, call))

    def _populate(
        self,
        plan: MappingPlan,
        target: Any,
        values: list[tuple[PropertyStep, Any]],
        key: ReferenceKey,
        source: Any,
        context: MapperContext,
        call: MappingCall,
    ) -> Any:
        call.register(key, source, target)
        if plan.immutable and values:
            if context.allow_readonly_target_to_populate:
                return target
            raise ReadOnlyTargetError(type_name(type(target)))
        values = [(step, value) for step, value in values if not step.constructor_only]
        transformed = [
            (step, self._transform(plan, step, value, context, call)) for step, value in values
        ]
        state = _TargetState(target)
        try:
            for step, value in transformed:
                step.write.write(target, value)
        except Exception:
            state.restore()
            raise
        return target

    # --- Construction ---

    def _create(
        self,
        plan: MappingPlan,
        values: list[tuple[PropertyStep, Any]],
        key: ReferenceKey,
        source: Any,
        context: MapperContext,
        call: MappingCall,
    ) -> Any:
        constructor = plan.constructor
        if constructor is None:
            raise PlanCompilationError(f"{type_name(plan.target)} has no construction plan")
        if not constructor.use_constructor:
            return self._allocate_and_write(plan, constructor, values, key, source, context, call)

        mapped = {step.target_name: (step, value) for step, value in values}
        arguments, missing = self._arguments(plan, constructor, mapped, context)
        if missing:
            if constructor.strategy is ConstructorStrategy.AUTO and _can_fall_back(
                constructor, values
            ):
                logger.debug(
                    "%s: missing constructor arguments %s, instantiating without constructor",
                    type_name(plan.target),
                    missing,
                )
                return self._allocate_and_write(
                    plan, constructor, values, key, source, context, call
                )
            raise MissingConstructorArgumentsError(type_name(plan.target), missing)

        # Optional arguments with a regular mutator are written once the
        # target is registered, so references back to it can be resolved.
        deferred: set[str] = set()
        positional = []
        keywords = {}
        for slot in constructor.slots:
            if slot.name not in arguments:
                continue
            value = arguments[slot.name]
            if slot.binding is SlotBinding.MAPPED and slot.name in mapped:
                step = mapped[slot.name][0]
                if (
                    slot.has_default
                    and not slot.positional_only
                    and not step.constructor_only
                    and not constructor.immutable
                ):
                    deferred.add(slot.name)
                    continue
                value = self._transform(plan, step, value, context, call)
                if value is None and slot.has_default and not slot.nullable:
                    continue
            if slot.positional_only:
                positional.append(value)
            else:
                keywords[slot.keyword] = value
        try:
            target = plan.target(*positional, **keywords)
        except (TypeError, ValueError) as e:
            raise TargetConstructionError(type_name(plan.target), str(e)) from e
        call.register(key, source, target)
        remaining = [
            (step, value)
            for step, value in values
            if not step.constructor_slot or step.target_name in deferred
        ]
        self._write(remaining, target, context, call, plan)
        return target

    @staticmethod
    def _arguments(
        plan: MappingPlan,
        constructor: ConstructorPlan,
        mapped: dict[str, tuple[PropertyStep, Any]],
        context: MapperContext,
    ) -> tuple[dict[str, Any], list[str]]:
        """Resolve every slot: source value, context, default, None."""
        arguments: dict[str, Any] = {}
        missing = []
        for slot in constructor.slots:
            if slot.binding is SlotBinding.MAPPED and slot.name in mapped:
                value = mapped[slot.name][1]
                if value is None and slot.has_default and not slot.nullable:
                    continue
                arguments[slot.name] = value
                continue
            found, value = context.constructor_argument(plan.target, slot.name)
            if found:
                arguments[slot.name] = value
            elif slot.has_default:
                continue
            elif slot.nullable:
                arguments[slot.name] = None
            else:
                missing.append(slot.name)
        return arguments, missing

    def _allocate_and_write(
        self,
        plan: MappingPlan,
        constructor: ConstructorPlan,
        values: list[tuple[PropertyStep, Any]],
        key: ReferenceKey,
        source: Any,
        context: MapperContext,
        call: MappingCall,
    ) -> Any:
        try:
            if constructor.pydantic:
                target = plan.target.model_construct()  # type: ignore[attr-defined]
            elif constructor.allocatable:
                target = plan.target.__new__(plan.target)
            else:
                target = plan.target()
        except (TypeError, ValueError) as e:
            raise TargetConstructionError(type_name(plan.target), str(e)) from e
        call.register(key, source, target)
        mapped = {step.target_name for step, _ in values}
        for slot in constructor.slots:
            found, value = context.constructor_argument(plan.target, slot.name)
            if found and slot.name not in mapped:
                force_set(target, slot.name, value)
        self._write(values, target, context, call, plan)
        return target


def _can_fall_back(constructor: ConstructorPlan, values: list[tuple[PropertyStep, Any]]) -> bool:
    if not constructor.allocatable or constructor.immutable:
        return False
    return all(step.write.capability is not WriteCapability.CONSTRUCTOR for step, _ in values)


def _write_key(target: Any, name: str, value: Any) -> None:
    if isinstance(target, dict):
        target[name] = value
    else:
        setattr(target, name, value)


def _slot_names(cls: type) -> list[str]:
    names = []
    for klass in cls.__mro__:
        if klass.__module__.startswith("pydantic"):
            continue
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        names.extend(name for name in slots if name not in ("__dict__", "__weakref__"))
    return names


class _TargetState:
    """Shallow snapshot of a target, restored when populating fails midway.

    Collections held by the target are copied too, since adders grow them
    in place.
    """

    def __init__(self, target: Any) -> None:
        self.target = target
        if isinstance(target, dict):
            self.values = dict(target)
            self.slots: dict[str, Any] = {}
        else:
            self.values = dict(getattr(target, "__dict__", {}))
            self.slots = {
                name: getattr(target, name)
                for name in _slot_names(type(target))
                if hasattr(target, name)
            }
        self.contents = [
            (value, list(value) if isinstance(value, list) else value.copy())
            for value in (*self.values.values(), *self.slots.values())
            if isinstance(value, (list, set, dict))
        ]

    def restore(self) -> None:
        for collection, items in self.contents:
            collection.clear()
            if isinstance(collection, list):
                collection.extend(items)
            else:
                collection.update(items)
        if isinstance(self.target, dict):
            self.target.clear()
            self.target.update(self.values)
            return
        namespace = getattr(self.target, "__dict__", None)
        if namespace is not None:
            namespace.clear()
            namespace.update(self.values)
        for name in _slot_names(type(self.target)):
            if name in self.slots:
                object.__setattr__(self.target, name, self.slots[name])
            elif hasattr(self.target, name):
                object.__delattr__(self.target, name)
