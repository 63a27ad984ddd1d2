"""Type descriptors.

A TypeDescriptor is the uniform view of a type's properties used by the
plan compiler. Descriptors are built by introspection once per type and
cached; each carries a fingerprint (source file mtime + engine version)
so a changed class is described again on its next lookup.

Supports dataclasses, Pydantic models, plain classes, ``dict`` and
``SimpleNamespace`` bags.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import os
import platform
import threading
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from pydantic import BaseModel

from automap.core.enums import ReadCapability, TypeKind, WriteCapability
from automap.core.exceptions import MetadataError
from automap.core.version import VERSION
from automap.metadata.accessor import ContextParameter, ReadAccessor, WriteMutator
from automap.metadata.policy import (
    Discriminator,
    Groups,
    Ignore,
    MapToContext,
    MaxDepth,
    discriminator_of,
)
from automap.metadata.types import (
    is_classvar,
    is_nullable,
    strip_annotated,
)

logger = logging.getLogger(__name__)

_GETTER_PREFIXES = ("get_", "is_", "has_")
_MISSING = object()


def _is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


@dataclass(frozen=True)
class ConstructorParameter:
    """A parameter of the type's constructor."""

    name: str
    keyword: str
    declared_type: Any = Any
    has_default: bool = False
    nullable: bool = True
    positional_only: bool = False


@dataclass(frozen=True)
class PropertyDescriptor:
    """A property of a described type, with its read and write paths."""

    name: str
    declared_type: Any = Any
    nullable: bool = True
    read: ReadAccessor | None = None
    write: WriteMutator | None = None
    groups: frozenset[str] | None = None
    max_depth: int | None = None
    ignored: bool = False
    ignore_reason: str | None = None


@dataclass(frozen=True)
class TypeDescriptor:
    """Uniform, immutable view over a type."""

    type_: type
    kind: TypeKind
    properties: tuple[PropertyDescriptor, ...] = ()
    constructor: tuple[ConstructorParameter, ...] = ()
    immutable: bool = False
    allocatable: bool = True
    discriminator: Discriminator | None = None
    fingerprint: str = ""
    _by_name: dict[str, PropertyDescriptor] = field(
        default_factory=dict, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self._by_name.update({prop.name: prop for prop in self.properties})

    @property
    def name(self) -> str:
        return self.type_.__qualname__

    @property
    def is_dynamic_bag(self) -> bool:
        return self.kind is not TypeKind.OBJECT

    @property
    def is_pydantic(self) -> bool:
        return _is_pydantic_model(self.type_)

    def get(self, name: str) -> PropertyDescriptor | None:
        return self._by_name.get(name)

    def constructor_parameter(self, name: str) -> ConstructorParameter | None:
        for parameter in self.constructor:
            if parameter.name == name:
                return parameter
        return None


@lru_cache(maxsize=None)
def _source_file(type_: type) -> str | None:
    try:
        return inspect.getsourcefile(type_)
    except (TypeError, OSError):
        return None


def type_fingerprint(type_: type) -> str:
    """Modification fingerprint of a type's defining file."""
    path = _source_file(type_)
    stamp = platform.python_version()
    if path is not None:
        try:
            stamp = str(os.stat(path).st_mtime_ns)
        except OSError:
            pass
    return f"{stamp}:{VERSION}"


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError, AttributeError):
        annotations = getattr(obj, "__annotations__", {})
        return {name: Any for name in annotations}


def _class_hints(cls: type) -> dict[str, Any]:
    if _is_pydantic_model(cls):
        return {
            name: info.rebuild_annotation()
            for name, info in cls.model_fields.items()  # type: ignore[attr-defined]
        }
    return _type_hints(cls)


def _singular_candidates(name: str) -> list[str]:
    candidates = []
    if name.endswith("ies"):
        candidates.append(name[:-3] + "y")
    if name.endswith("es"):
        candidates.append(name[:-2])
    if name.endswith("s"):
        candidates.append(name[:-1])
    candidates.append(name)
    return candidates


class _ClassInspector:
    """Collects raw member information of a single class."""

    def __init__(self, cls: type, map_private: bool) -> None:
        self.cls = cls
        self.map_private = map_private
        self.hints = {
            name: hint for name, hint in _class_hints(cls).items() if not is_classvar(hint)
        }
        self.members: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            if klass is object or klass.__module__.startswith("pydantic"):
                continue
            self.members.update(vars(klass))
        self.slots = {
            slot
            for klass in cls.__mro__
            for slot in getattr(klass, "__slots__", ())
            if isinstance(slot, str)
        }
        self.constructor = self._constructor_parameters()
        self.init_names = {parameter.name for parameter in self.constructor}

    def function(self, name: str) -> Any:
        member = self.members.get(name)
        if inspect.isfunction(member):
            return member
        return None

    def property(self, name: str) -> property | None:
        member = self.members.get(name)
        return member if isinstance(member, property) else None

    def names(self) -> list[str]:
        """Candidate property names in declaration order."""
        ordered: list[str] = []

        def add(name: str) -> None:
            if name.startswith("_"):
                if not self.map_private or name.startswith("__"):
                    return
                name = name[1:]
            if name and name not in ordered and self.function(name) is None:
                ordered.append(name)

        for name in self.hints:
            add(name)
        for parameter in self.constructor:
            add(parameter.name)
        for slot in sorted(self.slots):
            add(slot)
        for name, member in self.members.items():
            if isinstance(member, property):
                add(name)
            elif inspect.isfunction(member):
                for prefix in (*_GETTER_PREFIXES, "set_"):
                    if name.startswith(prefix) and len(name) > len(prefix):
                        add(name[len(prefix):])
        return ordered

    def getter(self, name: str) -> Any:
        for prefix in _GETTER_PREFIXES:
            method = self.function(prefix + name)
            if method is not None:
                return method
        return None

    def adder(self, name: str) -> tuple[str, str, Any] | None:
        for singular in _singular_candidates(name):
            adder = self.function("add_" + singular)
            remover = self.function("remove_" + singular)
            if adder is not None and remover is not None:
                return "add_" + singular, "remove_" + singular, adder
        return None

    def private_name(self, name: str) -> str | None:
        private = "_" + name
        if private in self.hints or private in self.slots:
            return private
        return None

    def is_public_field(self, name: str) -> bool:
        if self.property(name) is not None:
            return False
        if name in self.hints or name in self.slots:
            return True
        if name in self.init_names:
            # A constructor argument backed by accessors or a private
            # attribute is not stored under its own name.
            return (
                self.getter(name) is None
                and self.function("set_" + name) is None
                and self.private_name(name) is None
            )
        return False

    def _constructor_parameters(self) -> tuple[ConstructorParameter, ...]:
        cls = self.cls
        if _is_pydantic_model(cls):
            return tuple(
                ConstructorParameter(
                    name=name,
                    keyword=info.alias or name,
                    declared_type=info.annotation,
                    has_default=not info.is_required(),
                    nullable=is_nullable(info.annotation),
                )
                for name, info in cls.model_fields.items()  # type: ignore[attr-defined]
            )
        if dataclasses.is_dataclass(cls):
            parameters = []
            for dc_field in dataclasses.fields(cls):
                if not dc_field.init:
                    continue
                declared, _ = strip_annotated(self.hints.get(dc_field.name, Any))
                parameters.append(
                    ConstructorParameter(
                        name=dc_field.name,
                        keyword=dc_field.name,
                        declared_type=declared,
                        has_default=dc_field.default is not dataclasses.MISSING
                        or dc_field.default_factory is not dataclasses.MISSING,
                        nullable=is_nullable(declared),
                    )
                )
            return tuple(parameters)
        if cls.__init__ is not object.__init__:
            factory = cls.__init__
        elif cls.__new__ is not object.__new__:
            # Named tuples and other types built in __new__
            factory = cls.__new__
        else:
            return ()
        try:
            signature = inspect.signature(factory)
        except (ValueError, TypeError):
            return ()
        init_hints = _type_hints(factory)
        parameters = []
        for index, (name, parameter) in enumerate(signature.parameters.items()):
            if index == 0 or parameter.kind in (
                inspect.Parameter.VAR_POSITIONAL,
                inspect.Parameter.VAR_KEYWORD,
            ):
                continue
            declared, _ = strip_annotated(init_hints.get(name, self.hints.get(name, Any)))
            parameters.append(
                ConstructorParameter(
                    name=name,
                    keyword=name,
                    declared_type=declared,
                    has_default=parameter.default is not inspect.Parameter.empty,
                    nullable=is_nullable(declared),
                    positional_only=parameter.kind is inspect.Parameter.POSITIONAL_ONLY,
                )
            )
        return tuple(parameters)


def _is_immutable(cls: type) -> bool:
    params = getattr(cls, "__dataclass_params__", None)
    if params is not None and params.frozen:
        return True
    if _is_pydantic_model(cls):
        return bool(cls.model_config.get("frozen"))  # type: ignore[attr-defined]
    return issubclass(cls, tuple)


def _return_hint(function: Any) -> Any:
    if function is None:
        return _MISSING
    return _type_hints(function).get("return", _MISSING)


def _first_parameter_hint(function: Any) -> Any:
    if function is None:
        return _MISSING
    hints = _type_hints(function)
    parameters = list(inspect.signature(function).parameters)
    if len(parameters) < 2:
        return _MISSING
    return hints.get(parameters[1], _MISSING)


def _context_parameters(method: Any) -> tuple[ContextParameter, ...] | None:
    """Context bindings of a getter method, or None if it is not a getter."""
    hints = _type_hints(method)
    bindings = []
    for index, (name, parameter) in enumerate(inspect.signature(method).parameters.items()):
        if index == 0:
            continue
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
            return None
        key = name
        _, extras = strip_annotated(hints.get(name, Any))
        for extra in extras:
            if isinstance(extra, MapToContext):
                key = extra.key
        bindings.append(
            ContextParameter(
                name=name, key=key, has_default=parameter.default is not inspect.Parameter.empty
            )
        )
    return tuple(bindings)


class TypeDescriptorFactory:
    """Builds and caches TypeDescriptors.

    Args:
        map_private_properties: Expose ``_name`` attributes as ``name``
            through reflection when no public path exists.
    """

    def __init__(self, map_private_properties: bool = False) -> None:
        self._map_private = map_private_properties
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._lock = threading.Lock()

    def describe(self, type_: type) -> TypeDescriptor:
        """Return the descriptor of a type, building it on first use."""
        fingerprint = type_fingerprint(type_)
        descriptor = self._descriptors.get(type_)
        if descriptor is not None and descriptor.fingerprint == fingerprint:
            return descriptor
        with self._lock:
            descriptor = self._descriptors.get(type_)
            if descriptor is None or descriptor.fingerprint != fingerprint:
                if descriptor is not None:
                    logger.debug("Type %s changed, rebuilding its descriptor", type_.__qualname__)
                descriptor = self._build(type_, fingerprint)
                self._descriptors[type_] = descriptor
        return descriptor

    def __len__(self) -> int:
        return len(self._descriptors)

    def _build(self, type_: type, fingerprint: str) -> TypeDescriptor:
        if not isinstance(type_, type):
            raise MetadataError(repr(type_), "not a class")
        if issubclass(type_, Mapping):
            return TypeDescriptor(type_=type_, kind=TypeKind.DICT, fingerprint=fingerprint)
        if issubclass(type_, types.SimpleNamespace):
            return TypeDescriptor(type_=type_, kind=TypeKind.NAMESPACE, fingerprint=fingerprint)
        try:
            inspector = _ClassInspector(type_, self._map_private)
            properties = tuple(
                self._describe_property(inspector, name) for name in inspector.names()
            )
        except (TypeError, ValueError) as e:
            raise MetadataError(type_.__qualname__, str(e)) from e

        new = type_.__new__
        descriptor = TypeDescriptor(
            type_=type_,
            kind=TypeKind.OBJECT,
            properties=properties,
            constructor=inspector.constructor,
            immutable=_is_immutable(type_),
            allocatable=_is_pydantic_model(type_) or new is object.__new__,
            discriminator=discriminator_of(type_),
            fingerprint=fingerprint,
        )
        logger.debug(
            "Described %s: %d properties, %d constructor parameters",
            type_.__qualname__,
            len(properties),
            len(inspector.constructor),
        )
        return descriptor

    def _describe_property(self, inspector: _ClassInspector, name: str) -> PropertyDescriptor:
        prop = inspector.property(name)
        getter = inspector.getter(name)
        setter = inspector.function("set_" + name)
        adder = inspector.adder(name)
        private = inspector.private_name(name) if self._map_private else None
        public_field = inspector.is_public_field(name)
        parameter = next((p for p in inspector.constructor if p.name == name), None)

        declared: Any = _MISSING
        for candidate in (
            inspector.hints.get(name, _MISSING),
            _return_hint(prop.fget if prop is not None else None),
            _return_hint(getter),
            inspector.hints.get("_" + name, _MISSING) if private else _MISSING,
            parameter.declared_type if parameter is not None else _MISSING,
            _first_parameter_hint(setter),
        ):
            if candidate is not _MISSING:
                declared = candidate
                break
        if declared is _MISSING and adder is not None:
            element = _first_parameter_hint(adder[2])
            declared = list[Any if element is _MISSING else element]  # type: ignore[misc]
        if declared is _MISSING:
            declared = Any
        declared, extras = strip_annotated(declared)

        read = self._read_accessor(name, prop, getter, private, public_field)
        write = self._write_mutator(inspector, name, prop, setter, adder, private, public_field)

        groups: frozenset[str] | None = None
        max_depth = None
        ignored = False
        for extra in extras:
            if isinstance(extra, Groups):
                groups = (groups or frozenset()) | extra.names
            elif isinstance(extra, MaxDepth):
                max_depth = extra.depth
            elif isinstance(extra, Ignore):
                ignored = True

        return PropertyDescriptor(
            name=name,
            declared_type=declared,
            nullable=is_nullable(declared),
            read=read,
            write=write,
            groups=groups,
            max_depth=max_depth,
            ignored=ignored,
            ignore_reason="ignored by policy" if ignored else None,
        )

    @staticmethod
    def _read_accessor(
        name: str,
        prop: property | None,
        getter: Any,
        private: str | None,
        public_field: bool,
    ) -> ReadAccessor | None:
        if public_field:
            return ReadAccessor(ReadCapability.FIELD, name)
        if prop is not None and prop.fget is not None:
            return ReadAccessor(ReadCapability.GETTER, name)
        if getter is not None:
            parameters = _context_parameters(getter)
            if parameters is not None:
                return ReadAccessor(
                    ReadCapability.GETTER, getter.__name__, is_method=True, parameters=parameters
                )
        if private is not None:
            return ReadAccessor(ReadCapability.REFLECTION, private)
        return None

    @staticmethod
    def _write_mutator(
        inspector: _ClassInspector,
        name: str,
        prop: property | None,
        setter: Any,
        adder: tuple[str, str, Any] | None,
        private: str | None,
        public_field: bool,
    ) -> WriteMutator | None:
        in_constructor = name in inspector.init_names
        if _is_immutable(inspector.cls):
            if in_constructor:
                return WriteMutator(WriteCapability.CONSTRUCTOR, name)
            return None
        if public_field:
            return WriteMutator(WriteCapability.FIELD, name)
        if prop is not None and prop.fset is not None:
            return WriteMutator(WriteCapability.SETTER, name)
        if setter is not None:
            return WriteMutator(WriteCapability.SETTER, setter.__name__, is_method=True)
        if in_constructor:
            return WriteMutator(WriteCapability.CONSTRUCTOR, private or name)
        if adder is not None:
            return WriteMutator(WriteCapability.ADDER_REMOVER, adder[0], remover=adder[1])
        if private is not None:
            return WriteMutator(WriteCapability.REFLECTION, private)
        return None


__all__ = [
    "ConstructorParameter",
    "PropertyDescriptor",
    "TypeDescriptor",
    "TypeDescriptorFactory",
    "type_fingerprint",
]
