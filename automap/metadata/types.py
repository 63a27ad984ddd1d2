"""Helpers classifying declared Python types."""

from __future__ import annotations

import collections.abc as abc
import datetime
import decimal
import enum
import types
import uuid
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

NoneType = type(None)

SCALAR_TYPES: tuple[type, ...] = (bool, int, float, str, bytes)
VALUE_TYPES: tuple[type, ...] = (uuid.UUID, decimal.Decimal)
DATETIME_TYPES: tuple[type, ...] = (datetime.datetime, datetime.date)

_SEQUENCE_CONTAINERS: dict[Any, type] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    abc.Sequence: list,
    abc.MutableSequence: list,
    abc.Collection: list,
    abc.Iterable: list,
    abc.Iterator: list,
    abc.Generator: list,
    abc.Set: set,
    abc.MutableSet: set,
}
_MAPPING_CONTAINERS: dict[Any, type] = {
    dict: dict,
    abc.Mapping: dict,
    abc.MutableMapping: dict,
}


@dataclass(frozen=True)
class CollectionShape:
    """Container kind and element types of a collection annotation."""

    container: type
    key_type: Any
    value_type: Any

    @property
    def is_mapping(self) -> bool:
        return self.container is dict


def isclass(tp: Any) -> bool:
    """A plain class; parametrized generics such as ``list[int]`` are not."""
    return isinstance(tp, type) and get_origin(tp) is None


def strip_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *extras]`` into ``(T, extras)``."""
    if get_origin(tp) is Annotated:
        args = get_args(tp)
        return args[0], tuple(args[1:])
    return tp, ()


def is_any(tp: Any) -> bool:
    return tp is Any or tp is object


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def is_classvar(tp: Any) -> bool:
    return tp is ClassVar or get_origin(tp) is ClassVar


def union_members(tp: Any) -> list[Any]:
    """Non-None members of a union, or ``[tp]`` for plain types."""
    if is_union(tp):
        return [arg for arg in get_args(tp) if arg is not NoneType]
    if tp is NoneType or tp is None:
        return []
    return [tp]


def is_nullable(tp: Any) -> bool:
    if is_any(tp) or tp is None or tp is NoneType:
        return True
    return is_union(tp) and NoneType in get_args(tp)


def make_union(members: list[Any], nullable: bool = False) -> Any:
    unique: list[Any] = []
    for member in members:
        if member not in unique:
            unique.append(member)
    if nullable:
        unique.append(NoneType)
    if not unique:
        return Any
    if len(unique) == 1:
        return unique[0]
    return Union[tuple(unique)]  # noqa: UP007


def unwrap_optional(tp: Any) -> Any:
    """Drop ``None`` from a union."""
    if not is_union(tp):
        return tp
    return make_union(union_members(tp))


def is_scalar(tp: Any) -> bool:
    return isclass(tp) and tp in SCALAR_TYPES


def is_value_type(tp: Any) -> bool:
    return isclass(tp) and issubclass(tp, VALUE_TYPES)


def is_datetime(tp: Any) -> bool:
    return isclass(tp) and issubclass(tp, DATETIME_TYPES)


def is_enum(tp: Any) -> bool:
    return isclass(tp) and issubclass(tp, enum.Enum)


def is_bag_type(tp: Any) -> bool:
    """Bare ``dict``, ``dict[str, Any]`` or ``SimpleNamespace``."""
    if tp is dict or tp is abc.Mapping or tp is types.SimpleNamespace:
        return True
    if isclass(tp) and issubclass(tp, (dict, types.SimpleNamespace)) and not get_args(tp):
        return True
    if get_origin(tp) in _MAPPING_CONTAINERS:
        args = get_args(tp)
        return len(args) == 2 and is_any(args[1])
    return False


def collection_shape(tp: Any) -> CollectionShape | None:
    """Describe a typed collection annotation, or None."""
    if is_bag_type(tp):
        return None
    origin = get_origin(tp) or tp
    args = get_args(tp)
    try:
        mapping = _MAPPING_CONTAINERS.get(origin)
        sequence = _SEQUENCE_CONTAINERS.get(origin)
    except TypeError:
        return None
    if mapping is not None:
        key_type, value_type = args if len(args) == 2 else (Any, Any)
        return CollectionShape(mapping, key_type, value_type)
    if sequence is not None:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            value_type = args[0] if len(set(args)) == 1 else Any
        else:
            value_type = args[0] if args else Any
        return CollectionShape(sequence, Any, value_type)
    return None


def is_structured(tp: Any) -> bool:
    """A user class mapped property by property."""
    if not isclass(tp) or is_any(tp) or tp is NoneType or tp is type:
        return False
    if is_scalar(tp) or is_value_type(tp) or is_datetime(tp) or is_enum(tp):
        return False
    if collection_shape(tp) is not None or is_bag_type(tp):
        return False
    return tp.__module__ != "builtins"


def bag_counterpart(tp: Any) -> Any:
    """Type a property takes once written into a dynamic bag."""
    if is_any(tp):
        return Any
    if is_union(tp):
        return make_union([bag_counterpart(m) for m in union_members(tp)], is_nullable(tp))
    if is_datetime(tp) or is_value_type(tp):
        return str
    if is_enum(tp):
        values = {type(member.value) for member in tp}
        return values.pop() if len(values) == 1 else Any
    if is_scalar(tp):
        return tp
    shape = collection_shape(tp)
    if shape is not None:
        if shape.is_mapping:
            return dict[shape.key_type, bag_counterpart(shape.value_type)]  # type: ignore[misc]
        return list[bag_counterpart(shape.value_type)]  # type: ignore[misc]
    if is_structured(tp) or is_bag_type(tp):
        return dict
    return Any


def type_name(tp: Any) -> str:
    if isclass(tp):
        return tp.__qualname__
    return repr(tp)
