"""Scalar, value-type and enum transformers."""

from __future__ import annotations

import datetime
import decimal
import enum
import uuid
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from pydantic import ConfigDict, TypeAdapter, ValidationError

from automap.core.exceptions import TypeMismatchError
from automap.metadata.types import is_any, is_enum, is_scalar, is_value_type, type_name
from automap.transformer.base import PASSTHROUGH, Transformer

if TYPE_CHECKING:
    from automap.core.configuration import MapperContext
    from automap.mapping.executor import MappingCall
    from automap.transformer.registry import TransformerRegistry

_NUMBERS = (int, float, decimal.Decimal)


def _kind(tp: type) -> str:
    if tp is bool:
        return "bool"
    if issubclass(tp, _NUMBERS):
        return "number"
    if issubclass(tp, (str, uuid.UUID)):
        return "text"
    return "bytes"


@lru_cache(maxsize=None)
def _adapter(target: type) -> TypeAdapter[Any]:
    if target is str:
        return TypeAdapter(str, config=ConfigDict(coerce_numbers_to_str=True))
    return TypeAdapter(target)


def _accepts(target: type, value: Any) -> bool:
    """Whether value is already a valid target instance."""
    if isinstance(value, bool) and target is not bool:
        return False
    if target is float and isinstance(value, int):
        return True
    return isinstance(value, target)


def coerce(value: Any, target: type, strict: bool = False) -> Any:
    """Convert a scalar or value-type value into target.

    Conversion is delegated to pydantic; in strict mode only values of the
    target type (and ints for floats) are accepted.
    """
    if _accepts(target, value):
        return value
    if not strict:
        if isinstance(value, enum.Enum):
            value = value.value
            if _accepts(target, value):
                return value
        if target is str and isinstance(value, (datetime.date, datetime.time)):
            return value.isoformat()
        if target is str and isinstance(value, uuid.UUID):
            return str(value)
    try:
        return _adapter(target).validate_python(value, strict=strict)
    except ValidationError as e:
        if strict:
            detail = f"Expected {type_name(target)}, got {type(value).__name__}"
        else:
            detail = (
                f"Cannot convert {type(value).__name__} value {value!r} to {type_name(target)}"
            )
        raise TypeMismatchError(detail, value) from e


class CoerceTransformer:
    """Converts values to a scalar or value type.

    In strict mode only values already of the target type are accepted.
    """

    def __init__(self, target: type, strict: bool = False) -> None:
        self.target = target
        self.strict = strict

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        return coerce(value, self.target, self.strict)

    def __repr__(self) -> str:
        return f"CoerceTransformer({type_name(self.target)}, strict={self.strict})"


class ScalarTransformerFactory:
    """Scalars and value types (UUID, Decimal)."""

    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        if not (is_scalar(target_type) or is_value_type(target_type)):
            return None
        if is_any(source_type):
            return CoerceTransformer(target_type, strict=registry.strict_types)
        if not (is_scalar(source_type) or is_value_type(source_type)):
            return None
        if source_type is target_type or (
            issubclass(source_type, target_type) and source_type is not bool
        ):
            return PASSTHROUGH
        if registry.strict_types and not (
            _kind(source_type) == _kind(target_type) == "number" and target_type is float
        ):
            raise TypeMismatchError(
                f"Cannot map {type_name(source_type)} to {type_name(target_type)} "
                f"with strict types"
            )
        return CoerceTransformer(target_type)


class EnumFromValueTransformer:
    def __init__(self, target: type[enum.Enum]) -> None:
        self.target = target

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        if isinstance(value, self.target):
            return value
        if isinstance(value, enum.Enum):
            value = value.value
        try:
            return self.target(value)
        except ValueError as e:
            raise TypeMismatchError(
                f"{value!r} is not a valid {type_name(self.target)}", value
            ) from e

    def __repr__(self) -> str:
        return f"EnumFromValueTransformer({type_name(self.target)})"


class EnumToValueTransformer:
    def __init__(self, target: Any) -> None:
        self.target = target

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        if not isinstance(value, enum.Enum):
            raise TypeMismatchError(f"Expected an enum member, got {type(value).__name__}", value)
        if is_any(self.target):
            return value.value
        return coerce(value.value, self.target)

    def __repr__(self) -> str:
        return f"EnumToValueTransformer({type_name(self.target)})"


class EnumTransformerFactory:
    """Enum members to and from their values."""

    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        if is_enum(target_type):
            if source_type is target_type:
                return PASSTHROUGH
            if is_any(source_type) or is_enum(source_type) or is_scalar(source_type):
                return EnumFromValueTransformer(target_type)
            return None
        if is_enum(source_type) and (is_any(target_type) or is_scalar(target_type)):
            return EnumToValueTransformer(target_type)
        return None
