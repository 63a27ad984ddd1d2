"""Date and datetime transformers.

Dates are formatted with ``MapperContext.datetime_format`` (a strftime
pattern) or ISO-8601 when no format is set. ``datetime_force_timezone``
is applied to every datetime parsed from a string.
"""

from __future__ import annotations

import datetime
import zoneinfo
from typing import TYPE_CHECKING, Any

from automap.core.exceptions import TypeMismatchError
from automap.metadata.types import is_any, is_datetime, type_name
from automap.transformer.base import PASSTHROUGH, Transformer

if TYPE_CHECKING:
    from automap.core.configuration import MapperContext
    from automap.mapping.executor import MappingCall
    from automap.transformer.registry import TransformerRegistry


def _timezone(name: str) -> datetime.tzinfo:
    if name.upper() in ("UTC", "Z"):
        return datetime.timezone.utc
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise TypeMismatchError(f"Unknown timezone '{name}'", name) from e


def _convert(value: datetime.date, target: type) -> Any:
    if issubclass(target, datetime.datetime):
        if isinstance(value, datetime.datetime):
            return value
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def parse_datetime(value: str, target: type, context: MapperContext) -> Any:
    """Parse a string into a date or datetime."""
    try:
        if context.datetime_format:
            parsed = datetime.datetime.strptime(value, context.datetime_format)
        elif issubclass(target, datetime.datetime):
            parsed = datetime.datetime.fromisoformat(value)
        else:
            return datetime.date.fromisoformat(value)
    except ValueError as e:
        raise TypeMismatchError(
            f"Cannot parse {value!r} as {type_name(target)}", value
        ) from e
    if context.datetime_force_timezone:
        tz = _timezone(context.datetime_force_timezone)
        parsed = parsed.replace(tzinfo=tz) if parsed.tzinfo is None else parsed.astimezone(tz)
    return _convert(parsed, target)


def format_datetime(value: datetime.date, context: MapperContext) -> str:
    if context.datetime_format:
        return value.strftime(context.datetime_format)
    return value.isoformat()


class DateTimeToDateTimeTransformer:
    def __init__(self, target: type) -> None:
        self.target = target

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        return _convert(value, self.target)


class DateTimeToStringTransformer:
    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        return format_datetime(value, context)


class StringToDateTimeTransformer:
    """Parses strings; dates already of a date type are converted."""

    def __init__(self, target: type) -> None:
        self.target = target

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        if isinstance(value, datetime.date):
            return _convert(value, self.target)
        if isinstance(value, str):
            return parse_datetime(value, self.target, context)
        raise TypeMismatchError(
            f"Cannot convert {type(value).__name__} to {type_name(self.target)}", value
        )

    def __repr__(self) -> str:
        return f"StringToDateTimeTransformer({type_name(self.target)})"


class DateTimeTransformerFactory:
    """Dates to dates, strings and back."""

    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        if is_datetime(target_type):
            if source_type is target_type:
                return PASSTHROUGH
            if is_datetime(source_type):
                return DateTimeToDateTimeTransformer(target_type)
            if is_any(source_type) or source_type is str:
                return StringToDateTimeTransformer(target_type)
            return None
        if is_datetime(source_type) and target_type is str:
            return DateTimeToStringTransformer()
        return None
