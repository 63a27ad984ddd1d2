"""Mapper configuration and per-call context.

Configuration is a Pydantic model holding the process-wide defaults of an
AutoMapper. MapperContext is the frozen per-call configuration, built by
merging caller options over those defaults.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from automap.core.enums import ConstructorStrategy

AttributeSelection = frozenset[str] | dict[str, Any]


class Configuration(BaseModel):
    """Configuration for an AutoMapper instance."""

    model_config = ConfigDict(frozen=True)

    map_private_properties: bool = False
    constructor_strategy: ConstructorStrategy = ConstructorStrategy.AUTO
    strict_types: bool = False
    auto_register: bool = True
    datetime_format: str | None = None
    allow_readonly_target_to_populate: bool = False

    def fingerprint(self) -> tuple[Any, ...]:
        """Static settings that change the shape of compiled plans."""
        return (
            self.map_private_properties,
            self.constructor_strategy.value,
            self.strict_types,
        )


def _selection(value: Any) -> AttributeSelection | None:
    if value is None or value is True:
        return None
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        return frozenset(value)
    return frozenset([value])


class MapperContext(BaseModel):
    """Per-call mapping options.

    Instances are frozen; the helpers below return modified copies.

    Args:
        groups: Visibility groups. None disables group filtering.
        allowed_attributes: Names to map. A dict selects nested attributes
            per property.
        ignored_attributes: Names to skip. A dict entry with a nested
            selection ignores attributes of the nested value instead.
        constructor_arguments: Target type -> parameter name -> value.
        circular_reference_limit: How many times a reference may be
            re-entered before the handler (or an error) takes over.
        circular_reference_handler: Called with (source, context) to
            produce a substitute value.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    groups: frozenset[str] | None = None
    allowed_attributes: AttributeSelection | None = None
    ignored_attributes: AttributeSelection | None = None
    constructor_arguments: dict[Any, dict[str, Any]] = {}
    circular_reference_limit: int | None = Field(default=None, ge=0)
    circular_reference_handler: Callable[..., Any] | None = None
    skip_null_values: bool = False
    skip_uninitialized_values: bool = False
    datetime_format: str | None = None
    datetime_force_timezone: str | None = None
    target_to_populate: Any = None
    allow_readonly_target_to_populate: bool = False
    map_to_accessor_parameter: dict[str, Any] = {}

    @field_validator("allowed_attributes", "ignored_attributes", mode="before")
    @classmethod
    def normalize_selection(cls, value: Any) -> AttributeSelection | None:
        return _selection(value)

    @classmethod
    def create(
        cls,
        options: MapperContext | Mapping[str, Any] | None,
        configuration: Configuration,
    ) -> MapperContext:
        """Merge caller options over the configuration defaults."""
        if isinstance(options, MapperContext):
            values = {name: getattr(options, name) for name in options.model_fields_set}
        else:
            values = dict(options or {})
        values.setdefault("datetime_format", configuration.datetime_format)
        values.setdefault(
            "allow_readonly_target_to_populate",
            configuration.allow_readonly_target_to_populate,
        )
        return cls.model_validate(values)

    def with_constructor_argument(self, target: Any, name: str, value: Any) -> MapperContext:
        arguments = {key: dict(params) for key, params in self.constructor_arguments.items()}
        arguments.setdefault(target, {})[name] = value
        return self.model_copy(update={"constructor_arguments": arguments})

    def constructor_argument(self, target: Any, name: str) -> tuple[bool, Any]:
        """Look up a constructor override, returning (found, value)."""
        params = self.constructor_arguments.get(target)
        if params is None and isinstance(target, type):
            params = self.constructor_arguments.get(target.__qualname__)
        if params is not None and name in params:
            return True, params[name]
        return False, None

    def is_allowed_attribute(self, name: str) -> bool:
        if self.allowed_attributes is not None and name not in self.allowed_attributes:
            return False
        ignored = self.ignored_attributes
        if ignored is None or name not in ignored:
            return True
        if isinstance(ignored, dict):
            return _selection(ignored[name]) is not None
        return False

    def for_property(self, name: str) -> MapperContext:
        """Context used to map the nested value of a property."""
        update: dict[str, Any] = {}
        if self.target_to_populate is not None:
            update["target_to_populate"] = None
        if isinstance(self.allowed_attributes, dict):
            update["allowed_attributes"] = _selection(self.allowed_attributes.get(name))
        elif self.allowed_attributes is not None:
            update["allowed_attributes"] = None
        if isinstance(self.ignored_attributes, dict):
            update["ignored_attributes"] = _selection(self.ignored_attributes.get(name))
        elif self.ignored_attributes is not None:
            update["ignored_attributes"] = None
        if not update:
            return self
        return self.model_copy(update=update)
