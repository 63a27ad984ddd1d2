"""automap exception hierarchy.

Every error raised while describing types, compiling plans or executing
them derives from AutoMapError. Errors raised by user collaborators
(custom transformers, providers, handlers) propagate unchanged.
"""

from __future__ import annotations

from typing import Any


class AutoMapError(Exception):
    """Base exception for all automap errors."""


# --- Metadata ---


class MetadataError(AutoMapError):
    """Raised when a type descriptor cannot be built."""

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        super().__init__(f"Cannot describe {type_name}: {detail}")


# --- Mapping ---


class MappingError(AutoMapError):
    """Base for mapping errors."""


class InvalidMappingError(MappingError):
    """Raised when no viable source/target pairing exists."""


class PlanCompilationError(MappingError):
    """Raised when a MappingPlan fails validation during compile()."""


class MissingConstructorArgumentsError(MappingError):
    """Raised when required constructor arguments cannot be resolved."""

    def __init__(self, target_class: str, missing: list[str]) -> None:
        self.target_class = target_class
        self.missing = missing
        super().__init__(
            f"Cannot create an instance of {target_class}: missing constructor "
            f"arguments {missing}"
        )


class TargetConstructionError(MappingError):
    """Raised when the target class rejects the mapped values while being built."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Failed to create an instance of {target_class}: {detail}")


class CircularReferenceError(MappingError):
    """Raised when a source reference is re-entered beyond the configured limit."""

    def __init__(self, reference: str, limit: int | None) -> None:
        self.reference = reference
        self.limit = limit
        if limit is None:
            detail = "its target is still under construction"
        else:
            detail = f"limit of {limit} reached"
        super().__init__(f"Circular reference detected for {reference}: {detail}")


class ReadOnlyTargetError(MappingError):
    """Raised when a mutation is attempted on an immutable target instance."""

    def __init__(self, target_class: str) -> None:
        self.target_class = target_class
        super().__init__(
            f"Cannot populate an instance of {target_class}: the type is read-only"
        )


class TypeMismatchError(MappingError, TypeError):
    """Raised when a value or declared type cannot be converted."""

    def __init__(self, detail: str, value: Any = None) -> None:
        self.value = value
        super().__init__(detail)


class UninitializedPropertyError(MappingError, AttributeError):
    """Raised when a source attribute has never been assigned."""

    def __init__(self, type_name: str, property_name: str) -> None:
        self.type_name = type_name
        self.property_name = property_name
        super().__init__(
            f"Property '{property_name}' of {type_name} is accessed before "
            f"initialization"
        )


class MissingContextParameterError(MappingError):
    """Raised when a getter parameter has no value in the context."""

    def __init__(self, accessor: str, parameter: str) -> None:
        self.accessor = accessor
        self.parameter = parameter
        super().__init__(
            f"Accessor '{accessor}' requires context parameter '{parameter}'"
        )
