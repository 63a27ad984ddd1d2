"""Union and collection transformers."""

from __future__ import annotations

import types
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from automap.core.exceptions import (
    MissingConstructorArgumentsError,
    TargetConstructionError,
    TypeMismatchError,
)
from automap.metadata.types import (
    collection_shape,
    is_any,
    is_union,
    type_name,
    union_members,
)
from automap.transformer.base import PASSTHROUGH, Transformer

if TYPE_CHECKING:
    from automap.core.configuration import MapperContext
    from automap.mapping.executor import MappingCall
    from automap.transformer.registry import TransformerRegistry

_CANDIDATE_ERRORS = (
    TypeMismatchError,
    MissingConstructorArgumentsError,
    TargetConstructionError,
    TypeError,
    ValueError,
)


class UnionTransformer:
    """Tries each union member in declaration order.

    A member matching the runtime type of the value is tried first.
    """

    def __init__(self, target: Any, candidates: list[tuple[Any, Transformer]]) -> None:
        self.target = target
        self.candidates = candidates

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        exact = [c for c in self.candidates if c[0] is type(value)]
        ordered = exact + [c for c in self.candidates if c not in exact]
        for _, transformer in ordered:
            try:
                return transformer.transform(value, context, call)
            except _CANDIDATE_ERRORS:
                continue
        raise TypeMismatchError(
            f"No member of {type_name(self.target)} accepts {type(value).__name__}", value
        )

    def __repr__(self) -> str:
        return f"UnionTransformer({type_name(self.target)})"


class UnionTransformerFactory:
    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        if not is_union(target_type):
            return None
        candidates: list[tuple[Any, Transformer]] = []
        for member in union_members(target_type):
            try:
                transformer = registry.resolve(source_type, member)
            except TypeMismatchError:
                continue
            if transformer is not None:
                candidates.append((member, transformer))
        if not candidates:
            if registry.strict_types:
                raise TypeMismatchError(
                    f"Cannot map {type_name(source_type)} to {type_name(target_type)} "
                    f"with strict types"
                )
            return None
        return UnionTransformer(target_type, candidates)


class CollectionTransformer:
    """Element-wise mapping into list, tuple, set, frozenset or dict.

    None elements are kept; adder mutators drop them when writing.
    """

    def __init__(
        self,
        container: type,
        element: Transformer,
        key: Transformer | None = None,
    ) -> None:
        self.container = container
        self.element = element
        self.key = key

    def _item(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        if value is None:
            return None
        return self.element.transform(value, context, call)

    def transform(self, value: Any, context: MapperContext, call: MappingCall) -> Any:
        if isinstance(value, types.SimpleNamespace):
            value = vars(value)
        if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
            raise TypeMismatchError(
                f"Expected a collection, got {type(value).__name__}", value
            )
        if self.container is dict:
            if not isinstance(value, Mapping):
                value = dict(enumerate(value))
            result = {}
            for k, v in value.items():
                if self.key is not None and k is not None:
                    k = self.key.transform(k, context, call)
                result[k] = self._item(v, context, call)
            return result
        items = value.values() if isinstance(value, Mapping) else value
        mapped = [self._item(item, context, call) for item in items]
        if self.container is list:
            return mapped
        try:
            return self.container(mapped)
        except TypeError as e:
            raise TypeMismatchError(
                f"Cannot build a {self.container.__name__} from the mapped elements: {e}", value
            ) from e

    def __repr__(self) -> str:
        return f"CollectionTransformer({self.container.__name__}, {self.element!r})"


class CollectionTransformerFactory:
    def get_transformer(
        self,
        source_type: Any,
        target_type: Any,
        registry: TransformerRegistry,
    ) -> Transformer | None:
        target = collection_shape(target_type)
        if target is None:
            return None
        source = collection_shape(source_type)
        if source is None and not is_any(source_type):
            return None
        source_value = source.value_type if source is not None else Any
        source_key = source.key_type if source is not None and source.is_mapping else Any
        element = registry.resolve(source_value, target.value_type) or PASSTHROUGH
        key = None
        if target.is_mapping and not is_any(target.key_type):
            key = registry.resolve(source_key, target.key_type)
            if key is PASSTHROUGH:
                key = None
        return CollectionTransformer(target.container, element, key)
