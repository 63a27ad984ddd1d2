"""AutoMapper - the public entry point.

Wires the descriptor factory, transformer registry, plan compiler, plan
cache and executor together, and owns the registration points for custom
transformer factories and providers.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar

from automap.core.configuration import Configuration, MapperContext
from automap.core.exceptions import InvalidMappingError
from automap.mapping.cache import PlanCache, PlanKey
from automap.mapping.compiler import PlanCompiler
from automap.mapping.executor import MappingCall, MappingExecutor
from automap.mapping.plan import MappingPlan
from automap.mapping.protocol import NameConverter, PropertyListener
from automap.mapping.provider import Provider
from automap.metadata.descriptor import TypeDescriptorFactory, type_fingerprint
from automap.metadata.types import type_name
from automap.transformer.base import TransformerFactory
from automap.transformer.registry import TransformerRegistry

T = TypeVar("T")

ContextOptions = MapperContext | Mapping[str, Any] | None


class AutoMapper:
    """Maps objects, dataclasses, Pydantic models and dicts onto each other.

    Example::

        mapper = AutoMapper()
        user_dto = mapper.map(user, UserDTO)
        payload = mapper.map(user, dict, {"groups": {"read"}})

    Args:
        configuration: Static settings. Defaults to ``Configuration()``.
        transformer_factories: Custom factories, consulted before the
            built-in ones in the given order.
        providers: Providers of pre-built target instances.
        name_converter: Renames keys when a dict or namespace is involved.
        property_listener: Called once per property while compiling; may
            change the ignore decision or disable the groups check.
    """

    def __init__(
        self,
        configuration: Configuration | None = None,
        *,
        transformer_factories: Sequence[TransformerFactory] = (),
        providers: Sequence[Provider] = (),
        name_converter: NameConverter | None = None,
        property_listener: PropertyListener | None = None,
    ) -> None:
        self._configuration = configuration or Configuration()
        self._descriptors = TypeDescriptorFactory(
            map_private_properties=self._configuration.map_private_properties
        )
        self._transformers = TransformerRegistry(
            strict_types=self._configuration.strict_types,
            factories=list(transformer_factories),
        )
        self._providers: list[Provider] = list(providers)
        self._compiler = PlanCompiler(
            self._descriptors,
            self._transformers,
            self._configuration,
            providers=self._providers,
            name_converter=name_converter,
            property_listener=property_listener,
        )
        self._cache = PlanCache(self._compiler.compile, self._fingerprint)
        self._executor = MappingExecutor(self.get_plan)
        self._registered: set[PlanKey] = set()

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def map(self, source: Any, target: type[T] | T, context: ContextOptions = None) -> Any:
        """Map source into a new instance of target, or into a target instance.

        Args:
            source: Object, dataclass, Pydantic model, dict or namespace.
            target: Target class (``dict`` and ``SimpleNamespace`` included),
                or an existing instance to populate.
            context: MapperContext or a mapping of its fields.

        Returns:
            The mapped value, or None when source is None.

        Raises:
            InvalidMappingError: If the pair cannot be mapped.
            MappingError: Any other mapping failure.
        """
        mapper_context = MapperContext.create(context, self._configuration)
        if not isinstance(target, type):
            if target is None:
                raise InvalidMappingError("A target class or instance is required")
            mapper_context = mapper_context.model_copy(update={"target_to_populate": target})
        if source is None:
            return None
        populate = mapper_context.target_to_populate
        target_type = type(populate) if populate is not None else target
        call = MappingCall(self._executor)
        return self._executor.map_value(source, target_type, mapper_context, call)  # type: ignore[arg-type]

    def map_collection(
        self, sources: Iterable[Any], target: type[T], context: ContextOptions = None
    ) -> list[Any]:
        """Map every element of sources; each element is an independent call."""
        if not isinstance(target, type):
            raise InvalidMappingError(
                f"map_collection requires a target class, got {type_name(type(target))}"
            )
        mapper_context = MapperContext.create(context, self._configuration)
        return [self.map(source, target, mapper_context) for source in sources]

    def register_transformer_factory(self, factory: TransformerFactory) -> None:
        """Add a custom transformer factory, consulted before the built-ins."""
        self._transformers.add_factory(factory)
        self._cache.clear()

    def register_provider(self, provider: Provider) -> None:
        """Add a provider, consulted after the previously registered ones."""
        self._providers.append(provider)
        self._cache.clear()

    def register_mapping(self, source_type: type, target_type: type) -> MappingPlan:
        """Declare and compile a mapping pair.

        Required for every pair when ``auto_register`` is off.
        """
        self._registered.add((source_type, target_type))
        return self._cache.get(source_type, target_type)

    def get_plan(self, source_type: type, target_type: type) -> MappingPlan:
        """Return the compiled plan of a pair.

        Raises:
            InvalidMappingError: If auto registration is off and the pair
                was never registered.
        """
        if (
            not self._configuration.auto_register
            and (source_type, target_type) not in self._registered
        ):
            raise InvalidMappingError(
                f"No mapping registered for {type_name(source_type)} -> "
                f"{type_name(target_type)}"
            )
        return self._cache.get(source_type, target_type)

    @property
    def plans(self) -> dict[PlanKey, MappingPlan]:
        """Compiled plans, keyed by (source type, target type)."""
        return self._cache.plans

    def _fingerprint(self, source_type: type, target_type: type) -> tuple[Any, ...]:
        return (
            type_fingerprint(source_type),
            type_fingerprint(target_type),
            *self._configuration.fingerprint(),
        )
