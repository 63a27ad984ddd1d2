"""Object providers.

A provider supplies the target instance for a (source, target) pair
instead of the constructor. The provided instance is then populated by
the plan, unless the provider wraps it in EarlyReturn, in which case it
is returned as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from automap.core.configuration import MapperContext


@dataclass(frozen=True)
class EarlyReturn:
    """Ends the mapping with value, skipping every property step."""

    value: Any


class Provider(Protocol):
    """Supplies pre-built target instances."""

    def supports(self, source_type: type, target_type: type) -> bool:
        """Whether this provider handles the pair. Called at compile time."""
        ...

    def provide(self, target_type: type, source: Any, context: MapperContext) -> Any:
        """Return an instance, an EarlyReturn, or None to construct normally."""
        ...
