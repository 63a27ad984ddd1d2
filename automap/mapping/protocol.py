"""Collaborator protocols used during plan compilation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class NameConverter(Protocol):
    """Renames bag keys.

    Only consulted when one side of the mapping is a dict or namespace:
    ``normalize`` turns a property name into the bag key read from or
    written to.
    """

    def normalize(self, property_name: str) -> str:
        ...


@dataclass
class PropertyMetadataEvent:
    """Mutable view of a property, handed to the listener before freezing.

    The listener runs exactly once per property and compiled plan; it may
    flip ``ignored`` or set ``disable_groups_check``.
    """

    source_type: type
    target_type: type
    source_property: str
    target_property: str
    source_groups: frozenset[str] | None = None
    target_groups: frozenset[str] | None = None
    max_depth: int | None = None
    ignored: bool = False
    ignore_reason: str | None = None
    disable_groups_check: bool = False


class PropertyListener(Protocol):
    def __call__(self, event: PropertyMetadataEvent) -> None:
        ...
