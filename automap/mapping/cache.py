"""Plan cache - compiles each (source, target) pair once.

Lookups are lock-free once a plan is published; compilation of a missing
or stale plan is guarded by a lock per pair, so concurrent callers of the
same pair wait for a single compilation.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from automap.mapping.plan import MappingPlan
from automap.metadata.types import type_name

logger = logging.getLogger(__name__)

PlanKey = tuple[type, type]


class PlanCache:
    """Compute-if-absent store of compiled plans.

    A cached plan is reused only while its fingerprint matches the current
    fingerprint of the pair; otherwise it is compiled again.

    Args:
        compile: Builds the plan of a pair.
        fingerprint: Current fingerprint of a pair.
    """

    def __init__(
        self,
        compile: Callable[[type, type], MappingPlan],
        fingerprint: Callable[[type, type], tuple[Any, ...]],
    ) -> None:
        self._compile = compile
        self._fingerprint = fingerprint
        self._plans: dict[PlanKey, MappingPlan] = {}
        self._locks: dict[PlanKey, threading.Lock] = {}
        self._guard = threading.Lock()

    def get(self, source: type, target: type) -> MappingPlan:
        """Return the plan of a pair, compiling it if absent or stale.

        Raises:
            MappingError: Compilation errors propagate and nothing is cached.
        """
        key = (source, target)
        expected = self._fingerprint(source, target)
        plan = self._plans.get(key)
        if plan is not None and plan.fingerprint == expected:
            return plan

        with self._lock_for(key):
            plan = self._plans.get(key)
            if plan is not None and plan.fingerprint == expected:
                return plan
            if plan is not None:
                logger.debug(
                    "Plan %s -> %s is stale, recompiling", type_name(source), type_name(target)
                )
            plan = self._compile(source, target)
            self._plans[key] = plan
            return plan

    def has(self, source: type, target: type) -> bool:
        """Check if a pair has a compiled plan."""
        return (source, target) in self._plans

    def clear(self) -> None:
        """Drop every compiled plan."""
        with self._guard:
            self._plans.clear()
            self._locks.clear()

    @property
    def plans(self) -> dict[PlanKey, MappingPlan]:
        """Snapshot of the compiled plans."""
        return dict(self._plans)

    def __len__(self) -> int:
        return len(self._plans)

    def _lock_for(self, key: PlanKey) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock
