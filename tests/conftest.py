"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from automap.core.configuration import Configuration
from automap.mapper import AutoMapper


@pytest.fixture
def mapper() -> AutoMapper:
    """AutoMapper with the default configuration."""
    return AutoMapper()


@pytest.fixture
def make_mapper() -> Callable[..., AutoMapper]:
    """Helper to build a mapper with custom settings.

    Usage:
        mapper = make_mapper(strict_types=True, providers=[MyProvider()])
    """

    def _make(**options: Any) -> AutoMapper:
        settings = {
            name: options.pop(name)
            for name in list(options)
            if name in Configuration.model_fields
        }
        return AutoMapper(Configuration(**settings), **options)

    return _make
