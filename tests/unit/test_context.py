"""Unit tests for Configuration and MapperContext."""

from __future__ import annotations

import pydantic
import pytest

from automap.core.configuration import Configuration, MapperContext
from automap.core.enums import ConstructorStrategy


class Invoice:
    pass


class TestConfiguration:
    def test_defaults(self) -> None:
        configuration = Configuration()

        assert configuration.constructor_strategy is ConstructorStrategy.AUTO
        assert configuration.auto_register is True
        assert configuration.strict_types is False

    def test_frozen(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Configuration().strict_types = True  # type: ignore[misc]

    def test_strategy_from_string(self) -> None:
        configuration = Configuration(constructor_strategy="never")

        assert configuration.constructor_strategy is ConstructorStrategy.NEVER

    def test_fingerprint_ignores_runtime_defaults(self) -> None:
        assert Configuration().fingerprint() == Configuration(datetime_format="%Y").fingerprint()
        assert Configuration().fingerprint() != Configuration(strict_types=True).fingerprint()


class TestCreate:
    def test_from_mapping(self) -> None:
        context = MapperContext.create({"groups": ["read"]}, Configuration())

        assert context.groups == frozenset({"read"})

    def test_configuration_defaults(self) -> None:
        configuration = Configuration(
            datetime_format="%Y", allow_readonly_target_to_populate=True
        )

        context = MapperContext.create(None, configuration)

        assert context.datetime_format == "%Y"
        assert context.allow_readonly_target_to_populate is True

    def test_explicit_values_win(self) -> None:
        context = MapperContext.create(
            MapperContext(datetime_format="%d"), Configuration(datetime_format="%Y")
        )

        assert context.datetime_format == "%d"

    def test_context_instance_takes_defaults_for_unset_fields(self) -> None:
        context = MapperContext.create(
            MapperContext(skip_null_values=True), Configuration(datetime_format="%Y")
        )

        assert context.skip_null_values is True
        assert context.datetime_format == "%Y"

    def test_negative_limit_is_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            MapperContext.create({"circular_reference_limit": -1}, Configuration())


class TestConstructorArguments:
    def test_lookup_by_class(self) -> None:
        context = MapperContext(constructor_arguments={Invoice: {"number": 1}})

        assert context.constructor_argument(Invoice, "number") == (True, 1)
        assert context.constructor_argument(Invoice, "total") == (False, None)

    def test_lookup_by_qualified_name(self) -> None:
        context = MapperContext(constructor_arguments={"Invoice": {"number": None}})

        assert context.constructor_argument(Invoice, "number") == (True, None)

    def test_with_constructor_argument_copies(self) -> None:
        original = MapperContext()
        updated = original.with_constructor_argument(Invoice, "number", 5)

        assert original.constructor_arguments == {}
        assert updated.constructor_argument(Invoice, "number") == (True, 5)
        assert "constructor_arguments" in updated.model_fields_set


class TestAttributeSelection:
    def test_everything_allowed_by_default(self) -> None:
        assert MapperContext().is_allowed_attribute("name") is True

    def test_allowed_attributes(self) -> None:
        context = MapperContext(allowed_attributes=frozenset({"name"}))

        assert context.is_allowed_attribute("name") is True
        assert context.is_allowed_attribute("age") is False

    def test_selection_accepts_lists_and_single_names(self) -> None:
        assert MapperContext(allowed_attributes=["a", "b"]).allowed_attributes == frozenset(
            {"a", "b"}
        )
        assert MapperContext(ignored_attributes="age").ignored_attributes == frozenset({"age"})

    def test_ignored_attributes(self) -> None:
        context = MapperContext(ignored_attributes=frozenset({"age"}))

        assert context.is_allowed_attribute("age") is False

    def test_nested_ignore_keeps_property(self) -> None:
        context = MapperContext(ignored_attributes={"city": ["zip"], "age": True})

        assert context.is_allowed_attribute("city") is True
        assert context.is_allowed_attribute("age") is False

    def test_for_property_narrows_selection(self) -> None:
        context = MapperContext(
            allowed_attributes={"city": ["zip"], "name": True},
            ignored_attributes={"city": "name"},
        )

        child = context.for_property("city")

        assert child.allowed_attributes == frozenset({"zip"})
        assert child.ignored_attributes == frozenset({"name"})
        assert context.for_property("name").allowed_attributes is None

    def test_for_property_clears_flat_selection(self) -> None:
        context = MapperContext(allowed_attributes=frozenset({"city"}))

        assert context.for_property("city").allowed_attributes is None

    def test_for_property_drops_target_to_populate(self) -> None:
        context = MapperContext(target_to_populate=object())

        assert context.for_property("city").target_to_populate is None

    def test_for_property_reuses_unchanged_context(self) -> None:
        context = MapperContext(groups=frozenset({"read"}))

        assert context.for_property("city") is context
