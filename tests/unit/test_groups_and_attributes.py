"""Unit tests for property selection: groups, attributes, skips and depth."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

import pytest

from automap.core.exceptions import UninitializedPropertyError
from automap.mapper import AutoMapper
from automap.mapping.compiler import IGNORED, NOT_READABLE, NOT_WRITABLE
from automap.mapping.protocol import PropertyMetadataEvent
from automap.metadata.policy import Groups, Ignore, MaxDepth


@dataclass
class Article:
    id: Annotated[int, Groups("read")]
    title: Annotated[str, Groups("read", "write")]
    secret: Annotated[str, Groups("admin")] = ""
    body: str = ""


@dataclass
class City:
    name: str
    zip: str


@dataclass
class Person:
    name: str
    age: int
    city: City | None = None


@dataclass
class Credentials:
    login: str
    password: Annotated[str, Ignore()] = ""


@dataclass
class Category:
    name: str
    parent: Annotated[Category | None, MaxDepth(1)] = None


class Draft:
    title: str
    content: str


class Token:
    def __init__(self) -> None:
        self._value = ""

    def set_token(self, value: str) -> None:
        self._value = value


@dataclass
class TokenView:
    token: str = ""


class Summary:
    items: list[int]

    def __init__(self) -> None:
        self.items = []

    @property
    def total(self) -> int:
        return sum(self.items)


def _article() -> Article:
    return Article(id=1, title="Hello", secret="s3cr3t", body="text")


def _person() -> Person:
    return Person(name="Ann", age=30, city=City(name="Toulon", zip="83000"))


class TestGroups:
    def test_source_groups(self, mapper: AutoMapper) -> None:
        data = mapper.map(_article(), dict, {"groups": ["read"]})

        assert data == {"id": 1, "title": "Hello"}

    def test_any_matching_group_is_enough(self, mapper: AutoMapper) -> None:
        data = mapper.map(_article(), dict, {"groups": {"write", "admin"}})

        assert data == {"title": "Hello", "secret": "s3cr3t"}

    def test_without_groups_only_ungrouped_properties(self, mapper: AutoMapper) -> None:
        assert mapper.map(_article(), dict) == {"body": "text"}

    def test_empty_groups_exclude_everything(self, mapper: AutoMapper) -> None:
        assert mapper.map(_article(), dict, {"groups": []}) == {}

    def test_target_groups(self, mapper: AutoMapper) -> None:
        article = _article()
        mapper.map({"id": 9, "title": "New"}, article, {"groups": ["write"]})

        assert article.id == 1
        assert article.title == "New"

    def test_listener_disables_groups_check(
        self, make_mapper: Callable[..., AutoMapper]
    ) -> None:
        def listener(event: PropertyMetadataEvent) -> None:
            if event.source_property == "secret":
                event.disable_groups_check = True

        mapper = make_mapper(property_listener=listener)

        assert mapper.map(_article(), dict, {"groups": ["read"]}) == {
            "id": 1,
            "title": "Hello",
            "secret": "s3cr3t",
        }
        assert mapper.map(_article(), dict) == {"secret": "s3cr3t", "body": "text"}


class TestPropertyListener:
    def test_runs_once_per_property(self, make_mapper: Callable[..., AutoMapper]) -> None:
        events: list[PropertyMetadataEvent] = []
        mapper = make_mapper(property_listener=events.append)

        mapper.map(_article(), dict)
        mapper.map(_article(), dict)

        assert [event.source_property for event in events] == ["id", "title", "secret", "body"]
        assert events[0].source_type is Article
        assert events[0].source_groups == frozenset({"read"})

    def test_listener_ignores_property(self, make_mapper: Callable[..., AutoMapper]) -> None:
        def listener(event: PropertyMetadataEvent) -> None:
            if event.target_property == "age":
                event.ignored = True
                event.ignore_reason = "hidden"

        mapper = make_mapper(property_listener=listener)

        assert "age" not in mapper.map(_person(), dict)
        assert mapper.get_plan(Person, dict).ignored == {"age": "hidden"}

    def test_listener_reverts_ignore(self, make_mapper: Callable[..., AutoMapper]) -> None:
        def listener(event: PropertyMetadataEvent) -> None:
            event.ignored = False

        mapper = make_mapper(property_listener=listener)

        assert mapper.map(Credentials("bob", "pw"), dict) == {"login": "bob", "password": "pw"}


class TestIgnoredProperties:
    def test_ignore_marker(self, mapper: AutoMapper) -> None:
        assert mapper.map(Credentials("bob", "pw"), dict) == {"login": "bob"}
        assert mapper.get_plan(Credentials, dict).ignored == {"password": IGNORED}

    def test_ignore_marker_on_target(self, mapper: AutoMapper) -> None:
        credentials = mapper.map({"login": "bob", "password": "pw"}, Credentials)

        assert credentials == Credentials("bob", "")

    def test_not_readable(self, mapper: AutoMapper) -> None:
        plan = mapper.get_plan(Token, TokenView)

        assert plan.ignored == {"token": NOT_READABLE}
        assert plan.steps == ()

    def test_not_writable(self, mapper: AutoMapper) -> None:
        plan = mapper.get_plan(dict, Summary)

        assert plan.ignored == {"total": NOT_WRITABLE}
        assert [step.target_name for step in plan.steps] == ["items"]


class TestAttributeSelection:
    def test_allowed_attributes(self, mapper: AutoMapper) -> None:
        data = mapper.map(_person(), dict, {"allowed_attributes": ["name"]})

        assert data == {"name": "Ann"}

    def test_allowed_nested_attributes(self, mapper: AutoMapper) -> None:
        data = mapper.map(
            _person(), dict, {"allowed_attributes": {"name": True, "city": ["zip"]}}
        )

        assert data == {"name": "Ann", "city": {"zip": "83000"}}

    def test_allowed_attributes_apply_to_first_level_only(self, mapper: AutoMapper) -> None:
        data = mapper.map(_person(), dict, {"allowed_attributes": ["city"]})

        assert data == {"city": {"name": "Toulon", "zip": "83000"}}

    def test_ignored_attributes(self, mapper: AutoMapper) -> None:
        data = mapper.map(_person(), dict, {"ignored_attributes": ["age", "city"]})

        assert data == {"name": "Ann"}

    def test_ignored_nested_attributes(self, mapper: AutoMapper) -> None:
        data = mapper.map(_person(), dict, {"ignored_attributes": {"city": ["zip"]}})

        assert data == {"name": "Ann", "age": 30, "city": {"name": "Toulon"}}

    def test_ignored_attributes_when_populating(self, mapper: AutoMapper) -> None:
        person = _person()
        mapper.map({"name": "Bea", "age": 41}, person, {"ignored_attributes": ["age"]})

        assert person.name == "Bea"
        assert person.age == 30


class TestSkipValues:
    def test_null_values_are_written_by_default(self, mapper: AutoMapper) -> None:
        assert mapper.map(Person("Ann", 30), dict) == {"name": "Ann", "age": 30, "city": None}

    def test_skip_null_values(self, mapper: AutoMapper) -> None:
        data = mapper.map(Person("Ann", 30), dict, {"skip_null_values": True})

        assert data == {"name": "Ann", "age": 30}

    def test_skip_null_values_keeps_target_value(self, mapper: AutoMapper) -> None:
        person = _person()
        mapper.map({"name": None, "age": 31}, person, {"skip_null_values": True})

        assert person.name == "Ann"
        assert person.age == 31

    def test_uninitialized_property_raises(self, mapper: AutoMapper) -> None:
        draft = Draft()
        draft.title = "Intro"

        with pytest.raises(UninitializedPropertyError, match="content") as exc_info:
            mapper.map(draft, dict)

        assert exc_info.value.type_name == "Draft"

    def test_skip_uninitialized_values(self, mapper: AutoMapper) -> None:
        draft = Draft()
        draft.title = "Intro"

        data = mapper.map(draft, dict, {"skip_uninitialized_values": True})

        assert data == {"title": "Intro"}


class TestMaxDepth:
    def _chain(self) -> Category:
        return Category("c3", Category("c2", Category("c1")))

    def test_max_depth_into_dict(self, mapper: AutoMapper) -> None:
        data = mapper.map(self._chain(), dict)

        assert data == {"name": "c3", "parent": {"name": "c2"}}

    def test_max_depth_into_object(self, mapper: AutoMapper) -> None:
        copy = mapper.map(self._chain(), Category)

        assert copy.parent is not None
        assert copy.parent.name == "c2"
        assert copy.parent.parent is None

    def test_depth_is_recorded_on_step(self, mapper: AutoMapper) -> None:
        step = mapper.get_plan(Category, dict).step("parent")

        assert step is not None
        assert step.max_depth == 1
