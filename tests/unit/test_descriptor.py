"""Unit tests for TypeDescriptorFactory."""

from __future__ import annotations

import types
from dataclasses import dataclass, field
from typing import Annotated, ClassVar, NamedTuple

import pytest
from pydantic import BaseModel, ConfigDict, Field

from automap.core.enums import ReadCapability, TypeKind, WriteCapability
from automap.core.exceptions import MetadataError
from automap.metadata.descriptor import TypeDescriptorFactory
from automap.metadata.policy import Groups, Ignore, MaxDepth


@dataclass
class Invoice:
    number: int
    lines: list[str] = field(default_factory=list)
    kind: ClassVar[str] = "invoice"


@dataclass(frozen=True)
class Stamp:
    code: str


class Item(BaseModel):
    item_id: int = Field(alias="itemId")
    title: str = ""


class FrozenItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str


class Account:
    currency: ClassVar[str] = "EUR"

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._active = False
        self._balance = 0.0

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def balance(self) -> float:
        return self._balance

    @balance.setter
    def balance(self, value: float) -> None:
        self._balance = value

    def is_active(self) -> bool:
        return self._active

    def set_active(self, active: bool) -> None:
        self._active = active

    def get_code(self, prefix: str, /) -> str:
        return prefix + self._owner


class Vault:
    _secret: str

    def __init__(self) -> None:
        self._secret = "x"


class Pixel:
    __slots__ = ("x", "y")

    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


class Library:
    def __init__(self) -> None:
        self._books: list[str] = []

    def get_books(self) -> list[str]:
        return list(self._books)

    def add_book(self, book: str) -> None:
        self._books.append(book)

    def remove_book(self, book: str) -> None:
        self._books.remove(book)


class Pair(NamedTuple):
    left: int
    right: int = 0


@dataclass
class Tagged:
    name: Annotated[str, Groups("read"), Groups("admin")]
    parent: Annotated[Tagged | None, MaxDepth(2)] = None
    token: Annotated[str, Ignore()] = ""


@pytest.fixture
def factory() -> TypeDescriptorFactory:
    return TypeDescriptorFactory()


class TestDataclasses:
    def test_properties(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Invoice)

        assert descriptor.kind is TypeKind.OBJECT
        assert [prop.name for prop in descriptor.properties] == ["number", "lines"]
        number = descriptor.get("number")
        assert number is not None
        assert number.declared_type is int
        assert number.nullable is False
        assert number.read is not None and number.read.capability is ReadCapability.FIELD
        assert number.write is not None and number.write.capability is WriteCapability.FIELD

    def test_constructor(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Invoice)

        assert [(p.name, p.has_default) for p in descriptor.constructor] == [
            ("number", False),
            ("lines", True),
        ]
        assert descriptor.immutable is False
        assert descriptor.allocatable is True

    def test_frozen(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Stamp)
        code = descriptor.get("code")

        assert descriptor.immutable is True
        assert code is not None and code.write is not None
        assert code.write.capability is WriteCapability.CONSTRUCTOR

    def test_annotated_markers(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Tagged)
        name, parent, token = (descriptor.get(n) for n in ("name", "parent", "token"))

        assert name is not None and name.groups == frozenset({"read", "admin"})
        assert name.declared_type is str
        assert parent is not None and parent.max_depth == 2
        assert parent.nullable is True
        assert token is not None and token.ignored is True


class TestPydantic:
    def test_alias_is_constructor_keyword(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Item)

        assert descriptor.is_pydantic is True
        parameter = descriptor.constructor_parameter("item_id")
        assert parameter is not None
        assert parameter.keyword == "itemId"
        assert [prop.name for prop in descriptor.properties] == ["item_id", "title"]

    def test_model_internals_are_not_properties(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Item)

        assert descriptor.get("model_fields") is None
        assert descriptor.get("fields_set") is None

    def test_frozen_model(self, factory: TypeDescriptorFactory) -> None:
        assert factory.describe(FrozenItem).immutable is True

    def test_models_are_allocatable(self, factory: TypeDescriptorFactory) -> None:
        assert factory.describe(Item).allocatable is True


class TestPlainClasses:
    def test_accessors(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Account)

        assert [prop.name for prop in descriptor.properties] == [
            "owner",
            "balance",
            "active",
            "code",
        ]
        owner, balance, active = (descriptor.get(n) for n in ("owner", "balance", "active"))
        assert owner is not None and owner.write is not None
        assert owner.write.capability is WriteCapability.CONSTRUCTOR
        assert balance is not None and balance.write is not None
        assert balance.write.capability is WriteCapability.SETTER
        assert balance.write.is_method is False
        assert active is not None and active.read is not None and active.write is not None
        assert active.declared_type is bool
        assert (active.read.name, active.read.is_method) == ("is_active", True)
        assert (active.write.name, active.write.is_method) == ("set_active", True)

    def test_class_variables_are_skipped(self, factory: TypeDescriptorFactory) -> None:
        assert factory.describe(Account).get("currency") is None

    def test_positional_only_getter_is_not_readable(
        self, factory: TypeDescriptorFactory
    ) -> None:
        code = factory.describe(Account).get("code")

        assert code is not None
        assert code.read is None
        assert code.write is None

    def test_private_properties(self) -> None:
        assert TypeDescriptorFactory().describe(Vault).properties == ()

        secret = TypeDescriptorFactory(map_private_properties=True).describe(Vault).get("secret")

        assert secret is not None and secret.read is not None and secret.write is not None
        assert secret.read.capability is ReadCapability.REFLECTION
        assert secret.write.name == "_secret"
        assert secret.declared_type is str

    def test_slots(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Pixel)
        x = descriptor.get("x")

        assert x is not None and x.read is not None
        assert x.read.capability is ReadCapability.FIELD
        assert x.declared_type is int

    def test_adder_and_remover(self, factory: TypeDescriptorFactory) -> None:
        books = factory.describe(Library).get("books")

        assert books is not None and books.write is not None
        assert books.write.capability is WriteCapability.ADDER_REMOVER
        assert (books.write.name, books.write.remover) == ("add_book", "remove_book")
        assert books.declared_type == list[str]
        assert books.read is not None and books.read.name == "get_books"

    def test_named_tuple(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(Pair)

        assert descriptor.immutable is True
        assert descriptor.allocatable is False
        assert [(p.name, p.has_default) for p in descriptor.constructor] == [
            ("left", False),
            ("right", True),
        ]


class TestBagsAndCaching:
    def test_dict(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(dict)

        assert descriptor.kind is TypeKind.DICT
        assert descriptor.is_dynamic_bag is True

    def test_namespace(self, factory: TypeDescriptorFactory) -> None:
        descriptor = factory.describe(types.SimpleNamespace)

        assert descriptor.kind is TypeKind.NAMESPACE
        assert descriptor.is_dynamic_bag is True

    def test_descriptors_are_cached(self, factory: TypeDescriptorFactory) -> None:
        assert factory.describe(Invoice) is factory.describe(Invoice)
        assert len(factory) == 1

    def test_not_a_class(self, factory: TypeDescriptorFactory) -> None:
        with pytest.raises(MetadataError, match="not a class"):
            factory.describe(42)  # type: ignore[arg-type]
