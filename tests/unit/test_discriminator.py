"""Unit tests for polymorphic mapping through discriminators."""

from __future__ import annotations

import types
from dataclasses import dataclass, field

from automap.mapper import AutoMapper
from automap.metadata.policy import Discriminator, discriminator_of
from automap.transformer.objects import resolve_subtype


@dataclass
class Pet:
    name: str


@dataclass
class Cat(Pet):
    lives: int = 9


@dataclass
class Dog(Pet):
    good: bool = True


Pet.__discriminator__ = Discriminator("type", {"cat": Cat, "dog": Dog})


@dataclass
class PetDTO:
    name: str


@dataclass
class CatDTO(PetDTO):
    lives: int = 9


PetDTO.__discriminator__ = Discriminator("kind", {"cat": CatDTO})


@dataclass
class Household:
    pets: list[Pet] = field(default_factory=list)
    favorite: Pet | None = None


class TestResolveSubtype:
    def test_mapping_value(self) -> None:
        disc = discriminator_of(Pet)
        assert disc is not None

        assert resolve_subtype(disc, Pet, {"type": "dog"}) is Dog

    def test_attribute_value(self) -> None:
        disc = discriminator_of(Pet)
        assert disc is not None

        assert resolve_subtype(disc, Pet, types.SimpleNamespace(type="cat")) is Cat

    def test_unknown_value_keeps_base(self) -> None:
        disc = discriminator_of(Pet)
        assert disc is not None

        assert resolve_subtype(disc, Pet, {"type": "parrot"}) is Pet
        assert resolve_subtype(disc, Pet, {"type": ["unhashable"]}) is Pet

    def test_subclass_outside_base_is_rejected(self) -> None:
        disc = discriminator_of(Pet)
        assert disc is not None

        assert resolve_subtype(disc, Cat, {"type": "dog"}) is Cat

    def test_inherited_by_subclasses(self) -> None:
        assert discriminator_of(Cat) is discriminator_of(Pet)
        assert discriminator_of(Household) is None


class TestPolymorphicMapping:
    def test_dict_into_subclass(self, mapper: AutoMapper) -> None:
        pet = mapper.map({"type": "cat", "name": "Tom", "lives": 7}, Pet)

        assert isinstance(pet, Cat)
        assert pet == Cat("Tom", 7)

    def test_dict_without_discriminator(self, mapper: AutoMapper) -> None:
        pet = mapper.map({"name": "Nemo"}, Pet)

        assert type(pet) is Pet

    def test_object_keeps_its_class(self, mapper: AutoMapper) -> None:
        dog = Dog("Rex", good=False)
        copy = mapper.map(dog, Pet)

        assert isinstance(copy, Dog)
        assert copy is not dog
        assert copy.good is False

    def test_other_family_by_discriminator_value(self, mapper: AutoMapper) -> None:
        pet = mapper.map(CatDTO("Tom", lives=3), Pet)

        assert pet == Cat("Tom", 3)

    def test_nested_properties(self, mapper: AutoMapper) -> None:
        household = mapper.map(
            {
                "pets": [{"type": "dog", "name": "Rex"}, {"type": "cat", "name": "Tom"}],
                "favorite": {"type": "cat", "name": "Tom"},
            },
            Household,
        )

        assert [type(pet) for pet in household.pets] == [Dog, Cat]
        assert isinstance(household.favorite, Cat)

    def test_plan_records_discriminator(self, mapper: AutoMapper) -> None:
        assert mapper.get_plan(dict, Pet).discriminator is discriminator_of(Pet)
        assert mapper.get_plan(dict, Cat).discriminator is None

    def test_populate_keeps_target_class(self, mapper: AutoMapper) -> None:
        pet = Pet("old")
        result = mapper.map({"type": "cat", "name": "new"}, pet)

        assert result is pet
        assert type(result) is Pet
        assert pet.name == "new"


class TestDiscriminatorIntoDicts:
    def test_value_is_written(self, mapper: AutoMapper) -> None:
        assert mapper.map(Cat("Tom"), dict) == {"type": "cat", "name": "Tom", "lives": 9}

    def test_value_comes_first(self, mapper: AutoMapper) -> None:
        assert list(mapper.map(Dog("Rex"), dict)) == ["type", "name", "good"]

    def test_base_class_has_no_value(self, mapper: AutoMapper) -> None:
        assert mapper.map(Pet("Nemo"), dict) == {"name": "Nemo"}

    def test_round_trip(self, mapper: AutoMapper) -> None:
        household = Household(pets=[Dog("Rex"), Cat("Tom")])

        data = mapper.map(household, dict)

        assert mapper.map(data, Household) == household
