"""
Example 04: Object Graphs

This example demonstrates deep cloning of cyclic graphs, circular reference
limits and handlers, and polymorphic mapping with a discriminator.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from automap import AutoMapper, CircularReferenceError, Discriminator


@dataclass
class Employee:
    """Employee with a manager back reference"""
    name: str
    manager: Employee | None = None
    reports: list[Employee] = field(default_factory=list)


@dataclass
class Shape:
    name: str


@dataclass
class Circle(Shape):
    radius: float = 1.0


@dataclass
class Rectangle(Shape):
    width: float = 1.0
    height: float = 1.0


Shape.__discriminator__ = Discriminator("type", {"circle": Circle, "rectangle": Rectangle})


def main():
    mapper = AutoMapper()
    boss = Employee("Grace")
    boss.reports.append(Employee("Linus", manager=boss))

    print("=== Object Graphs ===\n")

    print("1. Deep clone:")
    copy = mapper.map(boss, Employee)
    print(f"   Cycle rebuilt: {copy.reports[0].manager is copy}")
    print(f"   Independent: {copy is not boss}\n")

    print("2. Circular reference limit:")
    try:
        mapper.map(boss, dict, {"circular_reference_limit": 0})
    except CircularReferenceError as e:
        print(f"   {e}")
    data = mapper.map(
        boss,
        dict,
        {
            "circular_reference_limit": 0,
            "circular_reference_handler": lambda source, context: source.name,
        },
    )
    print(f"   With handler: {data}\n")

    print("3. Polymorphism:")
    shapes = mapper.map_collection(
        [
            {"type": "circle", "name": "c", "radius": 2},
            {"type": "rectangle", "name": "r", "width": 3, "height": 4},
        ],
        Shape,
    )
    for shape in shapes:
        print(f"   - {shape!r}")
    print(f"   Back to dicts: {[mapper.map(shape, dict) for shape in shapes]}")


if __name__ == "__main__":
    main()
