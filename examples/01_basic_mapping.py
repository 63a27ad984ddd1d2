"""
Example 01: Basic Mapping

This example demonstrates mapping between dataclasses, Pydantic models and
plain classes, and populating an existing instance.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel

from automap import AutoMapper


@dataclass
class Address:
    """Address entity"""
    street: str
    city: str


@dataclass
class User:
    """User entity"""
    id: int
    name: str
    address: Address
    tags: list[str] = field(default_factory=list)


class AddressOut(BaseModel):
    """Address as exposed by the API"""
    street: str
    city: str


class UserOut(BaseModel):
    """User as exposed by the API"""
    id: int
    name: str
    address: AddressOut
    tags: list[str] = []


def main():
    mapper = AutoMapper()
    user = User(id=1, name="Alice", address=Address("1 Main St", "Toulon"), tags=["admin"])

    print("=== Basic Mapping ===\n")

    # Dataclass to Pydantic model
    print("1. Dataclass -> Pydantic:")
    user_out = mapper.map(user, UserOut)
    print(f"   Type: {type(user_out).__name__}")
    print(f"   Data: {user_out}\n")

    # And back
    print("2. Pydantic -> Dataclass:")
    copy = mapper.map(user_out, User)
    print(f"   Equal to original: {copy == user}")
    print(f"   Nested copied: {copy.address is not user.address}\n")

    # Populate an existing instance
    print("3. Populate:")
    mapper.map({"name": "Alice Smith"}, user)
    print(f"   Name: {user.name}\n")

    # Collections
    print("4. Collection:")
    users = mapper.map_collection(
        [{"id": 2, "name": "Bob", "address": {"street": "2 Side St", "city": "Nice"}}],
        User,
    )
    for u in users:
        print(f"   - {u.name} ({u.address.city})")
    print()

    # Inspect the compiled plan
    print("5. Plan:")
    plan = mapper.get_plan(User, UserOut)
    for step in plan.steps:
        print(f"   {step.source_name} -> {step.target_name}: {step.transformer!r}")


if __name__ == "__main__":
    main()
