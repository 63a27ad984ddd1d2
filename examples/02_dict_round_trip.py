"""
Example 02: Dict Round Trip

This example demonstrates converting object graphs to and from dicts,
with groups, date formatting, enums and a key name converter.
"""

import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from automap import AutoMapper, Groups, Ignore


class Status(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass
class Post:
    """Blog post"""
    id: Annotated[int, Groups("list", "detail")]
    title: Annotated[str, Groups("list", "detail")]
    body: Annotated[str, Groups("detail")]
    status: Annotated[Status, Groups("list", "detail")]
    published_at: Annotated[datetime.datetime | None, Groups("detail")] = None
    internal_note: Annotated[str, Ignore()] = ""


class CamelCase:
    """Converts snake_case property names into camelCase keys"""

    def normalize(self, property_name: str) -> str:
        head, *rest = property_name.split("_")
        return head + "".join(part.title() for part in rest)


def main():
    mapper = AutoMapper(name_converter=CamelCase())
    post = Post(
        id=1,
        title="Hello",
        body="First post",
        status=Status.PUBLISHED,
        published_at=datetime.datetime(2024, 5, 1, 9, 0),
        internal_note="do not leak",
    )

    print("=== Dict Round Trip ===\n")

    print("1. List view:")
    print(f"   {mapper.map(post, dict, {'groups': ['list']})}\n")

    print("2. Detail view with a date format:")
    detail = mapper.map(post, dict, {"groups": ["detail"], "datetime_format": "%d/%m/%Y %H:%M"})
    print(f"   {detail}\n")

    print("3. Back to a Post:")
    restored = mapper.map(
        detail, Post, {"groups": ["detail"], "datetime_format": "%d/%m/%Y %H:%M"}
    )
    print(f"   {restored}")
    print(f"   Status: {restored.status!r}")


if __name__ == "__main__":
    main()
