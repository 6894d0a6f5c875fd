"""Sample shapes used across golden round-trip tests."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Self

import msgspec


class StructBase(
    msgspec.Struct,
    frozen=True,
    kw_only=True,
    omit_defaults=True,
    repr_omit_defaults=True,
    forbid_unknown_fields=True,
):
    """Base struct for strict sample contracts."""


class Entry(StructBase):
    id: str
    title: str


class Author(StructBase):
    first_name: str
    last_name: str


class Book(StructBase):
    id: str
    title: str
    author: Author | None = None
    year: int = 0


class Article(StructBase):
    id: str
    title: str
    author: Author | None = None
    date: dt.datetime | None = None
    tags: tuple[str, ...] = ()


class Maybe(StructBase):
    note: str | None


class Note(msgspec.Struct, dict=True):
    """Struct that tolerates attributes outside its declared fields."""

    public: str


class Cat(StructBase, tag=True):
    name: str
    lives: int = 9


class Dog(StructBase, tag=True):
    name: str
    good: bool = True


class Shelter(StructBase):
    pets: tuple[Cat | Dog, ...] = ()
    counts: dict[str, int] = {}


@dataclass(frozen=True)
class Point:
    x: int
    y: int
    label: str = ""


class Comic:
    """Shape that hand-codes its representation for every format."""

    __slots__ = ("id", "ignored", "issue", "name")

    def __init__(self, id: str, name: str, issue: str, ignored: str = "") -> None:  # noqa: A002
        self.id = id
        self.name = name
        self.issue = issue
        self.ignored = ignored

    def marshal_golden(self, fmt: str) -> object:
        if fmt == "json":
            return {self.id: f"{self.name}={self.issue}"}
        if fmt == "yaml":
            return {self.id: {self.name: self.issue}}
        return {"@id": self.id, "@issue": self.issue, "#text": self.name}

    @classmethod
    def unmarshal_golden(cls, fmt: str, payload: object) -> Self:
        if not isinstance(payload, dict):
            msg = f"Expected a mapping for Comic, got {type(payload).__name__}"
            raise TypeError(msg)
        if fmt == "xml":
            return cls(id=payload["@id"], name=payload.get("#text", ""), issue=payload["@issue"])
        ((comic_id, body),) = payload.items()
        if fmt == "json":
            name, _, issue = body.partition("=")
        else:
            ((name, issue),) = body.items()
        return cls(id=comic_id, name=name, issue=issue)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Comic):
            return NotImplemented
        return (self.id, self.name, self.issue, self.ignored) == (
            other.id,
            other.name,
            other.issue,
            other.ignored,
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.issue, self.ignored))

    def __repr__(self) -> str:
        return (
            f"Comic(id={self.id!r}, name={self.name!r}, "
            f"issue={self.issue!r}, ignored={self.ignored!r})"
        )


class Opaque:
    """Plain class msgspec cannot encode or decode."""

    def __init__(self, value: str) -> None:
        self.value = value


ARTICLE_DATE = dt.datetime(2021, 10, 27, 22, 30, 34, tzinfo=dt.UTC)
