"""Tests for unknown-field rejection."""

from __future__ import annotations

import msgspec
import pytest

from serde_golden.strict import reject_unknown_fields
from tests._support.models import Article, Book, Point, Shelter


def test_accepts_known_fields() -> None:
    """Pass payloads that only use declared fields."""
    reject_unknown_fields(
        {"id": "1", "title": "t", "author": {"first_name": "a", "last_name": "b"}},
        Book,
    )


def test_rejects_top_level_unknown_field() -> None:
    """Reject extra top-level keys."""
    with pytest.raises(msgspec.ValidationError, match=r"unknown field `extra` - at `\$`"):
        reject_unknown_fields({"id": "1", "title": "t", "extra": True}, Book)


def test_rejects_nested_unknown_field() -> None:
    """Report the path of nested unknown keys."""
    payload = {"id": "1", "title": "t", "author": {"first_name": "a", "nick": "z"}}
    with pytest.raises(msgspec.ValidationError, match=r"`nick` - at `\$\.author`"):
        reject_unknown_fields(payload, Book)


def test_rejects_dataclass_unknown_field() -> None:
    """Apply to dataclasses, which msgspec never checks itself."""
    with pytest.raises(msgspec.ValidationError, match="`z`"):
        reject_unknown_fields({"x": 1, "y": 2, "z": 3}, Point)


def test_rejects_unknown_field_in_sequence_items() -> None:
    """Walk sequence items with their index in the path."""
    payload = [{"x": 1, "y": 2}, {"x": 1, "y": 2, "w": 0}]
    with pytest.raises(msgspec.ValidationError, match=r"at `\$\[1\]`"):
        reject_unknown_fields(payload, list[Point])


def test_rejects_unknown_field_in_dict_values() -> None:
    """Walk mapping values."""
    payload = {"a": {"x": 1, "y": 2, "extra": 0}}
    with pytest.raises(msgspec.ValidationError, match="`extra`"):
        reject_unknown_fields(payload, dict[str, Point])


def test_allows_tag_field_in_tagged_union() -> None:
    """Accept the tag key of tagged struct unions."""
    payload = {"pets": [{"type": "Cat", "name": "Tom"}, {"type": "Dog", "name": "Rex"}]}
    reject_unknown_fields(payload, Shelter)


def test_rejects_unknown_field_in_tagged_union_member() -> None:
    """Resolve the union member from its tag before checking."""
    payload = {"pets": [{"type": "Dog", "name": "Rex", "lives": 3}]}
    with pytest.raises(msgspec.ValidationError, match=r"`lives` - at `\$\.pets\[0\]`"):
        reject_unknown_fields(payload, Shelter)


def test_ignores_shape_mismatches() -> None:
    """Leave type mismatches to msgspec conversion."""
    reject_unknown_fields("not a mapping", Article)
    reject_unknown_fields({"id": "1", "title": "t", "tags": "oops"}, Article)
