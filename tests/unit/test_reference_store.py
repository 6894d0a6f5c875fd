"""Tests for artifact naming and the in-memory reference store."""

from __future__ import annotations

import pytest

from serde_golden import (
    UPDATE_ENV_VAR,
    ArtifactName,
    InMemoryReferenceStore,
    ReferenceNotFoundError,
    ReferenceStore,
    artifact_name,
    join_scope,
)


def test_artifact_name_renders_scope_and_format() -> None:
    """Compose one artifact per format under the test scope."""
    name = artifact_name("test_marshaling/full struct", "json")
    assert name == ArtifactName(scope="test_marshaling/full struct", artifact="golden_json")
    assert str(name) == "test_marshaling/full struct/golden_json"
    assert name.parts == ("test_marshaling", "full struct", "golden_json")


def test_artifact_name_custom_prefix() -> None:
    """Honor a configured artifact prefix."""
    assert str(artifact_name("case", "xml", prefix="snapshot")) == "case/snapshot_xml"


def test_artifact_name_without_scope() -> None:
    """Render just the artifact when no scope is given."""
    name = artifact_name("", "yaml")
    assert str(name) == "golden_yaml"
    assert name.parts == ("golden_yaml",)


def test_join_scope_drops_empty_segments() -> None:
    """Join scope segments with single separators."""
    assert join_scope("outer/", "", "/inner", "leaf") == "outer/inner/leaf"


def test_artifact_names_are_hashable_keys() -> None:
    """Use frozen names as dictionary keys."""
    first = artifact_name("scope", "json")
    second = artifact_name("scope", "json")
    assert {first: 1}[second] == 1


def test_in_memory_store_round_trip() -> None:
    """Read back exactly what was written."""
    store = InMemoryReferenceStore(update=False)
    name = artifact_name("scope", "json")
    assert not store.exists(name)
    store.write(name, b"{}\n")
    assert store.exists(name)
    assert store.read(name) == b"{}\n"
    assert len(store) == 1
    assert store.snapshot() == {name: b"{}\n"}


def test_in_memory_store_last_writer_wins() -> None:
    """Replace earlier bytes on rewrite."""
    store = InMemoryReferenceStore(update=True)
    name = artifact_name("scope", "yaml")
    store.write(name, b"a: 1\n")
    store.write(name, b"a: 2\n")
    assert store.read(name) == b"a: 2\n"


def test_in_memory_store_missing_artifact() -> None:
    """Raise ReferenceNotFoundError for unknown names."""
    store = InMemoryReferenceStore(update=False)
    with pytest.raises(ReferenceNotFoundError, match="scope/golden_xml"):
        store.read(artifact_name("scope", "xml"))


def test_in_memory_store_update_mode_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Read the update flag from the environment when not given."""
    monkeypatch.setenv(UPDATE_ENV_VAR, "yes")
    assert InMemoryReferenceStore().is_update_mode() is True
    monkeypatch.setenv(UPDATE_ENV_VAR, "0")
    assert InMemoryReferenceStore().is_update_mode() is False
    assert InMemoryReferenceStore(update=True).is_update_mode() is True


def test_in_memory_store_satisfies_protocol() -> None:
    """Satisfy the runtime-checkable store protocol."""
    assert isinstance(InMemoryReferenceStore(update=False), ReferenceStore)
