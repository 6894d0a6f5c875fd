"""Reference store contract and in-memory implementation."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import msgspec

from serde_golden.env import update_mode_from_env
from serde_golden.errors import ReferenceNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping

_LOGGER = logging.getLogger(__name__)

SCOPE_SEPARATOR = "/"


class ArtifactName(msgspec.Struct, frozen=True):
    """Logical name of a reference artifact.

    ``scope`` is the hierarchical identity of the calling test and
    ``artifact`` names one format's reference inside that scope. Turning a
    name into a storage location is the store's concern.
    """

    scope: str
    artifact: str

    def __str__(self) -> str:
        if not self.scope:
            return self.artifact
        return f"{self.scope}{SCOPE_SEPARATOR}{self.artifact}"

    @property
    def parts(self) -> tuple[str, ...]:
        """Return scope segments followed by the artifact name.

        Returns
        -------
        tuple[str, ...]
            Non-empty name segments.
        """
        segments = [segment for segment in self.scope.split(SCOPE_SEPARATOR) if segment]
        return (*segments, self.artifact)


def join_scope(*segments: str) -> str:
    """Join scope segments into one hierarchical scope.

    Parameters
    ----------
    *segments
        Scope segments; empty segments are dropped.

    Returns
    -------
    str
        Segments joined with ``/``.
    """
    return SCOPE_SEPARATOR.join(
        segment.strip(SCOPE_SEPARATOR) for segment in segments if segment.strip(SCOPE_SEPARATOR)
    )


def artifact_name(scope: str, fmt: str, *, prefix: str = "golden") -> ArtifactName:
    """Return the artifact name for one format within a scope.

    Parameters
    ----------
    scope
        Hierarchical test identity.
    fmt
        Format name, e.g. ``json``.
    prefix
        Artifact prefix shared by every format.

    Returns
    -------
    ArtifactName
        Name such as ``<scope>/golden_json``.
    """
    return ArtifactName(scope=join_scope(scope), artifact=f"{prefix}_{fmt}")


@runtime_checkable
class ReferenceStore(Protocol):
    """Durable key-value store for named reference artifacts."""

    def exists(self, name: ArtifactName) -> bool:
        """Return True when an artifact is stored under ``name``."""
        ...

    def read(self, name: ArtifactName) -> bytes:
        """Return artifact bytes, raising ReferenceNotFoundError when absent."""
        ...

    def write(self, name: ArtifactName, data: bytes) -> None:
        """Store ``data`` under ``name``, replacing any previous bytes."""
        ...

    def is_update_mode(self) -> bool:
        """Return True when artifacts should be re-recorded."""
        ...


class InMemoryReferenceStore:
    """Dict-backed reference store with atomic per-name access."""

    def __init__(
        self,
        artifacts: Mapping[ArtifactName, bytes] | None = None,
        *,
        update: bool | None = None,
    ) -> None:
        self._artifacts: dict[ArtifactName, bytes] = dict(artifacts or {})
        self._lock = threading.Lock()
        self._update = update_mode_from_env() if update is None else update

    def exists(self, name: ArtifactName) -> bool:
        """Return True when bytes are stored under ``name``."""
        with self._lock:
            return name in self._artifacts

    def read(self, name: ArtifactName) -> bytes:
        """Return the bytes stored under ``name``.

        Returns
        -------
        bytes
            Stored artifact bytes.

        Raises
        ------
        ReferenceNotFoundError
            Raised when nothing is stored under ``name``.
        """
        with self._lock:
            data = self._artifacts.get(name)
        if data is None:
            msg = f"No reference artifact found for {name}."
            raise ReferenceNotFoundError(msg)
        return data

    def write(self, name: ArtifactName, data: bytes) -> None:
        """Store a copy of ``data`` under ``name``; the last writer wins."""
        _LOGGER.debug("Storing %d bytes for %s", len(data), name)
        with self._lock:
            self._artifacts[name] = bytes(data)

    def is_update_mode(self) -> bool:
        """Return the update flag fixed at construction."""
        return self._update

    def snapshot(self) -> dict[ArtifactName, bytes]:
        """Return a copy of every stored artifact.

        Returns
        -------
        dict[ArtifactName, bytes]
            Stored bytes keyed by name.
        """
        with self._lock:
            return dict(self._artifacts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)


__all__ = [
    "SCOPE_SEPARATOR",
    "ArtifactName",
    "InMemoryReferenceStore",
    "ReferenceStore",
    "artifact_name",
    "join_scope",
]
