"""Reference store backed by golden files under a test data directory."""

from __future__ import annotations

import logging
from pathlib import Path

from serde_golden import ArtifactName, ReferenceNotFoundError

_LOGGER = logging.getLogger(__name__)

GOLDEN_SUFFIX = ".golden"


class DirectoryReferenceStore:
    """Map artifact names to ``<root>/<scope...>/<artifact>.golden`` files."""

    def __init__(self, root: Path, *, update: bool = False) -> None:
        self.root = root
        self.update = update

    def path_for(self, name: ArtifactName) -> Path:
        """Return the golden file path for ``name``.

        Returns
        -------
        Path
            File path under the store root.
        """
        *scope, artifact = name.parts
        return self.root.joinpath(*scope, f"{artifact}{GOLDEN_SUFFIX}")

    def exists(self, name: ArtifactName) -> bool:
        return self.path_for(name).is_file()

    def read(self, name: ArtifactName) -> bytes:
        path = self.path_for(name)
        if not path.is_file():
            msg = f"No golden file found at {path}."
            raise ReferenceNotFoundError(msg)
        return path.read_bytes()

    def write(self, name: ArtifactName, data: bytes) -> None:
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        _LOGGER.debug("Wrote golden file %s", path)

    def is_update_mode(self) -> bool:
        return self.update
