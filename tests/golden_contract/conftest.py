"""Pytest config for golden file contract tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from serde_golden import RoundTripVerifier
from tests._support.store import DirectoryReferenceStore

TESTDATA_DIR = Path(__file__).parent / "testdata"


@pytest.fixture
def golden_verifier(*, update_goldens: bool) -> RoundTripVerifier:
    """Provide a verifier reading golden files from ``testdata``.

    Returns
    -------
    RoundTripVerifier
        Verifier that rewrites golden files when update mode is on.
    """
    return RoundTripVerifier(DirectoryReferenceStore(TESTDATA_DIR, update=update_goldens))
