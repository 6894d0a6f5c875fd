"""Shared pytest fixtures for golden round-trip tests."""

from __future__ import annotations

import pytest

from serde_golden import InMemoryReferenceStore, RoundTripVerifier, update_mode_from_env


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register golden snapshot pytest options."""
    parser.addoption(
        "--update-goldens",
        action="store_true",
        default=False,
        help="Regenerate golden reference artifacts.",
    )


@pytest.fixture(scope="session")
def update_goldens(pytestconfig: pytest.Config) -> bool:
    """Return True when golden files should be regenerated.

    Returns
    -------
    bool
        True when ``--update-goldens`` or ``GOLDEN_UPDATE`` asks for it.
    """
    update_flag = pytestconfig.getoption("--update-goldens")
    return bool(update_flag or update_mode_from_env())


@pytest.fixture
def recording_store() -> InMemoryReferenceStore:
    """Provide an empty in-memory store in update mode.

    Returns
    -------
    InMemoryReferenceStore
        Store that records every encoding it is asked to verify.
    """
    return InMemoryReferenceStore(update=True)


@pytest.fixture
def recording_verifier(recording_store: InMemoryReferenceStore) -> RoundTripVerifier:
    """Provide a verifier backed by ``recording_store``.

    Returns
    -------
    RoundTripVerifier
        Verifier with the default configuration.
    """
    return RoundTripVerifier(recording_store)
