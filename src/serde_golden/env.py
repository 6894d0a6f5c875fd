"""Environment resolution for golden update mode."""

from __future__ import annotations

import logging
import os

_LOGGER = logging.getLogger(__name__)

UPDATE_ENV_VAR = "GOLDEN_UPDATE"

_TRUE_VALUES = frozenset({"1", "y", "t", "yes", "on", "true"})
_FALSE_VALUES = frozenset({"", "0", "n", "f", "no", "off", "false"})


def truthy(value: str | None) -> bool:
    """Return True when a raw flag value uses a recognized truthy spelling.

    Parameters
    ----------
    value
        Raw flag value, typically read from the environment.

    Returns
    -------
    bool
        True for ``1``, ``y``, ``t``, ``yes``, ``on`` or ``true`` in any case.
    """
    return value is not None and value.strip().lower() in _TRUE_VALUES


def update_mode_from_env(name: str = UPDATE_ENV_VAR) -> bool:
    """Return whether golden artifacts should be (re)recorded.

    Parameters
    ----------
    name
        Environment variable carrying the update flag.

    Returns
    -------
    bool
        True when the variable holds a truthy spelling.
    """
    raw = os.environ.get(name)
    if raw is None:
        return False
    if truthy(raw):
        return True
    if raw.strip().lower() not in _FALSE_VALUES:
        _LOGGER.warning("Invalid boolean for %s: %r; update mode stays off", name, raw)
    return False


__all__ = [
    "UPDATE_ENV_VAR",
    "truthy",
    "update_mode_from_env",
]
