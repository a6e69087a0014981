# SPDX-License-Identifier: Apache-2.0
"""Small helpers shared by CLI handlers."""

from __future__ import annotations

import logging
import os

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "quiet": logging.WARNING,
}


def env_bool(name: str, default: bool = False) -> bool:
    """Interpret ``GUIDESPHERE_<name>`` (or ``name`` if already prefixed)."""

    key = name if name.startswith("GUIDESPHERE_") else f"GUIDESPHERE_{name}"
    raw = os.environ.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


def configure_logging_from_env(default: str = "info") -> int:
    """Configure root logging from ``GUIDESPHERE_VERBOSITY``.

    Accepts ``debug``, ``info`` or ``quiet``; returns the level applied.
    """

    verbosity = os.environ.get("GUIDESPHERE_VERBOSITY", default).strip().lower()
    level = _LEVELS.get(verbosity, _LEVELS[default])
    fmt = (
        "%(asctime)s %(levelname)s %(name)s: %(message)s"
        if level == logging.DEBUG
        else "%(message)s"
    )
    logging.basicConfig(level=level, format=fmt, force=True)
    return level
