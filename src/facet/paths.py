# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve the per-user cache and managed-binary locations."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

CACHE_DIR_ENV: Final[str] = "FACET_CACHE_DIR"
NAMESPACE_DIR: Final[str] = ".facet"
CACHE_SUBDIR: Final[str] = "cache"
BIN_SUBDIR: Final[str] = "bin"

LOGGER = logging.getLogger(__name__)


def home_dir(environ: Mapping[str, str] | None = None) -> Path | None:
    """Return the current user's home directory, or ``None`` when unknown.

    ``HOME`` (``USERPROFILE`` on Windows) from ``environ`` wins; otherwise the
    platform lookup used by :meth:`pathlib.Path.home` is attempted.

    Args:
        environ: Environment mapping to consult. Defaults to :data:`os.environ`.

    Returns:
        Path | None: Home directory, or ``None`` when it cannot be determined.
    """

    env = os.environ if environ is None else environ
    for key in ("HOME", "USERPROFILE"):
        value = env.get(key)
        if value:
            return Path(value)
    try:
        return Path.home()
    except (KeyError, RuntimeError) as exc:
        LOGGER.debug("Unable to resolve home directory: %s", exc)
        return None


def _override(environ: Mapping[str, str] | None) -> str | None:
    env = os.environ if environ is None else environ
    return env.get(CACHE_DIR_ENV) or None


def _namespace_root(environ: Mapping[str, str] | None) -> Path:
    home = home_dir(environ)
    # An unknown home degrades to a relative path; later I/O reports the problem.
    base = home if home is not None else Path()
    return base / NAMESPACE_DIR


def cache_dir(version: str, environ: Mapping[str, str] | None = None) -> Path:
    """Return the extraction directory for payload ``version``.

    Args:
        version: Embedded payload version; namespaces the directory.
        environ: Environment mapping to consult. Defaults to :data:`os.environ`.

    Returns:
        Path: ``$FACET_CACHE_DIR/<version>`` or ``~/.facet/cache/<version>``.
    """

    override = _override(environ)
    if override is not None:
        return Path(override).expanduser() / version
    return _namespace_root(environ) / CACHE_SUBDIR / version


def bin_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory holding launcher-managed runtime binaries.

    Args:
        environ: Environment mapping to consult. Defaults to :data:`os.environ`.

    Returns:
        Path: ``$FACET_CACHE_DIR/bin`` or ``~/.facet/bin``.
    """

    override = _override(environ)
    if override is not None:
        return Path(override).expanduser() / BIN_SUBDIR
    return _namespace_root(environ) / BIN_SUBDIR


__all__ = [
    "BIN_SUBDIR",
    "CACHE_DIR_ENV",
    "CACHE_SUBDIR",
    "NAMESPACE_DIR",
    "bin_dir",
    "cache_dir",
    "home_dir",
]
