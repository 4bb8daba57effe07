# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Package data embedded into the launcher at build time.

The release build drops two files next to this module:

``facet-cli.tar.gz``
    The application tree extracted into the per-user cache on first launch.
``BUILD_INFO.json``
    ``{"version": ..., "commit": ...}`` stamped by the release pipeline.
"""

from __future__ import annotations

import logging
from importlib import resources
from typing import Final

PAYLOAD_NAME: Final[str] = "facet-cli.tar.gz"
BUILD_INFO_NAME: Final[str] = "BUILD_INFO.json"

LOGGER = logging.getLogger(__name__)


def _read(name: str) -> bytes | None:
    resource = resources.files(__name__).joinpath(name)
    if not resource.is_file():
        LOGGER.debug("Embedded resource %s is missing", name)
        return None
    return resource.read_bytes()


def load_payload() -> bytes:
    """Return the embedded archive bytes, or ``b""`` when none was bundled.

    An empty payload is rejected later by the cache extraction step, which
    reports the failure with its usual context.
    """

    return _read(PAYLOAD_NAME) or b""


def load_build_info() -> bytes | None:
    """Return the raw stamped build metadata, if present."""

    return _read(BUILD_INFO_NAME)


__all__ = ["BUILD_INFO_NAME", "PAYLOAD_NAME", "load_build_info", "load_payload"]
