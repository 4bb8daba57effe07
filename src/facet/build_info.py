# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Version and commit identifiers reported by ``facet --version``."""

from __future__ import annotations

import logging
from functools import cache
from typing import Final

from pydantic import BaseModel, ConfigDict, ValidationError

from . import __version__
from .payload import load_build_info

UNKNOWN_COMMIT: Final[str] = "unknown"

LOGGER = logging.getLogger(__name__)


class BuildInfo(BaseModel):
    """Identifiers stamped into a release build."""

    model_config = ConfigDict(frozen=True)

    version: str = __version__
    commit: str = UNKNOWN_COMMIT


@cache
def current_build_info() -> BuildInfo:
    """Return the stamped build info, falling back to package metadata."""

    raw = load_build_info()
    if raw is None:
        return BuildInfo()
    try:
        return BuildInfo.model_validate_json(raw)
    except ValidationError as exc:
        LOGGER.debug("Ignoring malformed build info: %s", exc)
        return BuildInfo()


__all__ = ["BuildInfo", "UNKNOWN_COMMIT", "current_build_info"]
