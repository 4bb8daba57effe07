# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Environment exported to the embedded application at hand-off."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict

from .discovery import PRIMARY_OVERRIDE_ENV

PACKAGE_ROOT_ENV: Final[str] = "FACET_PACKAGE_ROOT"
BROWSER_PATH_ENV: Final[str] = PRIMARY_OVERRIDE_ENV


class LaunchEnvironment(BaseModel):
    """Variables the bootstrap hands to the embedded application."""

    model_config = ConfigDict(frozen=True)

    package_root: Path
    browser_path: str | None = None

    def exports(self) -> dict[str, str]:
        """Return only the variables this launcher sets."""

        exported = {PACKAGE_ROOT_ENV: str(self.package_root)}
        if self.browser_path:
            exported[BROWSER_PATH_ENV] = self.browser_path
        return exported

    def apply(self, base: Mapping[str, str]) -> dict[str, str]:
        """Return a copy of ``base`` extended with :meth:`exports`."""

        env = dict(base)
        env.update(self.exports())
        return env


__all__ = ["BROWSER_PATH_ENV", "LaunchEnvironment", "PACKAGE_ROOT_ENV"]
