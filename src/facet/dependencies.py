# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve managed runtime binaries, installing them on first use."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Final

from . import installer as installer_module
from .console import info
from .errors import DependencyError, InstallError
from .installer import LATEST, InstallResult, binary_filename
from .paths import bin_dir as managed_bin_dir

BUN: Final[str] = "bun"

Installer = Callable[..., InstallResult]

LOGGER = logging.getLogger(__name__)


class Provenance(StrEnum):
    """Where a resolved dependency binary came from."""

    SEARCH_PATH = "search-path"
    MANAGED = "managed"
    INSTALLED = "installed"


@dataclass(frozen=True, slots=True)
class ResolvedDependency:
    """Absolute location of a runtime dependency and how it was found."""

    name: str
    path: Path
    provenance: Provenance


class DependencyProvisioner:
    """Resolve dependencies once per launch, preferring the user's installation.

    Resolution order is the executable search path, then a previously
    provisioned copy in the managed bin directory, then a fresh install into
    that directory.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        installer: Installer | None = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._installer = installer
        self._resolved: dict[str, ResolvedDependency] = {}

    def ensure(self, name: str) -> ResolvedDependency:
        """Return the resolved binary for ``name``.

        Args:
            name: Executable name of the dependency (for example ``"bun"``).

        Returns:
            ResolvedDependency: Path and provenance of the binary.

        Raises:
            DependencyError: If the bin directory cannot be created, the
                installer fails, or the binary is missing after installation.
        """

        cached = self._resolved.get(name)
        if cached is not None:
            return cached
        resolved = self._resolve(name)
        LOGGER.debug("Resolved %s (%s): %s", name, resolved.provenance, resolved.path)
        self._resolved[name] = resolved
        return resolved

    def _resolve(self, name: str) -> ResolvedDependency:
        found = shutil.which(name, path=self._environ.get("PATH", os.defpath))
        if found:
            return ResolvedDependency(name=name, path=Path(found), provenance=Provenance.SEARCH_PATH)

        target_dir = managed_bin_dir(self._environ)
        managed = target_dir / binary_filename(name)
        if managed.exists():
            return ResolvedDependency(name=name, path=managed, provenance=Provenance.MANAGED)

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DependencyError("creating bin dir") from exc

        info(f"Installing {name} into {target_dir}")
        install = self._installer or installer_module.install
        try:
            result = install(name, LATEST, bin_dir=target_dir)
        except (InstallError, OSError) as exc:
            raise DependencyError(f"installing {name}") from exc

        installed = result.bin_dir / binary_filename(name)
        if not installed.exists():
            raise DependencyError(f"{name} binary not found after install at {installed}")
        return ResolvedDependency(name=name, path=installed, provenance=Provenance.INSTALLED)


def ensure_dependency(
    name: str,
    *,
    environ: Mapping[str, str] | None = None,
    installer: Installer | None = None,
) -> ResolvedDependency:
    """Resolve ``name`` with a single-use :class:`DependencyProvisioner`."""

    return DependencyProvisioner(environ=environ, installer=installer).ensure(name)


def ensure_bun(provisioner: DependencyProvisioner) -> Path:
    """Return the path of the ``bun`` runtime resolved by ``provisioner``."""

    return provisioner.ensure(BUN).path


__all__ = [
    "BUN",
    "DependencyProvisioner",
    "Provenance",
    "ResolvedDependency",
    "ensure_bun",
    "ensure_dependency",
]
