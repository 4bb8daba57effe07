# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised while bootstrapping the embedded application."""

from __future__ import annotations


class LauncherError(RuntimeError):
    """Base class for fatal bootstrap failures.

    The message names the stage that failed. When the error is raised with
    ``raise ... from exc`` the chained cause is appended so a single line reads
    ``stage: cause``.
    """

    def __str__(self) -> str:
        message = super().__str__()
        cause = self.__cause__
        if cause is None:
            return message
        return f"{message}: {cause}"


class ArchiveError(LauncherError):
    """Raised when an archive is unreadable or contains unsafe members."""


class CacheError(LauncherError):
    """Raised when the versioned payload cache cannot be materialised."""


class InstallError(LauncherError):
    """Raised when the runtime installer cannot provision a binary."""


class DependencyError(LauncherError):
    """Raised when a managed runtime dependency cannot be resolved."""


class ExecError(LauncherError):
    """Raised when handing control to the runtime binary fails."""


__all__ = [
    "ArchiveError",
    "CacheError",
    "DependencyError",
    "ExecError",
    "InstallError",
    "LauncherError",
]
