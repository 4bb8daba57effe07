# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe extraction of tar and zip archives into a destination directory."""

from __future__ import annotations

import logging
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import Final

from .errors import ArchiveError

PATH_TRAVERSAL_COMPONENT: Final[str] = ".."
_ZIP_MODE_SHIFT: Final[int] = 16
_PERMISSION_MASK: Final[int] = 0o777

LOGGER = logging.getLogger(__name__)


def unpack_archive(archive_path: Path, destination: Path) -> list[Path]:
    """Extract ``archive_path`` into ``destination``, overwriting existing files.

    The format is detected from the archive content, so temporary files do not
    need a meaningful suffix.

    Args:
        archive_path: Tar (optionally compressed) or zip archive on disk.
        destination: Directory that receives the archive members.

    Returns:
        list[Path]: Paths of the extracted members.

    Raises:
        ArchiveError: If the archive is unreadable, of an unknown format, or
            contains members that would land outside ``destination``.
    """

    destination.mkdir(parents=True, exist_ok=True)
    try:
        if tarfile.is_tarfile(archive_path):
            return _unpack_tar(archive_path, destination)
        if zipfile.is_zipfile(archive_path):
            return _unpack_zip(archive_path, destination)
    except (tarfile.TarError, zipfile.BadZipFile) as exc:
        raise ArchiveError(f"reading {archive_path.name}") from exc
    except OSError as exc:
        raise ArchiveError(f"unpacking {archive_path.name}") from exc
    raise ArchiveError(f"unrecognised archive format: {archive_path.name}")


def _unpack_tar(archive_path: Path, destination: Path) -> list[Path]:
    extracted: list[Path] = []
    with tarfile.open(archive_path, "r:*") as tar:
        members = tar.getmembers()
        for member in members:
            _check_member(member.name, destination)
            extracted.append(destination / member.name)
        # The data filter also rejects links pointing outside the destination.
        tar.extractall(destination, members=members, filter="data")
    LOGGER.debug("Extracted %d tar members into %s", len(extracted), destination)
    return extracted


def _unpack_zip(archive_path: Path, destination: Path) -> list[Path]:
    extracted: list[Path] = []
    with zipfile.ZipFile(archive_path) as archive:
        for info in archive.infolist():
            _check_member(info.filename, destination)
            target = Path(archive.extract(info, destination))
            mode = (info.external_attr >> _ZIP_MODE_SHIFT) & _PERMISSION_MASK
            if mode and not info.is_dir():
                target.chmod(mode)
            extracted.append(target)
    LOGGER.debug("Extracted %d zip members into %s", len(extracted), destination)
    return extracted


def _check_member(name: str, destination: Path) -> None:
    member = PurePosixPath(name)
    if member.is_absolute() or PATH_TRAVERSAL_COMPONENT in member.parts:
        raise ArchiveError(f"unsafe path in archive: {name}")
    if not _is_within(destination, destination / member):
        raise ArchiveError(f"unsafe path in archive: {name}")


def _is_within(root: Path, candidate: Path) -> bool:
    """Return ``True`` when ``candidate`` is located within ``root``."""

    try:
        candidate.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


__all__ = ["PATH_TRAVERSAL_COMPONENT", "unpack_archive"]
