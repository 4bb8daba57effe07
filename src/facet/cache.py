# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Materialise the embedded payload into a versioned per-user cache.

A cache directory is valid exactly when its sentinel file exists. The first
launch of a version unpacks the payload and writes the sentinel; every later
launch returns the directory without touching the payload. First-run
extraction is serialised across processes with an advisory lock next to the
cache directory, and the sentinel is checked again once the lock is held.
"""

from __future__ import annotations

import logging
import sys
import tempfile
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Final

from .archive import unpack_archive
from .errors import ArchiveError, CacheError
from .paths import cache_dir

if sys.platform != "win32":
    import fcntl

SENTINEL_NAME: Final[str] = ".extracted"
LOCK_SUFFIX: Final[str] = ".lock"
TEMP_PREFIX: Final[str] = "facet-cli-"
TEMP_SUFFIX: Final[str] = ".tar.gz"
LOCK_TIMEOUT_SECONDS: Final[float] = 300.0
_LOCK_POLL_SECONDS: Final[float] = 0.05

LOGGER = logging.getLogger(__name__)


def sentinel_path(directory: Path) -> Path:
    """Return the sentinel marker path inside ``directory``."""

    return directory / SENTINEL_NAME


def is_extracted(version: str, environ: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` when the cache for ``version`` has been materialised."""

    return sentinel_path(cache_dir(version, environ)).exists()


def ensure_cache(
    version: str,
    payload: bytes,
    *,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Return the cache directory for ``version``, extracting ``payload`` once.

    Args:
        version: Embedded payload version used to namespace the cache.
        payload: Compressed archive bytes bundled with the launcher.
        environ: Environment mapping forwarded to the path resolver.

    Returns:
        Path: Directory holding the extracted payload.

    Raises:
        CacheError: If any extraction step fails. A partially populated
            directory is left in place without a sentinel, so the next run
            extracts again.
    """

    directory = cache_dir(version, environ)
    sentinel = sentinel_path(directory)
    if sentinel.exists():
        LOGGER.debug("Cache hit for %s at %s", version, directory)
        return directory

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CacheError("creating cache dir") from exc

    with _extraction_lock(directory):
        if sentinel.exists():
            LOGGER.debug("Cache for %s was populated by another process", version)
            return directory
        LOGGER.debug("Extracting payload %s into %s", version, directory)
        _extract_payload(payload, directory)
        try:
            sentinel.write_text(version, encoding="utf-8")
        except OSError as exc:
            raise CacheError("writing sentinel") from exc
    return directory


def _extract_payload(payload: bytes, directory: Path) -> None:
    try:
        handle = tempfile.NamedTemporaryFile(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, delete=False)
    except OSError as exc:
        raise CacheError("creating temp file") from exc
    temp_path = Path(handle.name)
    try:
        try:
            with handle:
                handle.write(payload)
        except OSError as exc:
            raise CacheError("writing tarball") from exc
        try:
            unpack_archive(temp_path, directory)
        except ArchiveError as exc:
            raise CacheError("extracting tarball") from exc
    finally:
        with suppress(FileNotFoundError):
            temp_path.unlink()


@contextmanager
def _extraction_lock(directory: Path) -> Iterator[None]:
    """Hold an exclusive advisory lock for first-run extraction of ``directory``."""

    if sys.platform == "win32":  # pragma: no cover - no flock on Windows
        yield
        return

    lock_path = directory.with_name(directory.name + LOCK_SUFFIX)
    try:
        handle = lock_path.open("a+")
    except OSError as exc:
        raise CacheError("opening cache lock") from exc
    try:
        deadline = time.monotonic() + LOCK_TIMEOUT_SECONDS
        while True:
            try:
                fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise CacheError(f"cache lock timeout after {LOCK_TIMEOUT_SECONDS:.0f}s: {lock_path}") from None
                time.sleep(_LOCK_POLL_SECONDS)
            except OSError as exc:
                raise CacheError("acquiring cache lock") from exc
        try:
            yield
        finally:
            fcntl.flock(handle, fcntl.LOCK_UN)
    finally:
        handle.close()


__all__ = [
    "LOCK_SUFFIX",
    "SENTINEL_NAME",
    "ensure_cache",
    "is_extracted",
    "sentinel_path",
]
