# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Install managed runtime binaries from their upstream release archives."""

from __future__ import annotations

import http.client
import logging
import os
import platform
import shutil
import stat
import tempfile
from collections.abc import Callable
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol
from urllib.parse import urljoin, urlparse

from .archive import unpack_archive
from .errors import ArchiveError, InstallError

LATEST: Final[str] = "latest"
HTTPS_SCHEME: Final[str] = "https"
MAX_REDIRECTS: Final[int] = 3
HTTP_REDIRECT_STATUSES: Final[frozenset[int]] = frozenset({301, 302, 303, 307, 308})
HTTP_OK_STATUS: Final[int] = 200
DOWNLOAD_TIMEOUT_SECONDS: Final[float] = 60.0
ALLOWED_HOSTS: Final[frozenset[str]] = frozenset(
    {"github.com", "objects.githubusercontent.com", "release-assets.githubusercontent.com"}
)

BUN_RELEASES_URL: Final[str] = "https://github.com/oven-sh/bun/releases"

ARCH_ALIASES: Final[dict[str, str]] = {
    "amd64": "x64",
    "x86_64": "x64",
    "x64": "x64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}

BUN_TARGETS: Final[dict[tuple[str, str], str]] = {
    ("linux", "x64"): "bun-linux-x64",
    ("linux", "aarch64"): "bun-linux-aarch64",
    ("darwin", "x64"): "bun-darwin-x64",
    ("darwin", "aarch64"): "bun-darwin-aarch64",
    ("windows", "x64"): "bun-windows-x64",
}

Fetcher = Callable[[str, Path], None]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Location of a freshly installed runtime binary."""

    bin_dir: Path
    binary: Path


class RuntimeInstaller(Protocol):
    """Installer able to place one named runtime binary into a directory."""

    name: str

    def install(self, version: str, *, bin_dir: Path) -> InstallResult:
        """Install ``version`` into ``bin_dir`` and return the binary location."""


def binary_filename(name: str, *, system: str | None = None) -> str:
    """Return the on-disk executable name for ``name`` on ``system``."""

    resolved = (system or platform.system()).lower()
    return f"{name}.exe" if resolved == "windows" else name


def download_https_resource(url: str, destination: Path, *, redirects: int = 0) -> None:
    """Download ``url`` to ``destination`` following safe HTTPS redirects.

    Args:
        url: HTTPS URL to download.
        destination: Local file path where the response should be written.
        redirects: Current redirect depth used for recursion limits.

    Raises:
        InstallError: If the URL is not allow-listed, the redirect limit is
            exceeded, or the server does not answer with the payload.
    """

    parsed = urlparse(url)
    if parsed.scheme != HTTPS_SCHEME or parsed.netloc not in ALLOWED_HOSTS:
        raise InstallError(f"unexpected download target: {url}")
    if redirects > MAX_REDIRECTS:
        raise InstallError("download exceeded maximum redirect depth")

    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"

    with closing(http.client.HTTPSConnection(parsed.netloc, timeout=DOWNLOAD_TIMEOUT_SECONDS)) as connection:
        try:
            connection.request("GET", path)
            response = connection.getresponse()
        except (OSError, http.client.HTTPException) as exc:
            raise InstallError(f"downloading {url}") from exc

        if response.status in HTTP_REDIRECT_STATUSES:
            location = response.getheader("Location")
            if not location:
                raise InstallError("download redirected without a location header")
            next_url = urljoin(url, location)
            LOGGER.debug("Download redirected to %s", next_url)
            download_https_resource(next_url, destination, redirects=redirects + 1)
            return

        if response.status != HTTP_OK_STATUS:
            raise InstallError(f"downloading {url}: HTTP {response.status}")

        try:
            with open(destination, "wb") as handle:
                shutil.copyfileobj(response, handle)
        except (OSError, http.client.HTTPException) as exc:
            raise InstallError(f"downloading {url}") from exc


class BunInstaller:
    """Install the ``bun`` runtime from its GitHub release archives."""

    name: str = "bun"

    def __init__(
        self,
        *,
        system: str | None = None,
        machine: str | None = None,
        fetch: Fetcher = download_https_resource,
    ) -> None:
        self._system = system
        self._machine = machine
        self._fetch = fetch

    def target(self) -> str:
        """Return the release asset stem matching the host platform.

        Returns:
            str: Asset stem such as ``bun-linux-x64``.

        Raises:
            InstallError: If the platform has no published build.
        """

        system = (self._system or platform.system()).lower()
        machine_raw = (self._machine or platform.machine()).lower()
        machine = ARCH_ALIASES.get(machine_raw)
        if machine is None:
            raise InstallError(f"unsupported architecture for bun: {machine_raw}")
        target = BUN_TARGETS.get((system, machine))
        if target is None:
            raise InstallError(f"unsupported platform for bun: {system}-{machine}")
        return target

    def release_url(self, version: str) -> str:
        """Return the download URL of the release asset for ``version``."""

        asset = f"{self.target()}.zip"
        if version == LATEST:
            return f"{BUN_RELEASES_URL}/latest/download/{asset}"
        tag = version if version.startswith("bun-v") else f"bun-v{version.removeprefix('v')}"
        return f"{BUN_RELEASES_URL}/download/{tag}/{asset}"

    def install(self, version: str, *, bin_dir: Path) -> InstallResult:
        """Download, unpack and promote ``bun`` into ``bin_dir``.

        Args:
            version: ``latest`` or a concrete release version.
            bin_dir: Directory that receives the executable.

        Returns:
            InstallResult: Directory and path of the installed binary.

        Raises:
            InstallError: If downloading, unpacking or promoting fails.
        """

        url = self.release_url(version)
        binary_name = binary_filename(self.name, system=self._system)
        final_path = bin_dir / binary_name
        LOGGER.debug("Installing %s %s from %s", self.name, version, url)

        try:
            scratch_dir = tempfile.mkdtemp(prefix=f".{self.name}-", dir=bin_dir)
        except OSError as exc:
            raise InstallError("creating scratch dir") from exc
        scratch = Path(scratch_dir)
        try:
            archive_path = scratch / url.rsplit("/", 1)[-1]
            self._fetch(url, archive_path)
            unpacked = scratch / "unpacked"
            try:
                unpack_archive(archive_path, unpacked)
            except ArchiveError as exc:
                raise InstallError(f"unpacking {archive_path.name}") from exc
            _promote_binary(_locate_binary(unpacked, binary_name), final_path)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
        return InstallResult(bin_dir=bin_dir, binary=final_path)


def _locate_binary(source_dir: Path, binary_name: str) -> Path:
    for candidate in sorted(source_dir.rglob(binary_name)):
        if candidate.is_file():
            return candidate
    raise InstallError(f"{binary_name} not found in release archive")


def _promote_binary(source: Path, target: Path) -> None:
    staging = target.with_name(f".{target.name}.{os.getpid()}.tmp")
    try:
        shutil.copyfile(source, staging)
        staging.chmod(staging.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        # Same directory as the target, so the rename is atomic.
        os.replace(staging, target)
    except OSError as exc:
        staging.unlink(missing_ok=True)
        raise InstallError(f"installing {target.name}") from exc


_INSTALLERS: dict[str, RuntimeInstaller] = {BunInstaller.name: BunInstaller()}


def get_installer(name: str) -> RuntimeInstaller:
    """Return the registered installer for ``name``.

    Raises:
        InstallError: If no installer is registered under ``name``.
    """

    installer = _INSTALLERS.get(name)
    if installer is None:
        raise InstallError(f"no installer registered for {name}")
    return installer


def install(name: str, version: str = LATEST, *, bin_dir: Path) -> InstallResult:
    """Install dependency ``name`` at ``version`` into ``bin_dir``."""

    return get_installer(name).install(version, bin_dir=bin_dir)


__all__ = [
    "ALLOWED_HOSTS",
    "BUN_TARGETS",
    "BunInstaller",
    "InstallResult",
    "LATEST",
    "RuntimeInstaller",
    "binary_filename",
    "download_https_resource",
    "get_installer",
    "install",
]
