# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest

ENTRY_SOURCE = "console.log('facet');\n"


def _build_tarball(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def _make_executable(path: Path, body: str = "#!/bin/sh\nexit 0\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    path.chmod(0o755)
    return path


@pytest.fixture
def payload() -> bytes:
    """Return a minimal embedded payload with the application entry point."""

    return _build_tarball(
        {
            "cli/src/cli.ts": ENTRY_SOURCE,
            "cli/package.json": '{"name": "facet-cli"}\n',
        }
    )


@pytest.fixture
def environ(tmp_path: Path) -> dict[str, str]:
    """Return an isolated environment with its own cache root, home and PATH."""

    home = tmp_path / "home"
    home.mkdir()
    empty_bin = tmp_path / "empty-bin"
    empty_bin.mkdir()
    return {
        "FACET_CACHE_DIR": str(tmp_path / "facet-cache"),
        "HOME": str(home),
        "PATH": str(empty_bin),
    }


@pytest.fixture
def tarball_factory() -> Callable[[dict[str, str]], bytes]:
    """Return a helper building gzip tarballs from ``{name: content}``."""

    return _build_tarball


@pytest.fixture
def executable_factory() -> Callable[..., Path]:
    """Return a helper writing executable shell stubs."""

    return _make_executable
