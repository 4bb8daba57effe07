# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bootstrap pipeline that hands control to the embedded application.

The launcher answers a version query on its own. For every other invocation
it extracts the payload cache, resolves the ``bun`` runtime, looks for a
browser, exports the environment the application expects and finally
replaces itself with ``bun run <cache>/cli/src/cli.ts <args...>``.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .cache import ensure_cache
from .dependencies import BUN, DependencyProvisioner, ensure_bun
from .discovery import detect_browser
from .environment import LaunchEnvironment
from .errors import CacheError, DependencyError
from .process import exec_process

VERSION_FLAGS: Final[frozenset[str]] = frozenset({"--version", "-V"})
ENTRY_POINT: Final[tuple[str, ...]] = ("cli", "src", "cli.ts")
RUNTIME_NAME: Final[str] = BUN
RUNTIME_PREFIX: Final[tuple[str, ...]] = (BUN, "run")
PROG_NAME: Final[str] = "facet"

ExecFn = Callable[[Path, Sequence[str], Mapping[str, str]], object]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LaunchOptions:
    """Inputs for a single launcher invocation."""

    version: str
    commit: str
    payload: bytes
    args: tuple[str, ...] = field(default_factory=tuple)


def is_version_query(args: Iterable[str]) -> bool:
    """Return ``True`` when any argument asks for the launcher version."""

    return any(arg in VERSION_FLAGS for arg in args)


def version_banner(options: LaunchOptions) -> str:
    """Return the ``facet <version> (<commit>)`` line."""

    return f"{PROG_NAME} {options.version} ({options.commit})"


def entry_point(cache_dir: Path) -> Path:
    """Return the embedded application's entry point inside ``cache_dir``."""

    return cache_dir.joinpath(*ENTRY_POINT)


def build_argv(entry: Path, args: Sequence[str]) -> list[str]:
    """Return the runtime argument vector forwarding ``args`` verbatim."""

    return [*RUNTIME_PREFIX, str(entry), *args]


def run(
    options: LaunchOptions,
    *,
    environ: Mapping[str, str] | None = None,
    provisioner: DependencyProvisioner | None = None,
    exec_fn: ExecFn = exec_process,
) -> None:
    """Answer a version query or hand off to the embedded application.

    Args:
        options: Version, commit, payload and forwarded arguments.
        environ: Environment used for resolution and inherited by the child.
            Defaults to :data:`os.environ`.
        provisioner: Dependency resolver; a fresh one is created when omitted.
        exec_fn: Process replacement primitive. It does not return on success.

    Raises:
        CacheError: If the payload cache cannot be prepared.
        DependencyError: If the runtime cannot be located or installed.
        ExecError: If the hand-off itself fails.
    """

    if is_version_query(options.args):
        sys.stdout.write(version_banner(options) + "\n")
        sys.stdout.flush()
        return

    env = os.environ if environ is None else environ

    try:
        cache_dir = ensure_cache(options.version, options.payload, environ=env)
    except CacheError as exc:
        raise CacheError("cache setup") from exc

    resolver = provisioner or DependencyProvisioner(environ=env)
    try:
        runtime = ensure_bun(resolver)
    except DependencyError as exc:
        raise DependencyError(f"{RUNTIME_NAME} setup") from exc

    launch_env = LaunchEnvironment(package_root=cache_dir, browser_path=detect_browser(env))
    argv = build_argv(entry_point(cache_dir), options.args)
    LOGGER.debug("Launch environment: %s", launch_env.exports())
    exec_fn(runtime, argv, launch_env.apply(env))


__all__ = [
    "ENTRY_POINT",
    "LaunchOptions",
    "RUNTIME_NAME",
    "RUNTIME_PREFIX",
    "VERSION_FLAGS",
    "build_argv",
    "entry_point",
    "is_version_query",
    "run",
    "version_banner",
]
