# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Best-effort discovery of a Chrome/Chromium binary for PDF rendering.

Each strategy is a plain function returning candidate paths in priority order.
Strategies run in a fixed sequence and the first existing candidate wins. Not
finding a browser is a normal outcome: the embedded application simply runs
without PDF support.
"""

from __future__ import annotations

import glob
import logging
import os
import platform
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .paths import home_dir

PRIMARY_OVERRIDE_ENV: Final[str] = "PUPPETEER_EXECUTABLE_PATH"
SECONDARY_OVERRIDE_ENV: Final[str] = "CHROME_PATH"

DARWIN: Final[str] = "darwin"
LINUX: Final[str] = "linux"
ARM64_MACHINES: Final[frozenset[str]] = frozenset({"arm64", "aarch64"})

SYSTEM_CHROME_PATHS: Final[dict[str, tuple[str, ...]]] = {
    DARWIN: ("/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",),
    LINUX: (
        "/usr/bin/google-chrome-stable",
        "/usr/bin/chromium-browser",
        "/usr/bin/chromium",
    ),
}

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiscoveryContext:
    """Inputs shared by every discovery strategy."""

    environ: Mapping[str, str]
    system: str
    machine: str
    home: Path | None

    @classmethod
    def current(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        system: str | None = None,
        machine: str | None = None,
        home: Path | None = None,
    ) -> DiscoveryContext:
        """Build a context from the running host, honouring explicit overrides."""

        env = os.environ if environ is None else environ
        return cls(
            environ=env,
            system=(system or platform.system()).lower(),
            machine=(machine or platform.machine()).lower(),
            home=home if home is not None else home_dir(env),
        )


@dataclass(frozen=True, slots=True)
class Candidate:
    """A concrete or glob path proposed by a strategy."""

    strategy: str
    pattern: str
    is_glob: bool = False
    must_exist: bool = True


Strategy = Callable[[DiscoveryContext], Sequence[Candidate]]


def _env_override(name: str) -> Strategy:
    def strategy(context: DiscoveryContext) -> Sequence[Candidate]:
        value = context.environ.get(name)
        if not value:
            return ()
        # Overrides are trusted as given.
        return (Candidate(strategy=f"env:{name}", pattern=value, must_exist=False),)

    strategy.__name__ = f"env_{name.lower()}"
    return strategy


def playwright_patterns(context: DiscoveryContext) -> Sequence[Candidate]:
    """Return glob patterns into the Playwright browser cache."""

    if context.home is None:
        return ()
    cache_dir = context.home / ".cache" / "ms-playwright"
    if context.system == DARWIN:
        pattern = cache_dir / "chromium-*" / "chrome-mac" / "Chromium.app" / "Contents" / "MacOS" / "Chromium"
    elif context.system == LINUX:
        pattern = cache_dir / "chromium-*" / "chrome-linux" / "chrome"
    else:
        return ()
    return (Candidate(strategy="playwright", pattern=str(pattern), is_glob=True),)


def system_chrome_paths(context: DiscoveryContext) -> Sequence[Candidate]:
    """Return canonical system-wide Chrome/Chromium install locations."""

    return tuple(Candidate(strategy="system", pattern=path) for path in SYSTEM_CHROME_PATHS.get(context.system, ()))


def puppeteer_patterns(context: DiscoveryContext) -> Sequence[Candidate]:
    """Return glob patterns into the Puppeteer "Chrome for Testing" cache."""

    if context.home is None:
        return ()
    cache_dir = context.home / ".cache" / "puppeteer" / "chrome"
    if context.system == DARWIN:
        folder = "chrome-mac-arm64" if context.machine in ARM64_MACHINES else "chrome-mac-x64"
        pattern = (
            cache_dir
            / "*"
            / folder
            / "Google Chrome for Testing.app"
            / "Contents"
            / "MacOS"
            / "Google Chrome for Testing"
        )
    elif context.system == LINUX:
        pattern = cache_dir / "*" / "chrome-linux64" / "chrome"
    else:
        return ()
    return (Candidate(strategy="puppeteer", pattern=str(pattern), is_glob=True),)


STRATEGIES: Final[tuple[Strategy, ...]] = (
    _env_override(PRIMARY_OVERRIDE_ENV),
    _env_override(SECONDARY_OVERRIDE_ENV),
    playwright_patterns,
    system_chrome_paths,
    puppeteer_patterns,
)


def iter_candidates(context: DiscoveryContext) -> Iterator[Candidate]:
    """Yield every candidate of every strategy in priority order."""

    for strategy in STRATEGIES:
        yield from strategy(context)


def _match(candidate: Candidate) -> str | None:
    if not candidate.must_exist:
        return candidate.pattern
    if candidate.is_glob:
        matches = sorted(glob.glob(candidate.pattern))
        return matches[0] if matches else None
    return candidate.pattern if os.path.exists(candidate.pattern) else None


def detect_browser(
    environ: Mapping[str, str] | None = None,
    *,
    system: str | None = None,
    machine: str | None = None,
    home: Path | None = None,
) -> str | None:
    """Return the first browser executable found, or ``None``.

    Args:
        environ: Environment mapping to consult. Defaults to :data:`os.environ`.
        system: Operating system name override (``platform.system()`` style).
        machine: CPU architecture override (``platform.machine()`` style).
        home: Home directory override used for vendor cache globs.

    Returns:
        str | None: Path of the discovered browser, or ``None`` when no
        strategy produced a match.
    """

    context = DiscoveryContext.current(environ, system=system, machine=machine, home=home)
    for candidate in iter_candidates(context):
        match = _match(candidate)
        if match is not None:
            LOGGER.debug("Browser found via %s: %s", candidate.strategy, match)
            return match
    LOGGER.debug("No browser found for %s/%s", context.system, context.machine)
    return None


__all__ = [
    "Candidate",
    "DiscoveryContext",
    "PRIMARY_OVERRIDE_ENV",
    "SECONDARY_OVERRIDE_ENV",
    "STRATEGIES",
    "SYSTEM_CHROME_PATHS",
    "detect_browser",
    "iter_candidates",
    "playwright_patterns",
    "puppeteer_patterns",
    "system_chrome_paths",
]
