# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal output helpers built on Rich plus the verbose diagnostic logger."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from functools import cache
from typing import Final, TextIO

from rich.console import Console
from rich.text import Text

VERBOSE_ENV: Final[str] = "FACET_LAUNCHER_VERBOSE"
ROOT_LOGGER_NAME: Final[str] = "facet"

_VERBOSE_MARKER: Final[str] = "_facet_verbose_configured"


def detect_tty(stream: TextIO | None = None) -> bool:
    """Return ``True`` when ``stream`` appears to be backed by a terminal.

    Args:
        stream: Stream to inspect. Defaults to ``sys.stderr``.

    Returns:
        bool: ``True`` when the stream reports TTY support.
    """

    target = sys.stderr if stream is None else stream
    try:
        return target.isatty()
    except (AttributeError, ValueError):
        return False


@cache
def _stderr_console(tty: bool) -> Console:
    return Console(
        stderr=True,
        color_system="auto" if tty else None,
        force_terminal=tty,
        no_color=not tty,
        emoji=False,
        soft_wrap=True,
        highlight=False,
    )


def _print_line(msg: str, *, style: str | None) -> None:
    tty = detect_tty()
    text = Text(msg)
    if style and tty:
        text.stylize(style)
    _stderr_console(tty).print(text)


def info(msg: str) -> None:
    """Emit an informational message on stderr."""

    _print_line(msg, style="cyan")


def fail(msg: str) -> None:
    """Emit a fatal error message on stderr."""

    _print_line(msg, style="bold red")


def ensure_verbose_logger(environ: Mapping[str, str] | None = None) -> bool:
    """Stream ``facet`` debug records to stderr when verbosity is requested.

    Args:
        environ: Environment consulted for :data:`VERBOSE_ENV`. Defaults to
            :data:`os.environ`.

    Returns:
        bool: ``True`` when verbose logging is active.
    """

    env = os.environ if environ is None else environ
    if not env.get(VERBOSE_ENV):
        return False
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if getattr(logger, _VERBOSE_MARKER, False):
        return True
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    setattr(logger, _VERBOSE_MARKER, True)
    return True


__all__ = [
    "ROOT_LOGGER_NAME",
    "VERBOSE_ENV",
    "detect_tty",
    "ensure_verbose_logger",
    "fail",
    "info",
]
