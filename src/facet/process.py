# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Hand the current process over to another executable."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from types import FrameType
from typing import Final, NoReturn

from .errors import ExecError

FORWARDED_SIGNALS: Final[tuple[str, ...]] = ("SIGINT", "SIGTERM", "SIGBREAK")

LOGGER = logging.getLogger(__name__)


def supports_exec() -> bool:
    """Return ``True`` when the platform can replace the process image."""

    return os.name == "posix"


def exec_process(executable: Path, argv: Sequence[str], env: Mapping[str, str]) -> NoReturn:
    """Replace the current process with ``executable``.

    On POSIX the process image is swapped with :func:`os.execve`, so the child
    keeps the PID, the controlling terminal and the standard streams. Elsewhere
    the child runs as a subprocess that receives forwarded signals, and the
    launcher exits with the child's return code.

    Args:
        executable: Absolute path of the program to run.
        argv: Full argument vector including ``argv[0]``.
        env: Complete environment for the new program.

    Raises:
        ExecError: If the program cannot be started.
    """

    LOGGER.debug("Handing off to %s with argv %s", executable, list(argv))
    sys.stdout.flush()
    sys.stderr.flush()
    if supports_exec():
        try:
            os.execve(executable, list(argv), dict(env))
        except OSError as exc:
            raise ExecError(f"executing {executable}") from exc
    sys.exit(_spawn_and_wait(executable, argv, env))


def _spawn_and_wait(executable: Path, argv: Sequence[str], env: Mapping[str, str]) -> int:
    try:
        child = subprocess.Popen([str(executable), *argv[1:]], env=dict(env))
    except OSError as exc:
        raise ExecError(f"executing {executable}") from exc

    def _forward(signum: int, _frame: FrameType | None) -> None:
        child.send_signal(signum)

    previous: dict[int, object] = {}
    for name in FORWARDED_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            previous[signum] = signal.signal(signum, _forward)
    try:
        return child.wait()
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)  # type: ignore[arg-type]


__all__ = ["FORWARDED_SIGNALS", "exec_process", "supports_exec"]
