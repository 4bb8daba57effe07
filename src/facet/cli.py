# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console entry point for the ``facet`` launcher."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence

from .build_info import current_build_info
from .console import ensure_verbose_logger, fail
from .errors import LauncherError
from .launcher import PROG_NAME, ExecFn, LaunchOptions, is_version_query, run
from .payload import load_payload
from .process import exec_process


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    exec_fn: ExecFn = exec_process,
) -> int:
    """Run the launcher and translate bootstrap failures into an exit code.

    Args:
        argv: Arguments to forward. Defaults to ``sys.argv[1:]``.
        environ: Environment for resolution and hand-off. Defaults to
            :data:`os.environ`.
        exec_fn: Process replacement primitive.

    Returns:
        int: ``0`` after a version query, ``1`` on any bootstrap failure. A
        successful hand-off never returns.
    """

    env = os.environ if environ is None else environ
    ensure_verbose_logger(env)
    args = tuple(sys.argv[1:] if argv is None else argv)
    build = current_build_info()
    # The version query must not read the payload either.
    payload = b"" if is_version_query(args) else load_payload()
    options = LaunchOptions(version=build.version, commit=build.commit, payload=payload, args=args)
    try:
        run(options, environ=env, exec_fn=exec_fn)
    except LauncherError as exc:
        fail(f"{PROG_NAME}: {exc}")
        return 1
    return 0


__all__ = ["main"]
