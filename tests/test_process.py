# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the process hand-off primitive."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from facet import process
from facet.errors import ExecError
from facet.process import exec_process


class ExecCalled(Exception):
    """Raised by the execve double so the call does not fall through."""


def test_posix_hand_off_uses_execve(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[object, list[str], dict[str, str]]] = []

    def fake_execve(path: object, argv: list[str], env: dict[str, str]) -> None:
        calls.append((path, argv, env))
        raise ExecCalled

    monkeypatch.setattr(process, "supports_exec", lambda: True)
    monkeypatch.setattr(process.os, "execve", fake_execve)

    with pytest.raises(ExecCalled):
        exec_process(Path("/opt/bun"), ("bun", "run", "cli.ts", "--x"), {"A": "1"})

    assert calls == [(Path("/opt/bun"), ["bun", "run", "cli.ts", "--x"], {"A": "1"})]


def test_execve_failure_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_execve(*_args: object) -> None:
        raise PermissionError("denied")

    monkeypatch.setattr(process, "supports_exec", lambda: True)
    monkeypatch.setattr(process.os, "execve", fake_execve)

    with pytest.raises(ExecError, match="^executing /opt/bun: denied") as excinfo:
        exec_process(Path("/opt/bun"), ("bun",), {})

    assert isinstance(excinfo.value.__cause__, PermissionError)


def test_subprocess_fallback_exits_with_child_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(process, "supports_exec", lambda: False)
    argv = ("python", "-c", "import sys; sys.exit(3)")

    with pytest.raises(SystemExit) as excinfo:
        exec_process(Path(sys.executable), argv, {})

    assert excinfo.value.code == 3


def test_subprocess_fallback_reports_missing_program(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(process, "supports_exec", lambda: False)
    missing = tmp_path / "no-such-runtime"

    with pytest.raises(ExecError, match="^executing "):
        exec_process(missing, ("bun",), {})
