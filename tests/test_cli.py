# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the console entry point."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from facet import cli
from facet.build_info import BuildInfo
from facet.console import ROOT_LOGGER_NAME, VERBOSE_ENV, ensure_verbose_logger


@pytest.fixture
def stamped(monkeypatch: pytest.MonkeyPatch) -> BuildInfo:
    build = BuildInfo(version="0.0.0-test", commit="e2etest")
    monkeypatch.setattr(cli, "current_build_info", lambda: build)
    return build


@pytest.fixture
def clean_root_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level, propagate = logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
    if hasattr(logger, "_facet_verbose_configured"):
        delattr(logger, "_facet_verbose_configured")


@pytest.mark.usefixtures("stamped")
def test_version_query_exits_zero(capsys: pytest.CaptureFixture[str], environ: dict[str, str]) -> None:
    def unexpected(*_args: object) -> None:
        raise AssertionError("no hand-off expected")

    assert cli.main(["--version"], environ=environ, exec_fn=unexpected) == 0
    assert capsys.readouterr().out.strip() == "facet 0.0.0-test (e2etest)"


@pytest.mark.usefixtures("stamped")
def test_version_query_does_not_read_payload(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], environ: dict[str, str]
) -> None:
    def forbidden() -> bytes:
        raise AssertionError("payload must not be loaded")

    monkeypatch.setattr(cli, "load_payload", forbidden)

    assert cli.main(["build", "-V"], environ=environ) == 0
    assert "facet 0.0.0-test (e2etest)" in capsys.readouterr().out


@pytest.mark.usefixtures("stamped")
def test_missing_payload_fails_with_prefixed_message(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], environ: dict[str, str]
) -> None:
    monkeypatch.setattr(cli, "load_payload", lambda: b"")

    assert cli.main(["render"], environ=environ) == 1
    assert "facet: cache setup: extracting tarball" in capsys.readouterr().err


@pytest.mark.usefixtures("stamped")
def test_successful_bootstrap_reaches_hand_off(
    monkeypatch: pytest.MonkeyPatch,
    payload: bytes,
    environ: dict[str, str],
    tmp_path: Path,
    executable_factory: Callable[..., Path],
) -> None:
    bun = executable_factory(tmp_path / "tools" / "bun")
    environ["PATH"] = str(bun.parent)
    monkeypatch.setattr(cli, "load_payload", lambda: payload)
    seen: list[list[str]] = []

    def hand_off(_executable: Path, argv: list[str], _env: dict[str, str]) -> None:
        seen.append(list(argv))

    assert cli.main(["render", "doc.md"], environ=environ, exec_fn=hand_off) == 0
    assert seen and seen[0][-2:] == ["render", "doc.md"]


def test_verbose_logger_streams_debug_records(
    clean_root_logger: logging.Logger, capsys: pytest.CaptureFixture[str]
) -> None:
    assert ensure_verbose_logger({VERBOSE_ENV: "1"}) is True
    assert ensure_verbose_logger({VERBOSE_ENV: "1"}) is True

    logging.getLogger("facet.cache").debug("probe message")

    assert "probe message" in capsys.readouterr().err
    assert len(clean_root_logger.handlers) == 1
    assert clean_root_logger.level == logging.DEBUG


def test_verbose_logger_is_off_by_default(clean_root_logger: logging.Logger) -> None:
    assert ensure_verbose_logger({}) is False
    assert not clean_root_logger.handlers
