# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for stamped build metadata."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from facet import __version__, build_info
from facet.build_info import UNKNOWN_COMMIT, current_build_info


@pytest.fixture(autouse=True)
def _reset_cache() -> Iterator[None]:
    current_build_info.cache_clear()
    yield
    current_build_info.cache_clear()


def test_stamped_values_are_used(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_info, "load_build_info", lambda: b'{"version": "2.0.0", "commit": "deadbee"}')

    info = current_build_info()

    assert (info.version, info.commit) == ("2.0.0", "deadbee")


def test_missing_stamp_falls_back_to_package_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_info, "load_build_info", lambda: None)

    info = current_build_info()

    assert (info.version, info.commit) == (__version__, UNKNOWN_COMMIT)


def test_malformed_stamp_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_info, "load_build_info", lambda: b"{not json")

    assert current_build_info().commit == UNKNOWN_COMMIT


def test_result_is_memoised(monkeypatch: pytest.MonkeyPatch) -> None:
    reads: list[int] = []

    def loader() -> bytes:
        reads.append(1)
        return b'{"commit": "c0ffee0"}'

    monkeypatch.setattr(build_info, "load_build_info", loader)

    assert current_build_info() is current_build_info()
    assert len(reads) == 1
