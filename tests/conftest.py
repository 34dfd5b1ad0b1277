"""Shared pytest fixtures for pricemerge tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from _pytest.monkeypatch import MonkeyPatch

from pricemerge.runtime.paths import reset_paths


@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path: Path, monkeypatch: MonkeyPatch) -> Iterator[Path]:
    """Point PRICEMERGE_HOME at a per-test directory so no real config or cache is touched."""
    root = tmp_path / "home"
    root.mkdir()
    monkeypatch.setenv("PRICEMERGE_HOME", str(root))
    reset_paths()
    yield root
    reset_paths()
