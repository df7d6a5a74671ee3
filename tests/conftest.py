"""Pytest configuration for test isolation.

The CLI and ``JsonStateStore`` default to a project-relative snapshot file
(``./finance_state.json``). When tests run in the same working tree, a
snapshot written by one test would leak category mappings and stored records
into the next one, flipping duplicate flags and classifier results.

To keep tests hermetic, every test gets its own snapshot path via the
``STATEMENT_IMPORT_STATE_PATH`` environment variable.
"""

from __future__ import annotations

import os
import sys
from datetime import date
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `statement_import` is importable
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR)] if p not in sys.path]

from statement_import.config import ImportConfig  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_state_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Force a per-test state snapshot so tests don't share on-disk state."""

    state_path = tmp_path / "state" / "finance_state.json"
    state_path.parent.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("STATEMENT_IMPORT_STATE_PATH", os.fspath(state_path))
    return state_path


@pytest.fixture
def config() -> ImportConfig:
    """Config pinned to a fixed "today" so year defaults are deterministic."""

    return ImportConfig(today=date(2025, 6, 1))
