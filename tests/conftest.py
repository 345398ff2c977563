"""Pytest bootstrap for local source imports and per-user paths.

The ``pytest`` console script can run with a sys.path that excludes the
repository root, so the root is inserted before ``ctxtree`` is imported.
Every test also gets private config and selection-state files so nothing
reads or writes the real per-user directories.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def isolated_user_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("ctxtree.config.CONFIG_PATH", tmp_path / "user-config" / "config.json")
    monkeypatch.setattr("ctxtree.selection.persistence.STATE_PATH", tmp_path / "user-state" / "selections.json")
