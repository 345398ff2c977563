"""Persistent JSON storage for per-project selections.

One state file maps each resolved project root to its selected paths in
selection order. All access is defensive: a missing or malformed file loads
as an empty selection and write failures are logged, never raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_state_dir

from ..file_tree_model.fs import normalize_path
from .store import SelectionChange, SelectionStore

logger = logging.getLogger(__name__)

APP_NAME = "ctxtree"
STATE_FILENAME = "selections.json"
STATE_PATH = Path(user_state_dir(APP_NAME, appauthor=False)) / STATE_FILENAME


def _load_state(state_path: Path) -> dict[str, object]:
    try:
        data = json.loads(state_path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


class SelectionPersistence:
    """Loads and saves one project's selection; usable as a store observer."""

    def __init__(self, root: Path, state_path: Path | None = None) -> None:
        self.root = normalize_path(root)
        self.state_path = state_path if state_path is not None else STATE_PATH
        self.store: SelectionStore | None = None

    @property
    def key(self) -> str:
        return str(self.root)

    def load(self) -> list[Path]:
        """Return persisted paths for this root, dropping non-string entries."""
        value = _load_state(self.state_path).get(self.key)
        if not isinstance(value, list):
            return []
        return [normalize_path(item) for item in value if isinstance(item, str) and item]

    def save(self, paths: list[Path]) -> None:
        """Rewrite this root's entry with ``paths``."""
        state = _load_state(self.state_path)
        state[self.key] = [str(path) for path in paths]
        try:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            self.state_path.write_text(json.dumps(state, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            logger.warning("could not save selection to %s: %s", self.state_path, exc)

    def attach(self, store: SelectionStore) -> None:
        """Save ``store`` after every mutation."""
        self.store = store
        store.subscribe(self)

    def on_selection_changed(self, change: SelectionChange) -> None:
        if self.store is not None:
            self.save(self.store.paths())


def load_store(root: Path, state_path: Path | None = None) -> tuple[SelectionStore, SelectionPersistence]:
    """Create a store restored from disk with persistence attached."""
    persistence = SelectionPersistence(root, state_path)
    store = SelectionStore(persistence.load())
    persistence.attach(store)
    return store, persistence


__all__ = [
    "APP_NAME",
    "STATE_FILENAME",
    "STATE_PATH",
    "SelectionPersistence",
    "load_store",
]
