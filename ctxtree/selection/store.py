"""Selection Set: the ordered set of explicitly checked file paths.

The store is an explicit object handed to the materializer, toggler, and
workspace. It keeps a per-directory count of selected paths beneath each
ancestor so unselected subtrees can be classified without a filesystem walk,
and notifies observers once per mutation.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..file_tree_model.fs import normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionChange:
    """Paths added to and removed from the store by one mutation."""

    added: tuple[Path, ...] = ()
    removed: tuple[Path, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)


class SelectionObserver(Protocol):
    def on_selection_changed(self, change: SelectionChange) -> None: ...


class SelectionStore:
    """Insertion-ordered set of absolute file paths with ancestor counts."""

    def __init__(self, paths: Iterable[Path | str] = ()) -> None:
        self.lock = threading.RLock()
        self._paths: dict[Path, None] = {}
        self._counts: dict[Path, int] = {}
        self._observers: list[SelectionObserver] = []
        for path in paths:
            self._insert(normalize_path(path))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (Path, str)):
            return False
        return normalize_path(path) in self._paths

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def paths(self) -> list[Path]:
        """Return selected paths in selection order."""
        return list(self._paths)

    def selected_count_under(self, directory: Path) -> int:
        """Return how many selected paths live strictly beneath ``directory``."""
        return self._counts.get(normalize_path(directory), 0)

    def subscribe(self, observer: SelectionObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: SelectionObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _adjust_ancestors(self, path: Path, delta: int) -> None:
        for ancestor in path.parents:
            count = self._counts.get(ancestor, 0) + delta
            if count > 0:
                self._counts[ancestor] = count
            else:
                self._counts.pop(ancestor, None)

    def _insert(self, path: Path) -> bool:
        if path in self._paths:
            return False
        self._paths[path] = None
        self._adjust_ancestors(path, 1)
        return True

    def _remove(self, path: Path) -> bool:
        if path not in self._paths:
            return False
        del self._paths[path]
        self._adjust_ancestors(path, -1)
        return True

    def update(
        self,
        add: Iterable[Path | str] = (),
        remove: Iterable[Path | str] = (),
    ) -> SelectionChange:
        """Apply removals then additions as one mutation and notify observers."""
        with self.lock:
            removed = tuple(path for path in map(normalize_path, remove) if self._remove(path))
            added = tuple(path for path in map(normalize_path, add) if self._insert(path))
            change = SelectionChange(added=added, removed=removed)
        if change:
            self._notify(change)
        return change

    def add(self, path: Path | str) -> SelectionChange:
        return self.update(add=(path,))

    def discard(self, path: Path | str) -> SelectionChange:
        return self.update(remove=(path,))

    def clear(self) -> SelectionChange:
        """Remove every path (``deselect all``)."""
        with self.lock:
            removed = tuple(self._paths)
            self._paths.clear()
            self._counts.clear()
            change = SelectionChange(removed=removed)
        if change:
            self._notify(change)
        return change

    def _notify(self, change: SelectionChange) -> None:
        for path in change.added:
            logger.debug("Added: %s", path)
        for path in change.removed:
            logger.debug("Removed: %s", path)
        for observer in list(self._observers):
            try:
                observer.on_selection_changed(change)
            except Exception:
                logger.exception("selection observer %r failed", observer)


__all__ = [
    "SelectionChange",
    "SelectionObserver",
    "SelectionStore",
]
