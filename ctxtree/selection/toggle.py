"""Selection toggling for file and directory entries.

Files flip membership. Directories expand to their descendant files and flip
as a whole: fully selected subtrees are cleared, anything else (including a
partially selected subtree) becomes fully selected.
"""

from __future__ import annotations

from pathlib import Path

from ..exclusion import ExclusionPolicy
from ..file_tree_model.fs import collect_descendant_files, normalize_path
from ..file_tree_model.types import EntryKind, PathEntry
from .store import SelectionChange, SelectionStore


class SelectionToggler:
    """Mutates a ``SelectionStore`` in response to toggle requests."""

    def __init__(self, root: Path, store: SelectionStore, policy: ExclusionPolicy | None = None) -> None:
        self.root = normalize_path(root)
        self.store = store
        self.policy = policy or ExclusionPolicy()

    def toggle(self, entry: PathEntry) -> SelectionChange:
        """Toggle ``entry`` and return the applied change.

        Descendant enumeration happens before any mutation, so an unreadable
        subtree raises ``DirectoryUnreadable`` with the store untouched.
        """
        if entry.kind is EntryKind.FILE:
            with self.store.lock:
                if entry.path in self.store:
                    return self.store.discard(entry.path)
                return self.store.add(entry.path)

        with self.store.lock:
            descendants = collect_descendant_files(normalize_path(entry.path), self.root, self.policy, strict=True)
            all_selected = bool(descendants) and all(path in self.store for path in descendants)
            if all_selected:
                return self.store.update(remove=descendants)
            return self.store.update(add=descendants)

    def select_all(self) -> SelectionChange:
        """Add every non-excluded file under the root."""
        with self.store.lock:
            return self.store.update(add=collect_descendant_files(self.root, self.root, self.policy, strict=False))

    def deselect_all(self) -> SelectionChange:
        return self.store.clear()


__all__ = ["SelectionToggler"]
