"""Selection-aware directory listing with derived tri-state checked status."""

from __future__ import annotations

import logging
import stat
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import DirectoryUnreadable
from ..exclusion import ExclusionPolicy
from .fs import collect_descendant_files, normalize_path, scan_directory, stat_child
from .types import CheckedState, EntryKind, PathEntry, sort_entries

if TYPE_CHECKING:
    from ..selection.store import SelectionStore

logger = logging.getLogger(__name__)


def aggregate_state(descendants: list[Path], store: SelectionStore) -> CheckedState:
    """Classify a descendant-file set against the store.

    An empty set is ``UNCHECKED``, never ``PARTIAL``.
    """
    if not descendants:
        return CheckedState.UNCHECKED
    selected = sum(1 for path in descendants if path in store)
    if selected == len(descendants):
        return CheckedState.CHECKED
    if selected:
        return CheckedState.PARTIAL
    return CheckedState.UNCHECKED


class TreeMaterializer:
    """Lists directory children as ``PathEntry`` rows for rendering.

    Nothing is cached between calls, so every listing reflects the current
    disk contents and the current selection.
    """

    def __init__(
        self,
        root: Path,
        store: SelectionStore,
        policy: ExclusionPolicy | None = None,
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self.root = normalize_path(root)
        self.store = store
        self.policy = policy or ExclusionPolicy()
        self.on_warning = on_warning

    def descendant_files(self, directory: Path, strict: bool = True) -> list[Path]:
        """Return non-excluded files beneath ``directory`` (see ``collect_descendant_files``)."""
        return collect_descendant_files(normalize_path(directory), self.root, self.policy, strict=strict)

    def directory_state(self, directory: Path) -> CheckedState:
        """Derive the tri-state status of ``directory`` from its descendant files."""
        directory = normalize_path(directory)
        if self.store.selected_count_under(directory) == 0:
            return CheckedState.UNCHECKED
        return aggregate_state(self.descendant_files(directory, strict=False), self.store)

    def read_children(self, directory: Path) -> list[PathEntry]:
        """List ``directory`` children sorted directories-first, raising on failure.

        Raises ``DirectoryUnreadable`` when ``directory`` cannot be listed.
        """
        directory = normalize_path(directory)
        entries: list[PathEntry] = []
        for child in scan_directory(directory, self.root, self.policy):
            child_path = normalize_path(child.path)
            if child.is_dir:
                entries.append(
                    PathEntry(
                        name=child.name,
                        path=child_path,
                        kind=EntryKind.DIRECTORY,
                        checked_state=self.directory_state(child_path),
                    )
                )
                continue
            entries.append(
                PathEntry(
                    name=child.name,
                    path=child_path,
                    kind=EntryKind.FILE,
                    checked_state=CheckedState.CHECKED if child_path in self.store else CheckedState.UNCHECKED,
                )
            )
        return sort_entries(entries)

    def list_children(self, directory: Path | None = None) -> list[PathEntry]:
        """List children of ``directory`` (default: root), never raising.

        An unreadable directory is reported as a warning and yields ``[]``.
        """
        try:
            return self.read_children(self.root if directory is None else directory)
        except DirectoryUnreadable as exc:
            self.warn(str(exc))
            return []

    def entry_for(self, path: Path) -> PathEntry:
        """Materialize a single ``PathEntry`` for ``path``.

        Raises ``StatFailure`` when ``path`` cannot be inspected.
        """
        path = normalize_path(path)
        if stat.S_ISDIR(stat_child(path).st_mode):
            return PathEntry(
                name=path.name or str(path),
                path=path,
                kind=EntryKind.DIRECTORY,
                checked_state=self.directory_state(path),
            )
        return PathEntry(
            name=path.name,
            path=path,
            kind=EntryKind.FILE,
            checked_state=CheckedState.CHECKED if path in self.store else CheckedState.UNCHECKED,
        )

    def warn(self, message: str) -> None:
        logger.warning("%s", message)
        if self.on_warning is not None:
            self.on_warning(message)


__all__ = [
    "aggregate_state",
    "TreeMaterializer",
]
