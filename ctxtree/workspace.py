"""Host-facing facade over one project root.

Wires the exclusion policy, selection store, materializer, toggler, and
serializer together and exposes the operations a front end needs: listing,
toggling, bulk selection, checked-file flattening, and compile.
"""

from __future__ import annotations

import logging
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .config import Settings, load_settings
from .errors import EmptySelection, StatFailure
from .file_tree_model import EntryKind, PathEntry, TreeMaterializer, normalize_path, stat_child
from .file_tree_model.types import CheckedState
from .selection import SelectionChange, SelectionPersistence, SelectionStore, SelectionToggler, load_store
from .serializer import ContextSerializer, Document, write_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileResult:
    document: Document
    output_path: Path | None


class ContextWorkspace:
    """Selection and compile operations for a single project root."""

    def __init__(
        self,
        root: Path,
        settings: Settings,
        store: SelectionStore | None = None,
        persistence: SelectionPersistence | None = None,
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self.root = normalize_path(root)
        self.settings = settings
        self.store = store if store is not None else SelectionStore()
        self.persistence = persistence
        policy = settings.policy
        self.materializer = TreeMaterializer(self.root, self.store, policy, on_warning=on_warning)
        self.toggler = SelectionToggler(self.root, self.store, policy)
        self.serializer = ContextSerializer(self.root)

    @classmethod
    def open(
        cls,
        root: Path,
        settings: Settings | None = None,
        state_path: Path | None = None,
        on_warning: Callable[[str], None] | None = None,
    ) -> ContextWorkspace:
        """Open ``root`` with its persisted selection restored and autosaved."""
        root = normalize_path(root)
        if settings is None:
            settings = load_settings(root)
        store, persistence = load_store(root, state_path)
        return cls(root, settings, store=store, persistence=persistence, on_warning=on_warning)

    @property
    def on_warning(self) -> Callable[[str], None] | None:
        return self.materializer.on_warning

    @on_warning.setter
    def on_warning(self, callback: Callable[[str], None] | None) -> None:
        self.materializer.on_warning = callback

    def resolve(self, path: Path) -> Path:
        """Anchor a relative ``path`` at the project root."""
        path = Path(path).expanduser()
        return path if path.is_absolute() else self.root / path

    def list_children(self, directory: Path | None = None) -> list[PathEntry]:
        return self.materializer.list_children(None if directory is None else self.resolve(directory))

    def entry_for(self, path: Path) -> PathEntry:
        return self.materializer.entry_for(self.resolve(path))

    def toggle(self, entry: PathEntry) -> SelectionChange:
        return self.toggler.toggle(entry)

    def toggle_path(self, path: Path) -> SelectionChange:
        """Toggle ``path`` (relative paths are taken from the root).

        Excluded paths and paths outside the root are left alone with a
        warning. Raises ``StatFailure`` if the path cannot be inspected.
        """
        path = normalize_path(self.resolve(path))
        if path != self.root and self.root not in path.parents:
            self.materializer.warn(f"Outside the project root: {path}")
            return SelectionChange()
        if self.settings.policy.excludes(path, self.root):
            self.materializer.warn(f"Excluded by configuration: {path}")
            return SelectionChange()
        return self.toggle(self.entry_for(path))

    def select_all(self) -> SelectionChange:
        return self.toggler.select_all()

    def deselect_all(self) -> SelectionChange:
        return self.toggler.deselect_all()

    def get_all_checked_files(self) -> list[PathEntry]:
        """Flatten the store into file entries in selection order.

        Paths that vanished or are no longer regular files are skipped.
        """
        entries: list[PathEntry] = []
        for path in self.store.paths():
            try:
                mode = stat_child(path).st_mode
            except StatFailure:
                logger.debug("skipping vanished selection %s", path)
                continue
            if stat.S_ISDIR(mode):
                logger.debug("skipping selection that is now a directory: %s", path)
                continue
            entries.append(
                PathEntry(name=path.name, path=path, kind=EntryKind.FILE, checked_state=CheckedState.CHECKED)
            )
        return entries

    def prune_missing(self) -> list[Path]:
        """Remove selected paths that no longer exist as files; return them."""
        present = {entry.path for entry in self.get_all_checked_files()}
        stale = [path for path in self.store.paths() if path not in present]
        if stale:
            self.store.update(remove=stale)
        return stale

    def files_to_compile(self, entries: list[PathEntry] | None = None) -> list[Path]:
        """Checked files that survive the exclusion policy, in selection order."""
        if entries is None:
            entries = self.get_all_checked_files()
        policy = self.settings.policy
        return [
            entry.path
            for entry in entries
            if not policy.excludes(entry.path, self.root)
        ]

    def compile(self, output_path: Path | None = None, write: bool = True) -> CompileResult:
        """Serialize the current selection and write it in one piece.

        Raises ``EmptySelection`` before touching the output when nothing is
        selected, and ``OutputWriteFailure`` when the write fails.
        """
        entries = self.get_all_checked_files()
        if not entries:
            raise EmptySelection("No files selected. Please select at least one file to compile context.")
        files = self.files_to_compile(entries)
        if not files:
            raise EmptySelection("No files to include after applying exclusions.")

        logger.info("serializing %d files", len(files))
        document = self.serializer.serialize(files)
        if not write:
            return CompileResult(document=document, output_path=None)

        target = output_path if output_path is not None else self.settings.output_path(self.root)
        write_document(document, target)
        logger.info("context written to %s", target)
        return CompileResult(document=document, output_path=target)


__all__ = [
    "CompileResult",
    "ContextWorkspace",
]
