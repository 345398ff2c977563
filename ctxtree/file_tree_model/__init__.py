"""Domain model for selection-aware file trees.

This package contains non-UI tree primitives:
- entry datatypes with file/directory kind and tri-state checked status
- filesystem scanning and descendant-file walks honoring exclusion rules
- the materializer that lists children with derived checked status
"""

from __future__ import annotations

from .types import CheckedState, EntryKind, PathEntry, sort_entries
from .fs import DirectoryChild, collect_descendant_files, normalize_path, scan_directory, stat_child
from .materializer import TreeMaterializer, aggregate_state

__all__ = [
    "CheckedState",
    "EntryKind",
    "PathEntry",
    "sort_entries",
    "DirectoryChild",
    "collect_descendant_files",
    "normalize_path",
    "scan_directory",
    "stat_child",
    "TreeMaterializer",
    "aggregate_state",
]
