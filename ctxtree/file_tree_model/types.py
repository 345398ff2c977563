"""Domain datatypes for selection-aware file tree entries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


class CheckedState(Enum):
    """Selection status of one entry; only directories derive ``PARTIAL``."""

    CHECKED = "checked"
    UNCHECKED = "unchecked"
    PARTIAL = "partial"


@dataclass(frozen=True)
class PathEntry:
    """One filesystem node surfaced to a front end.

    Built fresh on every listing call. ``checked_state`` for directories is
    derived from descendant files at construction time and never stored.
    """

    name: str
    path: Path
    kind: EntryKind
    checked_state: CheckedState = CheckedState.UNCHECKED

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def label(self) -> str:
        """Display name with a trailing ``/`` for directories."""
        return self.name + ("/" if self.is_dir else "")


def sort_entries(entries: list[PathEntry]) -> list[PathEntry]:
    """Return ``entries`` with directories first, then case-insensitive names.

    ``sorted`` is stable, so names equal under case folding keep raw listing
    order.
    """
    return sorted(entries, key=lambda entry: (not entry.is_dir, entry.name.lower()))


__all__ = [
    "EntryKind",
    "CheckedState",
    "PathEntry",
    "sort_entries",
]
