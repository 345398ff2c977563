"""Filesystem scanning primitives for listing and descendant-file walks."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path

from ..errors import DirectoryUnreadable, StatFailure
from ..exclusion import ExclusionPolicy, to_relative_posix

logger = logging.getLogger(__name__)


def normalize_path(path: Path | str) -> Path:
    """Return the absolute, normalized identity key for ``path``.

    Symlinks are not resolved, so a linked file keeps the path it was
    reached through.
    """
    return Path(os.path.abspath(os.fspath(path)))


@dataclass(frozen=True)
class DirectoryChild:
    """One stat-classified child of a scanned directory."""

    name: str
    path: Path
    is_dir: bool


def stat_child(path: Path) -> os.stat_result:
    """Stat ``path`` following symlinks, wrapping failures in ``StatFailure``."""
    try:
        return os.stat(path)
    except OSError as exc:
        raise StatFailure(path, exc) from exc


def scan_directory(
    directory: Path,
    root: Path,
    policy: ExclusionPolicy | None = None,
) -> list[DirectoryChild]:
    """Return visible, stat-able children of ``directory`` in raw listing order.

    Raises ``DirectoryUnreadable`` when ``directory`` cannot be listed. Entries
    excluded by ``policy`` or failing ``stat`` (dangling links, permissions) are
    dropped silently.
    """
    children: list[DirectoryChild] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                child_path = Path(child.path)
                if policy is not None and policy.is_excluded(to_relative_posix(child_path, root), child.name):
                    continue
                try:
                    child_stat = stat_child(child_path)
                except StatFailure as exc:
                    logger.debug("skipping %s: %s", child_path, exc.cause)
                    continue
                children.append(
                    DirectoryChild(
                        name=child.name,
                        path=child_path,
                        is_dir=stat.S_ISDIR(child_stat.st_mode),
                    )
                )
    except OSError as exc:
        raise DirectoryUnreadable(directory, exc) from exc
    return children


def collect_descendant_files(
    directory: Path,
    root: Path,
    policy: ExclusionPolicy | None = None,
    strict: bool = True,
) -> list[Path]:
    """Return every file beneath ``directory``, depth-first.

    Linked files are included but linked directories are never entered, which
    keeps the walk finite. With ``strict`` an unreadable directory anywhere in
    the subtree raises ``DirectoryUnreadable``; otherwise it contributes no
    files.
    """
    results: list[Path] = []

    def walk(current: Path) -> None:
        try:
            with os.scandir(current) as entries:
                listed = list(entries)
        except OSError as exc:
            if strict:
                raise DirectoryUnreadable(current, exc) from exc
            logger.debug("skipping unreadable directory %s: %s", current, exc)
            return

        for child in listed:
            child_path = Path(child.path)
            if policy is not None and policy.is_excluded(to_relative_posix(child_path, root), child.name):
                continue
            try:
                if child.is_dir(follow_symlinks=False):
                    walk(child_path)
                elif child.is_file():
                    results.append(normalize_path(child_path))
            except OSError:
                continue

    walk(directory)
    return results


__all__ = [
    "DirectoryChild",
    "normalize_path",
    "stat_child",
    "scan_directory",
    "collect_descendant_files",
]
