"""Path exclusion rules shared by listing, toggling, and compile filtering.

Rules are evaluated independently on root-relative, forward-slash paths:
exact base-name matches, segment-aware path prefixes, and hidden segments.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

HIDDEN_MARKER = "."


def to_relative_posix(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` with forward-slash separators."""
    relative = os.path.relpath(os.fspath(path), os.fspath(root))
    if relative == os.curdir:
        return ""
    return relative.replace(os.sep, "/")


def _normalize_prefix(raw: str) -> str:
    """Normalize one configured prefix to ``a/b`` form (no leading ``./`` or slashes)."""
    text = str(raw).replace("\\", "/").strip()
    while text.startswith("./"):
        text = text[2:]
    return text.strip("/")


@dataclass(frozen=True)
class ExclusionRules:
    """Read-only exclusion configuration snapshot."""

    exclude_files: frozenset[str] = frozenset()
    exclude_paths: tuple[str, ...] = ()
    exclude_hidden: bool = False

    @classmethod
    def from_iterables(
        cls,
        exclude_files: Iterable[str] = (),
        exclude_paths: Iterable[str] = (),
        exclude_hidden: bool = False,
    ) -> ExclusionRules:
        prefixes: list[str] = []
        for raw in exclude_paths:
            prefix = _normalize_prefix(raw)
            if prefix and prefix not in prefixes:
                prefixes.append(prefix)
        return cls(
            exclude_files=frozenset(str(name) for name in exclude_files if name),
            exclude_paths=tuple(prefixes),
            exclude_hidden=bool(exclude_hidden),
        )


@dataclass(frozen=True)
class ExclusionPolicy:
    """Pure predicate deciding whether a root-relative path is excluded."""

    rules: ExclusionRules = ExclusionRules()

    def is_excluded(self, relative_path: str, base_name: str | None = None) -> bool:
        """Return whether ``relative_path`` (and its ``base_name``) is excluded.

        ``relative_path`` uses forward slashes and is relative to the project
        root; the empty string denotes the root itself, which is never excluded.
        """
        relative_path = relative_path.replace("\\", "/").strip("/")
        if not relative_path:
            return False
        segments = relative_path.split("/")
        if base_name is None:
            base_name = segments[-1]

        if base_name in self.rules.exclude_files:
            return True

        for prefix in self.rules.exclude_paths:
            if relative_path == prefix or relative_path.startswith(prefix + "/"):
                return True

        if self.rules.exclude_hidden:
            return any(segment.startswith(HIDDEN_MARKER) for segment in segments)
        return False

    def excludes(self, path: Path, root: Path) -> bool:
        """Return whether absolute ``path`` under ``root`` is excluded."""
        return self.is_excluded(to_relative_posix(path, root), path.name)


__all__ = [
    "HIDDEN_MARKER",
    "ExclusionRules",
    "ExclusionPolicy",
    "to_relative_posix",
]
