"""Context document serialization: a drawn file tree plus file bodies.

The document layout is a fixed text format consumed by external tools::

    File Tree:
    ├── src/
    │   └── a.ts
    └── README.md

    Files:

    --- Start of README.md ---
    Y

    --- Start of src/a.ts ---
    X

The tree is built only from the supplied files. The Files section follows the
order the files were supplied in, not tree order.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .errors import EmptySelection, FileReadFailure, OutputWriteFailure
from .exclusion import to_relative_posix

logger = logging.getLogger(__name__)

FILE_TREE_HEADER = "File Tree:\n"
FILES_HEADER = "\nFiles:\n"
BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_INDENT = "│   "
SPACE_INDENT = "    "


def file_delimiter(relative_path: str) -> str:
    return f"--- Start of {relative_path} ---"


@dataclass
class TreeNode:
    """One node of the transient tree built for a single serialize call."""

    name: str
    is_file: bool = False
    children: dict[str, TreeNode] = field(default_factory=dict)

    def sorted_children(self) -> list[TreeNode]:
        """Directories first, then files, case-insensitive within each group."""
        return sorted(self.children.values(), key=lambda node: (node.is_file, node.name.lower()))


@dataclass(frozen=True)
class Document:
    """Serialized context document text plus per-file read failures."""

    text: str
    files: tuple[str, ...] = ()
    read_failures: tuple[FileReadFailure, ...] = ()


def build_tree(relative_paths: Iterable[str]) -> TreeNode:
    """Insert each forward-slash path as a chain under a synthetic root."""
    root = TreeNode(name="")
    for relative_path in relative_paths:
        parts = [part for part in relative_path.split("/") if part]
        current = root
        for index, part in enumerate(parts):
            child = current.children.get(part)
            if child is None:
                child = TreeNode(name=part, is_file=index == len(parts) - 1)
                current.children[part] = child
            current = child
    return root


def render_tree(node: TreeNode, prefix: str = "") -> str:
    """Render ``node``'s children with box-drawing connectors, one line each."""
    lines: list[str] = []

    def walk(current: TreeNode, indent: str) -> None:
        children = current.sorted_children()
        for index, child in enumerate(children):
            last = index == len(children) - 1
            connector = LAST_BRANCH if last else BRANCH
            suffix = "" if child.is_file else "/"
            lines.append(f"{indent}{connector}{child.name}{suffix}\n")
            if not child.is_file:
                walk(child, indent + (SPACE_INDENT if last else PIPE_INDENT))

    walk(node, prefix)
    return "".join(lines)


def read_file_text(path: Path) -> str:
    """Read ``path`` as UTF-8 text.

    Raises ``FileReadFailure`` on I/O errors or content that does not decode.
    """
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            return handle.read()
    except UnicodeDecodeError as exc:
        raise FileReadFailure(path, f"not a UTF-8 text file ({exc.reason})") from exc
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise FileReadFailure(path, reason) from exc


class ContextSerializer:
    """Turns an explicit file list into a context ``Document``.

    Pure over its inputs apart from reading the files themselves: it does not
    consult the selection store or exclusion rules.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(os.path.abspath(os.fspath(root)))

    def relative_path(self, path: Path) -> str:
        return to_relative_posix(Path(os.path.abspath(os.fspath(path))), self.root)

    def serialize(self, files: Iterable[Path]) -> Document:
        """Build the document for ``files``; raise ``EmptySelection`` when empty."""
        file_list = list(files)
        if not file_list:
            raise EmptySelection("No files to serialize. The tree structure is empty.")

        relative_paths = [self.relative_path(path) for path in file_list]
        tree = render_tree(build_tree(relative_paths))

        sections: list[str] = []
        failures: list[FileReadFailure] = []
        for path, relative_path in zip(file_list, relative_paths):
            try:
                body = read_file_text(path)
            except FileReadFailure as exc:
                logger.warning("Error reading file %s: %s", relative_path, exc.reason)
                failures.append(exc)
                body = str(exc)
            sections.append(f"\n{file_delimiter(relative_path)}\n{body}\n")

        text = FILE_TREE_HEADER + tree + FILES_HEADER + "".join(sections)
        return Document(text=text, files=tuple(relative_paths), read_failures=tuple(failures))


def serialize(root: Path, files: Iterable[Path]) -> Document:
    """Module-level shortcut for ``ContextSerializer(root).serialize(files)``."""
    return ContextSerializer(root).serialize(files)


def write_document(document: Document, output_path: Path) -> Path:
    """Write the complete document text, creating parent directories.

    Raises ``OutputWriteFailure``; no retry is attempted.
    """
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(document.text)
    except OSError as exc:
        raise OutputWriteFailure(output_path, exc) from exc
    return output_path


__all__ = [
    "FILE_TREE_HEADER",
    "FILES_HEADER",
    "TreeNode",
    "Document",
    "ContextSerializer",
    "build_tree",
    "render_tree",
    "read_file_text",
    "file_delimiter",
    "serialize",
    "write_document",
]
