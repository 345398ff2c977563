"""Visible-row flattening and row formatting for the picker tree."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..file_tree_model import CheckedState, PathEntry

if TYPE_CHECKING:
    from ..workspace import ContextWorkspace

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

CHECK_MARKERS = {
    CheckedState.CHECKED: "[x]",
    CheckedState.PARTIAL: "[-]",
    CheckedState.UNCHECKED: "[ ]",
}


@dataclass(frozen=True)
class PickerTheme:
    """Semantic ANSI palette used by the picker renderer."""

    name: str
    reset: str
    reverse: str
    marker: str
    directory: str
    file: str
    checked: str
    partial: str
    status: str


DEFAULT_THEME = PickerTheme(
    name="default",
    reset="\033[0m",
    reverse="\033[7m",
    marker="\033[38;5;44m",
    directory="\033[1;34m",
    file="\033[38;5;252m",
    checked="\033[38;5;42m",
    partial="\033[38;5;214m",
    status="\033[2;38;5;250m",
)

PLAIN_THEME = PickerTheme(
    name="plain",
    reset="",
    reverse="",
    marker="",
    directory="",
    file="",
    checked="",
    partial="",
    status="",
)


@dataclass(frozen=True)
class PickerRow:
    """One rendered tree row: an entry plus its nesting depth."""

    entry: PathEntry
    depth: int


def check_marker(state: CheckedState) -> str:
    return CHECK_MARKERS[state]


def build_rows(workspace: ContextWorkspace, expanded: set[Path]) -> list[PickerRow]:
    """Flatten the root's children depth-first, inlining expanded directories."""
    rows: list[PickerRow] = []

    def walk(directory: Path, depth: int) -> None:
        for entry in workspace.list_children(directory):
            rows.append(PickerRow(entry=entry, depth=depth))
            if entry.is_dir and entry.path in expanded:
                walk(entry.path, depth + 1)

    walk(workspace.root, 0)
    return rows


def format_row(row: PickerRow, expanded: set[Path], theme: PickerTheme = DEFAULT_THEME) -> str:
    """Render one row as ``<indent><arrow> <[x]> <name>`` with ANSI styling."""
    entry = row.entry
    indent = "  " * row.depth
    reset = theme.reset
    if entry.is_dir:
        arrow = "▾ " if entry.path in expanded else "▸ "
        name_color = theme.directory
    else:
        arrow = "  "
        name_color = theme.file

    state = entry.checked_state
    if state is CheckedState.CHECKED:
        check_color = theme.checked
    elif state is CheckedState.PARTIAL:
        check_color = theme.partial
    else:
        check_color = ""
    check = f"{check_color}{check_marker(state)}{reset if check_color else ''}"
    return f"{indent}{theme.marker}{arrow}{reset}{check} {name_color}{entry.label}{reset}"


def clip_to_width(text: str, max_cols: int) -> str:
    """Cut a styled line to ``max_cols`` terminal columns.

    Escape sequences are copied through and take no columns; wide characters
    take two and combining marks none.
    """
    out: list[str] = []
    col = 0
    i = 0
    while i < len(text):
        match = ANSI_ESCAPE_RE.match(text, i) if text[i] == "\x1b" else None
        if match:
            out.append(match.group(0))
            i = match.end()
            continue
        ch = text[i]
        if unicodedata.combining(ch):
            w = 0
        elif unicodedata.east_asian_width(ch) in {"W", "F"}:
            w = 2
        else:
            w = 1
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1
    return "".join(out)


__all__ = [
    "ANSI_ESCAPE_RE",
    "CHECK_MARKERS",
    "PickerTheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "PickerRow",
    "check_marker",
    "build_rows",
    "format_row",
    "clip_to_width",
]
