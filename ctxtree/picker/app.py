"""Interactive picker: tree navigation, toggling, and compile in a terminal.

The app owns view state only. Selection lives in the workspace store; the
app subscribes to it and rebuilds visible rows after every change.
"""

from __future__ import annotations

import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import CtxTreeError
from ..selection import SelectionChange
from ..workspace import ContextWorkspace
from .input import read_key
from .rows import DEFAULT_THEME, PickerRow, PickerTheme, build_rows, clip_to_width, format_row
from .terminal import TerminalController

HELP_LINE = "space toggle  ←/→ collapse/expand  a all  d none  c compile  r refresh  q quit"


@dataclass
class PickerState:
    expanded: set[Path] = field(default_factory=set)
    rows: list[PickerRow] = field(default_factory=list)
    selected_idx: int = 0
    top: int = 0
    message: str = ""
    running: bool = True


class PickerApp:
    """Key-driven controller over a ``ContextWorkspace``."""

    def __init__(
        self,
        workspace: ContextWorkspace,
        output_path: Path | None = None,
        theme: PickerTheme = DEFAULT_THEME,
    ) -> None:
        self.workspace = workspace
        self.output_path = output_path
        self.theme = theme
        self.state = PickerState()
        workspace.on_warning = self.show_message
        workspace.store.subscribe(self)
        self.refresh()

    def close(self) -> None:
        self.workspace.store.unsubscribe(self)
        self.workspace.on_warning = None

    def show_message(self, message: str) -> None:
        self.state.message = message

    def on_selection_changed(self, change: SelectionChange) -> None:
        self.refresh()

    def refresh(self) -> None:
        """Rebuild rows, keeping the cursor on the same path when it is still visible."""
        state = self.state
        current = self.current_row()
        current_path = current.entry.path if current is not None else None
        state.rows = build_rows(self.workspace, state.expanded)
        if current_path is not None:
            for idx, row in enumerate(state.rows):
                if row.entry.path == current_path:
                    state.selected_idx = idx
                    break
        state.selected_idx = max(0, min(state.selected_idx, len(state.rows) - 1))

    def current_row(self) -> PickerRow | None:
        rows = self.state.rows
        if not rows or not 0 <= self.state.selected_idx < len(rows):
            return None
        return rows[self.state.selected_idx]

    def move(self, delta: int) -> None:
        if not self.state.rows:
            return
        self.state.selected_idx = max(0, min(self.state.selected_idx + delta, len(self.state.rows) - 1))

    def expand(self) -> None:
        row = self.current_row()
        if row is None or not row.entry.is_dir or row.entry.path in self.state.expanded:
            return
        self.state.expanded.add(row.entry.path)
        self.refresh()

    def collapse(self) -> None:
        """Collapse the current directory, or jump to the parent row."""
        row = self.current_row()
        if row is None:
            return
        if row.entry.is_dir and row.entry.path in self.state.expanded:
            self.state.expanded.discard(row.entry.path)
            self.refresh()
            return
        parent = row.entry.path.parent
        for idx in range(self.state.selected_idx - 1, -1, -1):
            if self.state.rows[idx].entry.path == parent:
                self.state.selected_idx = idx
                return

    def toggle_current(self) -> None:
        row = self.current_row()
        if row is None:
            return
        try:
            self.workspace.toggle(row.entry)
        except CtxTreeError as exc:
            self.show_message(str(exc))

    def compile(self) -> None:
        try:
            result = self.workspace.compile(self.output_path)
        except CtxTreeError as exc:
            self.show_message(str(exc))
            return
        message = f"Context successfully written to {result.output_path}"
        failures = len(result.document.read_failures)
        if failures:
            message += f" ({failures} file{'s' if failures != 1 else ''} could not be read)"
        self.show_message(message)

    def handle_key(self, key: str) -> bool:
        """Apply one key token; return ``False`` when the picker should exit."""
        if key in {"q", "ESC", "CTRL_C"}:
            self.state.running = False
            return False
        self.state.message = ""
        if key in {"UP", "k"}:
            self.move(-1)
        elif key in {"DOWN", "j"}:
            self.move(1)
        elif key == "HOME":
            self.state.selected_idx = 0
        elif key == "END":
            self.move(len(self.state.rows))
        elif key in {"RIGHT", "l", "ENTER"}:
            self.expand()
        elif key in {"LEFT", "h"}:
            self.collapse()
        elif key == "SPACE":
            self.toggle_current()
        elif key == "a":
            self.workspace.select_all()
        elif key == "d":
            self.workspace.deselect_all()
        elif key == "c":
            self.compile()
        elif key == "r":
            self.refresh()
        return True

    def render(self, width: int, height: int) -> str:
        """Return one full frame for a ``width`` x ``height`` terminal."""
        state = self.state
        theme = self.theme
        body_rows = max(1, height - 2)
        if state.selected_idx < state.top:
            state.top = state.selected_idx
        elif state.selected_idx >= state.top + body_rows:
            state.top = state.selected_idx - body_rows + 1

        lines: list[str] = [f"{theme.directory}{self.workspace.root}/{theme.reset}"]
        visible = state.rows[state.top : state.top + body_rows]
        for offset, row in enumerate(visible):
            text = format_row(row, state.expanded, theme)
            if state.top + offset == state.selected_idx:
                text = f"{theme.reverse}{text}{theme.reset}" if theme.reverse else f"> {text}"
            lines.append(text)
        if not state.rows:
            lines.append(f"{theme.status}(empty){theme.reset}")
        while len(lines) < height - 1:
            lines.append("")
        status = state.message or f"{len(self.workspace.store)} selected  {HELP_LINE}"
        lines.append(f"{theme.status}{status}{theme.reset}")
        return "\x1b[H\x1b[2J" + "\r\n".join(self._clip(line, width) for line in lines)

    def _clip(self, line: str, width: int) -> str:
        clipped = clip_to_width(line, max(1, width))
        return clipped if clipped == line else clipped + self.theme.reset

    def run(self, stdin_fd: int | None = None, stdout_fd: int | None = None) -> None:
        """Run the interactive loop until the user quits."""
        stdin_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        stdout_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        terminal = TerminalController(stdin_fd, stdout_fd)
        root_logger = logging.getLogger()
        previous_level = root_logger.level
        root_logger.setLevel(logging.ERROR)
        try:
            with terminal.raw_mode():
                while self.state.running:
                    size = shutil.get_terminal_size((80, 24))
                    terminal.write(self.render(size.columns, size.lines))
                    key = read_key(stdin_fd)
                    if not key:
                        break
                    self.handle_key(key)
        finally:
            root_logger.setLevel(previous_level)
            self.close()


__all__ = [
    "HELP_LINE",
    "PickerState",
    "PickerApp",
]
