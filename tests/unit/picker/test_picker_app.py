"""Key handling and frame rendering tests for the interactive picker."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from ctxtree.config import default_settings
from ctxtree.file_tree_model import CheckedState
from ctxtree.picker import PickerApp, format_row
from ctxtree.picker.rows import ANSI_ESCAPE_RE, DEFAULT_THEME, PLAIN_THEME, clip_to_width
from ctxtree.workspace import ContextWorkspace


def _write(path: Path, text: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class PickerAppTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.a = _write(self.root / "src" / "a.ts", "X")
        self.b = _write(self.root / "src" / "b.ts", "Z")
        self.readme = _write(self.root / "README.md", "Y")
        self.output = self.root.parent / f"{self.root.name}-context.txt"
        self.workspace = ContextWorkspace(self.root, default_settings())
        self.app = PickerApp(self.workspace, output_path=self.output, theme=PLAIN_THEME)

    def tearDown(self) -> None:
        self.app.close()
        self.output.unlink(missing_ok=True)
        self._tmp.cleanup()

    def _labels(self) -> list[str]:
        return [format_row(row, self.app.state.expanded, PLAIN_THEME) for row in self.app.state.rows]

    def test_initial_rows_list_root_children(self) -> None:
        self.assertEqual(self._labels(), ["▸ [ ] src/", "  [ ] README.md"])
        self.assertEqual(self.app.state.selected_idx, 0)

    def test_expand_and_collapse_directory(self) -> None:
        self.app.handle_key("RIGHT")
        self.assertEqual(
            self._labels(),
            ["▾ [ ] src/", "    [ ] a.ts", "    [ ] b.ts", "  [ ] README.md"],
        )

        self.app.handle_key("DOWN")
        self.app.handle_key("LEFT")
        self.assertEqual(self.app.state.selected_idx, 0)

        self.app.handle_key("LEFT")
        self.assertEqual(self._labels(), ["▸ [ ] src/", "  [ ] README.md"])

    def test_space_toggle_updates_rows_through_store_notification(self) -> None:
        self.app.handle_key("RIGHT")
        self.app.handle_key("j")
        self.app.handle_key("SPACE")

        states = [row.entry.checked_state for row in self.app.state.rows]
        self.assertEqual(
            states,
            [CheckedState.PARTIAL, CheckedState.CHECKED, CheckedState.UNCHECKED, CheckedState.UNCHECKED],
        )
        self.assertEqual(self.app.state.selected_idx, 1)

        self.app.handle_key("k")
        self.app.handle_key("SPACE")
        self.assertEqual(self.workspace.store.paths(), [self.a, self.b])

    def test_select_all_and_deselect_all_keys(self) -> None:
        self.app.handle_key("a")
        self.assertEqual(len(self.workspace.store), 3)
        self.assertEqual(self.app.state.rows[0].entry.checked_state, CheckedState.CHECKED)

        self.app.handle_key("d")
        self.assertEqual(len(self.workspace.store), 0)
        self.assertEqual(self.app.state.rows[0].entry.checked_state, CheckedState.UNCHECKED)

    def test_compile_key_reports_empty_selection(self) -> None:
        self.app.handle_key("c")
        self.assertIn("No files selected", self.app.state.message)
        self.assertFalse(self.output.exists())

    def test_compile_key_writes_output(self) -> None:
        self.app.handle_key("END")
        self.app.handle_key("SPACE")
        self.app.handle_key("c")

        self.assertEqual(self.app.state.message, f"Context successfully written to {self.output}")
        self.assertEqual(
            self.output.read_text(encoding="utf-8"),
            "File Tree:\n└── README.md\n\nFiles:\n\n--- Start of README.md ---\nY\n",
        )

    def test_cursor_stays_within_rows(self) -> None:
        self.app.handle_key("UP")
        self.assertEqual(self.app.state.selected_idx, 0)
        self.app.handle_key("END")
        self.app.handle_key("DOWN")
        self.assertEqual(self.app.state.selected_idx, 1)
        self.app.handle_key("HOME")
        self.assertEqual(self.app.state.selected_idx, 0)

    def test_quit_keys_stop_the_loop(self) -> None:
        self.assertTrue(self.app.handle_key("r"))
        self.assertFalse(self.app.handle_key("q"))
        self.assertFalse(self.app.state.running)

    def test_render_marks_cursor_and_shows_status(self) -> None:
        frame = self.app.render(80, 6)

        self.assertTrue(frame.startswith("\x1b[H\x1b[2J"))
        lines = frame[len("\x1b[H\x1b[2J") :].split("\r\n")
        self.assertEqual(lines[0], f"{self.root}/")
        self.assertEqual(lines[1], "> ▸ [ ] src/")
        self.assertEqual(lines[2], "  [ ] README.md")
        self.assertEqual(len(lines), 6)
        self.assertTrue(lines[-1].startswith("0 selected"))

    def test_render_scrolls_to_keep_cursor_visible(self) -> None:
        self.app.handle_key("RIGHT")
        self.app.handle_key("END")

        lines = self.app.render(80, 4).split("\r\n")

        self.assertEqual(lines[1:3], ["    [ ] b.ts", ">   [ ] README.md"])

    def test_compile_key_counts_unreadable_files(self) -> None:
        blob = self.root / "blob.bin"
        blob.write_bytes(b"\xff\xfe\x00\x81")
        self.workspace.toggle_path(blob)
        self.workspace.toggle_path(self.readme)

        with self.assertLogs("ctxtree.serializer", level="WARNING"):
            self.app.handle_key("c")

        self.assertEqual(
            self.app.state.message,
            f"Context successfully written to {self.output} (1 file could not be read)",
        )

    def test_render_clips_rows_to_width(self) -> None:
        lines = self.app.render(10, 6)[len("\x1b[H\x1b[2J") :].split("\r\n")

        self.assertEqual(lines[1], "> ▸ [ ] sr")
        self.assertEqual(lines[2], "  [ ] READ")
        self.assertTrue(all(len(line) <= 10 for line in lines))
        self.assertEqual(len(lines), 6)

    def test_styled_render_clips_visible_text_and_resets(self) -> None:
        self.app.theme = DEFAULT_THEME
        lines = self.app.render(6, 6).split("\r\n")

        for line in lines[1:3]:
            self.assertLessEqual(len(ANSI_ESCAPE_RE.sub("", line)), 6)
            self.assertTrue(line.endswith(DEFAULT_THEME.reset))

    def test_unreadable_directory_warning_lands_in_status(self) -> None:
        self.workspace.on_warning("Unable to read directory /nowhere")
        self.assertEqual(self.app.state.message, "Unable to read directory /nowhere")


class ClipToWidthTests(unittest.TestCase):
    def test_escape_sequences_take_no_columns(self) -> None:
        self.assertEqual(clip_to_width("\x1b[1mabcdef\x1b[0m", 3), "\x1b[1mabc")

    def test_wide_characters_take_two_columns(self) -> None:
        self.assertEqual(clip_to_width("日本語", 3), "日")

    def test_short_text_is_unchanged(self) -> None:
        self.assertEqual(clip_to_width("▸ [x] a.ts", 40), "▸ [x] a.ts")


if __name__ == "__main__":
    unittest.main()
