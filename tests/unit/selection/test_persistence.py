"""Tests for per-project selection persistence."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from ctxtree.selection import SelectionPersistence, load_store


class SelectionPersistenceTests(unittest.TestCase):
    def test_store_changes_are_saved_and_restored_in_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp).resolve()
            state_path = base / "state" / "selections.json"
            root = base / "project"
            root.mkdir()

            store, _persistence = load_store(root, state_path)
            store.update(add=[root / "b.txt", root / "a.txt"])

            restored, _ = load_store(root, state_path)
            self.assertEqual(restored.paths(), [root / "b.txt", root / "a.txt"])

            store.clear()
            self.assertEqual(load_store(root, state_path)[0].paths(), [])

    def test_roots_are_stored_independently(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp).resolve()
            state_path = base / "selections.json"
            one = SelectionPersistence(base / "one", state_path)
            two = SelectionPersistence(base / "two", state_path)

            one.save([base / "one" / "x.txt"])
            two.save([base / "two" / "y.txt"])

            self.assertEqual(one.load(), [base / "one" / "x.txt"])
            self.assertEqual(two.load(), [base / "two" / "y.txt"])

    def test_malformed_state_loads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp).resolve()
            state_path = base / "selections.json"
            persistence = SelectionPersistence(base, state_path)

            state_path.write_text("{not json", encoding="utf-8")
            self.assertEqual(persistence.load(), [])

            state_path.write_text(json.dumps({str(base): ["ok.txt", 3, "", None]}), encoding="utf-8")
            self.assertEqual(persistence.load(), [Path("ok.txt").absolute()])

    def test_default_state_path_is_module_level(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            state_path = Path(tmp) / "selections.json"
            with mock.patch("ctxtree.selection.persistence.STATE_PATH", state_path):
                persistence = SelectionPersistence(Path(tmp))
                persistence.save([Path(tmp) / "a.txt"])
            self.assertTrue(state_path.exists())

    def test_save_failure_is_logged_not_raised(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("file, not directory", encoding="utf-8")
            persistence = SelectionPersistence(Path(tmp), blocker / "selections.json")

            with self.assertLogs("ctxtree.selection.persistence", level="WARNING"):
                persistence.save([Path(tmp) / "a.txt"])


if __name__ == "__main__":
    unittest.main()
