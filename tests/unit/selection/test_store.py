"""Tests for the Selection Set store, its ancestor index, and observers."""

from __future__ import annotations

import unittest
from pathlib import Path

from ctxtree.selection import SelectionChange, SelectionStore


class _Recorder:
    def __init__(self) -> None:
        self.changes: list[SelectionChange] = []

    def on_selection_changed(self, change: SelectionChange) -> None:
        self.changes.append(change)


class SelectionStoreTests(unittest.TestCase):
    def test_iteration_follows_insertion_order(self) -> None:
        store = SelectionStore([Path("/p/b.txt"), Path("/p/a.txt")])
        store.add(Path("/p/c.txt"))
        self.assertEqual(store.paths(), [Path("/p/b.txt"), Path("/p/a.txt"), Path("/p/c.txt")])
        self.assertEqual(len(store), 3)

    def test_membership_normalizes_paths(self) -> None:
        store = SelectionStore([Path("/p/src/a.txt")])
        self.assertIn(Path("/p/src/../src/a.txt"), store)
        self.assertIn("/p/src/a.txt", store)
        self.assertNotIn(42, store)

    def test_ancestor_counts_follow_mutations(self) -> None:
        store = SelectionStore()
        store.update(add=[Path("/p/src/a.txt"), Path("/p/src/pkg/b.txt"), Path("/p/top.txt")])

        self.assertEqual(store.selected_count_under(Path("/p")), 3)
        self.assertEqual(store.selected_count_under(Path("/p/src")), 2)
        self.assertEqual(store.selected_count_under(Path("/p/src/pkg")), 1)
        self.assertEqual(store.selected_count_under(Path("/p/docs")), 0)

        store.discard(Path("/p/src/pkg/b.txt"))
        self.assertEqual(store.selected_count_under(Path("/p/src/pkg")), 0)
        self.assertEqual(store.selected_count_under(Path("/p/src")), 1)

        store.clear()
        self.assertEqual(store.selected_count_under(Path("/p")), 0)

    def test_duplicate_add_is_a_no_op(self) -> None:
        store = SelectionStore([Path("/p/a.txt")])
        change = store.add(Path("/p/a.txt"))
        self.assertFalse(change)
        self.assertEqual(store.selected_count_under(Path("/p")), 1)

    def test_observers_get_one_notification_per_mutation(self) -> None:
        store = SelectionStore([Path("/p/old.txt")])
        recorder = _Recorder()
        store.subscribe(recorder)

        store.update(add=[Path("/p/a.txt"), Path("/p/b.txt")], remove=[Path("/p/old.txt")])
        store.update(add=[Path("/p/a.txt")])
        store.clear()

        self.assertEqual(len(recorder.changes), 2)
        self.assertEqual(recorder.changes[0].added, (Path("/p/a.txt"), Path("/p/b.txt")))
        self.assertEqual(recorder.changes[0].removed, (Path("/p/old.txt"),))
        self.assertEqual(set(recorder.changes[1].removed), {Path("/p/a.txt"), Path("/p/b.txt")})

    def test_failing_observer_does_not_block_mutation(self) -> None:
        class _Broken:
            def on_selection_changed(self, change: SelectionChange) -> None:
                raise RuntimeError("boom")

        store = SelectionStore()
        recorder = _Recorder()
        store.subscribe(_Broken())
        store.subscribe(recorder)

        with self.assertLogs("ctxtree.selection.store", level="ERROR"):
            store.add(Path("/p/a.txt"))

        self.assertIn(Path("/p/a.txt"), store)
        self.assertEqual(len(recorder.changes), 1)

    def test_unsubscribe_stops_notifications(self) -> None:
        store = SelectionStore()
        recorder = _Recorder()
        store.subscribe(recorder)
        store.unsubscribe(recorder)
        store.add(Path("/p/a.txt"))
        self.assertEqual(recorder.changes, [])


if __name__ == "__main__":
    unittest.main()
