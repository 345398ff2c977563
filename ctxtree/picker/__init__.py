"""Interactive terminal picker for selecting files to compile."""

from __future__ import annotations

from .app import PickerApp, PickerState
from .rows import PickerRow, build_rows, check_marker, format_row

__all__ = [
    "PickerApp",
    "PickerState",
    "PickerRow",
    "build_rows",
    "check_marker",
    "format_row",
]
