"""Error taxonomy shared by listing, toggling, and compile operations.

Per-item failures (``StatFailure``, ``FileReadFailure``) are normally recovered
where they happen. Whole-operation failures propagate to the host.
"""

from __future__ import annotations

from pathlib import Path


class CtxTreeError(Exception):
    """Base class for all ctxtree errors."""


class DirectoryUnreadable(CtxTreeError):
    """A directory listing failed."""

    def __init__(self, path: Path, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(f"Unable to read directory {path}{reason}")


class StatFailure(CtxTreeError):
    """One entry could not be inspected."""

    def __init__(self, path: Path, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Unable to access {path}")


class FileReadFailure(CtxTreeError):
    """A selected file's text could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Error reading file: {reason}")


class OutputWriteFailure(CtxTreeError):
    """The compiled document could not be written."""

    def __init__(self, path: Path, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to write output file '{path}'{reason}")


class EmptySelection(CtxTreeError):
    """Nothing is left to serialize."""

    def __init__(self, message: str = "No files selected.") -> None:
        super().__init__(message)


__all__ = [
    "CtxTreeError",
    "DirectoryUnreadable",
    "StatFailure",
    "FileReadFailure",
    "OutputWriteFailure",
    "EmptySelection",
]
