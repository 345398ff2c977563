"""Selection Set state, persistence, and toggling."""

from __future__ import annotations

from .store import SelectionChange, SelectionObserver, SelectionStore
from .toggle import SelectionToggler
from .persistence import SelectionPersistence, load_store

__all__ = [
    "SelectionChange",
    "SelectionObserver",
    "SelectionStore",
    "SelectionToggler",
    "SelectionPersistence",
    "load_store",
]
