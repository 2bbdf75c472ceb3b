"""Bounded undo/redo log of whole-document snapshots."""

from __future__ import annotations

import copy
import logging
from collections import deque
from typing import Deque

from .level import LevelDocument

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


def capture_snapshot(document: LevelDocument) -> LevelDocument:
    """Return a deep copy of ``document`` that shares no objects with it."""

    return copy.deepcopy(document)


class LevelHistory:
    """Undo and redo stacks holding full copies of earlier documents.

    Callers record a snapshot of the document *before* each edit that changes
    it. Recording clears the redo stack. When a stack is full the oldest
    snapshot is discarded.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_LIMIT) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int):
            raise TypeError(f"capacity must be an int, got {type(capacity)!r}")
        if capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self.capacity = capacity
        self._undo: Deque[LevelDocument] = deque(maxlen=capacity)
        self._redo: Deque[LevelDocument] = deque(maxlen=capacity)

    def record(self, snapshot: LevelDocument) -> None:
        """Push the pre-edit ``snapshot`` and forget any undone edits."""

        if len(self._undo) == self.capacity:
            logger.debug("History full; dropping the oldest snapshot")
        self._undo.append(snapshot)
        self._redo.clear()

    def undo(self, current: LevelDocument) -> LevelDocument | None:
        """Return the document to restore, or ``None`` when nothing is undoable.

        A copy of ``current`` moves onto the redo stack.
        """

        if not self._undo:
            return None
        self._redo.append(capture_snapshot(current))
        return self._undo.pop()

    def redo(self, current: LevelDocument) -> LevelDocument | None:
        """Mirror of :meth:`undo`."""

        if not self._redo:
            return None
        self._undo.append(capture_snapshot(current))
        return self._redo.pop()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def redo_len(self) -> int:
        return len(self._redo)

    def __len__(self) -> int:
        return len(self._undo)


__all__ = ["DEFAULT_HISTORY_LIMIT", "LevelHistory", "capture_snapshot"]
