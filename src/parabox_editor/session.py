"""Editing session holding one live document, its history and a clipboard."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, TypeVar

from . import editing
from .editing import Cell, EditResult, ObjectPath, OperationDeclined
from .history import DEFAULT_HISTORY_LIMIT, LevelHistory, capture_snapshot
from .level import (
    Block,
    FloorType,
    LevelDocument,
    LevelHeader,
    LevelObject,
    ObjectKind,
    new_document,
)
from .level_format import ParseResult, load_level, serialize_level
from .settings import EditorSettings
from .validation import validate_level

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LevelEditorSession:
    """The state an editor front end drives.

    Each mutating method snapshots the document first and records the
    snapshot in :attr:`history` only when the edit was applied and changed
    the document, so a declined or no-op edit leaves the history untouched.
    Navigation and selection belong to the front end, which passes block ids
    and paths in.
    """

    def __init__(
        self,
        document: LevelDocument | None = None,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self.document = document if document is not None else new_document()
        self.history = LevelHistory(history_limit)
        self.clipboard: LevelObject | None = None

    @classmethod
    def from_settings(
        cls, settings: EditorSettings, document: LevelDocument | None = None
    ) -> "LevelEditorSession":
        return cls(document, history_limit=settings.history_limit)

    # Document lifecycle -----------------------------------------------------

    def new_document(self) -> LevelDocument:
        """Replace the document with the starter level and clear history."""

        return self._replace(new_document())

    def import_text(self, text: str) -> ParseResult:
        """Replace the document with the level parsed from ``text``.

        Raises:
            FormatError: If ``text`` is not a valid level. The current document
                and history are left as they were.
        """

        result = load_level(text)
        for warning in result.warnings:
            logger.warning("Imported level %s", warning)
        self._replace(result.document)
        return result

    def export_text(self) -> str:
        return serialize_level(self.document)

    def validate(self) -> List[str]:
        return validate_level(self.document)

    def _replace(self, document: LevelDocument) -> LevelDocument:
        self.document = document
        self.history.clear()
        return document

    # History ----------------------------------------------------------------

    def _commit(
        self,
        operation: Callable[[LevelDocument], EditResult[T]],
        *,
        record_history: bool = True,
    ) -> EditResult[T]:
        snapshot = capture_snapshot(self.document) if record_history else None
        result = operation(self.document)
        if isinstance(result, OperationDeclined):
            return result
        if snapshot is not None and snapshot != self.document:
            self.history.record(snapshot)
        return result

    def record_snapshot(self) -> None:
        """Record the current document, e.g. before a drag of unrecorded edits."""

        self.history.record(capture_snapshot(self.document))

    def undo(self) -> bool:
        """Restore the previous document; return ``False`` if there was none."""

        previous = self.history.undo(self.document)
        if previous is None:
            return False
        self.document = previous
        return True

    def redo(self) -> bool:
        """Re-apply the last undone edit; return ``False`` if there was none."""

        following = self.history.redo(self.document)
        if following is None:
            return False
        self.document = following
        return True

    # Edits ------------------------------------------------------------------

    def insert(
        self, parent_id: int, obj: LevelObject, at: Cell
    ) -> EditResult[LevelObject]:
        return self._commit(
            lambda document: editing.insert_object(document, parent_id, obj, at)
        )

    def place(
        self,
        parent_id: int,
        kind: ObjectKind | str,
        at: Cell,
        *,
        floor_type: FloorType | str = FloorType.BUTTON,
        ref_target: int = 0,
        ref_is_exit: bool = False,
        record_history: bool = True,
    ) -> EditResult[LevelObject]:
        return self._commit(
            lambda document: editing.place_object(
                document,
                parent_id,
                kind,
                at,
                floor_type=floor_type,
                ref_target=ref_target,
                ref_is_exit=ref_is_exit,
            ),
            record_history=record_history,
        )

    def delete(self, focus_id: int, path: ObjectPath) -> EditResult[LevelObject]:
        return self._commit(
            lambda document: editing.delete_object(document, focus_id, path)
        )

    def delete_at(
        self, parent_id: int, at: Cell, *, record_history: bool = True
    ) -> EditResult[LevelObject]:
        return self._commit(
            lambda document: editing.delete_at(document, parent_id, at),
            record_history=record_history,
        )

    def move(
        self,
        focus_id: int,
        path: ObjectPath,
        dx: int,
        dy: int,
        *,
        record_history: bool = True,
    ) -> EditResult[LevelObject]:
        return self._commit(
            lambda document: editing.move_object(document, focus_id, path, dx, dy),
            record_history=record_history,
        )

    def resize(self, block_id: int, width: int, height: int) -> EditResult[Block]:
        return self._commit(
            lambda document: editing.resize_block(document, block_id, width, height)
        )

    def recolor(
        self, block_id: int, hue: float, sat: float, val: float
    ) -> EditResult[Block]:
        return self._commit(
            lambda document: editing.recolor_block(document, block_id, hue, sat, val)
        )

    def set_fields(
        self, focus_id: int, path: ObjectPath, changes: Mapping[str, Any]
    ) -> EditResult[LevelObject]:
        return self._commit(
            lambda document: editing.set_object_fields(document, focus_id, path, changes)
        )

    def update_header(self, changes: Mapping[str, Any]) -> EditResult[LevelHeader]:
        return self._commit(lambda document: editing.update_header(document, changes))

    # Clipboard --------------------------------------------------------------

    def copy(self, focus_id: int, path: ObjectPath) -> EditResult[LevelObject]:
        copied = editing.copy_object(self.document, focus_id, path)
        if not isinstance(copied, OperationDeclined):
            self.clipboard = copied
        return copied

    def cut(self, focus_id: int, path: ObjectPath) -> EditResult[LevelObject]:
        removed = self._commit(
            lambda document: editing.cut_object(document, focus_id, path)
        )
        if not isinstance(removed, OperationDeclined):
            self.clipboard = removed
        return removed

    def paste(
        self, parent_id: int, at: Cell, *, record_history: bool = True
    ) -> EditResult[LevelObject]:
        clipboard = self.clipboard
        return self._commit(
            lambda document: editing.paste_object(document, clipboard, parent_id, at),
            record_history=record_history,
        )


__all__ = ["LevelEditorSession"]
