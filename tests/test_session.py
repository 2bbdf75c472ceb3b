"""Integration tests for :class:`parabox_editor.LevelEditorSession`."""

from __future__ import annotations

import logging

import pytest

from parabox_editor import (
    Block,
    DeclineReason,
    EditorSettings,
    FormatError,
    LevelEditorSession,
    OperationDeclined,
    Wall,
    new_document,
    parse_level,
    serialize_level,
)


@pytest.fixture()
def session(nested_level_text: str) -> LevelEditorSession:
    """Return a session editing the nested two-room level."""

    editor = LevelEditorSession()
    editor.import_text(nested_level_text)
    return editor


def test_new_session_starts_from_the_starter_level() -> None:
    editor = LevelEditorSession()

    assert editor.document == new_document()
    assert not editor.history.can_undo
    assert editor.clipboard is None


def test_from_settings_uses_configured_history_limit() -> None:
    editor = LevelEditorSession.from_settings(EditorSettings(history_limit=2))

    assert editor.history.capacity == 2


def test_undo_and_redo_restore_exact_documents(session: LevelEditorSession) -> None:
    original = serialize_level(session.document)

    session.place(0, "wall", (2, 5))
    session.resize(1, 4, 4)
    edited = serialize_level(session.document)

    assert session.undo()
    assert session.undo()
    assert serialize_level(session.document) == original
    assert not session.undo()

    assert session.redo()
    assert session.redo()
    assert serialize_level(session.document) == edited
    assert not session.redo()


def test_declined_edits_do_not_touch_history(session: LevelEditorSession) -> None:
    result = session.place(0, "wall", (0, 0))

    assert isinstance(result, OperationDeclined)
    assert result.reason is DeclineReason.CELL_OCCUPIED
    assert len(session.history) == 0


def test_new_edit_discards_redo(session: LevelEditorSession) -> None:
    session.place(0, "wall", (2, 5))
    session.undo()

    session.place(0, "wall", (3, 5))

    assert not session.history.can_redo


def test_unrecorded_drag_is_undone_in_one_step(session: LevelEditorSession) -> None:
    original = serialize_level(session.document)

    session.record_snapshot()
    for _ in range(3):
        session.move(0, [1], 1, 0, record_history=False)

    assert session.document.root.children[1] == Wall(x=3, y=0)
    assert len(session.history) == 1
    assert session.undo()
    assert serialize_level(session.document) == original


def test_cut_and_paste_round_trip_through_clipboard(session: LevelEditorSession) -> None:
    cut = session.cut(0, [0])

    assert isinstance(cut, Block)
    assert session.clipboard is cut

    pasted = session.paste(0, (2, 4))

    assert isinstance(pasted, Block)
    assert pasted is not session.clipboard
    assert pasted.id == 1
    assert session.validate() == []


def test_copy_does_not_record_history(session: LevelEditorSession) -> None:
    copied = session.copy(1, [2])

    assert isinstance(copied, Block)
    assert session.clipboard is copied
    assert len(session.history) == 0


def test_failed_copy_keeps_the_clipboard(session: LevelEditorSession) -> None:
    session.copy(1, [0])

    result = session.copy(0, [42])

    assert isinstance(result, OperationDeclined)
    assert session.clipboard == Wall(x=0, y=0)


def test_paste_with_empty_clipboard_is_declined(session: LevelEditorSession) -> None:
    result = session.paste(0, (2, 4))

    assert isinstance(result, OperationDeclined)
    assert result.reason is DeclineReason.EMPTY_CLIPBOARD


def test_set_fields_and_header_updates_are_undoable(session: LevelEditorSession) -> None:
    session.set_fields(1, [], {"hue": 0.5})
    session.update_header({"comment": "Renamed"})

    assert session.document.header.comment == "Renamed"
    session.undo()
    assert session.document.header.comment == "Two rooms"
    session.undo()
    assert session.document.root.children[0].hue == pytest.approx(0.1)


def test_failed_import_leaves_document_and_history(session: LevelEditorSession) -> None:
    session.place(0, "wall", (2, 5))
    before = serialize_level(session.document)

    with pytest.raises(FormatError):
        session.import_text("version 4\nno separator here\n")

    assert serialize_level(session.document) == before
    assert session.history.can_undo


def test_import_replaces_document_and_clears_history(
    session: LevelEditorSession, caplog: pytest.LogCaptureFixture
) -> None:
    session.place(0, "wall", (2, 5))

    with caplog.at_level(logging.WARNING, logger="parabox_editor.session"):
        result = session.import_text("version 4\n#\nBlock 0 0 0 5 5\n\tPortal 1 1\n")

    assert result.document is session.document
    assert not session.history.can_undo
    assert "unknown object type" in caplog.text


def test_export_matches_serializer(session: LevelEditorSession) -> None:
    assert session.export_text() == serialize_level(session.document)
    assert parse_level(session.export_text()) == session.document


def test_new_document_resets_state(session: LevelEditorSession) -> None:
    session.place(0, "wall", (2, 5))

    session.new_document()

    assert session.document == new_document()
    assert not session.history.can_undo


def test_edits_that_change_nothing_are_not_recorded(
    session: LevelEditorSession,
) -> None:
    assert session.set_fields(1, [], {})
    assert session.move(0, [1], 0, 0)
    assert session.set_fields(1, [], {"hue": 0.1})

    assert len(session.history) == 0
