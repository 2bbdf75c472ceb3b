"""Test configuration for the level editor engine."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest

from parabox_editor import LevelDocument, new_document, parse_level


NESTED_LEVEL_TEXT = """\
version 4
(Two rooms)
shed
attempt_order push,enter,eat,possess
#
Block -1 -1 0 7 7 0.6 0.8 1 1 0 0 0 0 0 0 0
\tBlock 1 1 1 3 3 0.1 0.8 1 1 0 0 0 0 0 0 0
\t\tWall 0 0 0 0 0
\t\tRef 2 2 2 1 0 0 0 0 -1 0 0 0 0 0 0
\t\tBlock 1 1 2 1 1 0.9 1 0.7 1 0 1 1 0 0 0 0
\tWall 0 0 0 0 0
\tFloor 5 5 PlayerButton
\tFloor 4 4 Info Push_the_box\\nthen_enter
\tRef 4 1 1 1 0 0 0 0 -1 0 0 0 0 0 0
"""


@pytest.fixture()
def starter_document() -> LevelDocument:
    """Return the default level created by the editor."""

    return new_document()


@pytest.fixture()
def nested_level_text() -> str:
    return NESTED_LEVEL_TEXT


@pytest.fixture()
def nested_document() -> LevelDocument:
    """Return a two-room level with references and an info floor."""

    return parse_level(NESTED_LEVEL_TEXT)


__all__ = ["NESTED_LEVEL_TEXT", "nested_document", "nested_level_text", "starter_document"]
