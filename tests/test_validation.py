"""Tests for the advisory level checks."""

from __future__ import annotations

from parabox_editor import (
    Block,
    Floor,
    FloorType,
    LevelDocument,
    Ref,
    Wall,
    create_box,
    validate_level,
)
from parabox_editor.validation import NO_GOAL_WARNING, NO_PLAYER_WARNING


def test_starter_level_has_no_warnings(starter_document: LevelDocument) -> None:
    assert validate_level(starter_document) == []


def test_nested_level_has_no_warnings(nested_document: LevelDocument) -> None:
    assert validate_level(nested_document) == []


def test_missing_player_is_the_only_warning(starter_document: LevelDocument) -> None:
    starter_document.root.children[0].player = False

    assert validate_level(starter_document) == [NO_PLAYER_WARNING]


def test_missing_goal_is_reported(starter_document: LevelDocument) -> None:
    del starter_document.root.children[1]

    assert validate_level(starter_document) == [NO_GOAL_WARNING]


def test_reference_to_missing_block_names_its_location(
    nested_document: LevelDocument,
) -> None:
    inner = nested_document.root.children[0]
    inner.children.append(Ref(x=0, y=2, target_id=9))

    assert validate_level(nested_document) == [
        "Block 0 > Block 1 > Ref at (0,2) references non-existent Block 9"
    ]


def test_box_with_children_is_reported(starter_document: LevelDocument) -> None:
    box = create_box(2, 0, 0)
    box.children.append(Wall(x=1, y=1))
    starter_document.root.children.append(box)

    assert validate_level(starter_document) == [
        "Block 0 > Block 2 is a Box (fillwithwalls=1) but has children"
    ]


def test_duplicate_block_ids_are_reported(starter_document: LevelDocument) -> None:
    starter_document.root.children.append(Block(x=0, y=0, id=1, width=1, height=1))

    assert validate_level(starter_document) == ["Block id 1 is used by 2 blocks"]


def test_multiple_exit_references_are_reported(starter_document: LevelDocument) -> None:
    starter_document.root.children.extend(
        [
            Ref(x=0, y=0, target_id=1, exit_block=True),
            Ref(x=0, y=1, target_id=1, exit_block=True),
            Ref(x=0, y=2, target_id=1),
        ]
    )

    assert validate_level(starter_document) == ["Block 1 has 2 exit references"]


def test_out_of_bounds_children_are_reported(starter_document: LevelDocument) -> None:
    starter_document.root.children.append(Wall(x=5, y=-1))

    assert validate_level(starter_document) == [
        "Block 0 > Wall at (5,-1) lies outside the 5×5 interior"
    ]


def test_stacked_cells_are_reported(starter_document: LevelDocument) -> None:
    starter_document.root.children.extend(
        [
            Wall(x=1, y=1),
            Floor(x=3, y=3, floor_type=FloorType.BUTTON),
        ]
    )

    assert validate_level(starter_document) == [
        "Block 0 has 2 solid objects at (1,1)",
        "Block 0 has 2 floors at (3,3)",
    ]


def test_validation_does_not_modify_the_document(nested_document: LevelDocument) -> None:
    nested_document.root.children.append(Ref(x=6, y=6, target_id=99))
    before = repr(nested_document)

    validate_level(nested_document)

    assert repr(nested_document) == before
