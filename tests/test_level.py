"""Unit tests for the :mod:`parabox_editor.level` data model."""

import pytest

from parabox_editor import (
    Block,
    Floor,
    FloorType,
    LevelDocument,
    ObjectKind,
    Ref,
    Wall,
    create_box,
    create_object,
    find_block,
    find_parent,
    iter_blocks,
    list_ref_targets,
    new_document,
    next_free_block_id,
    normalize_comment,
    normalize_info_text,
    objects_at,
    resolve_path,
)


def test_new_document_matches_starter_template(starter_document: LevelDocument) -> None:
    root = starter_document.root

    assert (root.id, root.x, root.y, root.width, root.height) == (0, -1, -1, 5, 5)
    assert root.fill_with_walls is False
    player, goal = root.children
    assert isinstance(player, Block)
    assert (player.id, player.x, player.y, player.width, player.height) == (1, 1, 1, 1, 1)
    assert player.player and player.possessable
    assert goal == Floor(x=3, y=3, floor_type=FloorType.PLAYER_BUTTON)
    assert starter_document.header.version == 4


def test_new_document_returns_independent_documents() -> None:
    first = new_document()
    second = new_document()

    first.root.children.clear()

    assert len(second.root.children) == 2


def test_next_free_block_id_is_one_past_the_maximum(nested_document: LevelDocument) -> None:
    assert next_free_block_id(nested_document) == 3


def test_next_free_block_id_ignores_gaps() -> None:
    root = Block(x=0, y=0, id=0)
    root.children = [Block(x=1, y=1, id=9), Wall(x=0, y=0)]

    assert next_free_block_id(LevelDocument(root=root)) == 10


def test_find_block_searches_nested_blocks(nested_document: LevelDocument) -> None:
    block = find_block(nested_document, 2)

    assert block is not None
    assert block.player is True
    assert find_block(nested_document, 42) is None


def test_find_parent_returns_owning_block(nested_document: LevelDocument) -> None:
    parent = find_parent(nested_document, 2)

    assert parent is not None
    assert parent.id == 1
    assert find_parent(nested_document, 0) is None


def test_iter_blocks_is_pre_order(nested_document: LevelDocument) -> None:
    assert [block.id for block in iter_blocks(nested_document)] == [0, 1, 2]


def test_resolve_path_follows_child_indices(nested_document: LevelDocument) -> None:
    assert resolve_path(nested_document, 0, []) is nested_document.root
    assert isinstance(resolve_path(nested_document, 0, [0, 1]), Ref)
    assert isinstance(resolve_path(nested_document, 1, [0]), Wall)


@pytest.mark.parametrize("path", [[9], [1, 0], [-1], [0, 2, 0, 0]])
def test_resolve_path_rejects_invalid_paths(
    nested_document: LevelDocument, path: list[int]
) -> None:
    assert resolve_path(nested_document, 0, path) is None


def test_resolve_path_requires_existing_focus(nested_document: LevelDocument) -> None:
    assert resolve_path(nested_document, 99, []) is None


def test_objects_at_lists_direct_children_only(nested_document: LevelDocument) -> None:
    at_origin = objects_at(nested_document.root, 0, 0)

    assert at_origin == [Wall(x=0, y=0)]


def test_block_rejects_invalid_extents() -> None:
    with pytest.raises(ValueError):
        Block(x=0, y=0, id=1, width=0)
    with pytest.raises(ValueError):
        Block(x=0, y=0, id=-1)
    with pytest.raises(TypeError):
        Block(x=0, y=0, id=1, height=2.5)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Block(x=0, y=0, id=1, zoom_factor=0.0)


def test_create_box_is_sealed() -> None:
    box = create_box(4, 2, 2)

    assert box.is_box
    assert (box.width, box.height) == (3, 3)
    assert box.hue == pytest.approx(0.12)


@pytest.mark.parametrize(
    ("kind", "expected_type"),
    [
        (ObjectKind.BOX, Block),
        ("block", Block),
        ("wall", Wall),
        ("floor", Floor),
        ("ref", Ref),
    ],
)
def test_create_object_builds_each_preset(kind, expected_type) -> None:
    obj = create_object(kind, 2, 3, ref_target=5)

    assert isinstance(obj, expected_type)
    assert (obj.x, obj.y) == (2, 3)


def test_create_object_plain_block_is_not_filled() -> None:
    block = create_object("block", 0, 0)

    assert isinstance(block, Block)
    assert block.fill_with_walls is False
    assert (block.width, block.height) == (3, 3)


def test_create_object_ref_uses_target_and_exit_flag() -> None:
    ref = create_object("ref", 1, 1, ref_target=7, ref_is_exit=True)

    assert ref == Ref(x=1, y=1, target_id=7, exit_block=True)


def test_create_object_rejects_unknown_kind() -> None:
    with pytest.raises(ValueError):
        create_object("portal", 0, 0)


def test_list_ref_targets_skips_boxes_and_indents_labels() -> None:
    document = new_document()
    document.root.children.append(create_box(2, 0, 0))
    inner = Block(x=4, y=4, id=3, width=2, height=2)
    inner.children.append(Block(x=0, y=0, id=4, width=1, height=1))
    document.root.children.append(inner)

    choices = list_ref_targets(document)

    assert [choice.id for choice in choices] == [0, 1, 3, 4]
    assert choices[0].label == "Block 0 (5×5)"
    assert choices[2].label == "  Block 3 (2×2)"
    assert choices[3].label == "    Block 4 (1×1)"


def test_normalize_comment_flattens_text() -> None:
    assert normalize_comment("  Line one\nline two) ") == "Line one line two"
    assert normalize_comment("   ") is None
    assert normalize_comment(None) is None


def test_normalize_info_text_replaces_unencodable_characters() -> None:
    assert normalize_info_text("a_b\tc\r\nd") == "a b c\nd"
    assert normalize_info_text("a\xa0b\x0bc\u2003d") == "a b c d"
    assert normalize_info_text("(hint)") == " (hint)"
    assert normalize_info_text("") is None


def test_normalize_info_text_validates_type() -> None:
    with pytest.raises(TypeError):
        normalize_info_text(3)  # type: ignore[arg-type]
