"""Core package for the recursive-box level editor engine."""

from .level import (
    Block,
    DrawStyle,
    Floor,
    FloorType,
    LevelDocument,
    LevelHeader,
    LevelObject,
    ObjectKind,
    Ref,
    RefTargetChoice,
    Wall,
    create_block,
    create_box,
    create_floor,
    create_object,
    create_player_block,
    create_ref,
    create_wall,
    find_block,
    find_parent,
    iter_blocks,
    iter_objects,
    list_ref_targets,
    new_document,
    next_free_block_id,
    normalize_comment,
    normalize_info_text,
    objects_at,
    resolve_path,
)
from .level_format import (
    FormatError,
    InvalidRootError,
    MalformedFieldError,
    MissingSeparatorError,
    ParseResult,
    ParseWarning,
    load_level,
    load_level_from_file,
    parse_level,
    serialize_level,
)
from .identity import BlockIdAllocator, assign_fresh_ids, duplicate_subtree
from .editing import (
    DeclineReason,
    OperationDeclined,
    cell_accepts,
    copy_object,
    cut_object,
    delete_at,
    delete_object,
    editable_fields,
    insert_object,
    move_object,
    paste_object,
    place_object,
    recolor_block,
    resize_block,
    set_object_fields,
    update_header,
)
from .history import DEFAULT_HISTORY_LIMIT, LevelHistory, capture_snapshot
from .validation import validate_level
from .session import LevelEditorSession
from .settings import EditorSettings
from .reports import LevelReport, build_level_report

__all__ = [
    "Block",
    "Wall",
    "Floor",
    "Ref",
    "FloorType",
    "DrawStyle",
    "ObjectKind",
    "LevelHeader",
    "LevelDocument",
    "LevelObject",
    "RefTargetChoice",
    "create_block",
    "create_box",
    "create_floor",
    "create_object",
    "create_player_block",
    "create_ref",
    "create_wall",
    "new_document",
    "next_free_block_id",
    "find_block",
    "find_parent",
    "iter_blocks",
    "iter_objects",
    "list_ref_targets",
    "normalize_comment",
    "normalize_info_text",
    "objects_at",
    "resolve_path",
    "FormatError",
    "MissingSeparatorError",
    "InvalidRootError",
    "MalformedFieldError",
    "ParseResult",
    "ParseWarning",
    "load_level",
    "load_level_from_file",
    "parse_level",
    "serialize_level",
    "BlockIdAllocator",
    "assign_fresh_ids",
    "duplicate_subtree",
    "DeclineReason",
    "OperationDeclined",
    "cell_accepts",
    "insert_object",
    "place_object",
    "delete_object",
    "delete_at",
    "move_object",
    "resize_block",
    "recolor_block",
    "editable_fields",
    "set_object_fields",
    "update_header",
    "copy_object",
    "cut_object",
    "paste_object",
    "DEFAULT_HISTORY_LIMIT",
    "LevelHistory",
    "capture_snapshot",
    "validate_level",
    "LevelEditorSession",
    "EditorSettings",
    "LevelReport",
    "build_level_report",
]
