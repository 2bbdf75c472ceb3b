"""Structural edits applied to a level document.

Every operation receives the document and the identifiers it acts on
explicitly. Operations either perform the edit and return the affected value,
or leave the document untouched and return an :class:`OperationDeclined`.
Declines are ordinary results rather than exceptions; they are falsy so
callers can write ``if not result: ...``.

Objects below a block are addressed by a *path*: a sequence of child indices
starting at a focus block. The empty path addresses the focus block itself.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Sequence, Tuple, TypeVar, Union

from .identity import assign_fresh_ids, duplicate_subtree, iter_objects_from
from .level import (
    LINE_FIELDS,
    Block,
    DrawStyle,
    FieldKind,
    FieldSpec,
    Floor,
    FloorType,
    LevelDocument,
    LevelHeader,
    LevelObject,
    ObjectKind,
    create_object,
    find_block,
    iter_objects,
    normalize_comment,
    normalize_info_text,
    objects_at,
    resolve_path,
)

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
ObjectPath = Sequence[int]
T = TypeVar("T")


class DeclineReason(str, Enum):
    """Why an edit was not applied."""

    BLOCK_NOT_FOUND = "block_not_found"
    OBJECT_NOT_FOUND = "object_not_found"
    INVALID_PATH = "invalid_path"
    CELL_OCCUPIED = "cell_occupied"
    INVALID_VALUE = "invalid_value"
    EMPTY_CLIPBOARD = "empty_clipboard"
    ALREADY_ATTACHED = "already_attached"


@dataclass(frozen=True)
class OperationDeclined:
    """Result returned when an edit's preconditions do not hold."""

    reason: DeclineReason
    message: str

    def __bool__(self) -> bool:
        return False


EditResult = Union[T, OperationDeclined]


def _decline(reason: DeclineReason, message: str) -> OperationDeclined:
    logger.debug("Edit declined (%s): %s", reason.value, message)
    return OperationDeclined(reason, message)


def cell_accepts(block: Block, obj: LevelObject, x: int, y: int) -> bool:
    """Return whether ``obj`` may be placed at ``(x, y)`` inside ``block``.

    A cell holds at most one floor and at most one object that is not a floor.
    """

    occupants = objects_at(block, x, y)
    if isinstance(obj, Floor):
        return not any(isinstance(occupant, Floor) for occupant in occupants)
    return all(isinstance(occupant, Floor) for occupant in occupants)


def _lookup_block(document: LevelDocument, block_id: int) -> EditResult[Block]:
    block = find_block(document, block_id)
    if block is None:
        return _decline(DeclineReason.BLOCK_NOT_FOUND, f"no block with id {block_id}")
    return block


def _lookup_object(
    document: LevelDocument, focus_id: int, path: ObjectPath
) -> EditResult[LevelObject]:
    focus = _lookup_block(document, focus_id)
    if not focus:
        return focus
    target = resolve_path(document, focus_id, path)
    if target is None:
        return _decline(
            DeclineReason.INVALID_PATH,
            f"path {list(path)} does not lead to an object inside block {focus_id}",
        )
    return target


def _lookup_child_slot(
    document: LevelDocument, focus_id: int, path: ObjectPath
) -> EditResult[Tuple[Block, int]]:
    if not path:
        return _decline(
            DeclineReason.INVALID_PATH, "the empty path addresses the focus block"
        )
    parent = _lookup_object(document, focus_id, path[:-1])
    if not parent:
        return parent
    index = path[-1]
    if (
        not isinstance(parent, Block)
        or isinstance(index, bool)
        or not isinstance(index, int)
        or not 0 <= index < len(parent.children)
    ):
        return _decline(
            DeclineReason.INVALID_PATH,
            f"path {list(path)} does not lead to an object inside block {focus_id}",
        )
    return parent, index


def _lookup_cell(at: Cell) -> EditResult[Cell]:
    x, y = at
    if not (_is_int(x) and _is_int(y)):
        return _decline(
            DeclineReason.INVALID_VALUE,
            f"cell coordinates must be integers, got ({x!r}, {y!r})",
        )
    return x, y


def _is_attached(document: LevelDocument, obj: LevelObject) -> bool:
    attached = {id(node) for node, _ in iter_objects(document.root)}
    return any(id(node) in attached for node, _ in iter_objects_from(obj))


# Insertion ------------------------------------------------------------------


def insert_object(
    document: LevelDocument, parent_id: int, obj: LevelObject, at: Cell
) -> EditResult[LevelObject]:
    """Place the new object ``obj`` at cell ``at`` inside block ``parent_id``.

    Blocks (and any blocks nested in them) receive the next free ids before
    they are appended. An object that already belongs to the document is
    declined; paste a copy instead.
    """

    parent = _lookup_block(document, parent_id)
    if not parent:
        return parent

    if _is_attached(document, obj):
        return _decline(
            DeclineReason.ALREADY_ATTACHED,
            f"this {type(obj).__name__} is already part of the level",
        )
    cell = _lookup_cell(at)
    if not cell:
        return cell
    x, y = cell
    if not cell_accepts(parent, obj, x, y):
        return _decline(
            DeclineReason.CELL_OCCUPIED,
            f"cell ({x},{y}) in block {parent_id} cannot take another "
            f"{type(obj).__name__}",
        )

    obj.x = x
    obj.y = y
    if isinstance(obj, Block):
        assign_fresh_ids(document, obj)
    parent.children.append(obj)
    return obj


def place_object(
    document: LevelDocument,
    parent_id: int,
    kind: ObjectKind | str,
    at: Cell,
    *,
    floor_type: FloorType | str = FloorType.BUTTON,
    ref_target: int = 0,
    ref_is_exit: bool = False,
) -> EditResult[LevelObject]:
    """Create an object from a quick-place preset and insert it."""

    x, y = at
    obj = create_object(
        kind,
        x,
        y,
        floor_type=floor_type,
        ref_target=ref_target,
        ref_is_exit=ref_is_exit,
    )
    return insert_object(document, parent_id, obj, at)


# Removal --------------------------------------------------------------------


def delete_object(
    document: LevelDocument, focus_id: int, path: ObjectPath
) -> EditResult[LevelObject]:
    """Remove and return the object at ``path`` below block ``focus_id``.

    References elsewhere to a deleted block are left dangling; the validator
    reports them.
    """

    slot = _lookup_child_slot(document, focus_id, path)
    if not slot:
        return slot
    parent, index = slot
    return parent.children.pop(index)


def delete_at(
    document: LevelDocument, parent_id: int, at: Cell
) -> EditResult[LevelObject]:
    """Remove the first non-floor object at cell ``at`` of block ``parent_id``."""

    parent = _lookup_block(document, parent_id)
    if not parent:
        return parent

    x, y = at
    for index, child in enumerate(parent.children):
        if child.x == x and child.y == y and not isinstance(child, Floor):
            return parent.children.pop(index)
    return _decline(
        DeclineReason.OBJECT_NOT_FOUND,
        f"no removable object at ({x},{y}) in block {parent_id}",
    )


# Geometry and appearance ----------------------------------------------------


def move_object(
    document: LevelDocument, focus_id: int, path: ObjectPath, dx: int, dy: int
) -> EditResult[LevelObject]:
    """Translate the object at ``path`` by ``(dx, dy)``.

    Cell occupancy is not re-checked, so objects may overlap while dragged.
    """

    target = _lookup_object(document, focus_id, path)
    if not target:
        return target
    if not all(_is_int(value) for value in (dx, dy)):
        return _decline(DeclineReason.INVALID_VALUE, "offsets must be integers")
    target.x += dx
    target.y += dy
    return target


def resize_block(
    document: LevelDocument, block_id: int, width: int, height: int
) -> EditResult[Block]:
    """Set the interior size of a block; children outside it are kept."""

    block = _lookup_block(document, block_id)
    if not block:
        return block
    if not all(_is_int(value) and value >= 1 for value in (width, height)):
        return _decline(
            DeclineReason.INVALID_VALUE,
            f"block size must be positive integers, got {width}x{height}",
        )
    block.width = width
    block.height = height
    return block


def recolor_block(
    document: LevelDocument, block_id: int, hue: float, sat: float, val: float
) -> EditResult[Block]:
    block = _lookup_block(document, block_id)
    if not block:
        return block
    if not all(_is_real(value) for value in (hue, sat, val)):
        return _decline(DeclineReason.INVALID_VALUE, "colour channels must be numbers")
    block.hue = float(hue)
    block.sat = float(sat)
    block.val = float(val)
    return block


# Field setters --------------------------------------------------------------


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_real(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _coerce_int(value: Any, *, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        value = int(value)
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    if not _is_int(value):
        raise TypeError(f"expected an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise ValueError(f"must be at least {minimum}, got {value}")
    return value


def _coerce_field(spec: FieldSpec, value: Any) -> Any:
    if spec.kind is FieldKind.INT:
        return _coerce_int(value, minimum=spec.minimum)
    if spec.kind is FieldKind.REAL:
        if not _is_real(value):
            raise TypeError(f"expected a finite number, got {value!r}")
        if spec.positive and value <= 0:
            raise ValueError(f"must be positive, got {value}")
        return float(value)
    if spec.kind is FieldKind.FLAG:
        if isinstance(value, bool):
            return value
        if _is_int(value) and value in (0, 1):
            return bool(value)
        raise TypeError(f"expected a boolean, got {value!r}")
    return FloorType(value)


def editable_fields(obj: LevelObject) -> Dict[str, Callable[[Any], Any]]:
    """Return the attributes of ``obj`` that may be set, with their coercers.

    Block ids are assigned by the engine and children change only through the
    structural operations, so neither is listed.
    """

    coercers: Dict[str, Callable[[Any], Any]] = {}
    for spec in LINE_FIELDS[type(obj)]:
        if isinstance(obj, Block) and spec.name == "id":
            continue
        coercers[spec.name] = lambda value, spec=spec: _coerce_field(spec, value)
    if isinstance(obj, Floor):
        coercers["info_text"] = normalize_info_text
    return coercers


def _coerce_changes(
    coercers: Mapping[str, Callable[[Any], Any]],
    changes: Mapping[str, Any],
    subject: str,
) -> EditResult[Dict[str, Any]]:
    coerced: Dict[str, Any] = {}
    for name, value in changes.items():
        coercer = coercers.get(name)
        if coercer is None:
            return _decline(
                DeclineReason.INVALID_VALUE, f"{subject} has no editable field {name!r}"
            )
        try:
            coerced[name] = coercer(value)
        except (TypeError, ValueError) as exc:
            return _decline(
                DeclineReason.INVALID_VALUE, f"invalid value for {subject}.{name}: {exc}"
            )
    return coerced


def set_object_fields(
    document: LevelDocument,
    focus_id: int,
    path: ObjectPath,
    changes: Mapping[str, Any],
) -> EditResult[LevelObject]:
    """Assign several attributes of one object after validating all of them.

    Args:
        document: The document being edited.
        focus_id: Block the ``path`` starts from.
        path: Child indices leading to the object; empty for the block itself.
        changes: Attribute names mapped to their new values. Only the fields
            reported by :func:`editable_fields` are accepted.

    Returns:
        The updated object, or :class:`OperationDeclined` when the object is
        missing or any name or value is rejected. Nothing is assigned unless
        every change is valid.
    """

    target = _lookup_object(document, focus_id, path)
    if not target:
        return target

    coerced = _coerce_changes(editable_fields(target), changes, type(target).__name__)
    if not coerced:
        if isinstance(coerced, OperationDeclined):
            return coerced
        return target

    if isinstance(target, Floor):
        floor_type = coerced.get("floor_type", target.floor_type)
        if floor_type is not FloorType.INFO:
            coerced["info_text"] = None

    for name, value in coerced.items():
        setattr(target, name, value)
    return target


def _coerce_optional_int(value: Any) -> int | None:
    return None if value is None else _coerce_int(value)


def _coerce_draw_style(value: Any) -> DrawStyle | None:
    return None if value is None else DrawStyle(value)


def _coerce_flag(value: Any) -> bool:
    return _coerce_field(FieldSpec("flag", FieldKind.FLAG), value)


def _coerce_attempt_order(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {type(value)!r}")
    token = value.strip()
    if not token:
        return None
    if len(token.split()) != 1 or token.startswith("("):
        raise ValueError(f"attempt order must be a single token, got {value!r}")
    return token


HEADER_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "version": lambda value: _coerce_int(value, minimum=1),
    "comment": normalize_comment,
    "shed": _coerce_flag,
    "inner_push": _coerce_flag,
    "draw_style": _coerce_draw_style,
    "attempt_order": _coerce_attempt_order,
    "custom_level_music": _coerce_optional_int,
    "custom_level_palette": _coerce_optional_int,
}
"""Editable header attributes and the coercer applied to each."""


def update_header(
    document: LevelDocument, changes: Mapping[str, Any]
) -> EditResult[LevelHeader]:
    """Assign header attributes after validating all of them."""

    coerced = _coerce_changes(HEADER_FIELDS, changes, "header")
    if isinstance(coerced, OperationDeclined):
        return coerced
    for name, value in coerced.items():
        setattr(document.header, name, value)
    return document.header


# Clipboard ------------------------------------------------------------------


def copy_object(
    document: LevelDocument, focus_id: int, path: ObjectPath
) -> EditResult[LevelObject]:
    """Return a detached deep copy of the object at ``path``."""

    target = _lookup_object(document, focus_id, path)
    if not target:
        return target
    return copy.deepcopy(target)


def cut_object(
    document: LevelDocument, focus_id: int, path: ObjectPath
) -> EditResult[LevelObject]:
    """Remove the object at ``path`` and return a detached copy of it."""

    slot = _lookup_child_slot(document, focus_id, path)
    if not slot:
        return slot
    parent, index = slot
    clipboard = copy.deepcopy(parent.children[index])
    del parent.children[index]
    return clipboard


def paste_object(
    document: LevelDocument,
    clipboard: LevelObject | None,
    parent_id: int,
    at: Cell,
) -> EditResult[LevelObject]:
    """Insert a fresh copy of ``clipboard`` at cell ``at`` of block ``parent_id``.

    Blocks in the pasted copy are renumbered so they cannot collide with the
    document, and references between them follow the new ids. The clipboard
    value itself is never attached to the document.
    """

    if clipboard is None:
        return _decline(DeclineReason.EMPTY_CLIPBOARD, "nothing to paste")

    parent = _lookup_block(document, parent_id)
    if not parent:
        return parent

    cell = _lookup_cell(at)
    if not cell:
        return cell
    x, y = cell
    if not cell_accepts(parent, clipboard, x, y):
        return _decline(
            DeclineReason.CELL_OCCUPIED,
            f"cell ({x},{y}) in block {parent_id} cannot take another "
            f"{type(clipboard).__name__}",
        )

    pasted, _ = duplicate_subtree(document, clipboard)
    pasted.x = x
    pasted.y = y
    parent.children.append(pasted)
    return pasted


__all__ = [
    "Cell",
    "DeclineReason",
    "EditResult",
    "HEADER_FIELDS",
    "ObjectPath",
    "OperationDeclined",
    "cell_accepts",
    "copy_object",
    "cut_object",
    "delete_at",
    "delete_object",
    "editable_fields",
    "insert_object",
    "move_object",
    "paste_object",
    "place_object",
    "recolor_block",
    "resize_block",
    "set_object_fields",
    "update_header",
]
