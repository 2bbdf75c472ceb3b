"""Advisory checks over a level document.

Validation never changes the document and never blocks saving; it only
describes problems a level author would want to know about.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import DefaultDict, List, Tuple

from .level import Block, Floor, FloorType, LevelDocument, LevelObject, Ref

NO_PLAYER_WARNING = "Level has no player block (a block with player=1)"
NO_GOAL_WARNING = "Level has no PlayerButton (goal)"


def _describe(obj: LevelObject) -> str:
    if isinstance(obj, Block):
        return f"Block {obj.id}"
    return f"{type(obj).__name__} at ({obj.x},{obj.y})"


def validate_level(document: LevelDocument) -> List[str]:
    """Return human-readable warnings for ``document``.

    The checks cover a missing player, a missing goal, references to blocks
    that do not exist, boxes that contain objects, duplicate block ids, several
    exit references to one block, objects outside their block, and cells with
    more than one floor or more than one solid object.
    """

    warnings: List[str] = []
    block_ids: Counter[int] = Counter()
    ref_targets: List[Tuple[int, str]] = []
    exit_refs: Counter[int] = Counter()
    has_player = False
    has_goal = False

    stack: List[Tuple[LevelObject, str]] = [(document.root, "")]
    while stack:
        obj, prefix = stack.pop()

        if isinstance(obj, Block):
            block_ids[obj.id] += 1
            if obj.player:
                has_player = True
            if obj.fill_with_walls and obj.children:
                warnings.append(
                    f"{prefix}Block {obj.id} is a Box (fillwithwalls=1) but has children"
                )
            warnings.extend(_check_interior(obj, prefix))
            child_prefix = f"{prefix}Block {obj.id} > "
            stack.extend((child, child_prefix) for child in reversed(obj.children))
        elif isinstance(obj, Floor):
            if obj.floor_type is FloorType.PLAYER_BUTTON:
                has_goal = True
        elif isinstance(obj, Ref):
            ref_targets.append((obj.target_id, f"{prefix}{_describe(obj)}"))
            if obj.exit_block:
                exit_refs[obj.target_id] += 1

    if not has_player:
        warnings.append(NO_PLAYER_WARNING)
    if not has_goal:
        warnings.append(NO_GOAL_WARNING)

    for target, location in ref_targets:
        if target not in block_ids:
            warnings.append(f"{location} references non-existent Block {target}")

    for block_id, count in sorted(block_ids.items()):
        if count > 1:
            warnings.append(f"Block id {block_id} is used by {count} blocks")

    for target, count in sorted(exit_refs.items()):
        if count > 1:
            warnings.append(f"Block {target} has {count} exit references")

    return warnings


def _check_interior(block: Block, prefix: str) -> List[str]:
    warnings: List[str] = []
    solids: DefaultDict[Tuple[int, int], int] = defaultdict(int)
    floors: DefaultDict[Tuple[int, int], int] = defaultdict(int)

    for child in block.children:
        cell = (child.x, child.y)
        if not (0 <= child.x < block.width and 0 <= child.y < block.height):
            warnings.append(
                f"{prefix}Block {block.id} > {_describe(child)} lies outside "
                f"the {block.width}×{block.height} interior"
            )
        if isinstance(child, Floor):
            floors[cell] += 1
        else:
            solids[cell] += 1

    for (x, y), count in solids.items():
        if count > 1:
            warnings.append(
                f"{prefix}Block {block.id} has {count} solid objects at ({x},{y})"
            )
    for (x, y), count in floors.items():
        if count > 1:
            warnings.append(f"{prefix}Block {block.id} has {count} floors at ({x},{y})")
    return warnings


__all__ = ["NO_GOAL_WARNING", "NO_PLAYER_WARNING", "validate_level"]
