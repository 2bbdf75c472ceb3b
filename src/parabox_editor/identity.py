"""Block identifier allocation and remapping for duplicated subtrees."""

from __future__ import annotations

import copy
from typing import Dict, Iterator, Tuple

from .level import Block, LevelDocument, LevelObject, Ref, iter_objects, iter_blocks


class BlockIdAllocator:
    """Hand out block ids that are unused in ``document``.

    Each allocation is one more than the largest id seen so far, counting both
    the blocks in the document and every id this allocator already issued.
    """

    def __init__(self, document: LevelDocument) -> None:
        self._highest = max((block.id for block in iter_blocks(document)), default=-1)

    def allocate(self) -> int:
        self._highest += 1
        return self._highest


def assign_fresh_ids(document: LevelDocument, obj: LevelObject) -> Dict[int, int]:
    """Give every block inside ``obj`` a new id, rewriting internal references.

    ``obj`` is modified in place and must not yet be part of ``document``. The
    returned mapping goes from each block's previous id to its new one.
    """

    allocator = BlockIdAllocator(document)
    id_map: Dict[int, int] = {}

    # References may target blocks later in the subtree; renumber all first.
    for node, _ in iter_objects_from(obj):
        if isinstance(node, Block):
            new_id = allocator.allocate()
            id_map.setdefault(node.id, new_id)
            node.id = new_id

    for node, _ in iter_objects_from(obj):
        if isinstance(node, Ref) and node.target_id in id_map:
            node.target_id = id_map[node.target_id]

    return id_map


def duplicate_subtree(
    document: LevelDocument, obj: LevelObject
) -> Tuple[LevelObject, Dict[int, int]]:
    """Return a deep copy of ``obj`` whose blocks cannot collide with ``document``.

    References inside the copy that pointed at blocks inside ``obj`` follow
    their targets to the new ids; references to anything else are unchanged.
    """

    clone = copy.deepcopy(obj)
    id_map = assign_fresh_ids(document, clone)
    return clone, id_map


def iter_objects_from(obj: LevelObject) -> Iterator[Tuple[LevelObject, int]]:
    """Yield ``(object, depth)`` in pre-order for any object, leaf or block."""

    if isinstance(obj, Block):
        yield from iter_objects(obj)
    else:
        yield obj, 0


__all__ = [
    "BlockIdAllocator",
    "assign_fresh_ids",
    "duplicate_subtree",
    "iter_objects_from",
]
