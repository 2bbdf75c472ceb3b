"""Data model describing a level document and the objects nested inside it.

A level is a tree rooted at a single :class:`Block`. Blocks are the only
objects that own children; walls, floors and references are leaves. Every
object stores its position in the local grid of the block that owns it, with
the origin in the lower-left corner and ``y`` increasing upwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, NamedTuple, Sequence, Tuple, Union


class FloorType(str, Enum):
    """Markers a :class:`Floor` can place on the grid."""

    BUTTON = "Button"
    PLAYER_BUTTON = "PlayerButton"
    FAST_TRAVEL = "FastTravel"
    INFO = "Info"


class DrawStyle(str, Enum):
    """Rendering styles understood by the game."""

    TUI = "tui"
    GRID = "grid"
    OLDSTYLE = "oldstyle"


class ObjectKind(str, Enum):
    """Quick-place presets offered by editing tools."""

    BOX = "box"
    BLOCK = "block"
    WALL = "wall"
    FLOOR = "floor"
    REF = "ref"


class FieldKind(Enum):
    """How a stored attribute is written in the level format."""

    INT = "int"
    REAL = "real"
    FLAG = "flag"
    FLOOR_TYPE = "floor_type"


@dataclass(frozen=True)
class FieldSpec:
    """Describe one positional attribute of an object line."""

    name: str
    kind: FieldKind
    required: bool = False
    minimum: int | None = None
    positive: bool = False


def _validate_int(value: int, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{field_name} must be an int, got {type(value)!r}")
    if minimum is not None and value < minimum:
        raise ValueError(f"{field_name} must be at least {minimum}, got {value}")
    return value


@dataclass
class LevelHeader:
    """Document level metadata written above the ``#`` separator."""

    version: int = 4
    comment: str | None = None
    shed: bool = False
    inner_push: bool = False
    draw_style: DrawStyle | None = None
    attempt_order: str | None = None
    custom_level_music: int | None = None
    custom_level_palette: int | None = None

    def __post_init__(self) -> None:
        _validate_int(self.version, field_name="version", minimum=1)


@dataclass
class Block:
    """A container with its own interior grid.

    ``width`` and ``height`` define the coordinate extent available to the
    block's ``children``; the order of ``children`` is the file order and is
    preserved by every operation.
    """

    x: int
    y: int
    id: int
    width: int = 5
    height: int = 5
    hue: float = 0.6
    sat: float = 0.8
    val: float = 1.0
    zoom_factor: float = 1.0
    fill_with_walls: bool = False
    player: bool = False
    possessable: bool = False
    player_order: int = 0
    flip_h: int = 0
    float_in_space: int = 0
    special_effect: int = 0
    children: List["LevelObject"] = field(default_factory=list)

    def __post_init__(self) -> None:
        _validate_int(self.id, field_name="block id", minimum=0)
        _validate_int(self.width, field_name="width", minimum=1)
        _validate_int(self.height, field_name="height", minimum=1)
        if not self.zoom_factor > 0:
            raise ValueError(f"zoom factor must be positive, got {self.zoom_factor}")

    @property
    def is_box(self) -> bool:
        return self.fill_with_walls


@dataclass
class Wall:
    """A solid cell."""

    x: int
    y: int
    player: bool = False
    possessable: bool = False
    player_order: int = 0


@dataclass
class Floor:
    """A marker drawn beneath whatever occupies its cell."""

    x: int
    y: int
    floor_type: FloorType = FloorType.BUTTON
    info_text: str | None = None


@dataclass
class Ref:
    """A non-owning reference to the block whose id is ``target_id``.

    ``exit_block`` marks the canonical exit instance of the target; other
    references to the same block are clones. The ``inf_*`` attributes are
    written back unchanged.
    """

    x: int
    y: int
    target_id: int
    exit_block: bool = False
    inf_exit: int = 0
    inf_exit_num: int = 0
    inf_enter: int = 0
    inf_enter_num: int = 0
    inf_enter_id: int = -1
    player: bool = False
    possessable: bool = False
    player_order: int = 0
    flip_h: int = 0
    float_in_space: int = 0
    special_effect: int = 0


LevelObject = Union[Block, Wall, Floor, Ref]


@dataclass
class LevelDocument:
    """A complete level: header metadata plus the root block."""

    root: Block
    header: LevelHeader = field(default_factory=LevelHeader)


KEYWORDS: dict[str, type] = {
    "Block": Block,
    "Wall": Wall,
    "Floor": Floor,
    "Ref": Ref,
}
"""Variant keyword written at the start of each object line."""

LINE_FIELDS: dict[type, Tuple[FieldSpec, ...]] = {
    Block: (
        FieldSpec("x", FieldKind.INT, required=True),
        FieldSpec("y", FieldKind.INT, required=True),
        FieldSpec("id", FieldKind.INT, required=True, minimum=0),
        FieldSpec("width", FieldKind.INT, required=True, minimum=1),
        FieldSpec("height", FieldKind.INT, required=True, minimum=1),
        FieldSpec("hue", FieldKind.REAL),
        FieldSpec("sat", FieldKind.REAL),
        FieldSpec("val", FieldKind.REAL),
        FieldSpec("zoom_factor", FieldKind.REAL, positive=True),
        FieldSpec("fill_with_walls", FieldKind.FLAG),
        FieldSpec("player", FieldKind.FLAG),
        FieldSpec("possessable", FieldKind.FLAG),
        FieldSpec("player_order", FieldKind.INT),
        FieldSpec("flip_h", FieldKind.INT),
        FieldSpec("float_in_space", FieldKind.INT),
        FieldSpec("special_effect", FieldKind.INT),
    ),
    Wall: (
        FieldSpec("x", FieldKind.INT, required=True),
        FieldSpec("y", FieldKind.INT, required=True),
        FieldSpec("player", FieldKind.FLAG),
        FieldSpec("possessable", FieldKind.FLAG),
        FieldSpec("player_order", FieldKind.INT),
    ),
    Floor: (
        FieldSpec("x", FieldKind.INT, required=True),
        FieldSpec("y", FieldKind.INT, required=True),
        FieldSpec("floor_type", FieldKind.FLOOR_TYPE, required=True),
    ),
    Ref: (
        FieldSpec("x", FieldKind.INT, required=True),
        FieldSpec("y", FieldKind.INT, required=True),
        FieldSpec("target_id", FieldKind.INT, required=True),
        FieldSpec("exit_block", FieldKind.FLAG),
        FieldSpec("inf_exit", FieldKind.INT),
        FieldSpec("inf_exit_num", FieldKind.INT),
        FieldSpec("inf_enter", FieldKind.INT),
        FieldSpec("inf_enter_num", FieldKind.INT),
        FieldSpec("inf_enter_id", FieldKind.INT),
        FieldSpec("player", FieldKind.FLAG),
        FieldSpec("possessable", FieldKind.FLAG),
        FieldSpec("player_order", FieldKind.INT),
        FieldSpec("flip_h", FieldKind.INT),
        FieldSpec("float_in_space", FieldKind.INT),
        FieldSpec("special_effect", FieldKind.INT),
    ),
}
"""Positional attributes of each variant, in file order."""


def keyword_for(obj: LevelObject) -> str:
    """Return the variant keyword used when writing ``obj``."""

    for keyword, cls in KEYWORDS.items():
        if type(obj) is cls:
            return keyword
    raise TypeError(f"not a level object: {type(obj)!r}")


def normalize_comment(text: str | None) -> str | None:
    """Normalise a title so it survives being written as ``(text)``."""

    if text is None:
        return None
    if not isinstance(text, str):
        raise TypeError(f"comment must be a string, got {type(text)!r}")

    flattened = " ".join(text.replace(")", "").splitlines())
    stripped = flattened.strip()
    return stripped or None


def normalize_info_text(text: str | None) -> str | None:
    """Normalise info text so the ``_``/``\\n`` encoding can restore it.

    Underscores and any whitespace other than a newline cannot be told apart
    from spaces once encoded, so they become spaces here. A leading ``(``
    gains a space in front because the line reader would otherwise take it
    for a comment.
    """

    if text is None:
        return None
    if not isinstance(text, str):
        raise TypeError(f"info text must be a string, got {type(text)!r}")

    unified = text.replace("\r\n", "\n").replace("\r", "\n").replace("\\n", "\n")
    normalised = "".join(
        " " if char == "_" or (char.isspace() and char != "\n") else char
        for char in unified
    )
    if not normalised:
        return None
    if normalised.startswith("("):
        normalised = " " + normalised
    return normalised


# Factories ------------------------------------------------------------------


def create_block(
    block_id: int,
    x: int,
    y: int,
    width: int = 5,
    height: int = 5,
    *,
    hue: float = 0.6,
    sat: float = 0.8,
    val: float = 1.0,
    fill_with_walls: bool = False,
    player: bool = False,
    possessable: bool = False,
) -> Block:
    """Return an empty block with the editor's default colour."""

    return Block(
        x=x,
        y=y,
        id=block_id,
        width=width,
        height=height,
        hue=hue,
        sat=sat,
        val=val,
        fill_with_walls=fill_with_walls,
        player=player,
        possessable=possessable,
    )


def create_player_block(block_id: int, x: int, y: int) -> Block:
    """Return a 1x1 possessable block controlled by the player."""

    return create_block(
        block_id, x, y, 1, 1, hue=0.9, sat=1.0, val=0.7, player=True, possessable=True
    )


def create_box(block_id: int, x: int, y: int) -> Block:
    """Return a sealed, wall-filled 3x3 box in the default box colour."""

    return create_block(
        block_id, x, y, 3, 3, hue=0.12, sat=0.7, val=0.85, fill_with_walls=True
    )


def create_wall(x: int, y: int) -> Wall:
    return Wall(x=x, y=y)


def create_floor(
    x: int,
    y: int,
    floor_type: FloorType | str = FloorType.BUTTON,
    info_text: str | None = None,
) -> Floor:
    """Return a floor marker; ``info_text`` only applies to info floors."""

    resolved = FloorType(floor_type)
    text = normalize_info_text(info_text) if resolved is FloorType.INFO else None
    return Floor(x=x, y=y, floor_type=resolved, info_text=text)


def create_ref(x: int, y: int, target_id: int, is_exit: bool = True) -> Ref:
    return Ref(x=x, y=y, target_id=target_id, exit_block=is_exit)


def create_object(
    kind: ObjectKind | str,
    x: int,
    y: int,
    *,
    block_id: int = 0,
    floor_type: FloorType | str = FloorType.BUTTON,
    ref_target: int = 0,
    ref_is_exit: bool = False,
) -> LevelObject:
    """Build the object a quick-place tool of type ``kind`` would drop.

    ``block_id`` is provisional for boxes and blocks; insertion assigns the
    next free identifier.
    """

    resolved = ObjectKind(kind)
    if resolved is ObjectKind.BOX:
        return create_box(block_id, x, y)
    if resolved is ObjectKind.BLOCK:
        return create_block(block_id, x, y, 3, 3)
    if resolved is ObjectKind.WALL:
        return create_wall(x, y)
    if resolved is ObjectKind.FLOOR:
        return create_floor(x, y, floor_type)
    return create_ref(x, y, ref_target, ref_is_exit)


def new_document() -> LevelDocument:
    """Return the starter level: a player block and its goal in a 5x5 room."""

    root = create_block(0, -1, -1, 5, 5)
    root.children = [
        create_player_block(1, 1, 1),
        create_floor(3, 3, FloorType.PLAYER_BUTTON),
    ]
    return LevelDocument(root=root, header=LevelHeader(version=4))


# Queries --------------------------------------------------------------------


def iter_objects(block: Block) -> Iterator[Tuple[LevelObject, int]]:
    """Yield ``(object, depth)`` pairs in pre-order, starting with ``block``."""

    stack: List[Tuple[LevelObject, int]] = [(block, 0)]
    while stack:
        obj, depth = stack.pop()
        yield obj, depth
        if isinstance(obj, Block):
            stack.extend((child, depth + 1) for child in reversed(obj.children))


def iter_blocks(document: LevelDocument) -> Iterator[Block]:
    """Yield every block in the document in pre-order."""

    for obj, _ in iter_objects(document.root):
        if isinstance(obj, Block):
            yield obj


def next_free_block_id(document: LevelDocument) -> int:
    """Return one more than the largest block id, or ``0`` without blocks."""

    return max((block.id for block in iter_blocks(document)), default=-1) + 1


def find_block(document: LevelDocument, block_id: int) -> Block | None:
    """Return the first block with ``block_id`` in depth-first pre-order."""

    for block in iter_blocks(document):
        if block.id == block_id:
            return block
    return None


def find_parent(document: LevelDocument, block_id: int) -> Block | None:
    """Return the block that directly owns the block ``block_id``."""

    for block in iter_blocks(document):
        for child in block.children:
            if isinstance(child, Block) and child.id == block_id:
                return block
    return None


def resolve_path(
    document: LevelDocument, focus_id: int, path: Sequence[int]
) -> LevelObject | None:
    """Follow child indices from the block ``focus_id`` down to an object.

    An empty ``path`` resolves to the focus block itself. ``None`` is returned
    when the focus block is missing, an index is out of range, or the path
    tries to descend into an object that is not a block.
    """

    current: LevelObject | None = find_block(document, focus_id)
    for index in path:
        if not isinstance(current, Block):
            return None
        if isinstance(index, bool) or not isinstance(index, int):
            return None
        if not 0 <= index < len(current.children):
            return None
        current = current.children[index]
    return current


def objects_at(block: Block, x: int, y: int) -> List[LevelObject]:
    """Return the direct children of ``block`` positioned at ``(x, y)``."""

    return [child for child in block.children if child.x == x and child.y == y]


class RefTargetChoice(NamedTuple):
    """A block offered as the target of a new reference."""

    id: int
    label: str


def list_ref_targets(document: LevelDocument) -> List[RefTargetChoice]:
    """Return the blocks a reference may point at, boxes excluded.

    Labels are indented two spaces per nesting level and show the size of the
    block's interior.
    """

    choices: List[RefTargetChoice] = []
    for obj, depth in iter_objects(document.root):
        if not isinstance(obj, Block) or obj.is_box:
            continue
        indent = "  " * depth
        label = f"{indent}Block {obj.id} ({obj.width}×{obj.height})"
        choices.append(RefTargetChoice(obj.id, label))
    return choices


__all__ = [
    "Block",
    "DrawStyle",
    "FieldKind",
    "FieldSpec",
    "Floor",
    "FloorType",
    "KEYWORDS",
    "LINE_FIELDS",
    "LevelDocument",
    "LevelHeader",
    "LevelObject",
    "ObjectKind",
    "Ref",
    "RefTargetChoice",
    "Wall",
    "create_block",
    "create_box",
    "create_floor",
    "create_object",
    "create_player_block",
    "create_ref",
    "create_wall",
    "find_block",
    "find_parent",
    "iter_blocks",
    "iter_objects",
    "keyword_for",
    "list_ref_targets",
    "new_document",
    "next_free_block_id",
    "normalize_comment",
    "normalize_info_text",
    "objects_at",
    "resolve_path",
]
