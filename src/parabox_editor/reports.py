"""Structured summaries of a parsed level for machine-readable output."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .level import Block, Floor, LevelDocument, Ref, Wall, iter_objects
from .level_format import ParseResult
from .validation import validate_level


class ParseWarningResource(BaseModel):
    """A recoverable problem noticed while reading the level text."""

    line_number: int = Field(..., ge=1)
    message: str
    snippet: str = ""


class BlockSummaryResource(BaseModel):
    """One block of the level tree."""

    id: int = Field(..., ge=0)
    depth: int = Field(..., ge=0)
    x: int
    y: int
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    child_count: int = Field(..., ge=0)
    is_box: bool
    is_player: bool


class ObjectCountsResource(BaseModel):
    """How many objects of each variant the level contains."""

    blocks: int = Field(default=0, ge=0)
    walls: int = Field(default=0, ge=0)
    floors: int = Field(default=0, ge=0)
    refs: int = Field(default=0, ge=0)


class LevelReport(BaseModel):
    """Summary of a level together with its parse and validation warnings."""

    version: int = Field(..., ge=1)
    title: str | None = None
    counts: ObjectCountsResource
    blocks: List[BlockSummaryResource] = Field(default_factory=list)
    parse_warnings: List[ParseWarningResource] = Field(default_factory=list)
    validation_warnings: List[str] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.parse_warnings or self.validation_warnings)


def build_level_report(source: ParseResult | LevelDocument) -> LevelReport:
    """Summarise a parsed level (or a document built in memory)."""

    if isinstance(source, ParseResult):
        document = source.document
        parse_warnings = [
            ParseWarningResource(
                line_number=warning.line_number,
                message=warning.message,
                snippet=warning.snippet,
            )
            for warning in source.warnings
        ]
    else:
        document = source
        parse_warnings = []

    counts = ObjectCountsResource()
    blocks: List[BlockSummaryResource] = []
    for obj, depth in iter_objects(document.root):
        if isinstance(obj, Block):
            counts.blocks += 1
            blocks.append(
                BlockSummaryResource(
                    id=obj.id,
                    depth=depth,
                    x=obj.x,
                    y=obj.y,
                    width=obj.width,
                    height=obj.height,
                    child_count=len(obj.children),
                    is_box=obj.is_box,
                    is_player=obj.player,
                )
            )
        elif isinstance(obj, Wall):
            counts.walls += 1
        elif isinstance(obj, Floor):
            counts.floors += 1
        elif isinstance(obj, Ref):
            counts.refs += 1

    return LevelReport(
        version=document.header.version,
        title=document.header.comment,
        counts=counts,
        blocks=blocks,
        parse_warnings=parse_warnings,
        validation_warnings=validate_level(document),
    )


__all__ = [
    "BlockSummaryResource",
    "LevelReport",
    "ObjectCountsResource",
    "ParseWarningResource",
    "build_level_report",
]
