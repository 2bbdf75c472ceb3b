"""Reading and writing the tab-indented level text format.

A level file has a header of directives, a line holding only ``#``, and then
one line per object. The number of leading tabs on an object line gives its
nesting depth: depth zero is the root block and every deeper line belongs to
the closest preceding block one level up.

Text inside parentheses is a comment when it opens the line or follows
whitespace. A header line consisting of a single comment is the level title.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Sequence, Tuple

from .level import (
    KEYWORDS,
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
    iter_objects,
    keyword_for,
    normalize_comment,
)

logger = logging.getLogger(__name__)

COMMENT_PATTERN = re.compile(r"(^|\s)\([^)]*\)")
TITLE_PATTERN = re.compile(r"^\(([^)]*)\)$")
INT_PATTERN = re.compile(r"[+-]?[0-9]+")
REAL_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
SEPARATOR = "#"


class FormatError(ValueError):
    """Raised when text cannot be read as a level."""

    def __init__(
        self,
        message: str,
        *,
        line_number: int | None = None,
        snippet: str | None = None,
    ) -> None:
        self.reason = message
        self.line_number = line_number
        self.snippet = snippet
        if line_number is not None:
            message = f"line {line_number}: {message}"
            if snippet:
                message = f"{message} ({snippet.strip()!r})"
        super().__init__(message)


class MissingSeparatorError(FormatError):
    """Raised when the ``#`` line between header and objects is absent."""


class InvalidRootError(FormatError):
    """Raised when the object section does not start with a single root block."""


class MalformedFieldError(FormatError):
    """Raised when a directive operand or object field cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        token: str | None = None,
        line_number: int | None = None,
        snippet: str | None = None,
    ) -> None:
        self.token = token
        super().__init__(message, line_number=line_number, snippet=snippet)


@dataclass(frozen=True)
class ParseWarning:
    """A recoverable oddity noticed while reading a level."""

    line_number: int
    message: str
    snippet: str = ""

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.message}"


@dataclass(frozen=True)
class ParseResult:
    """A parsed document together with the warnings raised while reading it."""

    document: LevelDocument
    warnings: Tuple[ParseWarning, ...] = ()


def strip_comments(line: str) -> str:
    """Remove parenthesised comments and surrounding whitespace from ``line``."""

    return COMMENT_PATTERN.sub(r"\1", line).strip()


def _count_tabs(line: str) -> int:
    return len(line) - len(line.lstrip("\t"))


def _parse_int(token: str) -> int:
    if INT_PATTERN.fullmatch(token):
        return int(token)
    if REAL_PATTERN.fullmatch(token):
        number = float(token)
        if number.is_integer():
            return int(number)
    raise ValueError(f"expected an integer, got {token!r}")


def _parse_real(token: str) -> float:
    if REAL_PATTERN.fullmatch(token):
        return float(token)
    raise ValueError(f"expected a number, got {token!r}")


def _format_real(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def encode_info_text(text: str) -> str:
    """Encode info text as a single whitespace-free token."""

    return text.replace(" ", "_").replace("\n", "\\n")


def decode_info_text(encoded: str) -> str:
    """Invert :func:`encode_info_text`."""

    return encoded.replace("\\n", "\n").replace("_", " ")


# Parsing --------------------------------------------------------------------


class _LevelReader:
    """Single-use state for reading one level text."""

    def __init__(self, text: str) -> None:
        if text.startswith("\ufeff"):
            text = text[1:]
        self.lines = [
            (index + 1, raw.rstrip("\r")) for index, raw in enumerate(text.split("\n"))
        ]
        self.warnings: List[ParseWarning] = []

    def warn(self, line_number: int, message: str, snippet: str) -> None:
        self.warnings.append(ParseWarning(line_number, message, snippet.strip()))

    def read(self) -> ParseResult:
        separator_index = next(
            (
                index
                for index, (_, line) in enumerate(self.lines)
                if strip_comments(line) == SEPARATOR
            ),
            None,
        )
        if separator_index is None:
            raise MissingSeparatorError(
                "missing '#' separator between header and objects"
            )

        header = self._read_header(self.lines[:separator_index])
        root = self._read_objects(self.lines[separator_index + 1 :])
        return ParseResult(
            document=LevelDocument(root=root, header=header),
            warnings=tuple(self.warnings),
        )

    def _read_header(self, lines: Sequence[Tuple[int, str]]) -> LevelHeader:
        header = LevelHeader()

        for line_number, line in lines:
            stripped = strip_comments(line)
            if not stripped:
                title = TITLE_PATTERN.match(line.strip())
                if title:
                    header.comment = normalize_comment(title.group(1))
                continue

            tokens = stripped.split()
            keyword = tokens[0].lower()
            operands = tokens[1:]

            if keyword == "version":
                header.version = self._directive_int(
                    keyword, operands, line_number, line, minimum=1
                )
            elif keyword == "shed":
                header.shed = True
            elif keyword == "inner_push":
                header.inner_push = True
            elif keyword == "draw_style":
                token = self._directive_token(keyword, operands, line_number, line)
                try:
                    header.draw_style = DrawStyle(token.lower())
                except ValueError:
                    self.warn(line_number, f"unknown draw style {token!r} ignored", line)
            elif keyword == "attempt_order":
                header.attempt_order = self._directive_token(
                    keyword, operands, line_number, line
                )
            elif keyword == "custom_level_music":
                header.custom_level_music = self._directive_int(
                    keyword, operands, line_number, line
                )
            elif keyword == "custom_level_palette":
                header.custom_level_palette = self._directive_int(
                    keyword, operands, line_number, line
                )
            else:
                logger.debug("Ignoring unknown header directive %r", keyword)

        return header

    def _directive_token(
        self, keyword: str, operands: Sequence[str], line_number: int, line: str
    ) -> str:
        if not operands:
            raise MalformedFieldError(
                f"'{keyword}' requires a value",
                line_number=line_number,
                snippet=line,
            )
        return operands[0]

    def _directive_int(
        self,
        keyword: str,
        operands: Sequence[str],
        line_number: int,
        line: str,
        *,
        minimum: int | None = None,
    ) -> int:
        token = self._directive_token(keyword, operands, line_number, line)
        try:
            value = _parse_int(token)
        except ValueError as exc:
            raise MalformedFieldError(
                f"'{keyword}' expects an integer",
                token=token,
                line_number=line_number,
                snippet=line,
            ) from exc
        if minimum is not None and value < minimum:
            raise MalformedFieldError(
                f"'{keyword}' must be at least {minimum}",
                token=token,
                line_number=line_number,
                snippet=line,
            )
        return value

    def _read_objects(self, lines: Sequence[Tuple[int, str]]) -> Block:
        root: Block | None = None
        stack: List[Block] = []

        for line_number, line in lines:
            stripped = strip_comments(line)
            if not stripped:
                continue

            depth = _count_tabs(line)
            tokens = stripped.split()
            obj = self._read_object(tokens, line_number, line)
            if obj is None:
                continue

            if depth == 0:
                if not isinstance(obj, Block):
                    raise InvalidRootError(
                        f"top-level object must be a Block, got {tokens[0]}",
                        line_number=line_number,
                        snippet=line,
                    )
                if root is not None:
                    self.warn(
                        line_number, "a second top-level Block replaces the root", line
                    )
                root = obj
                stack = [obj]
                continue

            if not stack:
                raise InvalidRootError(
                    "object appears before the root Block",
                    line_number=line_number,
                    snippet=line,
                )
            if depth > len(stack):
                self.warn(
                    line_number,
                    f"indentation jumps to depth {depth}; treated as depth {len(stack)}",
                    line,
                )
                depth = len(stack)

            del stack[depth:]
            stack[-1].children.append(obj)
            if isinstance(obj, Block):
                stack.append(obj)

        if root is None:
            raise InvalidRootError("no root Block found")
        return root

    def _read_object(
        self, tokens: Sequence[str], line_number: int, line: str
    ) -> LevelObject | None:
        keyword = tokens[0]
        cls = KEYWORDS.get(keyword)
        if cls is None:
            self.warn(line_number, f"unknown object type {keyword!r} skipped", line)
            return None

        specs = LINE_FIELDS[cls]
        operands = tokens[1:]
        values: dict[str, Any] = {}
        for index, spec in enumerate(specs):
            if index >= len(operands):
                if spec.required:
                    raise MalformedFieldError(
                        f"{keyword} is missing its {spec.name} field",
                        line_number=line_number,
                        snippet=line,
                    )
                break
            values[spec.name] = self._read_field(spec, operands[index], line_number, line)

        extra = operands[len(specs) :]
        if cls is Floor and values["floor_type"] is FloorType.INFO and extra:
            values["info_text"] = decode_info_text(" ".join(extra))

        try:
            return cls(**values)
        except (TypeError, ValueError) as exc:
            raise MalformedFieldError(
                str(exc), line_number=line_number, snippet=line
            ) from exc

    def _read_field(
        self, spec: FieldSpec, token: str, line_number: int, line: str
    ) -> Any:
        try:
            if spec.kind is FieldKind.INT:
                value: Any = _parse_int(token)
                if spec.minimum is not None and value < spec.minimum:
                    raise ValueError(f"must be at least {spec.minimum}")
                return value
            if spec.kind is FieldKind.REAL:
                number = _parse_real(token)
                if spec.positive and not number > 0:
                    raise ValueError("must be positive")
                return number
            if spec.kind is FieldKind.FLAG:
                return _parse_int(token) != 0
            return FloorType(token)
        except ValueError as exc:
            raise MalformedFieldError(
                f"invalid {spec.name} value {token!r}",
                token=token,
                line_number=line_number,
                snippet=line,
            ) from exc


def load_level(text: str) -> ParseResult:
    """Parse ``text`` and return the document along with any warnings.

    Raises:
        MissingSeparatorError: If no ``#`` line separates header and objects.
        InvalidRootError: If the objects do not form a tree under one Block.
        MalformedFieldError: If a directive operand or field is unreadable.
    """

    if not isinstance(text, str):
        raise TypeError(f"level text must be a string, got {type(text)!r}")
    return _LevelReader(text).read()


def parse_level(text: str) -> LevelDocument:
    """Parse ``text`` into a document, logging any recoverable warnings."""

    result = load_level(text)
    for warning in result.warnings:
        logger.warning("Level text %s", warning)
    return result.document


def load_level_from_file(path: Path | str) -> ParseResult:
    """Read a UTF-8 level file from ``path``."""

    level_path = Path(path)
    return load_level(level_path.read_text(encoding="utf-8-sig"))


# Serialisation --------------------------------------------------------------


def _format_field(spec: FieldSpec, value: Any) -> str:
    if spec.kind is FieldKind.FLAG:
        return "1" if value else "0"
    if spec.kind is FieldKind.REAL:
        return _format_real(value)
    if spec.kind is FieldKind.FLOOR_TYPE:
        return FloorType(value).value
    return str(int(value))


def serialize_object(obj: LevelObject) -> str:
    """Return the un-indented line describing ``obj`` (children excluded)."""

    parts = [keyword_for(obj)]
    parts.extend(
        _format_field(spec, getattr(obj, spec.name)) for spec in LINE_FIELDS[type(obj)]
    )
    if isinstance(obj, Floor) and obj.floor_type is FloorType.INFO and obj.info_text:
        parts.append(encode_info_text(obj.info_text))
    return " ".join(parts)


def serialize_header(header: LevelHeader) -> List[str]:
    """Return the header lines in canonical order, without the separator."""

    lines = [f"version {header.version}"]
    if header.comment:
        lines.append(f"({header.comment})")
    if header.shed:
        lines.append("shed")
    if header.inner_push:
        lines.append("inner_push")
    if header.draw_style is not None:
        lines.append(f"draw_style {DrawStyle(header.draw_style).value}")
    if header.attempt_order:
        lines.append(f"attempt_order {header.attempt_order}")
    if header.custom_level_music is not None:
        lines.append(f"custom_level_music {header.custom_level_music}")
    if header.custom_level_palette is not None:
        lines.append(f"custom_level_palette {header.custom_level_palette}")
    return lines


def serialize_level(document: LevelDocument) -> str:
    """Return the text form of ``document``, ending with a newline."""

    lines = serialize_header(document.header)
    lines.append(SEPARATOR)
    for obj, depth in iter_objects(document.root):
        lines.append("\t" * depth + serialize_object(obj))
    return "\n".join(lines) + "\n"


__all__ = [
    "FormatError",
    "InvalidRootError",
    "MalformedFieldError",
    "MissingSeparatorError",
    "ParseResult",
    "ParseWarning",
    "decode_info_text",
    "encode_info_text",
    "load_level",
    "load_level_from_file",
    "parse_level",
    "serialize_header",
    "serialize_level",
    "serialize_object",
    "strip_comments",
]
