"""Command-line entry point for the level editor engine."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from parabox_editor import (
    EditorSettings,
    FormatError,
    ParseResult,
    build_level_report,
    list_ref_targets,
    load_level_from_file,
    new_document,
    serialize_level,
)
from parabox_editor.settings import parse_log_level

logger = logging.getLogger(__name__)


def _write_output(text: str, output: Path | None) -> None:
    if output is None:
        print(text, end="")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    print(f"Wrote level to '{output}'.")


def _load(path: Path) -> ParseResult:
    try:
        return load_level_from_file(path)
    except (FormatError, OSError) as exc:
        print(f"Failed to load level from '{path}': {exc}")
        raise SystemExit(2) from exc


def _run_new(args: argparse.Namespace) -> None:
    _write_output(serialize_level(new_document()), args.output)


def _run_check(args: argparse.Namespace) -> None:
    result = _load(args.path)
    report = build_level_report(result)

    if args.json:
        print(report.model_dump_json(indent=2))
        return

    counts = report.counts
    title = f" '{report.title}'" if report.title else ""
    print(
        f"Level{title} (version {report.version}): {counts.blocks} blocks, "
        f"{counts.walls} walls, {counts.floors} floors, {counts.refs} refs."
    )
    for warning in report.parse_warnings:
        print(f"parse warning: line {warning.line_number}: {warning.message}")
    for message in report.validation_warnings:
        print(f"warning: {message}")
    if not report.has_warnings:
        print("No problems found.")


def _run_format(args: argparse.Namespace) -> None:
    result = _load(args.path)
    for warning in result.warnings:
        logger.warning("%s: %s", args.path, warning)
    _write_output(serialize_level(result.document), args.output)


def _run_blocks(args: argparse.Namespace) -> None:
    result = _load(args.path)
    choices = list_ref_targets(result.document)
    if not choices:
        print("No blocks can be referenced in this level.")
        return
    for choice in choices:
        print(choice.label)


_COMMANDS = {
    "new": _run_new,
    "check": _run_check,
    "format": _run_format,
    "blocks": _run_blocks,
}


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create, check and normalise recursive-box puzzle levels."
    )
    parser.add_argument(
        "--log-level",
        help=(
            "Logging level (DEBUG, INFO, WARNING, ERROR). "
            "Defaults to PARABOX_EDITOR_LOG_LEVEL or WARNING."
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Write the starter level.")
    new_parser.add_argument(
        "--output",
        type=Path,
        help="File to write instead of printing to standard output.",
    )

    check_parser = subparsers.add_parser(
        "check", help="Parse a level and report warnings."
    )
    check_parser.add_argument("path", type=Path, help="Level file to check.")
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON.",
    )

    format_parser = subparsers.add_parser(
        "format", help="Rewrite a level in canonical form."
    )
    format_parser.add_argument("path", type=Path, help="Level file to read.")
    format_parser.add_argument(
        "--output",
        type=Path,
        help="File to write instead of printing to standard output.",
    )

    blocks_parser = subparsers.add_parser(
        "blocks", help="List the blocks a reference may target."
    )
    blocks_parser.add_argument("path", type=Path, help="Level file to read.")

    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    """Run the level editor command-line tool."""

    args = _parse_args(argv)

    try:
        settings = EditorSettings.from_env()
        level = parse_log_level(args.log_level or settings.log_level)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        raise SystemExit(2) from exc

    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    _COMMANDS[args.command](args)


if __name__ == "__main__":
    main()
