"""Configuration helpers for the level editor engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from .history import DEFAULT_HISTORY_LIMIT

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _normalise_string(value: str | None, *, default: str) -> str:
    if value is None:
        return default

    trimmed = value.strip()
    return trimmed or default


def parse_log_level(value: str) -> int:
    """Return the :mod:`logging` level named by ``value``.

    Raises:
        ValueError: If ``value`` is not a standard level name.
    """

    name = value.strip().upper()
    if name not in _LOG_LEVELS:
        raise ValueError(
            f"log level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}"
        )
    return getattr(logging, name)


@dataclass(frozen=True)
class EditorSettings:
    """Settings for editor sessions and the command-line tool.

    Values are read from environment variables so they can be changed without
    touching code. Empty strings are treated as if the variable was unset.
    """

    history_limit: int = DEFAULT_HISTORY_LIMIT
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EditorSettings":
        """Return settings populated from ``environ``.

        Args:
            environ: Optional mapping of environment variables. When omitted,
                :data:`os.environ` is used.
        """

        source = environ if environ is not None else os.environ

        history_limit = DEFAULT_HISTORY_LIMIT
        limit_raw = source.get("PARABOX_EDITOR_HISTORY_LIMIT")
        if limit_raw is not None:
            trimmed_limit = limit_raw.strip()
            if trimmed_limit:
                try:
                    history_limit = int(trimmed_limit)
                except ValueError as exc:
                    raise ValueError(
                        "PARABOX_EDITOR_HISTORY_LIMIT must be a positive integer."
                    ) from exc
                if history_limit < 1:
                    raise ValueError(
                        "PARABOX_EDITOR_HISTORY_LIMIT must be greater than zero."
                    )

        log_level = _normalise_string(
            source.get("PARABOX_EDITOR_LOG_LEVEL"), default="WARNING"
        ).upper()
        parse_log_level(log_level)

        return cls(history_limit=history_limit, log_level=log_level)


__all__ = ["EditorSettings", "parse_log_level"]
