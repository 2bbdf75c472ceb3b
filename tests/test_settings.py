import logging

import pytest

from parabox_editor import EditorSettings
from parabox_editor.settings import parse_log_level


def test_settings_defaults_when_environment_is_empty() -> None:
    settings = EditorSettings.from_env({})

    assert settings.history_limit == 50
    assert settings.log_level == "WARNING"


def test_settings_read_environment_values() -> None:
    settings = EditorSettings.from_env(
        {
            "PARABOX_EDITOR_HISTORY_LIMIT": " 12 ",
            "PARABOX_EDITOR_LOG_LEVEL": "debug",
        }
    )

    assert settings.history_limit == 12
    assert settings.log_level == "DEBUG"


def test_blank_values_fall_back_to_defaults() -> None:
    settings = EditorSettings.from_env(
        {"PARABOX_EDITOR_HISTORY_LIMIT": "  ", "PARABOX_EDITOR_LOG_LEVEL": ""}
    )

    assert settings == EditorSettings()


@pytest.mark.parametrize("raw", ["many", "0", "-4"])
def test_invalid_history_limit_is_rejected(raw: str) -> None:
    with pytest.raises(ValueError):
        EditorSettings.from_env({"PARABOX_EDITOR_HISTORY_LIMIT": raw})


def test_invalid_log_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        EditorSettings.from_env({"PARABOX_EDITOR_LOG_LEVEL": "chatty"})


def test_parse_log_level_returns_logging_constants() -> None:
    assert parse_log_level("info") == logging.INFO
    assert parse_log_level(" ERROR ") == logging.ERROR
