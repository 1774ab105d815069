from __future__ import annotations

import logging
from pathlib import Path

import pytest

from shadowcoach.config import DEFAULT_PROGRESS_PATH, get_settings
from shadowcoach.logging_config import build_logging_config, configure_logging


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    for name in (
        "SHADOWCOACH_PROGRESS_PATH",
        "SHADOWCOACH_STORAGE_KEY",
        "SHADOWCOACH_UNLOCK_RULE",
        "SHADOWCOACH_COMBO_SEED",
        "SHADOWCOACH_EXAM_QUESTION_COUNT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    settings = get_settings()
    assert settings.progress_path == DEFAULT_PROGRESS_PATH
    assert settings.storage_key == "learning_state_v1"
    assert settings.unlock_rule == "arsenal"
    assert settings.combo_seed is None
    assert settings.exam_question_count == 10


def test_environment_overrides(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("SHADOWCOACH_PROGRESS_PATH", str(tmp_path / "state.json"))
    clean_env.setenv("SHADOWCOACH_UNLOCK_RULE", "exam")
    clean_env.setenv("SHADOWCOACH_COMBO_SEED", "42")

    settings = get_settings()

    assert settings.progress_path == tmp_path / "state.json"
    assert settings.unlock_rule == "exam"
    assert settings.combo_seed == 42
    assert get_settings() is settings


def test_invalid_configuration_raises_runtime_error(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SHADOWCOACH_UNLOCK_RULE", "never")
    with pytest.raises(RuntimeError, match="Invalid shadowcoach configuration"):
        get_settings()


def test_question_count_must_be_positive(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SHADOWCOACH_EXAM_QUESTION_COUNT", "0")
    with pytest.raises(RuntimeError):
        get_settings()


def test_configure_logging_honours_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHADOWCOACH_LOG_LEVEL", "warning")
    monkeypatch.setenv("SHADOWCOACH_DEBUG_GENERATOR", "1")

    configure_logging()

    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("shadowcoach.combos").level == logging.DEBUG
    telemetry_logger = logging.getLogger("shadowcoach.telemetry")
    assert telemetry_logger.level == logging.INFO
    assert telemetry_logger.propagate is False


def test_telemetry_log_can_be_muted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHADOWCOACH_TELEMETRY_LOG", "0")
    monkeypatch.setenv("SHADOWCOACH_LOG_FORMAT", "%(message)s")

    config = build_logging_config()

    assert config["loggers"]["shadowcoach.telemetry"]["level"] == "CRITICAL"
    assert config["formatters"]["default"]["format"] == "%(message)s"
