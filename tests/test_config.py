"""Config loading tests."""

from __future__ import annotations

import logging

import pytest

from config import Config


def test_config_defaults() -> None:
    """Config should load with sensible defaults when no env vars are set."""
    cfg = Config()
    assert cfg.flask_port == 5000
    assert cfg.random_code_max_attempts == 1000
    assert cfg.product_type_code_max_attempts == 100
    assert cfg.value_code_mappings_path == ""
    assert cfg.label_size == "label-medium"
    assert "labels" in cfg.label_output_dir


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config.from_env() reads from environment variables."""
    monkeypatch.setenv("FLASK_PORT", "9000")
    monkeypatch.setenv("RANDOM_CODE_MAX_ATTEMPTS", "50")
    monkeypatch.setenv("LABEL_SIZE", "label-small")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("FLASK_DEBUG", "no")
    cfg = Config.from_env()
    assert cfg.flask_port == 9000
    assert cfg.random_code_max_attempts == 50
    assert cfg.label_size == "label-small"
    assert cfg.cors_origins == ["http://a.test", "http://b.test"]
    assert cfg.flask_debug is False


def test_unknown_label_size_warns(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="config"):
        Config(label_size="label-huge")
    assert "not a known label size" in caplog.text


def test_default_secret_without_debug_warns(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="config"):
        Config(flask_debug=False)
    assert "FLASK_SECRET_KEY" in caplog.text
