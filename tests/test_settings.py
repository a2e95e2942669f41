"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import AppConfig, load_config

ENV_NAMES = (
    "GEMINI_IMAGE_MODEL",
    "HISTORY_LIMIT",
    "DEFAULT_LATITUDE",
    "DEFAULT_LONGITUDE",
    "LOG_DIR",
    "LOG_LEVEL",
    "GEMINI_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    yield


def test_env_file_overrides_defaults(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# local settings",
                "GEMINI_IMAGE_MODEL=custom-image-model",
                'GEMINI_API_KEY="abc123"',
                "HISTORY_LIMIT=12",
                "DEFAULT_LATITUDE=30.04",
                "DEFAULT_LONGITUDE=31.23",
                "LOG_LEVEL=debug",
            ]
        ),
        encoding="utf-8",
    )
    # register with monkeypatch so values written by the .env loader are undone
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    config = load_config(str(env_file))

    assert config.image_model == "custom-image-model"
    assert config.history_limit == 12
    assert config.default_location == (30.04, 31.23)
    assert config.log_level == "DEBUG"
    assert config.hq_image_model == AppConfig().hq_image_model


def test_malformed_numbers_fall_back(tmp_path, monkeypatch):
    monkeypatch.setenv("HISTORY_LIMIT", "lots")
    monkeypatch.setenv("DEFAULT_LATITUDE", "north")
    monkeypatch.setenv("DEFAULT_LONGITUDE", "31.2")

    config = load_config(str(tmp_path / "missing.env"))

    assert config.history_limit == AppConfig().history_limit
    assert config.default_location is None
    assert config.log_dir == Path("logs")
