"""Tests for configuration loading and saving."""

from __future__ import annotations

from pathlib import Path

import pytest

from geo_tutor.config import (
    GeoTutorConfig,
    ReasoningConfig,
    load_config,
    save_config,
)
from geo_tutor.exceptions import ConfigError


@pytest.fixture
def clean_env(monkeypatch):
    for var in (
        "GEO_TUTOR_PROVIDER",
        "GEO_TUTOR_API_KEY",
        "GEO_TUTOR_MODEL",
        "GEO_TUTOR_BASE_URL",
        "GEO_TUTOR_LOG_LEVEL",
        "GEO_TUTOR_TRANSCRIPTS_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestLoadConfig:
    def test_defaults_when_missing(self, clean_env, tmp_path: Path):
        cfg = load_config(tmp_path / "missing.yaml")
        assert cfg.reasoning.provider == ""
        assert cfg.reasoning.llm_timeout_seconds == 180.0
        assert cfg.logging.level == "INFO"
        assert cfg.transcripts_dir == ""

    def test_env_fallback(self, clean_env, tmp_path: Path):
        clean_env.setenv("GEO_TUTOR_PROVIDER", "anthropic")
        clean_env.setenv("GEO_TUTOR_API_KEY", "sk-test")
        clean_env.setenv("GEO_TUTOR_MODEL", "claude-test")

        cfg = load_config(tmp_path / "missing.yaml")
        assert cfg.reasoning.provider == "anthropic"
        assert cfg.reasoning.api_key == "sk-test"
        assert cfg.reasoning.model == "claude-test"

    def test_yaml_with_env_interpolation(self, clean_env, tmp_path: Path):
        clean_env.setenv("MY_GEMINI_KEY", "g-123")
        path = tmp_path / "config.yaml"
        path.write_text(
            "reasoning:\n"
            "  provider: google\n"
            "  api_key: ${MY_GEMINI_KEY}\n"
            "  llm_timeout_seconds: 60\n"
            "logging:\n"
            "  file: ''\n"
        )

        cfg = load_config(path)
        assert cfg.reasoning.provider == "google"
        assert cfg.reasoning.api_key == "g-123"
        assert cfg.reasoning.llm_timeout_seconds == 60.0
        assert cfg.logging.file == ""

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == GeoTutorConfig()

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("reasoning: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_field(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("reasoning:\n  max_output_tokens: lots\n")
        with pytest.raises(ConfigError, match="max_output_tokens"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestSaveConfig:
    def test_save_then_load(self, tmp_path: Path):
        path = tmp_path / "nested" / "config.yaml"
        cfg = GeoTutorConfig(
            reasoning=ReasoningConfig(provider="openai", api_key="k", model="m")
        )

        written = save_config(cfg, path)

        assert written == path
        assert load_config(path) == cfg
