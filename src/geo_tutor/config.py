"""Configuration loading and validation."""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError

DEFAULT_CONFIG_PATH = "~/.geo-tutor/config.yaml"


class ReasoningConfig(BaseModel):
    provider: str = ""  # "google" | "anthropic" | "openai" | "openai-compatible" | ""
    api_key: str = ""
    model: str = ""  # Empty = provider default
    base_url: str = ""  # For openai-compatible providers
    max_output_tokens: int = 8192
    llm_timeout_seconds: float = 180.0  # Whole stream, not per chunk


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: str = "~/.geo-tutor/logs/geo-tutor.log"  # "" = console only


class GeoTutorConfig(BaseModel):
    reasoning: ReasoningConfig = Field(default_factory=ReasoningConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    transcripts_dir: str = ""  # Save every raw stream here when set


def _interpolate_env_vars(text: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(r"\$\{(\w+)\}", replacer, text)


def _config_from_env() -> GeoTutorConfig:
    """Build config from environment variables (CI, containers)."""
    return GeoTutorConfig(
        reasoning=ReasoningConfig(
            provider=os.environ.get("GEO_TUTOR_PROVIDER", ""),
            api_key=os.environ.get("GEO_TUTOR_API_KEY", ""),
            model=os.environ.get("GEO_TUTOR_MODEL", ""),
            base_url=os.environ.get("GEO_TUTOR_BASE_URL", ""),
        ),
        logging=LoggingConfig(
            level=os.environ.get("GEO_TUTOR_LOG_LEVEL", "INFO"),
        ),
        transcripts_dir=os.environ.get("GEO_TUTOR_TRANSCRIPTS_DIR", ""),
    )


def _resolve_path(path: str | Path | None) -> Path:
    return Path(path or DEFAULT_CONFIG_PATH).expanduser()


def load_config(path: str | Path | None = None) -> GeoTutorConfig:
    """Load config from YAML file, env vars, or defaults.

    Priority: config.yaml (with ${ENV} interpolation) > env vars > defaults.
    Raises ConfigError if the file exists but cannot be used.
    """
    path = _resolve_path(path)

    if not path.exists():
        if os.environ.get("GEO_TUTOR_PROVIDER"):
            return _config_from_env()
        return GeoTutorConfig()

    raw_text = path.read_text()
    interpolated = _interpolate_env_vars(raw_text)
    try:
        data = yaml.safe_load(interpolated)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return GeoTutorConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {path} must be a mapping")
    try:
        return GeoTutorConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e


def save_config(config: GeoTutorConfig, path: str | Path | None = None) -> Path:
    """Save config to YAML file."""
    path = _resolve_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump()
    path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))
    return path
