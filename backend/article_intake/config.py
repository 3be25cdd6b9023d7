from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


_PLACEHOLDER_PREFIX = "your-"


class SummarizerSettings(BaseModel):
    api_key: Optional[str] = None
    # OpenAI-compatible endpoint (OpenRouter by default).
    api_base: str = "https://openrouter.ai/api/v1"
    model: str = "openai/gpt-3.5-turbo"
    max_input_chars: int = Field(default=4000, ge=1)
    max_output_tokens: int = Field(default=500, ge=1)
    timeout_s: float = Field(default=30.0, gt=0.0)

    @property
    def has_credential(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and not key.startswith(_PLACEHOLDER_PREFIX)


class DoiSettings(BaseModel):
    base_url: str = "https://api.crossref.org"
    mailto: Optional[str] = None
    timeout_s: float = Field(default=15.0, gt=0.0)


class StorageSettings(BaseModel):
    mongo_url: str = "mongodb://localhost:27017"
    db_name: str = "research_articles"
    collection: str = "articles"
    upload_dir: str = "uploads"
    server_selection_timeout_ms: int = 1500


class LoggingSettings(BaseModel):
    log_dir: str = "logs"
    level: str = "INFO"


class Settings(BaseModel):
    summarizer: SummarizerSettings = Field(default_factory=SummarizerSettings)
    doi: DoiSettings = Field(default_factory=DoiSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# env var -> (section, field)
_ENV_OVERRIDES = {
    "OPENAI_API_KEY": ("summarizer", "api_key"),
    "OPENAI_API_BASE": ("summarizer", "api_base"),
    "SUMMARIZER_MODEL": ("summarizer", "model"),
    "CROSSREF_MAILTO": ("doi", "mailto"),
    "MONGO_URL": ("storage", "mongo_url"),
    "DB_NAME": ("storage", "db_name"),
    "UPLOAD_DIR": ("storage", "upload_dir"),
    "LOG_LEVEL": ("logging", "level"),
}


def _apply_env(raw: dict[str, Any], environ: dict[str, str]) -> dict[str, Any]:
    for var, (section, field) in _ENV_OVERRIDES.items():
        value = environ.get(var)
        if value:
            # an empty YAML section loads as None
            section_raw = dict(raw.get(section) or {})
            section_raw[field] = value
            raw[section] = section_raw
    return raw


def load_settings(
    config_path: Optional[str | Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> Settings:
    """Load settings from an optional YAML file, then environment overrides."""
    env = dict(os.environ) if environ is None else environ
    path = Path(config_path) if config_path else Path(__file__).resolve().parents[2] / "config.yaml"
    raw: Any = {}
    if path.exists():
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    raw = {k: v for k, v in dict(raw).items() if v is not None}
    return Settings.model_validate(_apply_env(raw, env))
