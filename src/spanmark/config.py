"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/spanmark/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class StyleConfig(BaseModel):
    """Decoration defaults."""

    default_font_size: int = 12

    @field_validator("default_font_size")
    @classmethod
    def _positive_size(cls, value: int) -> int:
        if value < 1:
            msg = "STYLE__DEFAULT_FONT_SIZE must be at least 1"
            raise ValueError(msg)
        return value


class PersistenceConfig(BaseModel):
    """Layout of the metadata block embedded at the end of a document.

    The block is two comment lines: the directive that tells the host to
    load spans on open, and the data line carrying the encoded token.
    """

    comment_prefix: str = "# "
    directive: str = "spanmark: load"
    data_key: str = "spanmark-data:"

    @model_validator(mode="after")
    def _distinct_lines(self) -> PersistenceConfig:
        if self.directive.strip() == self.data_key.strip():
            msg = "PERSISTENCE__DIRECTIVE and PERSISTENCE__DATA_KEY must differ"
            raise ValueError(msg)
        if "\n" in self.comment_prefix:
            msg = "PERSISTENCE__COMMENT_PREFIX must be a single line"
            raise ValueError(msg)
        return self


class ListConfig(BaseModel):
    """Span list presentation."""

    display_width: int = 40


class ExportConfig(BaseModel):
    """HTML export options."""

    title: str = "spanmark export"
    font_family: str = "monospace"


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path = Path("logs")
    log_level: str = "WARNING"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``STYLE__DEFAULT_FONT_SIZE``, ``PERSISTENCE__DATA_KEY``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    style: StyleConfig = StyleConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    listing: ListConfig = ListConfig()
    export: ExportConfig = ExportConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.debug("Settings: no .env file found, using env vars and defaults")

    return settings
