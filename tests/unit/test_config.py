"""Tests for spanmark.config -- Settings, sub-models and the cached accessor.

Every test constructs Settings(_env_file=None, ...) to avoid reading real .env files.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from spanmark.config import (
    _PROJECT_ROOT,
    PersistenceConfig,
    Settings,
    StyleConfig,
    get_settings,
)


class TestDefaults:
    """Defaults match the documented behaviour."""

    def test_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.style.default_font_size == 12
        assert s.persistence.comment_prefix == "# "
        assert s.persistence.directive == "spanmark: load"
        assert s.persistence.data_key == "spanmark-data:"
        assert s.listing.display_width == 40
        assert s.export.font_family == "monospace"
        assert s.app.log_dir == Path("logs")

    def test_env_file_points_at_project_root(self) -> None:
        assert Settings.model_config.get("env_file") == _PROJECT_ROOT / ".env"


class TestEnvironment:
    """Nested values come from double-underscore environment variables."""

    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STYLE__DEFAULT_FONT_SIZE", "20")
        monkeypatch.setenv("PERSISTENCE__COMMENT_PREFIX", ";; ")
        monkeypatch.setenv("LISTING__DISPLAY_WIDTH", "72")

        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.style.default_font_size == 20
        assert s.persistence.comment_prefix == ";; "
        assert s.listing.display_width == 72

    def test_invalid_type_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STYLE__DEFAULT_FONT_SIZE", "large")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]


class TestValidation:
    """Sub-model validators."""

    def test_font_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="at least 1"):
            StyleConfig(default_font_size=0)

    def test_directive_and_data_key_must_differ(self) -> None:
        with pytest.raises(ValidationError, match="must differ"):
            PersistenceConfig(directive="same:", data_key="same:")

    def test_prefix_must_be_single_line(self) -> None:
        with pytest.raises(ValidationError, match="single line"):
            PersistenceConfig(comment_prefix="#\n")


class TestGetSettings:
    """get_settings caches one instance until cleared."""

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("LISTING__DISPLAY_WIDTH", "10")
        get_settings.cache_clear()

        second = get_settings()

        assert second is not first
        assert second.listing.display_width == 10
