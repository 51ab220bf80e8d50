"""Unit tests for configuration defaults and overrides."""

from __future__ import annotations

from pathlib import Path

import platformdirs
import pytest
from pydantic import ValidationError

from togglebot.config import (
    _DEFAULT_CACHE_DIR,
    _DEFAULT_INDEX_DIR,
    CacheSettings,
    FetcherSettings,
    Settings,
)


class TestPlatformDefaults:
    """Verify config defaults use platformdirs instead of hardcoded Unix paths."""

    def test_default_cache_dir_matches_platformdirs(self) -> None:
        assert platformdirs.user_cache_dir("togglebot") == _DEFAULT_CACHE_DIR

    def test_default_index_dir_under_cache_dir(self) -> None:
        assert Path(_DEFAULT_INDEX_DIR).parent == Path(_DEFAULT_CACHE_DIR)
        assert Path(_DEFAULT_INDEX_DIR).name == "doc-indexes"

    def test_cache_settings_uses_platform_default(self) -> None:
        assert CacheSettings().index_dir == _DEFAULT_INDEX_DIR


class TestDefaults:
    def test_cache_defaults(self) -> None:
        settings = Settings()
        assert settings.cache.max_age_days == 3
        assert settings.cache.link_cache_capacity == 500

    def test_fetcher_defaults(self) -> None:
        settings = Settings()
        assert settings.fetcher.docs_rs_url == "https://docs.rs"
        assert settings.fetcher.std_docs_url == "https://doc.rust-lang.org/stable"
        assert settings.fetcher.version == "latest"
        assert settings.fetcher.max_redirects == 10
        assert "docs.rs" in settings.fetcher.allowed_domains

    def test_logging_defaults(self) -> None:
        settings = Settings()
        assert settings.logging.level == "INFO"
        assert settings.logging.format == "json"


class TestEnvironmentOverrides:
    def test_nested_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("TOGGLEBOT__CACHE__MAX_AGE_DAYS", "1")
        monkeypatch.setenv("TOGGLEBOT__FETCHER__MAX_REDIRECTS", "5")
        settings = Settings()
        assert settings.cache.max_age_days == 1
        assert settings.fetcher.max_redirects == 5

    def test_init_args_beat_env(self, monkeypatch) -> None:
        monkeypatch.setenv("TOGGLEBOT__CACHE__LINK_CACHE_CAPACITY", "10")
        settings = Settings(cache=CacheSettings(link_cache_capacity=20))
        assert settings.cache.link_cache_capacity == 20


class TestValidation:
    def test_link_cache_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CacheSettings(link_cache_capacity=0)

    def test_max_age_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            CacheSettings(max_age_days=0)

    def test_max_redirects_may_be_zero(self) -> None:
        assert FetcherSettings(max_redirects=0).max_redirects == 0

    def test_negative_max_redirects_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FetcherSettings(max_redirects=-1)

    def test_invalid_env_value_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("TOGGLEBOT__CACHE__LINK_CACHE_CAPACITY", "0")
        with pytest.raises(ValidationError):
            Settings()
