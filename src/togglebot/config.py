"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (TOGGLEBOT__CACHE__MAX_AGE_DAYS=1)
  2. togglebot.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional: all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CACHE_DIR = platformdirs.user_cache_dir("togglebot")
_DEFAULT_INDEX_DIR = str(Path(_DEFAULT_CACHE_DIR) / "doc-indexes")


def _find_config_file() -> str | None:
    """Return the path of the first togglebot.yaml found, or None."""
    candidates = [
        Path("togglebot.yaml"),
        Path(platformdirs.user_config_dir("togglebot")) / "togglebot.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    index_dir: str = _DEFAULT_INDEX_DIR
    max_age_days: float = Field(default=3, gt=0)
    link_cache_capacity: int = Field(default=500, ge=1)


class FetcherSettings(BaseModel):
    docs_rs_url: str = "https://docs.rs"
    std_docs_url: str = "https://doc.rust-lang.org/stable"
    version: str = "latest"
    max_redirects: int = Field(default=10, ge=0)
    timeout_seconds: float = 30.0
    # Base domains the fetcher may contact, including every redirect hop.
    allowed_domains: list[str] = ["docs.rs", "rust-lang.org"]


class ResolverSettings(BaseModel):
    suggestion_score_cutoff: int = 80
    suggestion_max_results: int = 3


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: TOGGLEBOT__FETCHER__MAX_REDIRECTS=5
        env_prefix="TOGGLEBOT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    fetcher: FetcherSettings = FetcherSettings()
    resolver: ResolverSettings = ResolverSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
