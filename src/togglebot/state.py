"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object.
The link cache and resolver are built on first use and then shared by every
lookup for the rest of the process lifetime.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from togglebot.fetcher import Fetcher
from togglebot.index_store import IndexStore
from togglebot.link_cache import LinkCache
from togglebot.resolver import DocResolver

if TYPE_CHECKING:
    import httpx

    from togglebot.config import Settings


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    http_client: httpx.AsyncClient
    link_cache: LinkCache | None = None
    resolver: DocResolver | None = None

    def get_resolver(self) -> DocResolver:
        """Return the shared resolver, constructing it (and the link cache) on first access."""
        if self.resolver is None:
            if self.link_cache is None:
                self.link_cache = LinkCache(self.settings.cache.link_cache_capacity)
            cache_settings = self.settings.cache
            self.resolver = DocResolver(
                self.link_cache,
                IndexStore(
                    Path(cache_settings.index_dir).expanduser(),
                    max_age=timedelta(days=cache_settings.max_age_days),
                ),
                Fetcher(self.http_client, self.settings.fetcher),
                version=self.settings.fetcher.version,
                suggestion_max_results=self.settings.resolver.suggestion_max_results,
                suggestion_score_cutoff=self.settings.resolver.suggestion_score_cutoff,
            )
        return self.resolver
