"""Doc link resolution.

``DocResolver.find`` walks three tiers, each cheaper but staler than the next:

  1. Link cache, keyed by the raw query (no parsing on a repeat query)
  2. Disk index store, one file per crate
  3. Remote index fetch, written back to the disk store on a best-effort basis

Answers the user can act on (invalid path, unknown crate or item) are
returned as plain messages. Only infrastructure failures raise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from togglebot.errors import DocSearchError, ErrorCode, InvalidPathError
from togglebot.models.path import SimplePath

if TYPE_CHECKING:
    from togglebot.link_cache import LinkCache
    from togglebot.models.index import CrateIndex
    from togglebot.protocols import IndexFetcherProtocol, IndexStoreProtocol, PathParser

log = structlog.get_logger()

# Disk store outcomes that mean "go to the network", not "fail".
_CACHE_MISS_CODES = frozenset({ErrorCode.INDEX_NOT_FOUND, ErrorCode.INDEX_STALE})


class DocResolver:
    """Finds documentation links for fully qualified item paths."""

    def __init__(
        self,
        link_cache: LinkCache,
        store: IndexStoreProtocol,
        fetcher: IndexFetcherProtocol,
        *,
        version: str = "latest",
        parse: PathParser = SimplePath.parse,
        suggestion_max_results: int = 3,
        suggestion_score_cutoff: int = 80,
    ) -> None:
        self.link_cache = link_cache
        self._store = store
        self._fetcher = fetcher
        self._version = version
        self._parse = parse
        self._suggestion_max_results = suggestion_max_results
        self._suggestion_score_cutoff = suggestion_score_cutoff

    async def find(self, raw_query: str) -> str:
        """Return the doc URL for ``raw_query`` or a message explaining why there is none.

        Raises DocSearchError for failures the fallback chain cannot recover
        from (network errors, corrupt cache files, malformed remote indexes).
        """
        link = await self.link_cache.get(raw_query)
        if link is not None:
            log.debug("link_cache_hit", path=raw_query)
            return link

        try:
            path = self._parse(raw_query)
        except InvalidPathError as exc:
            return f"The path `{raw_query}` is invalid: {exc}"

        try:
            index = await self._load_index(path.crate_name)
        except DocSearchError as exc:
            if exc.code == ErrorCode.CRATE_NOT_FOUND:
                log.info("crate_not_found", crate=path.crate_name)
                return f"Crate `{path.crate_name}` doesn't exist"
            raise

        link = index.find_link(path)
        if link is None:
            return self._not_found_message(path, index)

        await self.link_cache.insert(path.canonical, link)
        return link

    async def _load_index(self, crate_name: str) -> CrateIndex:
        try:
            index = await self._store.load(crate_name)
        except DocSearchError as exc:
            if exc.code not in _CACHE_MISS_CODES:
                raise
            log.debug("getting_fresh_index", crate=crate_name, reason=exc.code)
        else:
            log.debug("index_loaded_from_disk", crate=crate_name)
            return index

        index = await self._fetcher.fetch_index(crate_name, self._version)

        # The disk store only saves network round-trips; a failed write must
        # not fail the lookup.
        try:
            await self._store.save(crate_name, index)
        except Exception as exc:
            log.warning("index_save_failed", crate=crate_name, error=str(exc), exc_info=True)

        return index

    def _not_found_message(self, path: SimplePath, index: CrateIndex) -> str:
        message = f"Item `{path}` doesn't exist"
        suggestions = index.suggest(
            path,
            limit=self._suggestion_max_results,
            score_cutoff=self._suggestion_score_cutoff,
        )
        if suggestions:
            message += ". Did you mean: " + ", ".join(f"`{s}`" for s in suggestions) + "?"
        return message
