"""On-disk cache of crate indexes, one JSON file per crate.

A file older than ``max_age`` is reported as stale even though it still
exists; the resolver then refetches the index and overwrites it. Files are
never deleted.
"""

from __future__ import annotations

import asyncio
import time
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from togglebot.errors import DocSearchError, ErrorCode
from togglebot.models.index import CrateIndex

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()

DEFAULT_MAX_AGE = timedelta(days=3)


class IndexStore:
    """File-backed crate index cache implementing IndexStoreProtocol."""

    def __init__(self, directory: Path, max_age: timedelta = DEFAULT_MAX_AGE) -> None:
        self._directory = directory
        self._max_age = max_age

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, crate_name: str) -> Path:
        return self._directory / f"{crate_name}.json"

    async def load(self, crate_name: str) -> CrateIndex:
        """Load a fresh index for ``crate_name``.

        Raises DocSearchError with INDEX_NOT_FOUND or INDEX_STALE on a cache
        miss, INDEX_CORRUPT if the file cannot be deserialised and
        INDEX_READ_FAILED for any other filesystem error.
        """
        return await asyncio.to_thread(self._load_sync, crate_name)

    async def save(self, crate_name: str, index: CrateIndex) -> None:
        """Write ``index``, replacing any previous file. Raises INDEX_WRITE_FAILED."""
        await asyncio.to_thread(self._save_sync, crate_name, index)

    def _load_sync(self, crate_name: str) -> CrateIndex:
        path = self.path_for(crate_name)
        try:
            age = time.time() - path.stat().st_mtime
            if age > self._max_age.total_seconds():
                raise DocSearchError(
                    code=ErrorCode.INDEX_STALE,
                    message=f"Cached index for {crate_name!r} is outdated",
                    recoverable=True,
                )
            payload = path.read_bytes()
        except FileNotFoundError as exc:
            raise DocSearchError(
                code=ErrorCode.INDEX_NOT_FOUND,
                message=f"No cached index for {crate_name!r}",
                recoverable=True,
            ) from exc
        except OSError as exc:
            raise DocSearchError(
                code=ErrorCode.INDEX_READ_FAILED,
                message=f"Failed reading cached index {path}: {exc}",
            ) from exc

        try:
            return CrateIndex.model_validate_json(payload)
        except ValidationError as exc:
            raise DocSearchError(
                code=ErrorCode.INDEX_CORRUPT,
                message=f"Cached index {path} is corrupt",
            ) from exc

    def _save_sync(self, crate_name: str, index: CrateIndex) -> None:
        path = self.path_for(crate_name)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_text(index.model_dump_json(), encoding="utf-8")
        except OSError as exc:
            raise DocSearchError(
                code=ErrorCode.INDEX_WRITE_FAILED,
                message=f"Failed writing cached index {path}: {exc}",
            ) from exc
        log.debug("index_saved", crate=crate_name, path=str(path), items=len(index.mapping))
