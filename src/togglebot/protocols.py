"""Protocol interfaces for swappable components.

The resolver references these protocols, not the concrete implementations,
so tests can substitute lightweight stubs (e.g. a counting fetcher or an
in-memory store).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from togglebot.models.index import CrateIndex
    from togglebot.models.path import SimplePath


class PathParser(Protocol):
    """Turns a raw query into a path, raising InvalidPathError when it can't."""

    def __call__(self, raw: str) -> SimplePath: ...


class IndexStoreProtocol(Protocol):
    """Interface for the on-disk crate index cache."""

    async def load(self, crate_name: str) -> CrateIndex: ...

    async def save(self, crate_name: str, index: CrateIndex) -> None: ...


class IndexFetcherProtocol(Protocol):
    """Interface for the remote crate index fetcher."""

    async def fetch_index(self, crate_name: str, version: str | None = None) -> CrateIndex: ...
