"""Shared test fixtures for the togglebot test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from togglebot.errors import DocSearchError, ErrorCode
from togglebot.index_store import IndexStore
from togglebot.models.index import CrateIndex

if TYPE_CHECKING:
    from pathlib import Path


class StubFetcher:
    """IndexFetcherProtocol stub serving fixed indexes and counting calls."""

    def __init__(self, indexes: dict[str, CrateIndex]) -> None:
        self.indexes = indexes
        self.calls: list[tuple[str, str | None]] = []

    async def fetch_index(self, crate_name: str, version: str | None = None) -> CrateIndex:
        self.calls.append((crate_name, version))
        index = self.indexes.get(crate_name)
        if index is None:
            raise DocSearchError(
                code=ErrorCode.CRATE_NOT_FOUND,
                message=f"Crate {crate_name!r} has no documentation",
            )
        return index


@pytest.fixture()
def anyhow_index() -> CrateIndex:
    """Small index for the anyhow crate."""
    return CrateIndex(
        name="anyhow",
        version="latest",
        base_url="https://docs.rs/anyhow/latest/",
        mapping={
            "anyhow": "anyhow/index.html",
            "anyhow::Result": "anyhow/type.Result.html",
            "anyhow::Error": "anyhow/struct.Error.html",
            "anyhow::Error::new": "anyhow/struct.Error.html#method.new",
            "anyhow::bail": "anyhow/macro.bail.html",
        },
    )


@pytest.fixture()
def stub_fetcher(anyhow_index: CrateIndex) -> StubFetcher:
    return StubFetcher({"anyhow": anyhow_index})


@pytest.fixture()
def index_dir(tmp_path: Path) -> Path:
    return tmp_path / "doc-indexes"


@pytest.fixture()
def store(index_dir: Path) -> IndexStore:
    """Disk store rooted in a not-yet-existing tmp directory."""
    return IndexStore(index_dir)
