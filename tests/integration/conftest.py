"""Integration test fixtures.

Provides a fully wired AppState with a tmp index directory and a real
httpx client (mock it with respx), plus the environment for subprocess
MCP tests.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest

from togglebot.config import CacheSettings, Settings
from togglebot.state import AppState

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def subprocess_env(index_dir: Path) -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Points the index directory at an isolated tmp directory and sends every
    fetch to an unroutable host so no test reaches the network.
    """
    env = os.environ.copy()
    env["TOGGLEBOT__CACHE__INDEX_DIR"] = str(index_dir)
    env["TOGGLEBOT__FETCHER__DOCS_RS_URL"] = "http://127.0.0.1:1"
    env["TOGGLEBOT__FETCHER__STD_DOCS_URL"] = "http://127.0.0.1:1"
    env["TOGGLEBOT__LOGGING__LEVEL"] = "WARNING"
    return env


@pytest.fixture()
async def app_state(index_dir: Path) -> AppState:
    """AppState wired like the server's lifespan, minus the MCP layer."""
    settings = Settings(cache=CacheSettings(index_dir=str(index_dir)))
    async with httpx.AsyncClient() as client:
        yield AppState(settings=settings, http_client=client)
