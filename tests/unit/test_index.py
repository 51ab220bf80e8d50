"""Unit tests for togglebot.models.index."""

from __future__ import annotations

import pydantic
import pytest

from togglebot.models.index import CrateIndex
from togglebot.models.path import SimplePath


class TestFindLink:
    def test_item(self, anyhow_index: CrateIndex) -> None:
        link = anyhow_index.find_link(SimplePath.parse("anyhow::Result"))
        assert link == "https://docs.rs/anyhow/latest/anyhow/type.Result.html"

    def test_crate_root(self, anyhow_index: CrateIndex) -> None:
        link = anyhow_index.find_link(SimplePath.parse("anyhow"))
        assert link == "https://docs.rs/anyhow/latest/anyhow/index.html"

    def test_associated_item(self, anyhow_index: CrateIndex) -> None:
        link = anyhow_index.find_link(SimplePath.parse("anyhow::Error::new"))
        assert link == "https://docs.rs/anyhow/latest/anyhow/struct.Error.html#method.new"

    def test_missing_item(self, anyhow_index: CrateIndex) -> None:
        assert anyhow_index.find_link(SimplePath.parse("anyhow::Nonexistent")) is None

class TestSuggest:
    def test_close_match(self, anyhow_index: CrateIndex) -> None:
        assert anyhow_index.suggest(SimplePath.parse("anyhow::Reslt")) == ["anyhow::Result"]

    def test_nothing_close(self, anyhow_index: CrateIndex) -> None:
        assert anyhow_index.suggest(SimplePath.parse("anyhow::Nonexistent")) == []

    def test_limit_zero(self, anyhow_index: CrateIndex) -> None:
        assert anyhow_index.suggest(SimplePath.parse("anyhow::Reslt"), limit=0) == []

    def test_empty_index(self) -> None:
        index = CrateIndex(name="empty", version="latest", base_url="https://docs.rs/empty/latest/")
        assert index.suggest(SimplePath.parse("empty::Thing")) == []

class TestSerialisation:
    def test_json_round_trip(self, anyhow_index: CrateIndex) -> None:
        payload = anyhow_index.model_dump_json()
        assert CrateIndex.model_validate_json(payload) == anyhow_index

    def test_frozen(self, anyhow_index: CrateIndex) -> None:
        with pytest.raises(pydantic.ValidationError):
            anyhow_index.name = "other"  # type: ignore[misc]
