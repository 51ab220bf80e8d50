from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict
from rapidfuzz import fuzz, process

if TYPE_CHECKING:
    from togglebot.models.path import SimplePath


class CrateIndex(BaseModel):
    """All documented items of one crate, mapped to their doc pages.

    ``mapping`` keys are full item paths (``anyhow::Result``), values are
    links relative to ``base_url`` (``anyhow/type.Result.html``).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    base_url: str  # Always ends with "/"
    mapping: dict[str, str] = {}

    def find_link(self, path: SimplePath) -> str | None:
        """Return the absolute documentation URL for ``path``, or None."""
        link = self.mapping.get(path.item_path)
        if link is None:
            return None
        return self.base_url + link

    def suggest(
        self,
        path: SimplePath,
        *,
        limit: int = 3,
        score_cutoff: int = 80,
    ) -> list[str]:
        """Return known item paths that look like ``path``, best match first."""
        if limit <= 0 or not self.mapping:
            return []
        results = process.extract(
            path.item_path,
            list(self.mapping),
            scorer=fuzz.ratio,
            limit=limit,
            score_cutoff=score_cutoff,
        )
        return [candidate for candidate, _score, _idx in results]
