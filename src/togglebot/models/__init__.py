from __future__ import annotations

from togglebot.models.index import CrateIndex
from togglebot.models.path import SimplePath

__all__ = [
    "CrateIndex",
    "SimplePath",
]
