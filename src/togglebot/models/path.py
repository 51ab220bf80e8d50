"""Fully-qualified item paths as typed by users, e.g. ``anyhow::Result``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from togglebot.errors import InvalidPathError

# crates.io limits crate names to 64 characters.
MAX_CRATE_NAME_LENGTH = 64

_CRATE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
_IDENT_RE = re.compile(r"^(?:r#)?[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class SimplePath:
    """A validated path of ``::``-separated segments, crate name first."""

    segments: tuple[str, ...]

    @classmethod
    def parse(cls, raw: str) -> SimplePath:
        """Parse a raw query into a path.

        Raises InvalidPathError with a user-facing reason when the query is
        not a valid path. A bare crate name is accepted and refers to the
        crate root.
        """
        text = raw.strip()
        if not text:
            raise InvalidPathError("the path is empty")
        if text.startswith("::") or text.endswith("::"):
            raise InvalidPathError("the path must not start or end with `::`")

        segments = tuple(text.split("::"))
        if any(not segment for segment in segments):
            raise InvalidPathError("the path contains an empty segment")

        crate_name, *items = segments
        if len(crate_name) > MAX_CRATE_NAME_LENGTH or not _CRATE_NAME_RE.match(crate_name):
            raise InvalidPathError(f"`{crate_name}` is not a valid crate name")

        for item in items:
            if item == "_" or not _IDENT_RE.match(item):
                raise InvalidPathError(f"`{item}` is not a valid identifier")

        return cls(segments)

    @property
    def crate_name(self) -> str:
        return self.segments[0]

    @property
    def canonical(self) -> str:
        """Key used by the link cache."""
        return "::".join(self.segments)

    @property
    def item_path(self) -> str:
        """The path as rustdoc spells it.

        Hyphens in the crate name become underscores and raw identifier
        prefixes are dropped: ``serde-json::r#type`` → ``serde_json::type``.
        """
        items = (segment.removeprefix("r#") for segment in self.segments[1:])
        return "::".join((self.crate_name.replace("-", "_"), *items))

    def __str__(self) -> str:
        return self.canonical
