"""Rustdoc search-index discovery and transformation.

A crate index is obtained in two steps:

1. ``start_search`` names the crate's root documentation page.
2. ``SearchStart.find_index`` locates the search-index script referenced by
   that page, and ``FindIndex.transform_index`` turns the script into a
   ``CrateIndex`` mapping every item path to its page.

Only the JSON-based search-index format is understood (``JSON.parse('{...}')``
and ``new Map(JSON.parse('[...]'))``). No network I/O happens here; the
fetcher downloads the pages and hands over their bodies.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from urllib.parse import urljoin

from togglebot.errors import DocSearchError, ErrorCode
from togglebot.models.index import CrateIndex

STD_CRATES: frozenset[str] = frozenset({"std", "core", "alloc", "proc_macro", "test"})

# Order matches rustdoc's ItemType discriminants.
ITEM_TYPES: tuple[str, ...] = (
    "mod",
    "externcrate",
    "import",
    "struct",
    "enum",
    "fn",
    "type",
    "static",
    "trait",
    "impl",
    "tymethod",
    "method",
    "structfield",
    "variant",
    "macro",
    "primitive",
    "associatedtype",
    "constant",
    "associatedconstant",
    "union",
    "foreigntype",
    "keyword",
    "existential",
    "attr",
    "derive",
    "traitalias",
    "generic",
)

# Item types without a page or anchor of their own.
_UNLINKED_TYPES = frozenset({"externcrate", "import", "impl", "generic"})

_SEARCH_INDEX_ATTR_RE = re.compile(r'data-search-index-js="([^"]+)"')
_SEARCH_INDEX_SCRIPT_RE = re.compile(r'<script[^>]*\ssrc="([^"]*search-index[^"]*\.js)"')
_ROOT_PATH_RE = re.compile(r'data-root-path="([^"]*)"')
_RESOURCE_SUFFIX_RE = re.compile(r'data-resource-suffix="([^"]*)"')
_JSON_PARSE_RE = re.compile(r"JSON\.parse\('((?:[^'\\]|\\.)*)'\)", re.DOTALL)
_JS_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def crate_ident(crate_name: str) -> str:
    """Return the crate name as it appears in Rust paths (``serde-json`` → ``serde_json``)."""
    return crate_name.replace("-", "_")


def start_search(
    crate_name: str,
    version: str,
    *,
    docs_rs_url: str = "https://docs.rs",
    std_url: str = "https://doc.rust-lang.org/stable",
) -> SearchStart:
    """Begin an index lookup for ``crate_name`` at the given version selector.

    Standard library crates are documented on doc.rust-lang.org and ignore
    ``version``; everything else is looked up on docs.rs.
    """
    ident = crate_ident(crate_name)
    if ident in STD_CRATES:
        url = f"{std_url.rstrip('/')}/{ident}/index.html"
    else:
        url = f"{docs_rs_url.rstrip('/')}/{crate_name}/{version}/{ident}/index.html"
    return SearchStart(crate_name=crate_name, version=version, url=url)


@dataclass(frozen=True)
class SearchStart:
    """First step: the crate's root documentation page."""

    crate_name: str
    version: str
    url: str

    def find_index(self, body: str, *, page_url: str | None = None) -> FindIndex:
        """Locate the search-index script referenced by the root page.

        ``page_url`` is the URL the body was finally served from (after
        redirects) and defaults to ``self.url``. Relative script paths are
        resolved against it.
        """
        base = page_url or self.url

        match = _SEARCH_INDEX_ATTR_RE.search(body) or _SEARCH_INDEX_SCRIPT_RE.search(body)
        if match is not None:
            index_url = urljoin(base, match.group(1))
        else:
            root = _ROOT_PATH_RE.search(body)
            suffix = _RESOURCE_SUFFIX_RE.search(body)
            if root is None or suffix is None:
                raise DocSearchError(
                    code=ErrorCode.INDEX_FORMAT_INVALID,
                    message=f"No search index referenced by {base}",
                )
            index_url = urljoin(base, f"{root.group(1)}search-index{suffix.group(1)}.js")

        return FindIndex(
            crate_name=self.crate_name,
            version=self.version,
            url=index_url,
            base_url=urljoin(index_url, "."),
        )


@dataclass(frozen=True)
class FindIndex:
    """Second step: the search-index script and the doc root it belongs to."""

    crate_name: str
    version: str
    url: str
    base_url: str

    def transform_index(self, body: str) -> CrateIndex:
        """Turn the search-index script into a ``CrateIndex`` for this crate."""
        crates = _parse_search_index(body, self.url)
        ident = crate_ident(self.crate_name)

        data = crates.get(ident)
        if data is None:
            raise DocSearchError(
                code=ErrorCode.INDEX_FORMAT_INVALID,
                message=f"Search index at {self.url} has no entry for crate {ident!r}",
            )

        try:
            mapping = _build_mapping(ident, data)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise DocSearchError(
                code=ErrorCode.INDEX_FORMAT_INVALID,
                message=f"Malformed search index data for {ident!r} at {self.url}: {exc}",
            ) from exc

        return CrateIndex(
            name=self.crate_name,
            version=self.version,
            base_url=self.base_url,
            mapping=mapping,
        )


def _parse_search_index(body: str, url: str) -> dict[str, dict]:
    """Extract the per-crate data dict from a search-index script."""
    match = _JSON_PARSE_RE.search(body)
    if match is None:
        raise DocSearchError(
            code=ErrorCode.INDEX_FORMAT_INVALID,
            message=f"Unrecognised search index format at {url}",
        )

    # The JSON is embedded in a single-quoted JS string: undo \\, \' and
    # line continuations.
    raw = _JS_ESCAPE_RE.sub(lambda m: "" if m.group(1) == "\n" else m.group(1), match.group(1))

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DocSearchError(
            code=ErrorCode.INDEX_FORMAT_INVALID,
            message=f"Search index at {url} is not valid JSON: {exc}",
        ) from exc

    # Newer rustdoc: new Map([["crate", {...}], ...]); older: {"crate": {...}}
    if isinstance(payload, list):
        try:
            return {name: data for name, data in payload}
        except (TypeError, ValueError) as exc:
            raise DocSearchError(
                code=ErrorCode.INDEX_FORMAT_INVALID,
                message=f"Search index at {url} is not a list of crate entries: {exc}",
            ) from exc
    if isinstance(payload, dict):
        return payload
    raise DocSearchError(
        code=ErrorCode.INDEX_FORMAT_INVALID,
        message=f"Search index at {url} has unexpected top-level type {type(payload).__name__}",
    )


def _item_type(code: int) -> str:
    if not 0 <= code < len(ITEM_TYPES):
        raise ValueError(f"unknown item type code {code}")
    return ITEM_TYPES[code]


def _item_types(raw: str | list[int]) -> list[str]:
    # Compressed form: one character per item, "A" being type 0.
    if isinstance(raw, str):
        return [_item_type(ord(char) - 65) for char in raw]
    return [_item_type(code) for code in raw]


def _decode_vlq_hex(raw: str) -> list[int]:
    """Decode a rustdoc VLQ-hex column into one integer per item.

    Numbers are hex, most significant digit first: leading digits are
    ``@``-based, the final digit is backtick-based, and the low bit of the
    result is the sign. A lone backtick is 0. The characters ``0`` to ``?``
    repeat one of the 16 most recently decoded numbers.
    """
    values: list[int] = []
    backrefs: list[int] = []
    pos = 0
    while pos < len(raw):
        char = ord(raw[pos])
        if 48 <= char < 64:
            values.append(backrefs[char - 48])
            pos += 1
            continue
        if char == 96:
            values.append(0)
            pos += 1
            continue

        number = 0
        while char < 96:
            if char < 64:
                raise ValueError(f"unexpected character {raw[pos]!r} at offset {pos}")
            number = (number << 4) | (char & 0xF)
            pos += 1
            char = ord(raw[pos])
        number = (number << 4) | (char & 0xF)
        pos += 1

        value = -(number >> 1) if number & 1 else number >> 1
        values.append(value)
        backrefs.insert(0, value)
        del backrefs[16:]
    return values


def _parent_refs(raw: str | list[int]) -> list[int]:
    # Newer rustdoc writes the column VLQ-hex encoded, older as a JSON list.
    if isinstance(raw, str):
        return _decode_vlq_hex(raw)
    return raw


def _module_paths(raw: list, count: int, default: str) -> list[str]:
    """Expand the module path column to one path per item.

    Dense form: one entry per item, ``""`` repeating the previous path.
    Sparse form: ``[index, path]`` pairs, each path holding until the next.
    """
    paths: list[str] = []
    last = default

    if raw and isinstance(raw[0], list):
        changes = {index: path for index, path in raw}
        for i in range(count):
            last = changes.get(i, last)
            paths.append(last)
        return paths

    for i in range(count):
        if i < len(raw) and raw[i]:
            last = raw[i]
        paths.append(last)
    return paths


def _build_mapping(ident: str, data: dict) -> dict[str, str]:
    names: list[str] = data["n"]
    types = _item_types(data["t"])
    paths = _module_paths(data.get("q", []), len(names), ident)
    parent_refs = _parent_refs(data.get("i", []))
    parents: list[list] = data.get("p", [])

    mapping: dict[str, str] = {ident: f"{ident}/index.html"}

    for i, name in enumerate(names):
        item_type = types[i]
        if not name or item_type in _UNLINKED_TYPES:
            continue

        path = paths[i]
        directory = path.replace("::", "/")
        parent_ref = parent_refs[i] if i < len(parent_refs) else 0

        if parent_ref:
            if not 0 < parent_ref <= len(parents):
                raise ValueError(f"parent reference {parent_ref} out of range")
            parent_code, parent_name = parents[parent_ref - 1][:2]
            parent_type = _item_type(parent_code)
            if parent_type == "variant":
                # Fields of enum variants live on the enum page; skip them.
                continue
            full_path = f"{path}::{parent_name}::{name}"
            link = f"{directory}/{parent_type}.{parent_name}.html#{item_type}.{name}"
            mapping.setdefault(full_path, link)
            continue

        full_path = f"{path}::{name}"
        if item_type == "mod":
            # A module shares its name with e.g. std::vec!; the module wins.
            mapping[full_path] = f"{directory}/{name}/index.html"
        else:
            mapping.setdefault(full_path, f"{directory}/{item_type}.{name}.html")

    return mapping
