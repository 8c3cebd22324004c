"""
Manifest interpretation for Asset Sync.

A manifest is a JSON document listing assets by name and URL, either flat:

    {"files": [{"name": "x.deepar", "url": "https://..."}]}

or split into a fixed set of categories:

    {"male_files": [...], "female_files": [...], "both_files": [...]}

Anything else (invalid JSON, not an object, no recognized key) is not a
manifest, and the caller treats the payload as a single file.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from ..core.constants import CATEGORIES, CATEGORY_KEY_SUFFIX, DEFAULT_BRANCH, FLAT_MANIFEST_KEY
from ..remote.links import repo_coords_from_url, to_direct_url
from ..remote.models import EntryKind, RemoteEntry

logger = logging.getLogger(__name__)

# A string literal (kept as is), or a comma directly before a closing bracket/brace
_TRAILING_COMMA = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[\]}])')


def _strip_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub(lambda m: m.group(1) or m.group(2), text)


@dataclass(frozen=True)
class ManifestItem:
    """One {name, url} entry."""
    name: str
    url: str

    def to_entry(self, default_branch: str = DEFAULT_BRANCH) -> RemoteEntry:
        """RemoteEntry for the reconciler; repo coordinates come from the URL when it has them."""
        located = repo_coords_from_url(self.url, default_branch)
        coords, repo_path = located if located else (None, "")
        return RemoteEntry(
            name=self.name,
            kind=EntryKind.FILE,
            download_url=to_direct_url(self.url),
            repo_path=repo_path,
            coords=coords,
        )

    @classmethod
    def from_dict(cls, data: Any) -> Optional["ManifestItem"]:
        """Build from a raw item; None if it lacks a usable name or url."""
        if not isinstance(data, dict):
            return None
        name = data.get("name")
        url = data.get("url")
        if not isinstance(name, str) or not isinstance(url, str):
            return None
        name = name.strip()
        url = url.strip()
        if not name or not url:
            return None
        # Names become local filenames; anything path-like is rejected
        if "/" in name or "\\" in name or name in (".", ".."):
            return None
        return cls(name=name, url=url)


@dataclass(frozen=True)
class FlatManifest:
    items: Tuple[ManifestItem, ...] = ()

    @property
    def names(self) -> set:
        return {i.name for i in self.items}


@dataclass(frozen=True)
class CategorizedManifest:
    """Items per known category. Every known category is present (possibly empty)."""
    categories: Dict[str, Tuple[ManifestItem, ...]] = field(default_factory=dict)

    def items(self, category: str) -> Tuple[ManifestItem, ...]:
        return self.categories.get(category, ())

    @property
    def total_items(self) -> int:
        return sum(len(items) for items in self.categories.values())


@dataclass(frozen=True)
class NotAManifest:
    reason: str = ""


ManifestShape = Union[FlatManifest, CategorizedManifest, NotAManifest]


def category_key(category: str) -> str:
    return f"{category}{CATEGORY_KEY_SUFFIX}"


def decode_lenient(data: Union[bytes, str]) -> Any:
    """
    Decode JSON, retrying once with trailing commas removed.

    Commas inside string values are left alone.

    Raises:
        ValueError: if neither attempt decodes
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValueError("payload is not UTF-8 text") from e
    else:
        text = data.lstrip("\ufeff")

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    cleaned = _strip_trailing_commas(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}") from e


def _collect_items(raw: Any, label: str) -> Tuple[ManifestItem, ...]:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Manifest key %r is not a list; ignoring", label)
        return ()

    items = []
    seen = set()
    for entry in raw:
        item = ManifestItem.from_dict(entry)
        if item is None:
            logger.debug("Discarding manifest item without name/url in %r: %r", label, entry)
            continue
        if item.name in seen:
            logger.debug("Discarding duplicate manifest item %r in %r", item.name, label)
            continue
        seen.add(item.name)
        items.append(item)
    return tuple(items)


def parse_manifest(data: Union[bytes, str]) -> ManifestShape:
    """
    Classify a fetched payload as a flat manifest, a categorized manifest, or
    not a manifest.

    Categorized keys take precedence over "files" when a document has both.
    Unknown top-level keys are ignored.
    """
    try:
        doc = decode_lenient(data)
    except ValueError as e:
        return NotAManifest(str(e))

    if not isinstance(doc, dict):
        return NotAManifest("top-level value is not an object")

    if any(category_key(c) in doc for c in CATEGORIES):
        return CategorizedManifest(categories={
            c: _collect_items(doc.get(category_key(c)), category_key(c))
            for c in CATEGORIES
        })

    if FLAT_MANIFEST_KEY in doc:
        return FlatManifest(items=_collect_items(doc[FLAT_MANIFEST_KEY], FLAT_MANIFEST_KEY))

    return NotAManifest("no recognized manifest keys")
