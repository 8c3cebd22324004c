"""
Manifest handling for Asset Sync.

The manifest is a JSON file enumerating remote assets by name and URL,
optionally partitioned into categories.
"""

from .manifest import (
    ManifestItem,
    FlatManifest,
    CategorizedManifest,
    NotAManifest,
    ManifestShape,
    parse_manifest,
    decode_lenient,
    category_key,
)

__all__ = [
    "ManifestItem",
    "FlatManifest",
    "CategorizedManifest",
    "NotAManifest",
    "ManifestShape",
    "parse_manifest",
    "decode_lenient",
    "category_key",
]
