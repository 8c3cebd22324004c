"""
Effect catalog: which effect files are available per category.
"""

from .effects import (
    EffectCatalog,
    FilterItem,
    Gender,
    CatalogHandle,
    Uninitialized,
    Ready,
    DEFAULT_FILTER,
    NO_EFFECT,
    load_catalog,
    bundled_names,
)

__all__ = [
    "EffectCatalog",
    "FilterItem",
    "Gender",
    "CatalogHandle",
    "Uninitialized",
    "Ready",
    "DEFAULT_FILTER",
    "NO_EFFECT",
    "load_catalog",
    "bundled_names",
]
