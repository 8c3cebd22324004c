"""
Effect catalog for Asset Sync.

Builds the per-category list of effect files available on this device, from
both the synced cache (<root>/effects/<category>/) and the assets bundled
with the app (<bundled>/effects/<category>/). The catalog is an immutable
value owned by whoever loads it; CatalogHandle carries the load state.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Optional, Tuple, Union

from ..core.constants import CATEGORIES, EFFECT_EXTENSION, EFFECTS_FOLDER
from ..core.files import is_hidden
from ..core.formatting import effect_id, format_effect_name, name_sort_key

logger = logging.getLogger(__name__)

# Built-in identifier the renderer understands as "no effect"
NO_EFFECT = "none"

# Colour pairs for auto-generated filter chips, assigned round-robin
COLOR_PALETTES = [
    ("#FF6B9D", "#C44569"),  # Pink
    ("#8B4513", "#CD853F"),  # Brown
    ("#D4A373", "#E9EDC9"),  # Beige
    ("#FF69B4", "#FFB6C1"),  # Light Pink
    ("#FF4500", "#FF6347"),  # Orange-Red
    ("#00F5D4", "#F15BB5"),  # Cyan-Magenta
    ("#2D3142", "#4F5D75"),  # Dark Blue-Gray
    ("#FFD700", "#B8860B"),  # Gold
    ("#808080", "#A9A9A9"),  # Gray
    ("#8B7355", "#D2B48C"),  # Tan
    ("#1A1A1A", "#8B0000"),  # Black-Red
    ("#FF6600", "#FFCC00"),  # Orange-Yellow
    ("#FF1493", "#FF69B4"),  # Deep Pink
    ("#00CED1", "#20B2AA"),  # Teal
    ("#9370DB", "#00CED1"),  # Purple-Cyan
    ("#191970", "#4B0082"),  # Navy-Indigo
    ("#32CD32", "#228B22"),  # Green
    ("#4169E1", "#1E90FF"),  # Royal Blue
]


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    BOTH = "both"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Gender":
        label = (label or "").strip().lower()
        for gender in cls:
            if gender.value == label:
                return gender
        return cls.UNKNOWN


@dataclass(frozen=True)
class FilterItem:
    """One selectable effect."""
    id: str
    name: str
    effect_file: str  # local file path, or NO_EFFECT
    colors: Tuple[str, str]
    category: str = ""
    bundled: bool = False


DEFAULT_FILTER = FilterItem(
    id="original",
    name="Original",
    effect_file=NO_EFFECT,
    colors=("#333333", "#555555"),
)


@dataclass(frozen=True)
class EffectCatalog:
    """Effects per category. Lists never include DEFAULT_FILTER."""
    male: Tuple[FilterItem, ...] = ()
    female: Tuple[FilterItem, ...] = ()
    both: Tuple[FilterItem, ...] = ()

    @property
    def total(self) -> int:
        return len(self.male) + len(self.female) + len(self.both)

    def category(self, name: str) -> Tuple[FilterItem, ...]:
        return getattr(self, name, ())

    def filters_for_gender(self, gender: Union[Gender, str, None]) -> list:
        """
        Filters to offer for a classifier label.

        male -> default + male + both
        female -> default + female + both
        anything else -> default + both
        """
        if not isinstance(gender, Gender):
            gender = Gender.from_label(gender)
        if gender is Gender.MALE:
            return [DEFAULT_FILTER, *self.male, *self.both]
        if gender is Gender.FEMALE:
            return [DEFAULT_FILTER, *self.female, *self.both]
        return [DEFAULT_FILTER, *self.both]


def _scan_category(folder: Path) -> Dict[str, Path]:
    if not folder.is_dir():
        return {}
    return {
        f.name: f
        for f in folder.iterdir()
        if f.is_file() and not is_hidden(f.name) and f.name.lower().endswith(EFFECT_EXTENSION)
    }


def load_catalog(synced_root: Optional[Path], bundled_root: Optional[Path] = None) -> EffectCatalog:
    """
    Build a catalog from synced and bundled effect folders.

    When both hold a file with the same name, the synced copy is used.
    """
    by_category = {}
    for category in CATEGORIES:
        bundled = _scan_category(bundled_root / EFFECTS_FOLDER / category) if bundled_root else {}
        synced = _scan_category(synced_root / EFFECTS_FOLDER / category) if synced_root else {}
        merged = {**{n: (p, True) for n, p in bundled.items()}, **{n: (p, False) for n, p in synced.items()}}

        items = []
        for index, name in enumerate(sorted(merged, key=name_sort_key)):
            path, is_bundled = merged[name]
            items.append(FilterItem(
                id=effect_id(name),
                name=format_effect_name(name),
                effect_file=str(path),
                colors=COLOR_PALETTES[index % len(COLOR_PALETTES)],
                category=category,
                bundled=is_bundled,
            ))
        by_category[category] = tuple(items)
        logger.debug("Catalog %s: %d effects", category, len(items))

    return EffectCatalog(**by_category)


def bundled_names(bundled_dir: Optional[Path]) -> FrozenSet[str]:
    """Names of every file shipped under the bundled directory (any depth)."""
    if not bundled_dir or not bundled_dir.is_dir():
        return frozenset()
    return frozenset(
        f.name for f in bundled_dir.rglob("*")
        if f.is_file() and not is_hidden(f.name)
    )


class Uninitialized:
    """Catalog not loaded yet."""

    def __repr__(self) -> str:
        return "Uninitialized()"


@dataclass(frozen=True)
class Ready:
    catalog: EffectCatalog


CatalogState = Union[Uninitialized, Ready]


class CatalogHandle:
    """
    Owner-held load state for an EffectCatalog.

    Starts Uninitialized; ensure_ready() loads once. A failed load still
    moves to Ready with an empty catalog so callers don't retry every frame.
    """

    def __init__(
        self,
        synced_root: Optional[Path],
        bundled_root: Optional[Path] = None,
        loader: Callable[[Optional[Path], Optional[Path]], EffectCatalog] = load_catalog,
    ):
        self.synced_root = synced_root
        self.bundled_root = bundled_root
        self._loader = loader
        self.state: CatalogState = Uninitialized()

    @property
    def is_ready(self) -> bool:
        return isinstance(self.state, Ready)

    @property
    def catalog(self) -> EffectCatalog:
        if not isinstance(self.state, Ready):
            raise RuntimeError("Effect catalog has not been loaded")
        return self.state.catalog

    def ensure_ready(self) -> EffectCatalog:
        if isinstance(self.state, Ready):
            return self.state.catalog
        return self.reload()

    def reload(self) -> EffectCatalog:
        """Load (again), e.g. after a sync pass changed the cache."""
        try:
            catalog = self._loader(self.synced_root, self.bundled_root)
        except OSError as e:
            logger.warning("Could not load effect catalog: %s", e)
            catalog = EffectCatalog()
        self.state = Ready(catalog)
        logger.info(
            "Effect catalog ready: %d male, %d female, %d both",
            len(catalog.male), len(catalog.female), len(catalog.both),
        )
        return catalog
