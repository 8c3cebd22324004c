"""
Sync pass results.

Each unit of work (file, directory, category) returns its own immutable
SyncResult; callers combine them with merge().
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple


def _freeze_categories(by_category) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType({k: tuple(v) for k, v in dict(by_category or {}).items()})


@dataclass(frozen=True)
class SyncResult:
    """Names downloaded, already present, and failed during a pass."""
    downloaded: Tuple[str, ...] = ()
    already_present: Tuple[str, ...] = ()
    failed: Tuple[str, ...] = ()
    by_category: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "downloaded", tuple(self.downloaded))
        object.__setattr__(self, "already_present", tuple(self.already_present))
        object.__setattr__(self, "failed", tuple(self.failed))
        object.__setattr__(self, "by_category", _freeze_categories(self.by_category))

    @property
    def total_files(self) -> int:
        return len(self.downloaded) + len(self.already_present) + len(self.failed)

    @property
    def success_count(self) -> int:
        return len(self.downloaded) + len(self.already_present)

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: "SyncResult") -> "SyncResult":
        """Combine two results. Category lists for the same key are concatenated."""
        categories = {k: list(v) for k, v in self.by_category.items()}
        for key, names in other.by_category.items():
            categories.setdefault(key, []).extend(names)
        return SyncResult(
            downloaded=self.downloaded + other.downloaded,
            already_present=self.already_present + other.already_present,
            failed=self.failed + other.failed,
            by_category=categories,
        )

    def prefixed(self, prefix: str) -> "SyncResult":
        """Same result with every name placed under a folder prefix ("dir/name")."""
        def add(names: Iterable[str]) -> Tuple[str, ...]:
            return tuple(f"{prefix}/{n}" for n in names)

        return SyncResult(
            downloaded=add(self.downloaded),
            already_present=add(self.already_present),
            failed=add(self.failed),
            by_category={k: add(v) for k, v in self.by_category.items()},
        )

    def in_category(self, category: str) -> "SyncResult":
        """
        Place names under the category folder and record the bare successful
        names in by_category[category].
        """
        placed = self.prefixed(category)
        return SyncResult(
            downloaded=placed.downloaded,
            already_present=placed.already_present,
            failed=placed.failed,
            by_category={category: self.downloaded + self.already_present},
        )

    @classmethod
    def combine(cls, results: Iterable["SyncResult"]) -> "SyncResult":
        combined = cls()
        for result in results:
            combined = combined.merge(result)
        return combined
