"""
Manifest-driven sync for Asset Sync.

Flat manifests sync into the local root; categorized manifests sync each
known category into its own folder under effects/.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple

from ..core.constants import CATEGORIES, DEFAULT_BRANCH
from ..core.progress import ProgressReporter
from ..manifest.manifest import CategorizedManifest, FlatManifest, ManifestItem
from .reconciler import Action, CacheReconciler
from .result import SyncResult

logger = logging.getLogger(__name__)

Span = Tuple[float, float]


class ManifestSync:
    """Reconciles a local folder (or category folders) against a manifest."""

    def __init__(
        self,
        reconciler: CacheReconciler,
        progress: Optional[ProgressReporter] = None,
        default_branch: str = DEFAULT_BRANCH,
    ):
        self.reconciler = reconciler
        self.progress = progress or ProgressReporter()
        self.default_branch = default_branch

    async def sync_flat(self, manifest: FlatManifest, local_dir: Path, span: Span = (0.0, 1.0)) -> SyncResult:
        logger.info("Flat manifest: %d files", len(manifest.items))
        return await self._sync_items(manifest.items, local_dir, span)

    async def sync_categorized(
        self,
        manifest: CategorizedManifest,
        effects_dir: Path,
        span: Span = (0.0, 1.0),
    ) -> SyncResult:
        """
        Sync every known category into effects_dir/<category>/.

        A category missing from the document is treated as empty: its folder
        is created and emptied of synced files.
        """
        start, end = span
        total = manifest.total_items
        results = []
        done = 0

        for category in CATEGORIES:
            items = manifest.items(category)
            logger.info("Category %s: %d files", category, len(items))
            sub_start = start + (done / total) * (end - start) if total else start
            done += len(items)
            sub_end = start + (done / total) * (end - start) if total else start
            result = await self._sync_items(items, effects_dir / category, (sub_start, sub_end))
            results.append(result.in_category(category))

        return SyncResult.combine(results)

    async def _sync_items(self, items: Sequence[ManifestItem], local_dir: Path, span: Span) -> SyncResult:
        """Prune local_dir to the declared names, then reconcile each item."""
        local_dir.mkdir(parents=True, exist_ok=True)
        self.reconciler.prune(local_dir, {item.name for item in items})

        start, end = span
        step = (end - start) / len(items) if items else 0.0
        results = []

        for i, item in enumerate(items):
            progress = start + (i + 1) * step
            entry = item.to_entry(self.default_branch)
            self.progress.report(f"Checking {entry.name}...", progress, entry.name)
            decision = self.reconciler.decide(entry, local_dir)
            if decision.action is Action.FETCH:
                self.progress.report(f"Downloading {entry.name}...", progress, entry.name)
            results.append(await self.reconciler.reconcile(entry, local_dir, decision))

        return SyncResult.combine(results)
