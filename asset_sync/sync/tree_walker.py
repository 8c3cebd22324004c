"""
Recursive remote directory sync for Asset Sync.

Walks a repository folder one listing request per directory, files before
subdirectories, and prunes each local level against its remote listing.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from ..core.errors import ListingError
from ..core.progress import ProgressReporter
from ..remote.client import ContentsClient
from ..remote.models import ContentsListing, RemoteEntry, RepoCoords
from .reconciler import Action, CacheReconciler
from .result import SyncResult

logger = logging.getLogger(__name__)

Span = Tuple[float, float]


class TreeWalker:
    """Mirrors a remote folder tree into a local directory."""

    def __init__(
        self,
        client: ContentsClient,
        reconciler: CacheReconciler,
        progress: Optional[ProgressReporter] = None,
    ):
        self.client = client
        self.reconciler = reconciler
        self.progress = progress or ProgressReporter()

    async def walk(
        self,
        coords: RepoCoords,
        path: str,
        local_dir: Path,
        span: Span = (0.0, 1.0),
    ) -> SyncResult:
        """
        Sync the remote folder at path into local_dir.

        Raises:
            ListingError: the top-level listing failed (nested failures are
                recorded in the result instead)
        """
        listing = await self.client.list_directory(coords, path)
        return await self._sync_listing(listing, coords, local_dir, span)

    async def _list_child(self, entry: RemoteEntry, coords: RepoCoords) -> ContentsListing:
        if entry.listing_url:
            return await self.client.list_url(entry.listing_url, coords, entry.repo_path)
        return await self.client.list_directory(coords, entry.repo_path)

    async def _sync_listing(
        self,
        listing: ContentsListing,
        coords: RepoCoords,
        local_dir: Path,
        span: Span,
    ) -> SyncResult:
        local_dir.mkdir(parents=True, exist_ok=True)
        start, end = span

        if listing.single_file:
            # Path named one file; there's no complete directory scope to prune
            entry = listing.entries[0]
            self.progress.report(f"Checking {entry.name}...", end, entry.name)
            return await self.reconciler.reconcile(entry, local_dir)

        files = [e for e in listing.files if e.download_url]
        dirs = listing.directories
        total = len(files) + len(dirs)
        step = (end - start) / total if total else 0.0
        results = []

        for i, entry in enumerate(files):
            progress = start + (i + 1) * step
            self.progress.report(f"Checking {entry.name}...", progress, entry.name)
            decision = self.reconciler.decide(entry, local_dir)
            if decision.action is Action.FETCH:
                self.progress.report(f"Downloading {entry.name}...", progress, entry.name)
            results.append(await self.reconciler.reconcile(entry, local_dir, decision))

        for j, entry in enumerate(dirs):
            index = len(files) + j
            sub_span = (start + index * step, start + (index + 1) * step)
            self.progress.report(f"Syncing {entry.name}/...", sub_span[0], entry.name)
            logger.debug("Entering %s/", entry.repo_path or entry.name)

            try:
                child = await self._list_child(entry, coords)
                sub_result = await self._sync_listing(
                    child, coords, local_dir / entry.name, sub_span,
                )
            except (ListingError, OSError) as e:
                logger.warning("Failed to sync %s/: %s", entry.name, e)
                results.append(SyncResult(failed=(f"{entry.name}/",)))
                continue
            results.append(sub_result.prefixed(entry.name))

        self.reconciler.prune(local_dir, listing.names)
        return SyncResult.combine(results)
