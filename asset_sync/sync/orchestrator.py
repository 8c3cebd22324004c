"""
Sync orchestration for Asset Sync.

Entry point for a pass: classifies the source URL, prepares the local root,
dispatches to the tree walker or manifest sync, and reports progress.
"""

import asyncio
import logging
from pathlib import Path
from typing import AbstractSet, Callable, Optional

from ..config import SyncSettings
from ..core.constants import DEFAULT_FILENAME, EFFECTS_FOLDER
from ..core.errors import DownloadError, ListingError, SyncSetupError
from ..core.progress import ProgressCallback, ProgressChannel, ProgressReporter
from ..manifest.manifest import CategorizedManifest, FlatManifest, parse_manifest
from ..remote.client import ContentsClient
from ..remote.links import filename_from_content_disposition, repo_coords_from_url
from ..remote.models import EntryKind, RemoteEntry
from ..remote.network import check_network
from ..remote.pointer import PointerResolver
from ..remote.source import BlobFile, GenericPayload, RawFile, SourceShape, Tree, classify_source
from ..remote.transport import Transport
from .manifest_sync import ManifestSync
from .reconciler import CacheReconciler
from .result import SyncResult
from .tree_walker import TreeWalker

logger = logging.getLogger(__name__)

NetworkCheck = Callable[[str], tuple]

# Fraction of the bar reached once the remote listing/manifest is in hand
LISTED_PROGRESS = 0.1


def _header(headers: dict, name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None


class _Pass:
    """Collaborators for one sync pass, built once the transport is open."""

    def __init__(self, settings: SyncSettings, transport: Transport, bundled_names, progress: ProgressReporter):
        self.settings = settings
        self.transport = transport
        self.progress = progress
        self.resolver = PointerResolver(transport, settings.media_root, settings.pointer_timeout)
        self.reconciler = CacheReconciler(
            transport,
            self.resolver,
            bundled_names=bundled_names,
            min_valid_size=settings.min_valid_size,
            timeout=settings.request_timeout,
        )
        self.client = ContentsClient(
            transport,
            api_root=settings.api_root,
            timeout=settings.listing_timeout,
            auth_token=settings.api_token,
        )
        self.walker = TreeWalker(self.client, self.reconciler, progress)
        self.manifests = ManifestSync(self.reconciler, progress, settings.default_branch)


class AssetSync:
    """
    Synchronizes a remote asset source into <data_root>/<local_root_name>/.

    Per-file and per-directory failures end up in SyncResult.failed; only
    setup problems raise (SyncSetupError).
    """

    def __init__(
        self,
        settings: Optional[SyncSettings] = None,
        bundled_names: AbstractSet[str] = frozenset(),
        transport: Optional[Transport] = None,
        network_check: Optional[NetworkCheck] = check_network,
    ):
        self.settings = settings or SyncSettings()
        self.bundled_names = frozenset(bundled_names)
        self.transport = transport
        self.network_check = network_check

    def local_root(self, local_root_name: str) -> Path:
        name = (local_root_name or "").strip()
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise SyncSetupError(f"Invalid local folder name: {local_root_name!r}")
        return Path(self.settings.data_root) / name

    def sync(
        self,
        source_url: str,
        local_root_name: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """Run a pass to completion from synchronous code."""
        return asyncio.run(self.sync_async(source_url, local_root_name, on_progress))

    def stream(self, source_url: str, local_root_name: str) -> "SyncStream":
        """Run a pass, yielding ProgressEvents; see SyncStream."""
        return SyncStream(self, source_url, local_root_name)

    async def sync_async(
        self,
        source_url: str,
        local_root_name: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """
        Run one full reconciliation pass.

        Raises:
            SyncSetupError: unparseable source, local root can't be created,
                or the source host is unreachable
        """
        shape = classify_source(source_url, self.settings.default_branch)
        local_root = self.local_root(local_root_name)
        progress = ProgressReporter(on_progress)

        logger.info("Asset sync starting: %s -> %s", source_url, local_root)
        logger.debug("Source shape: %s", shape)
        progress.report("Connecting...", 0.0, None)

        try:
            local_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SyncSetupError(f"Cannot create local folder {local_root}: {e}") from e

        if self.network_check is not None:
            is_online, error = await asyncio.to_thread(self.network_check, source_url)
            if not is_online:
                raise SyncSetupError(f"Cannot reach source: {error}")

        if self.transport is not None:
            result = await self._dispatch(shape, local_root, self.transport, progress)
        else:
            async with Transport(
                timeout=self.settings.request_timeout,
                max_redirects=self.settings.max_redirects,
            ) as transport:
                result = await self._dispatch(shape, local_root, transport, progress)

        progress.report("Sync complete", 1.0, None)
        progress.close()
        logger.info(
            "Sync complete: %d downloaded, %d already present, %d failed",
            len(result.downloaded), len(result.already_present), len(result.failed),
        )
        return result

    async def _dispatch(
        self,
        shape: SourceShape,
        local_root: Path,
        transport: Transport,
        progress: ProgressReporter,
    ) -> SyncResult:
        ctx = _Pass(self.settings, transport, self.bundled_names, progress)
        handlers = {
            RawFile: self._sync_raw,
            BlobFile: self._sync_blob,
            Tree: self._sync_tree,
            GenericPayload: self._sync_generic,
        }
        return await handlers[type(shape)](shape, local_root, ctx)

    async def _sync_single(
        self,
        entry: RemoteEntry,
        local_root: Path,
        ctx: _Pass,
    ) -> SyncResult:
        ctx.progress.report(f"Checking {entry.name}...", LISTED_PROGRESS, entry.name)
        return await ctx.reconciler.reconcile(entry, local_root)

    async def _sync_raw(self, shape: RawFile, local_root: Path, ctx: _Pass) -> SyncResult:
        entry = RemoteEntry(
            name=shape.filename,
            kind=EntryKind.FILE,
            download_url=shape.url,
            repo_path=shape.repo_path,
            coords=shape.coords,
        )
        return await self._sync_single(entry, local_root, ctx)

    async def _sync_blob(self, shape: BlobFile, local_root: Path, ctx: _Pass) -> SyncResult:
        entry = RemoteEntry(
            name=shape.filename,
            kind=EntryKind.FILE,
            download_url=shape.download_url,
            repo_path=shape.repo_path,
            coords=shape.coords,
        )
        if not shape.is_manifest:
            return await self._sync_single(entry, local_root, ctx)

        ctx.progress.report("Fetching manifest...", 0.05, shape.filename)
        try:
            response = await ctx.transport.fetch(shape.download_url, timeout=self.settings.listing_timeout)
        except DownloadError as e:
            logger.warning("Manifest fetch failed: %s", e)
            return SyncResult(failed=(shape.filename,))
        return await self._apply_payload(response.body, entry, local_root, ctx)

    async def _sync_tree(self, shape: Tree, local_root: Path, ctx: _Pass) -> SyncResult:
        ctx.progress.report("Fetching file list...", LISTED_PROGRESS, None)
        try:
            return await ctx.walker.walk(shape.coords, shape.path, local_root, (LISTED_PROGRESS, 1.0))
        except ListingError as e:
            logger.warning("Listing failed for %s: %s", shape.url, e)
            label = shape.path.rstrip("/").rsplit("/", 1)[-1] if shape.path else shape.coords.repo
            return SyncResult(failed=(f"{label}/",))

    async def _sync_generic(self, shape: GenericPayload, local_root: Path, ctx: _Pass) -> SyncResult:
        ctx.progress.report("Fetching...", 0.05, shape.filename)
        try:
            response = await ctx.transport.fetch(shape.download_url)
        except DownloadError as e:
            logger.warning("Fetch failed for %s: %s", shape.url, e)
            return SyncResult(failed=(shape.filename or DEFAULT_FILENAME,))

        name = (
            filename_from_content_disposition(_header(response.headers, "Content-Disposition"))
            or shape.filename
            or DEFAULT_FILENAME
        )
        located = repo_coords_from_url(response.url, self.settings.default_branch)
        coords, repo_path = located if located else (None, "")
        entry = RemoteEntry(
            name=name,
            kind=EntryKind.FILE,
            download_url=shape.download_url,
            repo_path=repo_path,
            coords=coords,
        )
        return await self._apply_payload(response.body, entry, local_root, ctx)

    async def _apply_payload(
        self,
        body: bytes,
        entry: RemoteEntry,
        local_root: Path,
        ctx: _Pass,
    ) -> SyncResult:
        """Sync from a fetched manifest, or save the payload itself if it isn't one."""
        manifest = parse_manifest(body)

        if isinstance(manifest, CategorizedManifest):
            ctx.progress.report("Syncing categories...", LISTED_PROGRESS, None)
            return await ctx.manifests.sync_categorized(
                manifest, local_root / EFFECTS_FOLDER, (LISTED_PROGRESS, 1.0),
            )

        if isinstance(manifest, FlatManifest):
            ctx.progress.report("Syncing files...", LISTED_PROGRESS, None)
            return await ctx.manifests.sync_flat(manifest, local_root, (LISTED_PROGRESS, 1.0))

        logger.info("Payload is not a manifest (%s); saving as %s", manifest.reason, entry.name)
        ctx.progress.report(f"Saving {entry.name}...", LISTED_PROGRESS, entry.name)
        return await ctx.reconciler.store_single(entry, local_root, body)


class SyncStream:
    """
    One sync pass as an async iterator of ProgressEvents.

    Iterating starts the pass. Iteration ends when the pass completes (the
    result is then in .result) or re-raises the pass's setup error.
    """

    def __init__(self, engine: AssetSync, source_url: str, local_root_name: str):
        self._engine = engine
        self._source_url = source_url
        self._local_root_name = local_root_name
        self._channel = ProgressChannel()
        self._task: Optional[asyncio.Task] = None
        self.result: Optional[SyncResult] = None

    def __aiter__(self) -> ProgressChannel:
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
        return self._channel

    async def _run(self):
        try:
            self.result = await self._engine.sync_async(
                self._source_url, self._local_root_name, self._channel.send,
            )
        except asyncio.CancelledError as e:
            self._channel.close(e)
            raise
        except Exception as e:
            self._channel.close(e)
        else:
            self._channel.close()
