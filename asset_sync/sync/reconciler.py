"""
Cache reconciliation for Asset Sync.

Decides, per remote entry, whether the local copy can be kept or must be
fetched, and which local files in a fully-known scope must be deleted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional

from ..core.constants import MIN_VALID_SIZE
from ..core.errors import DownloadError
from ..core.files import delete_entries, find_obsolete_entries, local_size, write_atomic
from ..core.formatting import format_size
from ..remote.models import RemoteEntry
from ..remote.pointer import PointerResolver, is_pointer, parse_pointer
from ..remote.transport import Transport
from .result import SyncResult

logger = logging.getLogger(__name__)


class Action(Enum):
    SKIP = "skip"
    FETCH = "fetch"


@dataclass(frozen=True)
class Decision:
    action: Action
    reason: str = ""


def _looks_like_pointer(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return is_pointer(f.read(1024))
    except OSError:
        return False


def decide(
    entry: RemoteEntry,
    local_dir: Path,
    bundled_names: AbstractSet[str] = frozenset(),
    min_valid_size: int = MIN_VALID_SIZE,
) -> Decision:
    """
    Decide what to do with one remote file. First match wins:

    1. name is pre-bundled with the app -> skip
    2. local file is above the size threshold -> skip
    3. local file matches the remote size (or the remote size is unknown)
       and isn't a saved pointer -> skip
    4. otherwise -> fetch
    """
    if entry.name in bundled_names:
        return Decision(Action.SKIP, "bundled")

    size = local_size(local_dir / entry.name)
    if size is not None:
        if size > min_valid_size:
            return Decision(Action.SKIP, "present")
        if entry.size in (None, size) and not _looks_like_pointer(local_dir / entry.name):
            return Decision(Action.SKIP, "present")
        return Decision(Action.FETCH, f"local copy too small ({size} bytes)")

    return Decision(Action.FETCH, "missing")


def plan_deletions(local_dir: Path, remote_names: Iterable[str]) -> List[Path]:
    """
    The delete arm of reconciliation: local entries in this exact scope that the
    remote no longer lists. Hidden/marker names are never returned.
    """
    return find_obsolete_entries(local_dir, remote_names)


class CacheReconciler:
    """Applies reconcile decisions: skips, atomic fetches, and scoped deletes."""

    def __init__(
        self,
        transport: Transport,
        pointer_resolver: PointerResolver,
        bundled_names: AbstractSet[str] = frozenset(),
        min_valid_size: int = MIN_VALID_SIZE,
        timeout: Optional[float] = None,
    ):
        self.transport = transport
        self.pointer_resolver = pointer_resolver
        self.bundled_names = frozenset(bundled_names)
        self.min_valid_size = min_valid_size
        self.timeout = timeout

    def decide(self, entry: RemoteEntry, local_dir: Path) -> Decision:
        return decide(entry, local_dir, self.bundled_names, self.min_valid_size)

    async def reconcile(
        self,
        entry: RemoteEntry,
        local_dir: Path,
        decision: Optional[Decision] = None,
    ) -> SyncResult:
        """
        Skip or fetch one file. Never raises for per-file problems; failures
        are returned in SyncResult.failed.
        """
        decision = decision or self.decide(entry, local_dir)
        if decision.action is Action.SKIP:
            logger.debug("Skip %s (%s)", entry.name, decision.reason)
            return SyncResult(already_present=(entry.name,))

        logger.debug("Fetch %s (%s)", entry.name, decision.reason)
        try:
            written = await self.fetch(entry, local_dir / entry.name)
        except Exception as e:
            logger.warning("Failed: %s - %s", entry.name, e)
            return SyncResult(failed=(entry.name,))

        logger.info("Downloaded %s (%s)", entry.name, format_size(written))
        return SyncResult(downloaded=(entry.name,))

    async def fetch(self, entry: RemoteEntry, target: Path) -> int:
        """
        Download an entry to target, resolving pointers. Returns bytes written.

        Raises:
            DownloadError: transport or pointer resolution failure
            OSError: the file couldn't be written
        """
        if not entry.download_url:
            raise DownloadError(f"No download URL for {entry.name}")

        target.parent.mkdir(parents=True, exist_ok=True)
        response = await self.transport.fetch(entry.download_url, timeout=self.timeout)
        return await self.store(entry, target, response.body)

    async def store(self, entry: RemoteEntry, target: Path, body: bytes) -> int:
        """Write already-fetched bytes, swapping a pointer for its real object first."""
        if is_pointer(body):
            logger.debug("Detected pointer for %s, fetching real object", entry.name)
            body = await self.pointer_resolver.resolve(entry.coords, entry.repo_path, parse_pointer(body))
        return write_atomic(target, body)

    async def store_single(self, entry: RemoteEntry, local_dir: Path, body: bytes) -> SyncResult:
        """
        Save a payload fetched outside the reconciler (e.g. a non-manifest body).

        The usual skip rules apply: a copy already on disk is left as is.
        """
        decision = self.decide(entry, local_dir)
        if decision.action is Action.SKIP:
            logger.debug("Skip %s (%s)", entry.name, decision.reason)
            return SyncResult(already_present=(entry.name,))
        try:
            await self.store(entry, local_dir / entry.name, body)
        except Exception as e:
            logger.warning("Failed: %s - %s", entry.name, e)
            return SyncResult(failed=(entry.name,))
        return SyncResult(downloaded=(entry.name,))

    def prune(self, local_dir: Path, remote_names: Iterable[str]) -> List[Path]:
        """Delete local entries in local_dir that aren't in the complete remote name set."""
        return delete_entries(plan_deletions(local_dir, remote_names))
