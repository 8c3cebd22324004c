"""
File system utilities for Asset Sync.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from .constants import PARTIAL_PREFIX

logger = logging.getLogger(__name__)


def local_size(path: Path) -> Optional[int]:
    """Size of a regular file on disk, or None if it isn't one."""
    try:
        if not path.is_file():
            return None
        return path.stat().st_size
    except OSError:
        return None


def is_hidden(name: str) -> bool:
    """Hidden/marker entries (.gitkeep, .DS_Store) are never pruned."""
    return name.startswith(".")


def find_obsolete_entries(folder: Path, remote_names: Iterable[str]) -> List[Path]:
    """
    Find entries directly inside folder whose name the remote doesn't have.

    Only the given level is scanned; obsolete subfolders are returned whole.

    Args:
        folder: Local folder for one remote scope
        remote_names: Complete set of names the remote lists for that scope

    Returns:
        Sorted list of paths to remove
    """
    if not folder.is_dir():
        return []

    keep = set(remote_names)
    return sorted(
        entry for entry in folder.iterdir()
        if not is_hidden(entry.name) and entry.name not in keep
    )


def delete_entries(entries: Iterable[Path]) -> List[Path]:
    """
    Delete files and folders.

    Returns the paths actually removed. Failures are logged and skipped.
    """
    deleted = []
    for entry in entries:
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            deleted.append(entry)
            logger.info("Removed obsolete %s", entry)
        except OSError as e:
            logger.warning("Failed to delete %s: %s", entry, e)
    return deleted


def partial_path(target: Path) -> Path:
    """Temp sibling an in-flight download is written to."""
    return target.parent / f"{PARTIAL_PREFIX}{target.name}"


def write_atomic(target: Path, data: bytes) -> int:
    """
    Write bytes to target via a temp sibling and an atomic rename.

    A crash mid-write leaves only the temp file behind, never a truncated target.

    Returns:
        Number of bytes written
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = partial_path(target)
    try:
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except BaseException:
        try:
            tmp.unlink()
        except OSError:
            pass
        raise
    return len(data)
