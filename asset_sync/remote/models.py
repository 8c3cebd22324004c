"""
Remote-side data types for Asset Sync.

Everything here lives for one sync pass only.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class RepoCoords:
    """Repository coordinates on the hosting backend."""
    owner: str
    repo: str
    branch: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}@{self.branch}"


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "dir"
    OTHER = "other"  # symlinks, submodules

    @classmethod
    def from_listing(cls, value: str) -> "EntryKind":
        for kind in cls:
            if kind.value == value:
                return kind
        return cls.OTHER


@dataclass(frozen=True)
class RemoteEntry:
    """A file or directory the remote says exists."""
    name: str
    kind: EntryKind = EntryKind.FILE
    size: Optional[int] = None
    download_url: Optional[str] = None  # files only
    listing_url: Optional[str] = None   # directories only
    repo_path: str = ""
    coords: Optional[RepoCoords] = None  # needed to resolve large-file pointers

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @classmethod
    def from_listing(cls, data: dict, coords: Optional[RepoCoords] = None, parent_path: str = "") -> "RemoteEntry":
        """Build from one item of a contents-listing response."""
        name = data.get("name", "")
        size = data.get("size")
        return cls(
            name=name,
            kind=EntryKind.from_listing(data.get("type", "")),
            size=size if isinstance(size, int) else None,
            download_url=data.get("download_url"),
            listing_url=data.get("url"),
            repo_path=data.get("path") or "/".join(p for p in (parent_path, name) if p),
            coords=coords,
        )


@dataclass(frozen=True)
class ContentsListing:
    """
    Result of one listing request.

    single_file is set when the requested path addressed one file rather than
    a directory; the entry set is then not a complete directory scope.
    """
    entries: Tuple[RemoteEntry, ...]
    single_file: bool = False

    @property
    def names(self) -> set:
        return {e.name for e in self.entries}

    @property
    def files(self) -> list:
        return [e for e in self.entries if e.is_file]

    @property
    def directories(self) -> list:
        return [e for e in self.entries if e.is_directory]
