"""
Source classification for Asset Sync.

A source URL is classified once, up front, into one of four shapes; the
orchestrator dispatches on the shape's type.
"""

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import unquote, urlsplit

from ..core.constants import DEFAULT_BRANCH, DEFAULT_FILENAME, GITHUB_RAW_HOST, MANIFEST_EXTENSION
from ..core.errors import SyncSetupError
from .links import filename_from_url, is_direct_url, repo_coords_from_url, to_direct_url, is_github_host
from .models import RepoCoords


@dataclass(frozen=True)
class RawFile:
    """A GitHub raw endpoint serving one file's bytes."""
    url: str
    filename: str
    coords: Optional[RepoCoords] = None
    repo_path: str = ""


@dataclass(frozen=True)
class BlobFile:
    """A GitHub file page; may be a manifest or a single asset."""
    url: str
    download_url: str
    filename: str
    coords: RepoCoords
    repo_path: str

    @property
    def is_manifest(self) -> bool:
        return self.filename.lower().endswith(MANIFEST_EXTENSION)


@dataclass(frozen=True)
class Tree:
    """A GitHub folder page (or repository root)."""
    url: str
    coords: RepoCoords
    path: str = ""


@dataclass(frozen=True)
class GenericPayload:
    """Anything else: fetched, then interpreted as a manifest or a single file."""
    url: str
    download_url: str
    filename: Optional[str] = None


SourceShape = Union[RawFile, BlobFile, Tree, GenericPayload]


def classify_source(url: str, default_branch: str = DEFAULT_BRANCH) -> SourceShape:
    """
    Classify a source URL. First match wins: raw, blob, tree, generic.

    Raises:
        SyncSetupError: if the URL isn't an http(s) URL with a host, or is a
            GitHub URL that doesn't name a repository.
    """
    url = (url or "").strip()
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise SyncSetupError(f"Not a fetchable URL: {url!r}")

    host = parts.hostname.lower()
    segments = [unquote(s) for s in parts.path.split("/") if s]

    if host == GITHUB_RAW_HOST or (is_github_host(host) and is_direct_url(url)):
        located = repo_coords_from_url(url, default_branch)
        coords, repo_path = located if located else (None, "")
        return RawFile(
            url=url,
            filename=filename_from_url(url) or DEFAULT_FILENAME,
            coords=coords,
            repo_path=repo_path,
        )

    if is_github_host(host):
        if len(segments) < 2:
            raise SyncSetupError(f"GitHub URL does not name a repository: {url}")

        owner, repo = segments[0], segments[1]

        if len(segments) >= 5 and segments[2] == "blob":
            repo_path = "/".join(segments[4:])
            return BlobFile(
                url=url,
                download_url=to_direct_url(url),
                filename=segments[-1],
                coords=RepoCoords(owner, repo, segments[3]),
                repo_path=repo_path,
            )

        if len(segments) == 2:
            return Tree(url=url, coords=RepoCoords(owner, repo, default_branch))

        if len(segments) >= 4 and segments[2] == "tree":
            return Tree(
                url=url,
                coords=RepoCoords(owner, repo, segments[3]),
                path="/".join(segments[4:]),
            )

    return GenericPayload(
        url=url,
        download_url=to_direct_url(url),
        filename=filename_from_url(url),
    )
