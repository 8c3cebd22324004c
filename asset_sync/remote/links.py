"""
Direct-link normalization for Asset Sync.

Rewrites "view" URLs from hosting backends into URLs that return the file's
bytes. Pure functions, no network access.
"""

import re
from pathlib import PurePosixPath
from typing import Optional, Tuple
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from ..core.constants import DEFAULT_BRANCH, GITHUB_HOST, GITHUB_RAW_HOST
from .models import RepoCoords

DRIVE_DOWNLOAD_URL_TEMPLATE = "https://drive.google.com/uc?export=download&id={file_id}&confirm=1"

_DRIVE_FILE_PATTERN = re.compile(r"drive\.google\.com/file/d/([a-zA-Z0-9_-]+)")
_DRIVE_OPEN_PATTERN = re.compile(r"drive\.google\.com/(?:open|uc)\?(?:.*&)?id=([a-zA-Z0-9_-]+)")


def _host(url: str) -> str:
    return (urlsplit(url).hostname or "").lower()


def _segments(url: str) -> list[str]:
    return [unquote(s) for s in urlsplit(url).path.split("/") if s]


def is_github_host(host: str) -> bool:
    return host in (GITHUB_HOST, f"www.{GITHUB_HOST}")


def _with_query(url: str, **params: str) -> str:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(params)
    return urlunsplit(parts._replace(query=urlencode(query)))


def parse_drive_file_id(url: str) -> Optional[str]:
    """
    Extract a Google Drive file ID from a share link.

    Supports formats:
    - https://drive.google.com/file/d/FILE_ID/view?usp=sharing
    - https://drive.google.com/open?id=FILE_ID
    - https://drive.google.com/uc?id=FILE_ID
    """
    url = url.strip()
    match = _DRIVE_FILE_PATTERN.search(url) or _DRIVE_OPEN_PATTERN.search(url)
    return match.group(1) if match else None


def is_direct_url(url: str) -> bool:
    """True when the URL already serves raw bytes without rewriting."""
    host = _host(url)
    if host == GITHUB_RAW_HOST:
        return True
    if is_github_host(host):
        segments = _segments(url)
        if len(segments) >= 4 and segments[2] == "raw":
            return True
        query = dict(parse_qsl(urlsplit(url).query))
        return len(segments) >= 4 and segments[2] == "blob" and query.get("raw") == "true"
    if host == "drive.google.com":
        query = dict(parse_qsl(urlsplit(url).query))
        return urlsplit(url).path == "/uc" and query.get("export") == "download"
    if host.endswith("dropbox.com"):
        query = dict(parse_qsl(urlsplit(url).query))
        return query.get("dl") == "1" or query.get("raw") == "1"
    return False


def to_direct_url(url: str) -> str:
    """
    Rewrite a sharing/"view" URL into a byte-stream URL.

    - GitHub blob pages get ?raw=true
    - Google Drive share links become uc?export=download links
    - Dropbox share links get dl=1
    Anything else is returned unchanged.
    """
    url = url.strip()
    if is_direct_url(url):
        return url

    host = _host(url)
    if is_github_host(host):
        segments = _segments(url)
        if len(segments) >= 4 and segments[2] == "blob":
            return _with_query(url, raw="true")
        return url

    if host == "drive.google.com":
        file_id = parse_drive_file_id(url)
        if file_id:
            return DRIVE_DOWNLOAD_URL_TEMPLATE.format(file_id=file_id)
        return url

    if host.endswith("dropbox.com"):
        return _with_query(url, dl="1")

    return url


def repo_coords_from_url(url: str, default_branch: str = DEFAULT_BRANCH) -> Optional[Tuple[RepoCoords, str]]:
    """
    Extract (coords, repo-relative path) from a GitHub file URL.

    Handles raw.githubusercontent.com/OWNER/REPO/BRANCH/PATH and
    github.com/OWNER/REPO/(blob|raw)/BRANCH/PATH. Returns None for anything else.
    Branch names containing "/" can't be told apart from the path and are
    assumed to be a single segment.
    """
    host = _host(url)
    segments = _segments(url)

    if host == GITHUB_RAW_HOST and len(segments) >= 4:
        owner, repo, branch = segments[:3]
        return RepoCoords(owner, repo, branch), "/".join(segments[3:])

    if is_github_host(host) and len(segments) >= 5 and segments[2] in ("blob", "raw"):
        owner, repo, _, branch = segments[:4]
        return RepoCoords(owner, repo, branch or default_branch), "/".join(segments[4:])

    return None


def filename_from_url(url: str) -> Optional[str]:
    """Last non-empty path segment of a URL, percent-decoded."""
    segments = _segments(url)
    if not segments:
        return None
    name = PurePosixPath(segments[-1]).name
    return name or None


def filename_from_content_disposition(value: Optional[str]) -> Optional[str]:
    """
    Extract the filename from a Content-Disposition header value.

    filename*= (RFC 5987) wins over filename=. Only the basename is kept.
    """
    if not value:
        return None

    match = re.search(r"filename\*\s*=\s*([^']*)'[^']*'([^;]+)", value, re.IGNORECASE)
    if match:
        encoding = match.group(1) or "utf-8"
        try:
            name = unquote(match.group(2).strip().strip('"'), encoding=encoding)
        except LookupError:
            name = unquote(match.group(2).strip().strip('"'))
    else:
        match = re.search(r'filename\s*=\s*("([^"]*)"|[^;]+)', value, re.IGNORECASE)
        if not match:
            return None
        name = match.group(2) if match.group(2) is not None else match.group(1).strip()

    name = PurePosixPath(name.replace("\\", "/")).name
    if name in ("", ".", ".."):
        return None
    return name
