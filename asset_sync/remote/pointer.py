"""
Large-file pointer detection and resolution.

Repositories using a large-file storage extension commit a short text pointer
instead of the binary:

    version https://git-lfs.github.com/spec/v1
    oid sha256:4d7a2146...
    size 12345

The real bytes are served from a separate media endpoint addressed by
owner/repo/branch/path.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import quote

from ..core.constants import (
    DEFAULT_MEDIA_ROOT,
    POINTER_MAX_SIZE,
    POINTER_OID_MARKER,
    POINTER_SIZE_MARKER,
    POINTER_SPEC_PREFIX,
    POINTER_TIMEOUT,
)
from ..core.errors import DownloadError, PointerResolutionError
from .models import RepoCoords
from .transport import Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PointerInfo:
    """Digest and size a pointer declares for its object."""
    oid: str
    size: int


def _as_text(body: Union[bytes, str]) -> Optional[str]:
    if isinstance(body, str):
        return body
    if len(body) > POINTER_MAX_SIZE:
        return None
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        return None


def is_pointer(body: Union[bytes, str]) -> bool:
    """True if body is a large-file pointer rather than real content."""
    text = _as_text(body)
    if text is None:
        return False
    return (
        text.startswith(POINTER_SPEC_PREFIX)
        and POINTER_OID_MARKER in text
        and POINTER_SIZE_MARKER in text
    )


def parse_pointer(body: Union[bytes, str]) -> Optional[PointerInfo]:
    """Parse the oid/size lines of a pointer. None if body isn't a pointer."""
    if not is_pointer(body):
        return None

    oid = None
    size = None
    for line in _as_text(body).splitlines():
        if line.startswith(POINTER_OID_MARKER):
            oid = line[len(POINTER_OID_MARKER):].strip()
        elif line.startswith(POINTER_SIZE_MARKER):
            try:
                size = int(line[len(POINTER_SIZE_MARKER):].strip())
            except ValueError:
                return None
    if not oid or size is None:
        return None
    return PointerInfo(oid=oid, size=size)


class PointerResolver:
    """Fetches the real object behind a pointer from the media endpoint."""

    def __init__(
        self,
        transport: Transport,
        media_root: str = DEFAULT_MEDIA_ROOT,
        timeout: float = POINTER_TIMEOUT,
    ):
        self.transport = transport
        self.media_root = media_root.rstrip("/")
        self.timeout = timeout

    def media_url(self, coords: RepoCoords, repo_path: str) -> str:
        return (
            f"{self.media_root}/media/{quote(coords.owner)}/{quote(coords.repo)}"
            f"/{quote(coords.branch)}/{quote(repo_path.lstrip('/'))}"
        )

    async def resolve(
        self,
        coords: Optional[RepoCoords],
        repo_path: str,
        pointer: Optional[PointerInfo] = None,
    ) -> bytes:
        """
        Fetch the object a pointer stands for.

        When the pointer's oid/size are given, the payload must match both.

        Raises:
            PointerResolutionError: no coordinates, fetch failed, or mismatch
        """
        if coords is None or not repo_path:
            raise PointerResolutionError(
                f"Repository coordinates unknown for pointer {repo_path or '?'}"
            )

        url = self.media_url(coords, repo_path)
        logger.debug("Resolving pointer via %s", url)
        try:
            response = await self.transport.fetch(url, timeout=self.timeout)
        except DownloadError as e:
            raise PointerResolutionError(
                f"Media fetch failed for {repo_path}: {e}", url=url, status=e.status,
            ) from e

        data = response.body
        if is_pointer(data):
            raise PointerResolutionError(f"Media endpoint returned a pointer for {repo_path}", url=url)

        if pointer is not None:
            if len(data) != pointer.size:
                raise PointerResolutionError(
                    f"Size mismatch for {repo_path}: got {len(data)}, expected {pointer.size}",
                    url=url,
                )
            digest = hashlib.sha256(data).hexdigest()
            if digest != pointer.oid.lower():
                raise PointerResolutionError(f"Digest mismatch for {repo_path}", url=url)

        logger.debug("Pointer resolved: %s (%d bytes)", repo_path, len(data))
        return data
