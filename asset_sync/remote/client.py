"""
Contents-listing API client for Asset Sync.

Lists one repository directory per request:
GET <api-root>/repos/{owner}/{repo}/contents/{path}?ref={branch}
"""

import json
import logging
from typing import Optional
from urllib.parse import quote

from ..core.constants import DEFAULT_API_ROOT, LISTING_ACCEPT, LISTING_TIMEOUT
from ..core.errors import DownloadError, ListingError
from .models import ContentsListing, RemoteEntry, RepoCoords
from .transport import Transport

logger = logging.getLogger(__name__)


class ContentsClient:
    """
    Repository contents API client.

    Handles listing directories. Does NOT download files (see CacheReconciler).
    """

    def __init__(
        self,
        transport: Transport,
        api_root: str = DEFAULT_API_ROOT,
        timeout: float = LISTING_TIMEOUT,
        auth_token: Optional[str] = None,
    ):
        self.transport = transport
        self.api_root = api_root.rstrip("/")
        self.timeout = timeout
        self.auth_token = auth_token
        self._api_calls = 0

    @property
    def api_calls(self) -> int:
        """Total listing calls made by this client."""
        return self._api_calls

    def _get_headers(self) -> dict:
        headers = {"Accept": LISTING_ACCEPT}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def contents_url(self, coords: RepoCoords, path: str = "") -> str:
        path = quote(path.strip("/"))
        return (
            f"{self.api_root}/repos/{quote(coords.owner)}/{quote(coords.repo)}"
            f"/contents/{path}?ref={quote(coords.branch)}"
        )

    async def list_directory(self, coords: RepoCoords, path: str = "") -> ContentsListing:
        """List a directory by repository path."""
        return await self.list_url(self.contents_url(coords, path), coords, path)

    async def list_url(self, url: str, coords: Optional[RepoCoords] = None, path: str = "") -> ContentsListing:
        """
        List a directory by its listing endpoint URL (the "url" field of a dir entry).

        Raises:
            ListingError: request failed, body isn't JSON, or isn't a listing
        """
        logger.debug("Listing %s", url)
        try:
            response = await self.transport.fetch(url, timeout=self.timeout, headers=self._get_headers())
        except DownloadError as e:
            raise ListingError(f"Listing failed for {url}: {e}", url=url, status=e.status) from e
        finally:
            self._api_calls += 1

        try:
            data = json.loads(response.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ListingError(f"Listing for {url} is not JSON", url=url) from e

        if isinstance(data, list):
            entries = tuple(
                RemoteEntry.from_listing(item, coords, path)
                for item in data
                if isinstance(item, dict) and item.get("name")
            )
            return ContentsListing(entries=entries)

        if isinstance(data, dict) and data.get("type") == "file" and data.get("name"):
            parent = path.rsplit("/", 1)[0] if "/" in path else ""
            return ContentsListing(
                entries=(RemoteEntry.from_listing(data, coords, parent),),
                single_file=True,
            )

        raise ListingError(f"Unexpected listing payload from {url}", url=url)
