"""
HTTP transport for Asset Sync.

Every byte a pass fetches goes through Transport.fetch(): GET with a timeout,
redirects followed by hand up to a hop cap, body read fully into memory.
Uses asyncio + aiohttp; one request at a time per pass.
"""

import asyncio
import logging
import ssl
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin, urlsplit

import aiohttp
import certifi

from ..core.constants import MAX_REDIRECTS, REDIRECT_STATUSES, REQUEST_TIMEOUT
from ..core.errors import DownloadError, HttpStatusError, NetworkError, TooManyRedirects

logger = logging.getLogger(__name__)


def make_ssl_context() -> ssl.SSLContext:
    """
    TLS context verifying against the certifi CA bundle.

    A frozen build (PyInstaller) ships its own copy of the bundle under
    <_MEIPASS>/certifi/; that copy is used when present.
    """
    cafile = certifi.where()
    bundle_root = getattr(sys, "_MEIPASS", None)
    if getattr(sys, "frozen", False) and bundle_root:
        shipped = Path(bundle_root) / "certifi" / "cacert.pem"
        if shipped.is_file():
            cafile = str(shipped)
    logger.debug("Using CA bundle %s", cafile)
    return ssl.create_default_context(cafile=cafile)


@dataclass
class FetchResponse:
    """Terminal response of a fetch, after redirects."""
    url: str
    status: int
    body: bytes
    headers: dict = field(default_factory=dict)
    redirects: int = 0

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")


class Transport:
    """
    Async GET client with bounded redirect following.

    Use as an async context manager; the aiohttp session lives for the
    duration of the block. A session passed in is used as-is and not closed.
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        headers: Optional[dict] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.headers = dict(headers or {})
        self._session = session
        self._owns_session = session is None
        self._requests = 0

    @property
    def requests_made(self) -> int:
        """Total HTTP requests sent (each redirect hop counts)."""
        return self._requests

    async def __aenter__(self) -> "Transport":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def open(self):
        if self._session is not None:
            return
        ssl_context = make_ssl_context()
        connector = aiohttp.TCPConnector(
            limit=4,
            ttl_dns_cache=300,
            keepalive_timeout=30,
            ssl=ssl_context,
        )
        self._session = aiohttp.ClientSession(connector=connector)
        self._owns_session = True

    async def close(self):
        if self._session is not None and self._owns_session:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def fetch(
        self,
        url: str,
        *,
        timeout: Optional[float] = None,
        headers: Optional[dict] = None,
    ) -> FetchResponse:
        """
        GET a URL and return its terminal response.

        Extra headers are only sent to the original host; redirect hops to other
        hosts (CDNs, media servers) get the transport's default headers.

        Raises:
            TooManyRedirects: more than max_redirects hops
            HttpStatusError: non-2xx terminal status, or redirect without Location
            NetworkError: connection failure or timeout
            DownloadError: any other client error
        """
        if self._session is None:
            await self.open()

        client_timeout = aiohttp.ClientTimeout(total=timeout or self.timeout)
        origin = urlsplit(url).netloc
        current = url

        for hop in range(self.max_redirects + 1):
            request_headers = dict(self.headers)
            if headers and urlsplit(current).netloc == origin:
                request_headers.update(headers)

            try:
                async with self._session.get(
                    current,
                    allow_redirects=False,
                    timeout=client_timeout,
                    headers=request_headers,
                ) as response:
                    self._requests += 1

                    if response.status in REDIRECT_STATUSES:
                        location = response.headers.get("Location")
                        if not location:
                            raise HttpStatusError(
                                f"HTTP {response.status} without Location",
                                url=current, status=response.status,
                            )
                        logger.debug("Redirect %d: %s -> %s", hop + 1, current, location)
                        current = urljoin(current, location)
                        continue

                    if not 200 <= response.status < 300:
                        raise HttpStatusError(
                            f"HTTP {response.status}", url=current, status=response.status,
                        )

                    body = await response.read()
                    return FetchResponse(
                        url=current,
                        status=response.status,
                        body=body,
                        headers=dict(response.headers),
                        redirects=hop,
                    )

            except asyncio.TimeoutError as e:
                raise NetworkError(f"Timed out fetching {current}", url=current) from e
            except aiohttp.ClientConnectionError as e:
                raise NetworkError(f"Connection failed for {current}: {e}", url=current) from e
            except aiohttp.ClientError as e:
                raise DownloadError(f"Request failed for {current}: {e}", url=current) from e

        raise TooManyRedirects(
            f"More than {self.max_redirects} redirects starting at {url}", url=current,
        )
