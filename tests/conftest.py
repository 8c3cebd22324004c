"""Pytest configuration and fixtures."""

import asyncio
import hashlib
import json
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from asset_sync.config import SyncSettings
from asset_sync.core.errors import HttpStatusError
from asset_sync.remote.client import ContentsClient
from asset_sync.remote.models import RepoCoords
from asset_sync.remote.pointer import PointerResolver
from asset_sync.remote.transport import FetchResponse

API_ROOT = "https://api.example.test"
MEDIA_ROOT = "https://media.example.test"
RAW_ROOT = "https://raw.example.test"


def run(coro):
    """Drive a coroutine from a synchronous test."""
    return asyncio.run(coro)


def pointer_text(data: bytes) -> bytes:
    """Large-file pointer for data."""
    return (
        "version https://git-lfs.github.com/spec/v1\n"
        f"oid sha256:{hashlib.sha256(data).hexdigest()}\n"
        f"size {len(data)}\n"
    ).encode()


def payload(label: str, size: int = 512) -> bytes:
    """Deterministic binary content comfortably above the size threshold."""
    seed = label.encode()
    return (seed * (size // len(seed) + 1))[:size]


@dataclass
class Route:
    body: bytes = b""
    status: int = 200
    headers: dict = field(default_factory=dict)


class FakeTransport:
    """In-memory stand-in for Transport, keyed by exact URL."""

    def __init__(self):
        self.routes = {}
        self.handlers = []
        self.calls = []

    def add(self, url, body=b"", status=200, headers=None):
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode()
        elif isinstance(body, str):
            body = body.encode()
        self.routes[url] = Route(body, status, headers or {})

    def fail(self, url, error: Exception):
        self.routes[url] = error

    def fetched(self, fragment: str) -> list:
        return [c for c in self.calls if fragment in c]

    async def fetch(self, url, *, timeout=None, headers=None):
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            for handler in self.handlers:
                route = handler(url)
                if route is not None:
                    break
        if route is None:
            raise HttpStatusError("HTTP 404", url=url, status=404)
        if isinstance(route, Exception):
            raise route
        if not 200 <= route.status < 300:
            raise HttpStatusError(f"HTTP {route.status}", url=url, status=route.status)
        return FetchResponse(url=url, status=route.status, body=route.body, headers=dict(route.headers))


class FakeRepo:
    """
    A repository served through FakeTransport: contents listings, raw file
    URLs, and media URLs for pointer-backed files. Mutable between passes.
    """

    def __init__(self, transport: FakeTransport, owner="acme", repo="looks", branch="main"):
        self.coords = RepoCoords(owner, repo, branch)
        self.files = {}
        self.dirs = {""}
        self.media = {}
        self.broken_dirs = set()
        self._client = ContentsClient(None, api_root=API_ROOT)
        self._resolver = PointerResolver(None, media_root=MEDIA_ROOT)
        transport.handlers.append(self.handle)

    def _add_parents(self, path):
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            self.dirs.add("/".join(parts[:i]))

    def put(self, path, data: bytes):
        self._add_parents(path)
        self.files[path] = data

    def put_pointer(self, path, data: bytes):
        self.put(path, pointer_text(data))
        self.media[path] = data

    def mkdir(self, path):
        self._add_parents(path + "/x")

    def remove(self, path):
        self.files.pop(path, None)
        self.media.pop(path, None)

    def listing_url(self, path=""):
        return self._client.contents_url(self.coords, path)

    def raw_url(self, path):
        c = self.coords
        return f"{RAW_ROOT}/{c.owner}/{c.repo}/{c.branch}/{path}"

    def media_url(self, path):
        return self._resolver.media_url(self.coords, path)

    def _children(self, path):
        prefix = f"{path}/" if path else ""
        items = []
        for d in sorted(self.dirs):
            if d and d.startswith(prefix) and "/" not in d[len(prefix):]:
                items.append({
                    "name": d[len(prefix):],
                    "path": d,
                    "type": "dir",
                    "size": 0,
                    "download_url": None,
                    "url": self.listing_url(d),
                })
        for f in sorted(self.files):
            if f.startswith(prefix) and "/" not in f[len(prefix):]:
                items.append({
                    "name": f[len(prefix):],
                    "path": f,
                    "type": "file",
                    "size": len(self.files[f]),
                    "download_url": self.raw_url(f),
                    "url": self.listing_url(f),
                })
        return items

    def handle(self, url):
        for d in self.dirs:
            if url == self.listing_url(d):
                if d in self.broken_dirs:
                    return Route(b'{"message": "Server Error"}', status=500)
                return Route(json.dumps(self._children(d)).encode())
        for f, data in self.files.items():
            if url == self.raw_url(f):
                return Route(data)
            if url == self.listing_url(f):
                item = next(i for i in self._children(f.rpartition("/")[0]) if i["path"] == f)
                return Route(json.dumps(item).encode())
        for f, data in self.media.items():
            if url == self.media_url(f):
                return Route(data)
        return None


class ProgressRecorder:
    """Progress callback that keeps every event."""

    def __init__(self):
        self.events = []

    def __call__(self, status, progress, current_item=None):
        self.events.append((status, progress, current_item))

    @property
    def fractions(self):
        return [p for _, p, _ in self.events]

    @property
    def statuses(self):
        return [s for s, _, _ in self.events]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "network: tests that start a local HTTP server"
    )


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def repo(transport):
    return FakeRepo(transport)


@pytest.fixture
def settings(temp_dir):
    return SyncSettings(
        data_root=temp_dir / "data",
        api_root=API_ROOT,
        media_root=MEDIA_ROOT,
    )


@pytest.fixture
def recorder():
    return ProgressRecorder()
