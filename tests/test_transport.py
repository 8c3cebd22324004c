"""
Tests for the HTTP transport and connectivity check.

Transport tests run against a local aiohttp server; nothing leaves the machine.
"""

import asyncio
import sys
from unittest.mock import patch

import pytest
import requests
from aiohttp import web
from aiohttp.test_utils import TestServer

from asset_sync.core.errors import HttpStatusError, NetworkError, TooManyRedirects
from asset_sync.remote.network import check_network, origin_of
from asset_sync.remote import transport as transport_module
from asset_sync.remote.transport import Transport

from conftest import run


def make_app():
    async def hop(request):
        remaining = int(request.match_info["n"])
        if remaining == 0:
            return web.Response(body=b"payload", headers={"X-Seen-Token": request.headers.get("X-Token", "")})
        raise web.HTTPFound(f"/hop/{remaining - 1}")

    async def missing(request):
        return web.Response(status=404)

    async def no_location(request):
        return web.Response(status=302)

    async def slow(request):
        await asyncio.sleep(2)
        return web.Response(body=b"late")

    app = web.Application()
    app.router.add_get("/hop/{n}", hop)
    app.router.add_get("/missing", missing)
    app.router.add_get("/no-location", no_location)
    app.router.add_get("/slow", slow)
    return app


def fetch(path, transport):
    """Fetch path from a fresh local server through transport."""
    async def go():
        async with TestServer(make_app()) as server:
            async with transport:
                return await transport.fetch(str(server.make_url(path)))

    return run(go())


@pytest.mark.network
class TestTransport:
    """Tests for Transport.fetch()."""

    def test_plain_get(self):
        response = fetch("/hop/0", Transport())
        assert response.status == 200
        assert response.body == b"payload"
        assert response.redirects == 0

    def test_follows_redirects_up_to_cap(self):
        """Five hops is the limit and still succeeds."""
        transport = Transport(max_redirects=5)
        response = fetch("/hop/5", transport)
        assert response.body == b"payload"
        assert response.redirects == 5
        assert response.url.endswith("/hop/0")
        assert transport.requests_made == 6

    def test_four_redirects(self):
        response = fetch("/hop/4", Transport())
        assert response.redirects == 4

    def test_too_many_redirects(self):
        """Six chained redirects fail after six requests."""
        transport = Transport(max_redirects=5)
        with pytest.raises(TooManyRedirects):
            fetch("/hop/6", transport)
        assert transport.requests_made == 6

    def test_http_error_status(self):
        with pytest.raises(HttpStatusError) as exc_info:
            fetch("/missing", Transport())
        assert exc_info.value.status == 404

    def test_redirect_without_location(self):
        with pytest.raises(HttpStatusError):
            fetch("/no-location", Transport())

    def test_timeout(self):
        with pytest.raises(NetworkError):
            fetch("/slow", Transport(timeout=0.2))

    def test_connection_refused(self):
        async def go():
            async with Transport(timeout=2) as transport:
                await transport.fetch("http://127.0.0.1:9/")

        with pytest.raises(NetworkError):
            run(go())

    def test_extra_headers_sent_to_origin(self):
        async def go():
            async with TestServer(make_app()) as server:
                async with Transport() as transport:
                    return await transport.fetch(str(server.make_url("/hop/1")), headers={"X-Token": "abc"})

        response = run(go())
        assert response.headers["X-Seen-Token"] == "abc"


class TestSslContext:
    """Tests for CA bundle selection."""

    def capture_cafile(self, monkeypatch):
        seen = {}
        monkeypatch.setattr(
            transport_module.ssl, "create_default_context",
            lambda cafile=None: seen.setdefault("cafile", cafile),
        )
        return seen

    def test_uses_certifi_bundle(self, monkeypatch):
        seen = self.capture_cafile(monkeypatch)
        monkeypatch.delattr(sys, "frozen", raising=False)
        transport_module.make_ssl_context()
        assert seen["cafile"] == transport_module.certifi.where()

    def test_frozen_build_prefers_shipped_bundle(self, monkeypatch, tmp_path):
        shipped = tmp_path / "certifi" / "cacert.pem"
        shipped.parent.mkdir()
        shipped.write_text("certs")
        seen = self.capture_cafile(monkeypatch)
        monkeypatch.setattr(sys, "frozen", True, raising=False)
        monkeypatch.setattr(sys, "_MEIPASS", str(tmp_path), raising=False)
        transport_module.make_ssl_context()
        assert seen["cafile"] == str(shipped)

    def test_frozen_build_without_shipped_bundle(self, monkeypatch, tmp_path):
        seen = self.capture_cafile(monkeypatch)
        monkeypatch.setattr(sys, "frozen", True, raising=False)
        monkeypatch.setattr(sys, "_MEIPASS", str(tmp_path), raising=False)
        transport_module.make_ssl_context()
        assert seen["cafile"] == transport_module.certifi.where()


class TestCheckNetwork:
    """Tests for check_network()."""

    def test_origin_of(self):
        assert origin_of("https://cdn.example.com:8443/a/b.json?x=1") == "https://cdn.example.com:8443/"

    def test_online(self):
        with patch("asset_sync.remote.network.requests.head") as head:
            assert check_network("https://cdn.example.com/a.json") == (True, None)
        assert head.call_args[0][0] == "https://cdn.example.com/"

    def test_connection_error(self):
        with patch("asset_sync.remote.network.requests.head", side_effect=requests.ConnectionError()):
            assert check_network("https://cdn.example.com/a.json") == (False, "No internet connection")

    def test_timeout(self):
        with patch("asset_sync.remote.network.requests.head", side_effect=requests.Timeout()):
            assert check_network("https://cdn.example.com/a.json") == (False, "Connection timed out")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
