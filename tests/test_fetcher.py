import asyncio
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import pytest

from core.errors import (
    FetchTimeoutError,
    ListingBlockedError,
    ListingNotFoundError,
    SourceUnavailableError,
)
from core.fetcher import ListingFetcher

URL = "https://www.etuovi.com/kohde/80481676"


def _fetcher(handler) -> ListingFetcher:
    return ListingFetcher(transport=httpx.MockTransport(handler))


class TestListingFetcher:
    def test_returns_body(self):
        fetcher = _fetcher(lambda request: httpx.Response(200, text="<html>ok</html>"))
        assert asyncio.run(fetcher.fetch(URL)) == "<html>ok</html>"

    def test_sends_browser_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.headers)
            return httpx.Response(200, text="")

        asyncio.run(_fetcher(handler).fetch(URL))
        assert seen["user-agent"].startswith("Mozilla/5.0")
        assert seen["accept"].startswith("text/html")
        assert seen["accept-language"].startswith("fi-FI")

    def test_default_timeout(self):
        assert ListingFetcher().timeout == 15.0

    def test_not_found(self):
        fetcher = _fetcher(lambda request: httpx.Response(404))
        with pytest.raises(ListingNotFoundError) as exc_info:
            asyncio.run(fetcher.fetch(URL))
        assert exc_info.value.kind == "not-found"
        assert exc_info.value.status_code == 404

    def test_blocked(self):
        fetcher = _fetcher(lambda request: httpx.Response(403))
        with pytest.raises(ListingBlockedError) as exc_info:
            asyncio.run(fetcher.fetch(URL))
        assert exc_info.value.transient is True

    def test_server_error(self):
        fetcher = _fetcher(lambda request: httpx.Response(502))
        with pytest.raises(SourceUnavailableError):
            asyncio.run(fetcher.fetch(URL))

    def test_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(FetchTimeoutError) as exc_info:
            asyncio.run(_fetcher(handler).fetch(URL))
        assert exc_info.value.kind == "timeout"
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SourceUnavailableError) as exc_info:
            asyncio.run(_fetcher(handler).fetch(URL))
        assert exc_info.value.kind == "unavailable"

    def test_follows_redirects(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/kohde/80481676":
                return httpx.Response(301, headers={"Location": "https://www.etuovi.com/kohde/1"})
            return httpx.Response(200, text="moved")

        assert asyncio.run(_fetcher(handler).fetch(URL)) == "moved"

    def test_deadline_covers_slow_body(self):
        async def trickle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: text/html\r\nContent-Length: 10\r\n\r\n")
            try:
                for _ in range(10):
                    writer.write(b"x")
                    await writer.drain()
                    await asyncio.sleep(0.2)
            except ConnectionError:
                pass
            finally:
                writer.close()

        async def run() -> float:
            server = await asyncio.start_server(trickle, "127.0.0.1", 0)
            port = server.sockets[0].getsockname()[1]
            fetcher = ListingFetcher(timeout=0.5, transport=httpx.AsyncHTTPTransport())
            started = time.monotonic()
            try:
                with pytest.raises(FetchTimeoutError):
                    await fetcher.fetch(f"http://127.0.0.1:{port}/kohde/1")
                return time.monotonic() - started
            finally:
                server.close()

        assert asyncio.run(run()) < 1.5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
