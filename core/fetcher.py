import asyncio
import logging

import httpx

from config import settings
from core.errors import (
    FetchTimeoutError,
    ListingBlockedError,
    ListingNotFoundError,
    SourceUnavailableError,
)

log = logging.getLogger(__name__)


class ListingFetcher:
    """Downloads a listing page, one request per call and no retries."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout if timeout is not None else settings.etuovi_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict = {
            "headers": settings.request_headers,
            "timeout": self.timeout,
            "follow_redirects": True,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif settings.etuovi_proxy:
            kwargs["proxy"] = settings.etuovi_proxy
        return httpx.AsyncClient(**kwargs)

    async def fetch(self, url: str) -> str:
        async with self._client() as client:
            try:
                # httpx timeouts apply per operation, the deadline covers the whole request
                resp = await asyncio.wait_for(client.get(url), self.timeout)
                resp.raise_for_status()
            except (httpx.TimeoutException, asyncio.TimeoutError) as e:
                log.warning(f"Timed out after {self.timeout}s fetching {url}")
                raise FetchTimeoutError() from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                log.warning(f"Fetching {url} failed with HTTP {status}")
                if status == 404:
                    raise ListingNotFoundError() from e
                if status == 403:
                    raise ListingBlockedError() from e
                raise SourceUnavailableError() from e
            except httpx.HTTPError as e:
                log.warning(f"Fetching {url} failed: {e}")
                raise SourceUnavailableError() from e

        log.debug(f"Fetched {len(resp.text)} characters from {url}")
        return resp.text
