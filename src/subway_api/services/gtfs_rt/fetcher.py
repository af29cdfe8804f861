"""GTFS-RT feed fetcher with a per-feed deadline."""

from __future__ import annotations

import asyncio

import httpx

from subway_api.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0


class FeedFetchError(Exception):
    """Raised when a GTFS-RT feed cannot be retrieved."""


class GtfsRtFetcher:
    """Fetches GTFS-RT protobuf feeds from remote URLs.

    Exactly one attempt is made per call; the caller decides what a failure
    means for the overall result.
    """

    def __init__(self, timeout_sec: float = DEFAULT_TIMEOUT_SEC) -> None:
        self.timeout_sec = timeout_sec

    def client(self, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
        """Build an HTTP client configured for feed retrieval."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_sec),
            follow_redirects=True,
            transport=transport,
        )

    async def fetch(self, client: httpx.AsyncClient, url: str, feed_id: str) -> bytes:
        """Download one GTFS-RT protobuf feed.

        Args:
            client: HTTP client to issue the request with.
            url: Feed URL.
            feed_id: Label for logging (e.g. "ace").

        Returns:
            Raw protobuf bytes.

        Raises:
            FeedFetchError: On a non-success status, a transport error or
                when the deadline expires.
        """
        logger.debug("Fetching GTFS-RT feed", feed_id=feed_id, url=url)
        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.timeout_sec)
        except asyncio.TimeoutError as exc:
            msg = f"Feed {feed_id} timed out after {self.timeout_sec}s"
            raise FeedFetchError(msg) from exc
        except httpx.RequestError as exc:
            msg = f"Feed {feed_id} fetch error: {exc}"
            raise FeedFetchError(msg) from exc

        if not response.is_success:
            msg = f"Feed {feed_id} error: {response.status_code}"
            raise FeedFetchError(msg)

        data = response.content
        logger.debug(
            "GTFS-RT feed downloaded",
            feed_id=feed_id,
            status_code=response.status_code,
            size_bytes=len(data),
        )
        return data
