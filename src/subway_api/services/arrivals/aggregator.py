"""Concurrent multi-feed arrival aggregation."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

import httpx

from subway_api.config import FeedSource, get_settings
from subway_api.logging import get_logger
from subway_api.services.arrivals.filtering import (
    DEFAULT_LOOKAHEAD,
    DEFAULT_LOOKBACK,
    Arrival,
    extract_arrivals,
    sort_arrivals,
)
from subway_api.services.gtfs_rt.decoder import GtfsRtDecoder
from subway_api.services.gtfs_rt.fetcher import FeedFetchError, GtfsRtFetcher

logger = get_logger(__name__)


class ArrivalAggregator:
    """Fetches every feed source in parallel and merges their arrivals.

    Usage:
        aggregator = ArrivalAggregator.from_settings()
        arrivals = await aggregator.collect(["635", "R17"])

    Each feed is isolated. Any failure while fetching, decoding or
    extracting a feed only removes that feed's arrivals from the result.
    """

    def __init__(
        self,
        feed_sources: Sequence[FeedSource],
        fetcher: GtfsRtFetcher | None = None,
        decoder: GtfsRtDecoder | None = None,
        lookback: timedelta = DEFAULT_LOOKBACK,
        lookahead: timedelta = DEFAULT_LOOKAHEAD,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._feed_sources = tuple(feed_sources)
        self._fetcher = fetcher or GtfsRtFetcher()
        self._decoder = decoder or GtfsRtDecoder()
        self._lookback = lookback
        self._lookahead = lookahead
        self._transport = transport

    @classmethod
    def from_settings(cls) -> ArrivalAggregator:
        """Build an aggregator from application settings."""
        settings = get_settings()
        return cls(
            feed_sources=settings.feed_sources,
            fetcher=GtfsRtFetcher(timeout_sec=settings.feed_timeout_sec),
            lookback=timedelta(seconds=settings.arrival_lookback_sec),
            lookahead=timedelta(seconds=settings.arrival_lookahead_sec),
        )

    @property
    def feed_sources(self) -> tuple[FeedSource, ...]:
        return self._feed_sources

    async def collect(
        self,
        station_ids: Iterable[str],
        now: datetime | None = None,
    ) -> list[Arrival]:
        """Return arrivals at the given stations across all feeds, sorted by time."""
        stations = frozenset(station_ids)
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._fetcher.client(transport=self._transport) as client:
            results = await asyncio.gather(
                *(
                    self._collect_feed(client, source, stations, now)
                    for source in self._feed_sources
                )
            )

        arrivals = [arrival for feed_arrivals in results for arrival in feed_arrivals]
        logger.info(
            "Arrivals aggregated",
            feed_count=len(self._feed_sources),
            station_count=len(stations),
            arrival_count=len(arrivals),
        )
        return sort_arrivals(arrivals)

    async def _collect_feed(
        self,
        client: httpx.AsyncClient,
        source: FeedSource,
        stations: frozenset[str],
        now: datetime,
    ) -> list[Arrival]:
        """Fetch, decode and extract a single feed."""
        try:
            data = await self._fetcher.fetch(client, source.url, source.feed_id)
        except FeedFetchError as exc:
            logger.error("Feed unavailable", feed_id=source.feed_id, error=str(exc))
            return []

        trip_updates = self._decoder.decode(data, source.feed_id)
        try:
            return extract_arrivals(
                trip_updates,
                stations,
                now,
                lookback=self._lookback,
                lookahead=self._lookahead,
            )
        except Exception as exc:
            logger.error(
                "Failed to extract arrivals",
                feed_id=source.feed_id,
                error=str(exc),
            )
            return []
