"""GTFS-Realtime fetch and decode pipeline for MTA subway feeds."""

from subway_api.services.gtfs_rt.decoder import (
    GtfsRtDecoder,
    StopTimeUpdate,
    TripUpdate,
    decode_trip_updates,
)
from subway_api.services.gtfs_rt.fetcher import FeedFetchError, GtfsRtFetcher

__all__ = [
    "FeedFetchError",
    "GtfsRtDecoder",
    "GtfsRtFetcher",
    "StopTimeUpdate",
    "TripUpdate",
    "decode_trip_updates",
]
