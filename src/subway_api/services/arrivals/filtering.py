"""Arrival extraction, window filtering and ordering."""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal, cast

from subway_api.services.gtfs_rt.decoder import TripUpdate

DEFAULT_LOOKBACK = timedelta(minutes=1)
DEFAULT_LOOKAHEAD = timedelta(minutes=30)

DIRECTIONS = ("N", "S")

Direction = Literal["N", "S"]


@dataclass(frozen=True)
class Arrival:
    """A train expected at a requested station."""

    route_id: str
    direction: Direction
    arrival_time: datetime
    station_id: str


def _ts_to_dt(unix_ts: int) -> datetime:
    """Convert unix timestamp to timezone-aware datetime."""
    return datetime.fromtimestamp(unix_ts, tz=timezone.utc)


def split_stop_id(stop_id: str) -> tuple[str, str]:
    """Split a platform stop id such as ``635N`` into ``("635", "N")``."""
    return stop_id[:-1], stop_id[-1:]


def extract_arrivals(
    trip_updates: Iterable[TripUpdate],
    station_ids: Collection[str],
    now: datetime,
    lookback: timedelta = DEFAULT_LOOKBACK,
    lookahead: timedelta = DEFAULT_LOOKAHEAD,
) -> list[Arrival]:
    """Turn decoded trip updates into arrivals at the requested stations.

    A stop-time update qualifies when its station matches, it carries an
    arrival or departure time, and that time lies within
    ``[now - lookback, now + lookahead]`` (both ends inclusive). Times are
    compared as raw epoch seconds, so values no datetime can represent are
    simply outside the window.
    """
    earliest = (now - lookback).timestamp()
    latest = (now + lookahead).timestamp()
    arrivals: list[Arrival] = []

    for trip_update in trip_updates:
        for update in trip_update.stop_time_updates:
            station_id, direction = split_stop_id(update.stop_id)
            if station_id not in station_ids or direction not in DIRECTIONS:
                continue

            timestamp = update.effective_time
            if timestamp is None or not earliest <= timestamp <= latest:
                continue

            arrival_time = _ts_to_dt(timestamp)
            arrivals.append(
                Arrival(
                    route_id=trip_update.route_id,
                    direction=cast(Direction, direction),
                    arrival_time=arrival_time,
                    station_id=station_id,
                )
            )

    return arrivals


def sort_arrivals(arrivals: Iterable[Arrival]) -> list[Arrival]:
    """Order arrivals by time; equal times keep their input order."""
    return sorted(arrivals, key=lambda arrival: arrival.arrival_time)
