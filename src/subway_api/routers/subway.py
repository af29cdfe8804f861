"""Public subway arrival endpoints.

Endpoints
---------
GET /api/subway     – upcoming arrivals at the requested stations
GET /api/stations   – stations configured for the arrivals board
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from subway_api.config import StationConfig, get_settings
from subway_api.logging import get_logger
from subway_api.services.arrivals import Arrival, ArrivalAggregator

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["subway"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ArrivalOut(BaseModel):
    route_id: str = Field(serialization_alias="routeId")
    direction: str
    arrival_time: str = Field(serialization_alias="arrivalTime")
    station_id: str = Field(serialization_alias="stationId")


class SubwayArrivalsResponse(BaseModel):
    arrivals: list[ArrivalOut]


class SubwayErrorResponse(BaseModel):
    error: str
    arrivals: list[ArrivalOut] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers / dependencies
# ---------------------------------------------------------------------------


def parse_station_ids(raw: str | None) -> list[str]:
    """Split a comma-separated station list, dropping blank entries."""
    if not raw:
        return []
    return [station_id.strip() for station_id in raw.split(",") if station_id.strip()]


def format_instant(value: datetime) -> str:
    """Render a datetime as an ISO-8601 UTC instant, e.g. 2024-01-01T12:05:00.000Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_arrival(arrival: Arrival) -> ArrivalOut:
    return ArrivalOut(
        route_id=arrival.route_id,
        direction=arrival.direction,
        arrival_time=format_instant(arrival.arrival_time),
        station_id=arrival.station_id,
    )


def get_aggregator() -> ArrivalAggregator:
    """Dependency providing the feed aggregator."""
    return ArrivalAggregator.from_settings()


# ---------------------------------------------------------------------------
# GET /api/subway
# ---------------------------------------------------------------------------


@router.get(
    "/subway",
    response_model=SubwayArrivalsResponse,
    responses={500: {"model": SubwayErrorResponse}},
    summary="Upcoming arrivals at the requested stations",
    description=(
        "Fetch every MTA subway GTFS-RT feed, keep stop-time updates for the "
        "requested stations that fall between one minute ago and thirty minutes "
        "from now, and return them ordered by arrival time."
    ),
)
async def get_subway_arrivals(
    response: Response,
    aggregator: Annotated[ArrivalAggregator, Depends(get_aggregator)],
    stations: Annotated[
        str | None,
        Query(description="Comma-separated station ids, e.g. 137,R17"),
    ] = None,
) -> Any:
    """Return arrivals sorted ascending by arrival time."""
    settings = get_settings()
    station_ids = parse_station_ids(stations)

    try:
        arrivals = await aggregator.collect(station_ids) if station_ids else []
        body = SubwayArrivalsResponse(arrivals=[serialize_arrival(a) for a in arrivals])
    except Exception as exc:
        logger.error("Subway API error", exc_info=exc, station_ids=station_ids)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch subway data", "arrivals": []},
        )

    response.headers["Cache-Control"] = f"public, max-age={settings.subway_cache_max_age_sec}"
    return body


# ---------------------------------------------------------------------------
# GET /api/stations
# ---------------------------------------------------------------------------


@router.get(
    "/stations",
    response_model=list[StationConfig],
    summary="Stations shown on the arrivals board",
)
async def get_stations() -> list[StationConfig]:
    return get_settings().stations
