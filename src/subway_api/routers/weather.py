"""Weather endpoint for the arrivals board header."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from subway_api.services.weather import WeatherClient, WeatherFetchError, WeatherReport

router = APIRouter(prefix="/api", tags=["weather"])


def get_weather_client() -> WeatherClient:
    """Dependency providing the weather client."""
    return WeatherClient.from_settings()


@router.get(
    "/weather",
    response_model=WeatherReport,
    summary="Current weather at the configured location",
)
async def get_weather(
    client: Annotated[WeatherClient, Depends(get_weather_client)],
) -> Any:
    """Proxy current conditions from Open-Meteo."""
    try:
        return await client.fetch_current()
    except WeatherFetchError:
        return JSONResponse(status_code=502, content={"error": "Weather unavailable"})
