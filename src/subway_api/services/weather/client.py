"""Open-Meteo current conditions client."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, Field

from subway_api.config import get_settings
from subway_api.logging import get_logger

logger = get_logger(__name__)

CURRENT_FIELDS = (
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "is_day",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
)

# WMO weather interpretation codes
WEATHER_LABELS = {
    0: "Clear",
    1: "Mostly Clear",
    2: "Partly Cloudy",
    3: "Overcast",
    45: "Foggy",
    48: "Icy Fog",
    51: "Light Drizzle",
    53: "Drizzle",
    55: "Heavy Drizzle",
    61: "Light Rain",
    63: "Rain",
    65: "Heavy Rain",
    66: "Freezing Rain",
    67: "Heavy Freezing Rain",
    71: "Light Snow",
    73: "Snow",
    75: "Heavy Snow",
    77: "Snow Grains",
    80: "Light Showers",
    81: "Showers",
    82: "Heavy Showers",
    85: "Snow Showers",
    86: "Heavy Snow Showers",
    95: "Thunderstorm",
    96: "Thunderstorm w/ Hail",
    99: "Thunderstorm w/ Heavy Hail",
}


class WeatherFetchError(Exception):
    """Raised when current conditions cannot be retrieved."""


class WeatherReport(BaseModel):
    """Current conditions in display units (F, mph, inches)."""

    temperature: int
    feels_like: int = Field(serialization_alias="feelsLike")
    weather_code: int = Field(serialization_alias="weatherCode")
    label: str
    is_day: bool = Field(serialization_alias="isDay")
    humidity: float
    precipitation: float
    wind_speed: int = Field(serialization_alias="windSpeed")


def weather_label(code: int) -> str:
    return WEATHER_LABELS.get(code, "Unknown")


def parse_current(payload: dict[str, Any]) -> WeatherReport:
    """Map an Open-Meteo ``current`` block onto a WeatherReport."""
    current = payload["current"]
    code = int(current["weather_code"])
    return WeatherReport(
        temperature=round(current["temperature_2m"]),
        feels_like=round(current["apparent_temperature"]),
        weather_code=code,
        label=weather_label(code),
        is_day=current["is_day"] == 1,
        humidity=current["relative_humidity_2m"],
        precipitation=current["precipitation"],
        wind_speed=round(current["wind_speed_10m"]),
    )


class WeatherClient:
    """Fetches current conditions for a fixed location."""

    def __init__(
        self,
        api_url: str,
        latitude: float,
        longitude: float,
        timeout_sec: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.latitude = latitude
        self.longitude = longitude
        self.timeout_sec = timeout_sec
        self._transport = transport

    @classmethod
    def from_settings(cls) -> WeatherClient:
        settings = get_settings()
        return cls(
            api_url=settings.weather_api_url,
            latitude=settings.weather_latitude,
            longitude=settings.weather_longitude,
            timeout_sec=settings.weather_timeout_sec,
        )

    def _params(self) -> dict[str, str | float]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "current": ",".join(CURRENT_FIELDS),
            "temperature_unit": "fahrenheit",
            "wind_speed_unit": "mph",
            "precipitation_unit": "inch",
        }

    async def fetch_current(self) -> WeatherReport:
        """Retrieve and normalize current conditions.

        Raises:
            WeatherFetchError: If the request fails or the payload is unusable.
        """
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_sec),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(self.api_url, params=self._params())
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as exc:
            msg = "Failed to fetch weather"
            logger.error(msg, error=str(exc))
            raise WeatherFetchError(msg) from exc

        try:
            report = parse_current(payload)
        except (KeyError, TypeError, ValueError) as exc:
            msg = "Unexpected weather payload"
            logger.error(msg, error=str(exc))
            raise WeatherFetchError(msg) from exc

        logger.info(
            "Weather fetched", temperature=report.temperature, weather_code=report.weather_code
        )
        return report
