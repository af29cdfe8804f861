"""Weather conditions for the arrivals board."""

from subway_api.services.weather.client import WeatherClient, WeatherFetchError, WeatherReport

__all__ = [
    "WeatherClient",
    "WeatherFetchError",
    "WeatherReport",
]
