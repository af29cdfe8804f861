"""Application configuration via environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# MTA subway feed groups: feed id -> path suffix appended to "nyct%2Fgtfs"
MTA_FEED_SUFFIXES: dict[str, str] = {
    "ace": "-ace",
    "bdfm": "-bdfm",
    "g": "-g",
    "jz": "-jz",
    "nqrw": "-nqrw",
    "l": "-l",
    "1234567": "",
    "si": "-si",
}


@dataclass(frozen=True)
class FeedSource:
    """A named upstream GTFS-RT feed."""

    feed_id: str
    url: str


class StationConfig(BaseModel):
    """A station shown on the arrivals board."""

    id: str
    name: str
    display_name: str = Field(serialization_alias="displayName")
    lines: list[str] = Field(default_factory=list)


DEFAULT_STATIONS: list[StationConfig] = [
    StationConfig(id="137", name="28 St", display_name="28th St", lines=["1", "2", "3"]),
    StationConfig(id="R17", name="28 St", display_name="28th St", lines=["N", "R", "W"]),
    StationConfig(
        id="D17",
        name="34 St-Herald Sq",
        display_name="34th St-Herald Sq",
        lines=["B", "D", "F", "M", "N", "Q", "R", "W"],
    ),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Subway Arrivals API"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # MTA GTFS-RT feeds (public, no API key required)
    mta_feed_base_url: str = Field(
        default="https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds",
        validation_alias=AliasChoices("MTA_FEED_BASE_URL", "GTFS_RT_BASE_URL"),
    )
    feed_timeout_sec: float = Field(
        default=10.0,
        gt=0,
        validation_alias=AliasChoices("FEED_TIMEOUT_SEC", "GTFS_RT_FETCH_TIMEOUT_SEC"),
    )

    # Arrival window relative to request time
    arrival_lookback_sec: int = Field(default=60, ge=0)
    arrival_lookahead_sec: int = Field(default=30 * 60, ge=0)
    subway_cache_max_age_sec: int = Field(default=15, ge=0)

    # Weather (Open-Meteo, defaults to NYC)
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_latitude: float = 40.7128
    weather_longitude: float = -74.006
    weather_timeout_sec: float = 10.0

    # Arrivals board stations
    stations: list[StationConfig] = Field(default_factory=lambda: list(DEFAULT_STATIONS))

    # Data attribution
    data_attribution: str = (
        "Subway data provided by the Metropolitan Transportation Authority (MTA). "
        "This data is provided 'as is' without warranty."
    )
    mta_terms_url: str = "https://new.mta.info/developers/terms-and-conditions"

    @property
    def feed_sources(self) -> tuple[FeedSource, ...]:
        """Get the static table of feed sources."""
        base = self.mta_feed_base_url.rstrip("/")
        return tuple(
            FeedSource(feed_id=feed_id, url=f"{base}/nyct%2Fgtfs{suffix}")
            for feed_id, suffix in MTA_FEED_SUFFIXES.items()
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
