from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional


Mode = Literal["development", "production", "test"]
RoutingProfile = Literal["driving", "driving-traffic", "walking", "cycling"]


@dataclass(frozen=True)
class AppSettings:
    name: str = "Gbaka Guides API"
    version: str = "1.0.0"
    mode: Mode = "development"

    @property
    def is_production(self) -> bool:
        return self.mode == "production"


@dataclass(frozen=True)
class MapboxSettings:
    access_token: Optional[str]
    base_url: str = "https://api.mapbox.com"
    style: str = "mapbox/streets-v12"
    tile_size: int = 512


@dataclass(frozen=True)
class OSMSettings:
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    tile_url_template: str = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"


@dataclass(frozen=True)
class ProviderSettings:
    mapbox: MapboxSettings
    osm: OSMSettings
    timeout_s: float = 8.0
    user_agent: str = "gbakaguides/1.0.0"


@dataclass(frozen=True)
class SearchSettings:
    city_name: str = "Abidjan"
    city_aliases: tuple[str, ...] = ("abidjan", "abj")
    country: str = "ci"
    language: str = "fr"
    # (west, south, east, north) in degrees.
    viewbox: tuple[float, float, float, float] = (-4.2, 5.1, -3.9, 5.5)
    bounded: bool = True
    default_limit: int = 5
    max_limit: int = 20
    two_segment_labels: bool = False
    geocode_types: tuple[str, ...] = ("poi", "address", "neighborhood", "place")


@dataclass(frozen=True)
class DirectionsSettings:
    default_profile: RoutingProfile = "driving"
    include_alternatives: bool = False


@dataclass(frozen=True)
class CorsSettings:
    # Effective allow-list; local dev servers are only present outside production.
    allowed_origins: tuple[str, ...] = ()
    allow_credentials: bool = True


@dataclass(frozen=True)
class LoggingSettings:
    level: str
    format: str
    file: Optional[Path] = None


@dataclass(frozen=True)
class WebSettings:
    static_dir: Path
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 3001


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    providers: ProviderSettings
    search: SearchSettings
    directions: DirectionsSettings
    cors: CorsSettings
    logging: LoggingSettings
    web: WebSettings

    @property
    def provider_configured(self) -> bool:
        return bool(self.providers.mapbox.access_token)
