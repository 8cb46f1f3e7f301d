from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from gbakaguides.config.models import ProviderSettings
from gbakaguides.providers.base import ProviderHTTPClient
from gbakaguides.providers.mapbox import MapboxClient


logger = logging.getLogger(__name__)

TILE_PROVIDERS: tuple[str, ...] = ("mapbox", "osm")

TILE_CONTENT_TYPE = "image/png"
TILE_CACHE_CONTROL = "public, max-age=86400"


@dataclass(frozen=True)
class TileImage:
    content: bytes
    provider: str
    content_type: str = TILE_CONTENT_TYPE
    cache_control: str = TILE_CACHE_CONTROL


def wants_retina(scale: Optional[str]) -> bool:
    return bool(scale) and "@2x" in str(scale)


def validate_tile_coords(z: int, x: int, y: int) -> None:
    if z < 0 or z > 22:
        raise ValueError(f"Zoom level out of range: {z}")
    limit = 2**z
    if not (0 <= x < limit and 0 <= y < limit):
        raise ValueError(f"Tile ({x}, {y}) out of range for zoom {z}")


class TileProxy:
    """Fetches raster tiles from Mapbox or the OSM tile server; bytes pass through untouched."""

    def __init__(
        self,
        *,
        providers: ProviderSettings,
        mapbox: MapboxClient,
        osm_http: Optional[ProviderHTTPClient] = None,
    ) -> None:
        self._osm_template = providers.osm.tile_url_template
        self._mapbox = mapbox
        self._osm_http = osm_http or ProviderHTTPClient(
            provider="osm_tiles",
            timeout_s=providers.timeout_s,
            user_agent=providers.user_agent,
        )

    def fetch(self, provider: str, z: int, x: int, y: int, *, scale: Optional[str] = None) -> TileImage:
        validate_tile_coords(z, x, y)
        if provider == "mapbox":
            content = self._mapbox.fetch_tile(z, x, y, retina=wants_retina(scale))
        elif provider == "osm":
            url = self._osm_template.format(z=z, x=x, y=y)
            content = self._osm_http.get_bytes(url)
        else:
            raise KeyError(provider)
        logger.debug("Tile %s z=%s x=%s y=%s (%s bytes)", provider, z, x, y, len(content))
        return TileImage(content=content, provider=provider)

    def close(self) -> None:
        self._osm_http.close()
