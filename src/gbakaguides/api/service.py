from __future__ import annotations

# `logging` records which upstream path answered each request.
import logging
# `datetime` gives the health endpoint a UTC timestamp.
from datetime import datetime, timezone
# `Any` marks the dict payload boundary between the service and the Pydantic response models.
from typing import Any, Optional, Sequence

# `AppConfig` is the frozen runtime configuration injected at construction time.
from gbakaguides.config.models import AppConfig
# Coordinate helpers handle `lon,lat` parsing and the raw-coordinate search shortcut.
from gbakaguides.geo.coordinates import coordinate_place, parse_coordinate_query, parse_lonlat
# Provider adapters: each one talks to a single upstream and returns normalised records.
from gbakaguides.providers import mapbox as mapbox_provider
from gbakaguides.providers.base import NoRouteError, ProviderError
from gbakaguides.providers.mapbox import MapboxClient
from gbakaguides.providers.nominatim import NominatimClient
from gbakaguides.providers.tiles import TILE_PROVIDERS, TileImage, TileProxy
# Search is an ordered chain of strategies (OSM first, Mapbox as fallback).
from gbakaguides.search.strategies import (
    MapboxSearch,
    NominatimSearch,
    SearchExhaustedError,
    SearchStrategy,
    run_search_chain,
)
from gbakaguides.schemas.core import RouteResult, TransitPoint
from gbakaguides.transit.points import DEFAULT_TRANSIT_POINTS, filter_points


logger = logging.getLogger(__name__)

ROUTING_PROFILES: tuple[str, ...] = ("driving", "driving-traffic", "walking", "cycling")


class GatewayError(Exception):
    """
    The only error the service raises towards the HTTP layer.

    `details` carries upstream diagnostics; the app decides whether callers may see it.
    """

    def __init__(self, status_code: int, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details


def _route_payload(route: RouteResult) -> dict[str, Any]:
    return {
        "distance": route.distance,
        "duration": route.duration,
        "geometry": route.geometry.to_geojson(),
    }


def _legs_payload(route: RouteResult) -> list[dict[str, Any]]:
    return [
        {
            "summary": leg.summary,
            "steps": [
                {
                    "number": s.number,
                    "instruction": s.instruction,
                    "distance": s.distance,
                    "duration": s.duration,
                    "maneuver": s.maneuver,
                    "modifier": s.modifier,
                }
                for s in leg.steps
            ],
            "distance": leg.distance,
            "duration": leg.duration,
        }
        for leg in route.legs
    ]


# `GatewayService` sits between the HTTP routes and the provider adapters.
# Route handlers deal with query params and status codes; this class owns the proxy semantics.
class GatewayService:
    def __init__(
        self,
        config: AppConfig,
        *,
        mapbox: Optional[MapboxClient] = None,
        nominatim: Optional[NominatimClient] = None,
        tiles: Optional[TileProxy] = None,
        search_strategies: Optional[Sequence[SearchStrategy]] = None,
        transit_points: Sequence[TransitPoint] = DEFAULT_TRANSIT_POINTS,
    ) -> None:
        # Config is frozen; the service never writes to it.
        self._config = config
        # Adapters can be injected so tests (and alternative deployments) control upstream traffic.
        self._mapbox = mapbox or MapboxClient(providers=config.providers)
        self._nominatim = nominatim or NominatimClient(providers=config.providers, search=config.search)
        self._tiles = tiles or TileProxy(providers=config.providers, mapbox=self._mapbox)
        # Order matters: the first strategy is the primary provider, the rest are fallbacks.
        self._search_strategies: tuple[SearchStrategy, ...] = tuple(
            search_strategies
            if search_strategies is not None
            else (NominatimSearch(self._nominatim), MapboxSearch(self._mapbox, settings=config.search))
        )
        # A tuple keeps the transit table immutable for the process lifetime.
        self._transit_points: tuple[TransitPoint, ...] = tuple(transit_points)

    @property
    def config(self) -> AppConfig:
        return self._config

    def _limit(self, limit: Optional[int | str]) -> int:
        if limit is None or (isinstance(limit, str) and not limit.strip()):
            return self._config.search.default_limit
        try:
            value = int(limit)
        except (TypeError, ValueError):
            raise GatewayError(400, 'Parameter "limit" must be an integer') from None
        if value < 1:
            raise GatewayError(400, 'Parameter "limit" must be >= 1')
        return min(value, self._config.search.max_limit)

    def _country(self, country: Optional[str]) -> str:
        value = (country or self._config.search.country).strip().lower()
        if len(value) != 2 or not value.isalpha():
            raise GatewayError(400, 'Parameter "country" must be a 2-letter ISO code')
        return value

    @staticmethod
    def _query(query: Optional[str]) -> str:
        if query is None or not query.strip():
            raise GatewayError(400, 'Parameter "q" is required')
        return query.strip()

    def health(self, endpoints: Sequence[str]) -> dict[str, Any]:
        # Liveness only: no upstream calls here.
        return {
            "status": "healthy",
            "service": self._config.app.name,
            "version": self._config.app.version,
            "mode": self._config.app.mode,
            "timestamp": datetime.now(timezone.utc),
            "providerConfigured": self._config.provider_configured,
            "endpoints": list(endpoints),
        }

    def transit_points(self, point_type: Optional[str] = None) -> dict[str, Any]:
        points = filter_points(self._transit_points, point_type)
        return {
            "success": True,
            "count": len(points),
            "points": [p.to_payload() for p in points],
        }

    def search_places(
        self,
        query: Optional[str],
        *,
        limit: Optional[int | str] = None,
        country: Optional[str] = None,
    ) -> dict[str, Any]:
        q = self._query(query)
        n = self._limit(limit)
        cc = self._country(country)

        point = parse_coordinate_query(q)
        if point is not None:
            return {
                "success": True,
                "query": q,
                "results": [coordinate_place(point).to_payload()],
                "attribution": "",
                "source": "coordinates",
            }

        try:
            outcome = run_search_chain(self._search_strategies, q, limit=n, country=cc)
        except SearchExhaustedError as exc:
            logger.error("All search providers failed for %r: %s", q, exc.primary_error)
            raise GatewayError(500, "Search failed", details=str(exc.primary_error)) from exc

        return {
            "success": True,
            "query": q,
            "results": [r.to_payload() for r in outcome.results],
            "attribution": outcome.attribution,
            "source": outcome.source,
        }

    def geocode(
        self,
        query: Optional[str],
        *,
        limit: Optional[int | str] = None,
        country: Optional[str] = None,
    ) -> dict[str, Any]:
        q = self._query(query)
        n = self._limit(limit)
        cc = self._country(country)

        point = parse_coordinate_query(q)
        if point is not None:
            return {
                "success": True,
                "query": q,
                "results": [coordinate_place(point).to_payload()],
                "attribution": "",
                "source": "coordinates",
            }

        try:
            results = self._mapbox.geocode(
                q,
                limit=n,
                country=cc,
                language=self._config.search.language,
                types=self._config.search.geocode_types,
            )
        except ProviderError as exc:
            logger.error("Mapbox geocoding failed for %r: %s", q, exc)
            # Pass the provider's own status through when it gave one.
            status = exc.status_code if exc.status_code and 400 <= exc.status_code < 600 else 500
            raise GatewayError(status, "Geocoding failed", details=str(exc)) from exc

        return {
            "success": True,
            "query": q,
            "results": [r.to_payload() for r in results[:n]],
            "attribution": mapbox_provider.ATTRIBUTION,
        }

    def directions(
        self,
        origin: Optional[str],
        destination: Optional[str],
        *,
        profile: Optional[str] = None,
    ) -> dict[str, Any]:
        try:
            start = parse_lonlat(origin, name="from")
            end = parse_lonlat(destination, name="to")
        except ValueError as exc:
            raise GatewayError(400, str(exc)) from exc

        mode = (profile or self._config.directions.default_profile).strip().lower()
        if mode not in ROUTING_PROFILES:
            raise GatewayError(400, f'Parameter "profile" must be one of {", ".join(ROUTING_PROFILES)}')

        if start == end:
            raise GatewayError(404, "No route found", details="Origin and destination are identical")

        include_alternatives = self._config.directions.include_alternatives
        try:
            routes = self._mapbox.directions(
                start,
                end,
                profile=mode,
                language=self._config.search.language,
                alternatives=include_alternatives,
            )
        except NoRouteError as exc:
            logger.info("No route %s -> %s (%s): %s", origin, destination, mode, exc)
            raise GatewayError(404, "No route found", details=str(exc)) from exc
        except ProviderError as exc:
            logger.error("Directions failed %s -> %s (%s): %s", origin, destination, mode, exc)
            raise GatewayError(500, "Directions request failed", details=str(exc)) from exc

        best = routes[0]
        payload: dict[str, Any] = {
            "success": True,
            "profile": mode,
            "route": _route_payload(best),
            "legs": _legs_payload(best),
            "waypoints": list(best.waypoints),
        }
        if include_alternatives:
            payload["alternatives"] = [
                {**_route_payload(r), "legs": _legs_payload(r)} for r in routes[1:]
            ]
        return payload

    def tile(self, provider: str, z: int, x: int, y: int, *, scale: Optional[str] = None) -> TileImage:
        if provider not in TILE_PROVIDERS:
            raise GatewayError(404, f"Unknown tile provider: {provider}")
        try:
            return self._tiles.fetch(provider, z, x, y, scale=scale)
        except ValueError as exc:
            raise GatewayError(400, str(exc)) from exc
        except ProviderError as exc:
            logger.warning("Tile %s z=%s x=%s y=%s failed: %s", provider, z, x, y, exc)
            # Tile errors stay opaque even outside production.
            raise GatewayError(500, "Map tile could not be loaded") from exc

    def close(self) -> None:
        self._mapbox.close()
        self._nominatim.close()
        self._tiles.close()
