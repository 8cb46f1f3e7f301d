from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import quote

from gbakaguides.config.models import MapboxSettings, ProviderSettings
from gbakaguides.geo.polyline import to_linestring
from gbakaguides.providers.base import NoRouteError, ProviderError, ProviderHTTPClient
from gbakaguides.schemas.core import LonLat, PlaceResult, RouteLeg, RouteResult, RouteStep


logger = logging.getLogger(__name__)

PROVIDER = "mapbox"
ATTRIBUTION = "© Mapbox © OpenStreetMap"

# Mapbox answers these codes (sometimes with a 4xx) when the request was fine but no path exists.
NO_ROUTE_CODES = ("NoRoute", "NoSegment")


def format_distance_km(meters: float) -> str:
    return f"{max(float(meters), 0.0) / 1000:.1f} km"


def format_duration_min(seconds: float) -> str:
    # Half-up rounding (90s -> "2 min"); built-in `round` would give banker's rounding.
    minutes = math.floor(max(float(seconds), 0.0) / 60 + 0.5)
    return f"{int(minutes)} min"


def normalize_steps(raw_steps: Iterable[Mapping[str, Any]]) -> tuple[RouteStep, ...]:
    steps = []
    for number, step in enumerate(raw_steps, start=1):
        maneuver = step.get("maneuver") or {}
        steps.append(
            RouteStep(
                number=number,
                instruction=str(maneuver.get("instruction") or step.get("name") or ""),
                distance=format_distance_km(step.get("distance") or 0.0),
                duration=format_duration_min(step.get("duration") or 0.0),
                maneuver=maneuver.get("type"),
                modifier=maneuver.get("modifier"),
            )
        )
    return tuple(steps)


def normalize_route(route: Mapping[str, Any], *, waypoints: Iterable[Mapping[str, Any]] = ()) -> RouteResult:
    """
    Turn one Mapbox route object into a `RouteResult`.

    Geometry is normalised here (GeoJSON or encoded polyline) so nothing downstream has to guess.
    """

    try:
        geometry = to_linestring(route.get("geometry"), polyline_precision=5)
    except ValueError as exc:
        raise ProviderError(f"Malformed route geometry: {exc}", provider=PROVIDER) from exc

    try:
        raw_legs = route.get("legs") or []
        first_leg: Mapping[str, Any] = raw_legs[0] if raw_legs else {}
        leg = RouteLeg(
            summary=str(first_leg.get("summary") or ""),
            steps=normalize_steps(first_leg.get("steps") or []),
            distance=max(float(first_leg.get("distance") or 0.0), 0.0),
            duration=max(float(first_leg.get("duration") or 0.0), 0.0),
        )
        return RouteResult(
            distance=max(float(route.get("distance") or 0.0), 0.0),
            duration=max(float(route.get("duration") or 0.0), 0.0),
            geometry=geometry,
            legs=(leg,),
            waypoints=tuple(dict(w) for w in waypoints),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ProviderError(f"Malformed route payload: {exc}", provider=PROVIDER) from exc


def normalize_mapbox_features(payload: Any) -> list[PlaceResult]:
    if not isinstance(payload, Mapping) or not isinstance(payload.get("features"), list):
        raise ProviderError("Mapbox geocoding payload missing `features`", provider=PROVIDER)

    out = []
    for feature in payload["features"]:
        if not isinstance(feature, Mapping):
            continue
        center = feature.get("center")
        if not isinstance(center, list) or len(center) < 2:
            geometry = feature.get("geometry")
            center = geometry.get("coordinates") if isinstance(geometry, Mapping) else None
        if not isinstance(center, list) or len(center) < 2:
            continue
        # A feature that is present but unreadable makes the whole answer a provider error.
        try:
            lon, lat = float(center[0]), float(center[1])
            place = PlaceResult(
                id=str(feature.get("id", f"{lat},{lon}")),
                text=str(feature.get("text") or ""),
                place_name=str(feature.get("place_name") or feature.get("text") or ""),
                center=LonLat(lon=lon, lat=lat),
                relevance=float(feature.get("relevance") or 0.0),
                place_type=tuple(str(t) for t in feature.get("place_type") or ("place",)),
                properties=dict(feature.get("properties") or {}),
            )
        except (TypeError, ValueError) as exc:
            raise ProviderError(f"Malformed Mapbox feature {feature.get('id')!r}: {exc}", provider=PROVIDER) from exc
        out.append(place)
    out.sort(key=lambda r: r.relevance, reverse=True)
    return out


class MapboxClient:
    def __init__(self, *, providers: ProviderSettings, http: Optional[ProviderHTTPClient] = None) -> None:
        self._settings: MapboxSettings = providers.mapbox
        self._base_url = self._settings.base_url.rstrip("/")
        self._http = http or ProviderHTTPClient(
            provider=PROVIDER,
            timeout_s=providers.timeout_s,
            user_agent=providers.user_agent,
            secrets=(self._settings.access_token,),
        )

    def _token(self) -> str:
        if not self._settings.access_token:
            raise ProviderError("Mapbox access token is not configured", provider=PROVIDER)
        return self._settings.access_token

    def geocode(
        self,
        query: str,
        *,
        limit: int,
        country: str,
        language: str,
        types: Optional[Iterable[str]] = None,
    ) -> list[PlaceResult]:
        url = f"{self._base_url}/geocoding/v5/mapbox.places/{quote(query.strip(), safe='')}.json"
        params: dict[str, Any] = {
            "access_token": self._token(),
            "country": country.lower(),
            "limit": int(limit),
            "language": language,
        }
        if types:
            params["types"] = ",".join(types)
        results = normalize_mapbox_features(self._http.get_json(url, params=params))
        logger.info("Mapbox geocoding returned %s results for %r", len(results), query)
        return results

    def directions(
        self,
        origin: LonLat,
        destination: LonLat,
        *,
        profile: str,
        language: str,
        alternatives: bool = False,
    ) -> list[RouteResult]:
        """
        Fetch routes between two points; the first element is the primary route.

        Raises `NoRouteError` when Mapbox found nothing, `ProviderError` otherwise.
        """

        coords = f"{origin.as_path_segment()};{destination.as_path_segment()}"
        url = f"{self._base_url}/directions/v5/mapbox/{profile}/{coords}"
        params = {
            "access_token": self._token(),
            "alternatives": "true" if alternatives else "false",
            "geometries": "geojson",
            "overview": "full",
            "steps": "true",
            "language": language,
        }
        try:
            payload = self._http.get_json(url, params=params)
        except ProviderError as exc:
            if any(code in str(exc) for code in NO_ROUTE_CODES):
                raise NoRouteError(str(exc), provider=PROVIDER, status_code=exc.status_code) from exc
            raise

        if not isinstance(payload, Mapping):
            raise ProviderError("Mapbox directions payload is not an object", provider=PROVIDER)
        code = payload.get("code")
        routes = payload.get("routes") or []
        if code in NO_ROUTE_CODES or not routes:
            raise NoRouteError(f"Mapbox found no route ({code or 'empty'})", provider=PROVIDER)
        if code not in (None, "Ok"):
            raise ProviderError(f"Mapbox directions error: {code} {payload.get('message', '')}".strip(), provider=PROVIDER)

        waypoints = payload.get("waypoints") or []
        return [normalize_route(route, waypoints=waypoints) for route in routes]

    def tile_request(self, z: int, x: int, y: int, *, retina: bool) -> tuple[str, dict[str, str]]:
        suffix = "@2x" if retina else ""
        url = (
            f"{self._base_url}/styles/v1/{self._settings.style}/tiles/"
            f"{self._settings.tile_size}/{z}/{x}/{y}{suffix}"
        )
        return url, {"access_token": self._token()}

    def fetch_tile(self, z: int, x: int, y: int, *, retina: bool = False) -> bytes:
        url, params = self.tile_request(z, x, y, retina=retina)
        return self._http.get_bytes(url, params=params, headers={"Accept": "image/png,image/*;q=0.8,*/*;q=0.5"})

    def close(self) -> None:
        self._http.close()
