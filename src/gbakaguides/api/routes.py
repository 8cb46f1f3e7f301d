from __future__ import annotations

# We use `Optional[...]` for query parameters so the service (not FastAPI) decides what "missing" means.
from typing import Optional

# FastAPI primitives:
# - `APIRouter` groups endpoints so the app factory can mount them under the API prefix.
# - `Depends` injects the service per request (no global variables needed).
# - `Query` lets us expose `from` (a Python keyword) as a query parameter via an alias.
# - `Request` gives access to `app.state` where the service lives.
from fastapi import APIRouter, Depends, Query, Request, Response

# Pydantic response models define the JSON contract the frontend relies on.
from gbakaguides.api.schemas import DirectionsOut, ErrorOut, HealthOut, PlacesOut, TransitPointsOut
# `GatewayService` owns the proxy semantics; handlers only translate HTTP <-> service calls.
from gbakaguides.api.service import GatewayService


router = APIRouter()

# Public endpoint manifest, also returned by the JSON 404 for unknown API paths.
ENDPOINTS: tuple[str, ...] = (
    "GET /health",
    "GET /transit/points?type=...",
    "GET /search/places?q=...&limit=...",
    "GET /geocode?q=...&limit=...&country=...",
    "GET /directions?from=lon,lat&to=lon,lat&profile=...",
    "GET /tiles/{provider}/{z}/{x}/{y}?scale=@2x",
)

_ERRORS = {
    400: {"model": ErrorOut, "description": "Missing or invalid parameter"},
    500: {"model": ErrorOut, "description": "Upstream provider failure"},
}


def get_service(request: Request) -> GatewayService:
    # Pitfall: if `create_app` did not attach the service, this raises `AttributeError` at runtime.
    return request.app.state.gateway_service  # type: ignore[attr-defined]


def endpoint_manifest(request: Request) -> list[str]:
    prefix = request.app.state.api_prefix  # type: ignore[attr-defined]
    out = []
    for entry in ENDPOINTS:
        method, path = entry.split(" ", 1)
        out.append(f"{method} {prefix}{path}")
    return out


# Liveness probe; never touches upstream providers.
@router.get("/health", response_model=HealthOut)
def health(request: Request, service: GatewayService = Depends(get_service)) -> HealthOut:
    return HealthOut(**service.health(endpoint_manifest(request)))


# `/gbaka/points` is the path the bundled frontend still calls.
@router.get("/transit/points", response_model=TransitPointsOut)
@router.get("/gbaka/points", response_model=TransitPointsOut, include_in_schema=False)
def transit_points(
    point_type: Optional[str] = Query(None, alias="type", description="gbaka | woroworo"),
    service: GatewayService = Depends(get_service),
) -> TransitPointsOut:
    return TransitPointsOut(**service.transit_points(point_type))


# OSM-first place search with Mapbox fallback.
@router.get("/search/places", response_model=PlacesOut, response_model_exclude_none=True, responses=_ERRORS)
def search_places(
    q: Optional[str] = Query(None, description="Free text, or a raw 'lat,lon' pair"),
    limit: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    service: GatewayService = Depends(get_service),
) -> PlacesOut:
    return PlacesOut(**service.search_places(q, limit=limit, country=country))


# Direct Mapbox geocoding (no fallback chain).
@router.get("/geocode", response_model=PlacesOut, response_model_exclude_none=True, responses=_ERRORS)
@router.get("/mapbox/geocoding", response_model=PlacesOut, response_model_exclude_none=True, include_in_schema=False)
def geocode(
    q: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    service: GatewayService = Depends(get_service),
) -> PlacesOut:
    return PlacesOut(**service.geocode(q, limit=limit, country=country))


@router.get(
    "/directions",
    response_model=DirectionsOut,
    response_model_exclude_none=True,
    responses={**_ERRORS, 404: {"model": ErrorOut, "description": "No route found"}},
)
@router.get("/mapbox/directions", response_model=DirectionsOut, response_model_exclude_none=True, include_in_schema=False)
def directions(
    origin: Optional[str] = Query(None, alias="from", description="lon,lat"),
    destination: Optional[str] = Query(None, alias="to", description="lon,lat"),
    profile: Optional[str] = Query(None, description="driving | walking | cycling"),
    service: GatewayService = Depends(get_service),
) -> DirectionsOut:
    return DirectionsOut(**service.directions(origin, destination, profile=profile))


def _tile_response(service: GatewayService, provider: str, z: int, x: int, y: int, scale: Optional[str]) -> Response:
    tile = service.tile(provider, z, x, y, scale=scale)
    # Bytes are passed through unchanged; only the caching headers are ours.
    return Response(
        content=tile.content,
        media_type=tile.content_type,
        headers={"Cache-Control": tile.cache_control},
    )


@router.get(
    "/tiles/{provider}/{z}/{x}/{y}",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 500: {"model": ErrorOut}},
)
def tile(
    provider: str,
    z: int,
    x: int,
    y: int,
    scale: Optional[str] = Query(None, description="'@2x' for retina (Mapbox only)"),
    service: GatewayService = Depends(get_service),
) -> Response:
    return _tile_response(service, provider, z, x, y, scale)


@router.get("/mapbox/tiles/{z}/{x}/{y}", response_class=Response, include_in_schema=False)
def mapbox_tile(
    z: int,
    x: int,
    y: int,
    scale: Optional[str] = Query(None),
    service: GatewayService = Depends(get_service),
) -> Response:
    return _tile_response(service, "mapbox", z, x, y, scale)


@router.get("/osm/tiles/{z}/{x}/{y}", response_class=Response, include_in_schema=False)
def osm_tile(
    z: int,
    x: int,
    y: int,
    service: GatewayService = Depends(get_service),
) -> Response:
    return _tile_response(service, "osm", z, x, y, None)
