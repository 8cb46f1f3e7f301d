from __future__ import annotations

import math
import re
from typing import Optional

from gbakaguides.schemas.core import LonLat, PlaceResult


_PAIR_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


def _valid(lon: float, lat: float) -> bool:
    return (
        math.isfinite(lon)
        and math.isfinite(lat)
        and -180.0 <= lon <= 180.0
        and -90.0 <= lat <= 90.0
    )


def parse_lonlat(value: Optional[str], *, name: str) -> LonLat:
    """
    Parse a `"lon,lat"` query parameter.

    Raises `ValueError` with a message naming the parameter when it is missing or malformed.
    """

    if value is None or not value.strip():
        raise ValueError(f'Parameter "{name}" is required (format: lon,lat)')
    match = _PAIR_RE.match(value)
    if match is None:
        raise ValueError(f'Parameter "{name}" must be "lon,lat", got {value!r}')
    lon, lat = float(match.group(1)), float(match.group(2))
    if not _valid(lon, lat):
        raise ValueError(f'Parameter "{name}" is out of range: lon={lon}, lat={lat}')
    return LonLat(lon=lon, lat=lat)


def parse_coordinate_query(query: str) -> Optional[LonLat]:
    """
    Detect a free-text search that is really a raw `"lat,lon"` pair.

    Note the order: people type latitude first, the API boundary speaks lon/lat.
    """

    match = _PAIR_RE.match(query)
    if match is None:
        return None
    lat, lon = float(match.group(1)), float(match.group(2))
    if not _valid(lon, lat):
        return None
    return LonLat(lon=lon, lat=lat)


def coordinate_place(point: LonLat) -> PlaceResult:
    label = f"{point.lat:.4f}, {point.lon:.4f}"
    return PlaceResult(
        id=f"coords.{point.lat:.6f},{point.lon:.6f}",
        text=label,
        place_name=f"Coordonnées {label}",
        center=point,
        relevance=1.0,
        place_type=("coordinates",),
        properties={"category": "coordinates"},
    )
