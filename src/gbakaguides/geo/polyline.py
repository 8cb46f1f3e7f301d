from __future__ import annotations

import math
from typing import Any, Mapping

from gbakaguides.schemas.core import LineString


def decode_polyline(encoded: str, *, precision: int = 5) -> list[tuple[float, float]]:
    """
    Decode an encoded polyline string into `(lon, lat)` pairs.

    The encoded format stores latitude first; the output is flipped to GeoJSON order.
    """

    factor = 10**precision
    coordinates: list[tuple[float, float]] = []
    index = 0
    lat = 0
    lon = 0
    length = len(encoded)

    while index < length:
        deltas = []
        for _ in range(2):
            result = 0
            shift = 0
            while True:
                if index >= length:
                    raise ValueError("Truncated polyline string")
                b = ord(encoded[index]) - 63
                index += 1
                if b < 0:
                    raise ValueError(f"Invalid polyline character at {index - 1}")
                result |= (b & 0x1F) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(result >> 1) if (result & 1) else (result >> 1))
        lat += deltas[0]
        lon += deltas[1]
        coordinates.append((lon / factor, lat / factor))

    return coordinates


def _coerce_position(position: Any) -> tuple[float, float]:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        raise ValueError(f"Invalid LineString position: {position!r}")
    lon, lat = float(position[0]), float(position[1])
    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise ValueError(f"Non-finite LineString position: {position!r}")
    return lon, lat


def to_linestring(geometry: Any, *, polyline_precision: int = 5) -> LineString:
    """
    Normalise a route geometry to a GeoJSON LineString.

    Accepts a GeoJSON LineString object or an encoded polyline string (precision 5 or 6).
    """

    if isinstance(geometry, str):
        return LineString(coordinates=tuple(decode_polyline(geometry, precision=polyline_precision)))
    if isinstance(geometry, Mapping):
        if geometry.get("type") != "LineString":
            raise ValueError(f"Unsupported geometry type: {geometry.get('type')!r}")
        positions = geometry.get("coordinates")
        if not isinstance(positions, list):
            raise ValueError("LineString geometry missing `coordinates`")
        return LineString(coordinates=tuple(_coerce_position(p) for p in positions))
    raise ValueError(f"Unsupported geometry payload: {type(geometry).__name__}")
