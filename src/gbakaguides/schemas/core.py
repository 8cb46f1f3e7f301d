from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


TransitType = Literal["gbaka", "woroworo"]


@dataclass(frozen=True)
class LonLat:
    lon: float
    lat: float

    def as_list(self) -> list[float]:
        # GeoJSON order.
        return [self.lon, self.lat]

    def as_path_segment(self) -> str:
        return f"{self.lon},{self.lat}"


@dataclass(frozen=True)
class TransitPoint:
    id: int
    name: str
    type: TransitType
    coordinates: LonLat
    description: str
    price: int
    frequency: str
    icon: str
    color: str
    routes: tuple[str, ...]

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "coordinates": self.coordinates.as_list(),
            "description": self.description,
            "price": self.price,
            "frequency": self.frequency,
            "icon": self.icon,
            "color": self.color,
            "routes": list(self.routes),
        }


@dataclass(frozen=True)
class PlaceResult:
    id: str
    text: str
    place_name: str
    center: LonLat
    relevance: float
    place_type: tuple[str, ...] = ("place",)
    properties: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        # `geometry.coordinates` is derived from `center` so the two can never disagree.
        return {
            "id": self.id,
            "type": "Feature",
            "place_type": list(self.place_type),
            "relevance": self.relevance,
            "text": self.text,
            "place_name": self.place_name,
            "center": self.center.as_list(),
            "geometry": {"type": "Point", "coordinates": self.center.as_list()},
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class LineString:
    coordinates: tuple[tuple[float, float], ...]

    def to_geojson(self) -> dict[str, Any]:
        return {"type": "LineString", "coordinates": [list(c) for c in self.coordinates]}


@dataclass(frozen=True)
class RouteStep:
    number: int
    instruction: str
    distance: str
    duration: str
    maneuver: Optional[str]
    modifier: Optional[str]


@dataclass(frozen=True)
class RouteLeg:
    summary: str
    steps: tuple[RouteStep, ...]
    distance: float
    duration: float


@dataclass(frozen=True)
class RouteResult:
    distance: float
    duration: float
    geometry: LineString
    legs: tuple[RouteLeg, ...]
    waypoints: tuple[dict[str, Any], ...] = ()
