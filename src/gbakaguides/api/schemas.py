from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    status: str = Field(..., examples=["healthy"])
    service: str
    version: str
    mode: str
    timestamp: datetime
    providerConfigured: bool
    endpoints: list[str] = Field(default_factory=list)


class TransitPointOut(BaseModel):
    id: int
    name: str
    type: str = Field(..., examples=["gbaka", "woroworo"])
    coordinates: list[float] = Field(..., min_length=2, max_length=2, description="[lon, lat]")
    description: str
    price: int = Field(..., ge=0)
    frequency: str
    icon: str
    color: str
    routes: list[str]


class TransitPointsOut(BaseModel):
    success: bool = True
    count: int
    points: list[TransitPointOut]


class PointGeometryOut(BaseModel):
    type: str = "Point"
    coordinates: list[float]


class PlaceOut(BaseModel):
    id: str
    type: str = "Feature"
    place_type: list[str]
    relevance: float
    text: str
    place_name: str
    center: list[float] = Field(..., description="[lon, lat]")
    geometry: PointGeometryOut
    properties: dict[str, Any] = Field(default_factory=dict)


class PlacesOut(BaseModel):
    success: bool = True
    query: str
    results: list[PlaceOut]
    attribution: str
    source: Optional[str] = Field(default=None, examples=["nominatim", "mapbox_fallback", "coordinates"])


class LineStringOut(BaseModel):
    type: str = "LineString"
    coordinates: list[list[float]]


class RouteStepOut(BaseModel):
    number: int = Field(..., ge=1)
    instruction: str
    distance: str = Field(..., examples=["1.2 km"])
    duration: str = Field(..., examples=["3 min"])
    maneuver: Optional[str] = None
    modifier: Optional[str] = None


class RouteLegOut(BaseModel):
    summary: str
    steps: list[RouteStepOut]
    distance: float = Field(..., ge=0)
    duration: float = Field(..., ge=0)


class RouteSummaryOut(BaseModel):
    distance: float = Field(..., ge=0, description="meters")
    duration: float = Field(..., ge=0, description="seconds")
    geometry: LineStringOut


class AlternativeRouteOut(RouteSummaryOut):
    legs: list[RouteLegOut]


class DirectionsOut(BaseModel):
    success: bool = True
    profile: str
    route: RouteSummaryOut
    legs: list[RouteLegOut]
    waypoints: list[dict[str, Any]] = Field(default_factory=list)
    alternatives: Optional[list[AlternativeRouteOut]] = None


class ErrorOut(BaseModel):
    success: bool = False
    error: str
    details: Optional[Any] = None
