from __future__ import annotations

from typing import Iterable, Optional

from gbakaguides.schemas.core import LonLat, TransitPoint


TRANSIT_TYPES: tuple[str, ...] = ("gbaka", "woroworo")

# Curated departure points; not derived from any live feed.
DEFAULT_TRANSIT_POINTS: tuple[TransitPoint, ...] = (
    TransitPoint(
        id=1,
        name="Gare Gbaka Yopougon",
        type="gbaka",
        coordinates=LonLat(lon=-4.065, lat=5.335),
        description="Gare principale de Yopougon - Départ toutes les 5 min",
        price=300,
        frequency="5min",
        icon="🚌",
        color="#f97316",
        routes=("Plateau", "Cocody", "Marcory"),
    ),
    TransitPoint(
        id=2,
        name="Arrêt Wôrô-wôrô Cocody",
        type="woroworo",
        coordinates=LonLat(lon=-4.055, lat=5.345),
        description="Arrêt taxi partagé - Riviera Golf",
        price=400,
        frequency="2min",
        icon="🚖",
        color="#3b82f6",
        routes=("Plateau", "Marcory", "Treichville"),
    ),
    TransitPoint(
        id=3,
        name="Gare Plateau",
        type="gbaka",
        coordinates=LonLat(lon=-4.025, lat=5.325),
        description="Terminus Plateau - Rue du Commerce",
        price=300,
        frequency="10min",
        icon="🚌",
        color="#f97316",
        routes=("Yopougon", "Cocody", "Adjamé"),
    ),
    TransitPoint(
        id=4,
        name="Station Adjamé",
        type="gbaka",
        coordinates=LonLat(lon=-4.035, lat=5.355),
        description="Grande station - Toutes destinations",
        price=250,
        frequency="3min",
        icon="🚌",
        color="#10b981",
        routes=("Yopougon", "Plateau", "Cocody", "Marcory", "Treichville"),
    ),
    TransitPoint(
        id=5,
        name="Arrêt Marcory",
        type="woroworo",
        coordinates=LonLat(lon=-4.015, lat=5.315),
        description="Marché Marcory - Taxis vers Plateau",
        price=350,
        frequency="5min",
        icon="🚖",
        color="#8b5cf6",
        routes=("Plateau", "Cocody", "Treichville"),
    ),
)


def filter_points(points: Iterable[TransitPoint], point_type: Optional[str] = None) -> list[TransitPoint]:
    if not point_type:
        return list(points)
    wanted = point_type.strip().lower().replace("-", "").replace("ô", "o")
    if wanted not in TRANSIT_TYPES:
        return []
    return [p for p in points if p.type == wanted]
