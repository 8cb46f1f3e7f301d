from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from gbakaguides.config.models import ProviderSettings, SearchSettings
from gbakaguides.providers.base import ProviderError, ProviderHTTPClient
from gbakaguides.schemas.core import LonLat, PlaceResult


logger = logging.getLogger(__name__)

PROVIDER = "nominatim"
ATTRIBUTION = "© OpenStreetMap contributors"

IN_CITY_RELEVANCE = 1.0
UNCONFIRMED_RELEVANCE = 0.5


def mentions_city(display_name: str, aliases: tuple[str, ...]) -> bool:
    lowered = display_name.lower()
    return any(alias in lowered for alias in aliases)


def short_label(display_name: str, *, two_segments: bool = False) -> str:
    segments = [s.strip() for s in display_name.split(",") if s.strip()]
    if not segments:
        return display_name.strip()
    if two_segments and len(segments) > 1:
        return f"{segments[0]}, {segments[1]}"
    return segments[0]


def _float_or_none(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_nominatim_places(payload: Any, *, settings: SearchSettings) -> list[PlaceResult]:
    """
    Normalize a Nominatim `/search?format=json` payload into `PlaceResult` rows.

    - `text` is the first comma segment of `display_name` (two segments when configured
      and the hit is inside the city).
    - `relevance` is 1.0 when the display name mentions the city, 0.5 otherwise.
    - Output is sorted by relevance, then importance, descending.
    - Hits without usable coordinates are dropped.
    """

    if not isinstance(payload, list):
        raise ProviderError(
            f"Unexpected Nominatim response type: {type(payload).__name__}",
            provider=PROVIDER,
        )

    rows: list[tuple[float, float, PlaceResult]] = []
    for place in payload:
        if not isinstance(place, Mapping):
            continue
        lon = _float_or_none(place.get("lon"))
        lat = _float_or_none(place.get("lat"))
        if lon is None or lat is None:
            continue

        display_name = str(place.get("display_name") or "")
        in_city = mentions_city(display_name, settings.city_aliases)
        importance = _float_or_none(place.get("importance"))
        relevance = IN_CITY_RELEVANCE if in_city else UNCONFIRMED_RELEVANCE

        result = PlaceResult(
            id=str(place.get("place_id", f"{lat},{lon}")),
            text=short_label(display_name, two_segments=settings.two_segment_labels and in_city),
            place_name=display_name,
            center=LonLat(lon=lon, lat=lat),
            relevance=relevance,
            place_type=(str(place.get("type") or "place"),),
            properties={
                "category": place.get("type"),
                "class": place.get("class"),
                "importance": importance,
                "address": place.get("address") or {},
            },
        )
        rows.append((relevance, importance or 0.0, result))

    rows.sort(key=lambda row: (row[0], row[1]), reverse=True)
    return [row[2] for row in rows]


class NominatimClient:
    def __init__(
        self,
        *,
        providers: ProviderSettings,
        search: SearchSettings,
        http: Optional[ProviderHTTPClient] = None,
    ) -> None:
        self._url = providers.osm.nominatim_url
        self._search = search
        self._http = http or ProviderHTTPClient(
            provider=PROVIDER,
            timeout_s=providers.timeout_s,
            user_agent=providers.user_agent,
        )

    def build_params(self, query: str, *, limit: int, country: str) -> dict[str, Any]:
        q = query.strip()
        # Pin the search to the city unless the user already named it.
        if not mentions_city(q, self._search.city_aliases):
            q = f"{q} {self._search.city_name}"
        west, south, east, north = self._search.viewbox
        params: dict[str, Any] = {
            "q": q,
            "format": "json",
            "limit": int(limit),
            "countrycodes": country.lower(),
            "accept-language": self._search.language,
            "viewbox": f"{west},{south},{east},{north}",
            "addressdetails": 1,
        }
        if self._search.bounded:
            params["bounded"] = 1
        return params

    def search(self, query: str, *, limit: int, country: str) -> list[PlaceResult]:
        payload = self._http.get_json(self._url, params=self.build_params(query, limit=limit, country=country))
        results = normalize_nominatim_places(payload, settings=self._search)
        logger.info("Nominatim returned %s results for %r", len(results), query)
        return results[: int(limit)]

    def close(self) -> None:
        self._http.close()
