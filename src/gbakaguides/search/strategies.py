from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from gbakaguides.config.models import SearchSettings
from gbakaguides.providers import mapbox as mapbox_provider
from gbakaguides.providers import nominatim as nominatim_provider
from gbakaguides.providers.base import ProviderError
from gbakaguides.providers.mapbox import MapboxClient
from gbakaguides.providers.nominatim import NominatimClient
from gbakaguides.schemas.core import PlaceResult


logger = logging.getLogger(__name__)


class SearchStrategy(Protocol):
    """
    One way of answering a place search.

    `search` returns normalised results (possibly empty) or raises `ProviderError`.
    """

    name: str
    attribution: str

    def search(self, query: str, *, limit: int, country: str) -> list[PlaceResult]:
        ...


class NominatimSearch:
    name = "nominatim"
    attribution = nominatim_provider.ATTRIBUTION

    def __init__(self, client: NominatimClient) -> None:
        self._client = client

    def search(self, query: str, *, limit: int, country: str) -> list[PlaceResult]:
        return self._client.search(query, limit=limit, country=country)


class MapboxSearch:
    name = "mapbox_fallback"
    attribution = mapbox_provider.ATTRIBUTION

    def __init__(self, client: MapboxClient, *, settings: SearchSettings) -> None:
        self._client = client
        self._settings = settings

    def search(self, query: str, *, limit: int, country: str) -> list[PlaceResult]:
        return self._client.geocode(query, limit=limit, country=country, language=self._settings.language)


@dataclass(frozen=True)
class SearchOutcome:
    results: list[PlaceResult]
    source: str
    attribution: str
    primary: bool


class SearchExhaustedError(ProviderError):
    """Every strategy failed; carries the primary strategy's error."""

    def __init__(self, primary_error: ProviderError, errors: Sequence[ProviderError]) -> None:
        super().__init__(
            str(primary_error),
            provider=primary_error.provider,
            status_code=primary_error.status_code,
        )
        self.primary_error = primary_error
        self.errors = list(errors)


def run_search_chain(
    strategies: Sequence[SearchStrategy],
    query: str,
    *,
    limit: int,
    country: str,
) -> SearchOutcome:
    """
    Try strategies in order; the first non-empty answer wins.

    - A strategy that raises `ProviderError` or returns nothing yields to the next.
    - If every strategy raised, `SearchExhaustedError` carries the first (primary) error.
    - If at least one answered but all were empty, the last answering strategy's empty result is returned.
    """

    if not strategies:
        raise ValueError("At least one search strategy is required")

    errors: list[ProviderError] = []
    empty: Optional[SearchOutcome] = None
    for index, strategy in enumerate(strategies):
        try:
            results = strategy.search(query, limit=limit, country=country)
        except ProviderError as exc:
            logger.warning("Search strategy %s failed for %r: %s", strategy.name, query, exc)
            errors.append(exc)
            continue

        outcome = SearchOutcome(
            results=list(results[:limit]),
            source=strategy.name,
            attribution=strategy.attribution,
            primary=index == 0,
        )
        if outcome.results:
            if index > 0:
                logger.info("Search for %r answered by fallback %s", query, strategy.name)
            return outcome
        logger.info("Search strategy %s returned no results for %r", strategy.name, query)
        empty = outcome

    if empty is not None:
        return empty
    raise SearchExhaustedError(errors[0], errors)
