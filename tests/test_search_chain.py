from __future__ import annotations

import pytest

from gbakaguides.providers.base import ProviderError
from gbakaguides.schemas.core import LonLat, PlaceResult
from gbakaguides.search.strategies import SearchExhaustedError, run_search_chain


def _place(pid: str) -> PlaceResult:
    return PlaceResult(id=pid, text=pid, place_name=pid, center=LonLat(lon=-4.0, lat=5.3), relevance=1.0)


class _Strategy:
    def __init__(self, name: str, *, results=None, error: Exception | None = None) -> None:
        self.name = name
        self.attribution = f"© {name}"
        self.results = results or []
        self.error = error
        self.calls: list[tuple[str, int, str]] = []

    def search(self, query: str, *, limit: int, country: str) -> list[PlaceResult]:
        self.calls.append((query, limit, country))
        if self.error is not None:
            raise self.error
        return list(self.results)


def test_primary_answer_wins_and_fallback_is_not_called() -> None:
    primary = _Strategy("nominatim", results=[_place("a"), _place("b")])
    fallback = _Strategy("mapbox_fallback", results=[_place("z")])

    outcome = run_search_chain([primary, fallback], "Plateau", limit=5, country="ci")

    assert [r.id for r in outcome.results] == ["a", "b"]
    assert outcome.source == "nominatim"
    assert outcome.primary is True
    assert fallback.calls == []


def test_primary_error_falls_back() -> None:
    primary = _Strategy("nominatim", error=ProviderError("503", provider="nominatim", status_code=503))
    fallback = _Strategy("mapbox_fallback", results=[_place("z")])

    outcome = run_search_chain([primary, fallback], "Plateau", limit=5, country="ci")

    assert outcome.source == "mapbox_fallback"
    assert outcome.attribution == "© mapbox_fallback"
    assert outcome.primary is False
    assert fallback.calls == [("Plateau", 5, "ci")]


def test_primary_empty_falls_back() -> None:
    primary = _Strategy("nominatim", results=[])
    fallback = _Strategy("mapbox_fallback", results=[_place("z")])

    assert run_search_chain([primary, fallback], "Gare Sud", limit=5, country="ci").source == "mapbox_fallback"


def test_all_failing_surfaces_primary_error() -> None:
    primary_error = ProviderError("nominatim down", provider="nominatim", status_code=502)
    primary = _Strategy("nominatim", error=primary_error)
    fallback = _Strategy("mapbox_fallback", error=ProviderError("mapbox down", provider="mapbox"))

    with pytest.raises(SearchExhaustedError) as excinfo:
        run_search_chain([primary, fallback], "Plateau", limit=5, country="ci")

    assert excinfo.value.primary_error is primary_error
    assert str(excinfo.value) == "nominatim down"
    assert excinfo.value.status_code == 502
    assert len(excinfo.value.errors) == 2


def test_all_empty_returns_empty_outcome() -> None:
    primary = _Strategy("nominatim")
    fallback = _Strategy("mapbox_fallback")

    outcome = run_search_chain([primary, fallback], "xyzzy", limit=5, country="ci")
    assert outcome.results == []


def test_primary_empty_and_fallback_failing_keeps_primary_empty_answer() -> None:
    primary = _Strategy("nominatim")
    fallback = _Strategy("mapbox_fallback", error=ProviderError("mapbox down", provider="mapbox", status_code=503))

    outcome = run_search_chain([primary, fallback], "xyzzy", limit=5, country="ci")

    assert outcome.results == []
    assert outcome.source == "nominatim"
    assert outcome.primary is True
    assert fallback.calls == [("xyzzy", 5, "ci")]


def test_limit_is_enforced_on_results() -> None:
    primary = _Strategy("nominatim", results=[_place(str(i)) for i in range(8)])
    assert len(run_search_chain([primary], "Plateau", limit=3, country="ci").results) == 3


def test_empty_strategy_list_is_rejected() -> None:
    with pytest.raises(ValueError):
        run_search_chain([], "Plateau", limit=3, country="ci")
