from __future__ import annotations

import math
from dataclasses import replace

from gbakaguides.transit.points import DEFAULT_TRANSIT_POINTS, TRANSIT_TYPES, filter_points


def test_table_is_well_formed() -> None:
    assert len(DEFAULT_TRANSIT_POINTS) == 5
    assert len({p.id for p in DEFAULT_TRANSIT_POINTS}) == 5
    for point in DEFAULT_TRANSIT_POINTS:
        lon, lat = point.to_payload()["coordinates"]
        assert math.isfinite(lon) and math.isfinite(lat)
        # Abidjan sits west of Greenwich, north of the equator: a swapped pair would fail here.
        assert -4.2 <= lon <= -3.9
        assert 5.1 <= lat <= 5.5
        assert point.price >= 0
        assert point.type in TRANSIT_TYPES
        assert point.routes


def test_filter_by_type() -> None:
    gbaka = filter_points(DEFAULT_TRANSIT_POINTS, "gbaka")
    assert [p.id for p in gbaka] == [1, 3, 4]
    assert [p.id for p in filter_points(DEFAULT_TRANSIT_POINTS, "Wôrô-wôrô")] == [2, 5]


def test_filter_unknown_type_is_empty_not_an_error() -> None:
    assert filter_points(DEFAULT_TRANSIT_POINTS, "metro") == []


def test_no_filter_returns_everything() -> None:
    assert filter_points(DEFAULT_TRANSIT_POINTS, None) == list(DEFAULT_TRANSIT_POINTS)
    assert filter_points(DEFAULT_TRANSIT_POINTS, "") == list(DEFAULT_TRANSIT_POINTS)


def test_filter_only_serves_known_types() -> None:
    stray = replace(DEFAULT_TRANSIT_POINTS[0], id=99, type="metro")
    assert filter_points([*DEFAULT_TRANSIT_POINTS, stray], "metro") == []
