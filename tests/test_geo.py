from __future__ import annotations

import pytest

from gbakaguides.geo.coordinates import coordinate_place, parse_coordinate_query, parse_lonlat
from gbakaguides.geo.polyline import decode_polyline, to_linestring
from gbakaguides.schemas.core import LonLat


def test_parse_lonlat_reads_geojson_order() -> None:
    point = parse_lonlat("-4.065,5.335", name="from")
    assert point == LonLat(lon=-4.065, lat=5.335)
    assert point.as_path_segment() == "-4.065,5.335"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_parse_lonlat_requires_value(value) -> None:
    with pytest.raises(ValueError, match='"to" is required'):
        parse_lonlat(value, name="to")


@pytest.mark.parametrize("value", ["abc", "-4.0", "-4.0,5.3,1", "200,5", "-4,95"])
def test_parse_lonlat_rejects_malformed(value) -> None:
    with pytest.raises(ValueError, match='"from"'):
        parse_lonlat(value, name="from")


def test_coordinate_query_is_lat_first() -> None:
    point = parse_coordinate_query("5.32,-4.05")
    assert point == LonLat(lon=-4.05, lat=5.32)

    assert parse_coordinate_query(" 5.32 , -4.05 ") == point
    assert parse_coordinate_query("Plateau") is None
    assert parse_coordinate_query("95,-4.05") is None


def test_coordinate_place_label_and_geometry() -> None:
    payload = coordinate_place(LonLat(lon=-4.05, lat=5.32)).to_payload()

    assert payload["center"] == [-4.05, 5.32]
    assert payload["geometry"] == {"type": "Point", "coordinates": [-4.05, 5.32]}
    assert "5.3200" in payload["text"]
    assert "-4.0500" in payload["text"]
    assert payload["relevance"] == 1.0


def test_decode_polyline_reference_string() -> None:
    coords = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")
    assert coords == [(-120.2, 38.5), (-120.95, 40.7), (-126.453, 43.252)]


def test_decode_polyline_precision_6() -> None:
    # Same deltas read at precision 6 land ten times closer to the origin.
    coords = decode_polyline("_p~iF~ps|U", precision=6)
    assert coords == [(-12.02, 3.85)]


def test_decode_polyline_rejects_truncated_input() -> None:
    with pytest.raises(ValueError):
        decode_polyline("_p~iF~ps|")


def test_to_linestring_accepts_geojson_and_polyline() -> None:
    geojson = to_linestring({"type": "LineString", "coordinates": [[-4.065, 5.335], [-4.025, 5.325]]})
    assert geojson.to_geojson() == {"type": "LineString", "coordinates": [[-4.065, 5.335], [-4.025, 5.325]]}

    encoded = to_linestring("_p~iF~ps|U_ulLnnqC")
    assert encoded.to_geojson()["type"] == "LineString"
    assert encoded.coordinates[0] == (-120.2, 38.5)


@pytest.mark.parametrize(
    "geometry",
    [None, 42, {"type": "Point", "coordinates": [1, 2]}, {"type": "LineString"}, {"type": "LineString", "coordinates": [[1]]}],
)
def test_to_linestring_rejects_other_shapes(geometry) -> None:
    with pytest.raises(ValueError):
        to_linestring(geometry)
