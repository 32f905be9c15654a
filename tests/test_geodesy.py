import math

import pytest

from busline.geodesy import (
    alignment,
    haversine_km,
    normalize,
    projected_delta,
    validate_lon_lat,
)


def test_haversine_zero_distance():
    p = (126.9780, 37.5665)
    assert haversine_km(p, p) == 0


def test_haversine_is_symmetric():
    seoul = (126.9780, 37.5665)
    busan = (129.0756, 35.1796)
    assert haversine_km(seoul, busan) == pytest.approx(haversine_km(busan, seoul))


def test_haversine_one_degree_on_equator():
    assert haversine_km((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111.195, abs=1e-3)


def test_haversine_seoul_to_busan():
    # Roughly 325 km as the crow flies.
    assert haversine_km((126.9780, 37.5665), (129.0756, 35.1796)) == pytest.approx(325, abs=5)


@pytest.mark.parametrize(
    "point",
    [(float("nan"), 0.0), (0.0, float("inf")), (0.0, 90.5), (-180.5, 0.0)],
)
def test_validate_lon_lat_rejects_bad_input(point):
    with pytest.raises(ValueError):
        validate_lon_lat(point)


def test_validate_lon_lat_accepts_strings_and_bounds():
    assert validate_lon_lat(("180", "-90")) == (180.0, -90.0)


def test_projected_delta_matches_haversine_over_short_span():
    origin = (127.0276, 37.4979)
    target = (127.0396, 37.5045)
    east, north = projected_delta(origin, target)
    assert math.hypot(east, north) == pytest.approx(haversine_km(origin, target), rel=5e-3)


def test_projected_delta_scales_longitude_by_latitude():
    east_equator, _ = projected_delta((0.0, 0.0), (0.01, 0.0))
    east_60, _ = projected_delta((0.0, 60.0), (0.01, 60.0))
    assert east_60 == pytest.approx(east_equator / 2, rel=1e-3)


def test_projected_delta_wraps_antimeridian():
    east, north = projected_delta((179.999, 0.0), (-179.999, 0.0))
    assert east > 0
    assert east == pytest.approx(haversine_km((179.999, 0.0), (-179.999, 0.0)), rel=1e-3)
    assert north == 0


def test_normalize_keeps_zero_vector():
    assert normalize((0.0, 0.0)) == (0.0, 0.0)
    assert normalize((3.0, 4.0)) == pytest.approx((0.6, 0.8))


def test_alignment_extremes():
    origin = (127.0, 37.5)
    east = (127.01, 37.5)
    north = (127.0, 37.51)
    assert alignment(origin, east, origin, east) == pytest.approx(1.0)
    assert alignment(east, origin, origin, east) == pytest.approx(-1.0)
    assert alignment(origin, north, origin, east) == pytest.approx(0.0, abs=1e-9)
    assert alignment(origin, origin, origin, east) == 0
