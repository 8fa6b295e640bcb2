import math

import numpy as np

from tracepath.models import Bounds, Fix
from tracepath.projection import (
    BoundsProjector,
    CallbackProjector,
    lat_lon_to_plane,
    lat_to_mercator,
)

BOUNDS = Bounds(min_lat=50.0, max_lat=52.0, min_lon=4.0, max_lon=6.0)


def test_corners_map_to_viewport_edges():
    top_left = lat_lon_to_plane(52.0, 4.0, BOUNDS, 200, 100)
    bottom_right = lat_lon_to_plane(50.0, 6.0, BOUNDS, 200, 100)
    assert math.isclose(top_left.x, 0.0, abs_tol=1e-9)
    assert math.isclose(top_left.y, 0.0, abs_tol=1e-9)
    assert math.isclose(bottom_right.x, 200.0)
    assert math.isclose(bottom_right.y, 100.0)


def test_padding_shrinks_drawable_area():
    point = lat_lon_to_plane(52.0, 4.0, BOUNDS, 200, 100, padding=40)
    assert math.isclose(point.x, 40.0)
    assert math.isclose(point.y, 40.0)


def test_projection_is_monotonic():
    lons = np.linspace(4.0, 6.0, 25)
    xs = [lat_lon_to_plane(51.0, lon, BOUNDS, 300, 300).x for lon in lons]
    assert all(b >= a for a, b in zip(xs, xs[1:]))

    lats = np.linspace(50.0, 52.0, 25)
    ys = [lat_lon_to_plane(lat, 5.0, BOUNDS, 300, 300).y for lat in lats]
    assert all(b <= a for a, b in zip(ys, ys[1:]))


def test_mercator_clamps_near_pole():
    assert lat_to_mercator(89.9) == lat_to_mercator(85.0)
    bounds = Bounds(min_lat=80.0, max_lat=89.9, min_lon=0.0, max_lon=1.0)
    point = lat_lon_to_plane(89.9, 0.5, bounds, 100, 100)
    assert math.isfinite(point.x) and math.isfinite(point.y)


def test_degenerate_ranges_do_not_divide_by_zero():
    bounds = Bounds(min_lat=10.0, max_lat=10.0, min_lon=20.0, max_lon=20.0)
    point = lat_lon_to_plane(10.0, 20.0, bounds, 100, 100)
    assert math.isfinite(point.x) and math.isfinite(point.y)


def test_bounds_projector_matches_scalar_projection():
    fixes = [Fix(50.5, 4.5, 0), Fix(51.5, 5.5, 1000)]
    projector = BoundsProjector(BOUNDS, 120, 80, padding=10)
    projected = projector.project_many(fixes)
    for fix, point in zip(fixes, projected):
        expected = lat_lon_to_plane(fix.latitude, fix.longitude, BOUNDS, 120, 80, 10)
        assert math.isclose(point.x, expected.x)
        assert math.isclose(point.y, expected.y)
    assert projector.project(fixes[0]) == lat_lon_to_plane(50.5, 4.5, BOUNDS, 120, 80, 10)


def test_callback_projector_drops_unplaceable_points():
    def host(lat, lon):
        if lat > 51:
            return (float("nan"), 0.0)
        if lon > 5.9:
            return None
        return (lon * 10, lat * 10)

    projector = CallbackProjector(host)
    fixes = [Fix(50.0, 4.0, 0), Fix(51.5, 5.0, 1), Fix(50.5, 6.0, 2)]
    projected = projector.project_many(fixes)
    assert [(p.x, p.y) for p in projected] == [(40.0, 500.0)]
