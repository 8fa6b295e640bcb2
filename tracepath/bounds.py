from __future__ import annotations

from typing import Optional, Sequence

from .constants import DISPLAY_MIN_DELTA, DISPLAY_PADDING_RATIO
from .models import Bounds, Fix, Region


def bounding_box(fixes: Sequence[Fix]) -> Optional[Bounds]:
    if not fixes:
        return None

    min_lat = max_lat = fixes[0].latitude
    min_lon = max_lon = fixes[0].longitude
    for fix in fixes:
        min_lat = min(min_lat, fix.latitude)
        max_lat = max(max_lat, fix.latitude)
        min_lon = min(min_lon, fix.longitude)
        max_lon = max(max_lon, fix.longitude)

    return Bounds(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)


def display_bounds(
    fixes: Sequence[Fix],
    padding_ratio: float = DISPLAY_PADDING_RATIO,
    min_delta: float = DISPLAY_MIN_DELTA,
) -> Optional[Bounds]:
    """Pad the bounding box around its centre and floor both spans at ``min_delta``.

    A single fix or a tight cluster still yields a usable viewport.
    """

    bounds = bounding_box(fixes)
    if bounds is None:
        return None

    center_lat, center_lon = bounds.center
    lat_delta = max(bounds.lat_span * (1 + padding_ratio), min_delta)
    lon_delta = max(bounds.lon_span * (1 + padding_ratio), min_delta)

    return Bounds(
        min_lat=center_lat - lat_delta / 2,
        max_lat=center_lat + lat_delta / 2,
        min_lon=center_lon - lon_delta / 2,
        max_lon=center_lon + lon_delta / 2,
    )


def region_from_bounds(bounds: Bounds) -> Region:
    center_lat, center_lon = bounds.center
    return Region(
        latitude=center_lat,
        longitude=center_lon,
        latitude_delta=bounds.lat_span,
        longitude_delta=bounds.lon_span,
    )
