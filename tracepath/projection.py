"""Lat/lon to plane projection.

Two projectors share the :class:`Projector` interface: :class:`BoundsProjector`
does the Mercator-corrected math over a bounds rectangle, while
:class:`CallbackProjector` hands each fix to a host map widget's own
screen-projection function.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

import numpy as np

from .constants import MERCATOR_LAT_LIMIT, RANGE_EPSILON
from .models import Bounds, Fix, ProjectedPoint

logger = logging.getLogger(__name__)


def lat_to_mercator(latitude):
    """Spherical Mercator ordinate, clamped to +/-85 degrees.

    Accepts a scalar or a numpy array.
    """

    clamped = np.clip(latitude, -MERCATOR_LAT_LIMIT, MERCATOR_LAT_LIMIT)
    radians = np.radians(clamped)
    return np.log(np.tan(np.pi / 4 + radians / 2))


def _plane_scale(bounds: Bounds) -> Tuple[float, float, float]:
    merc_max = float(lat_to_mercator(bounds.max_lat))
    merc_min = float(lat_to_mercator(bounds.min_lat))
    lat_range = (merc_max - merc_min) or RANGE_EPSILON
    lon_range = (bounds.max_lon - bounds.min_lon) or RANGE_EPSILON
    return merc_max, lat_range, lon_range


def lat_lon_to_plane(
    latitude: float,
    longitude: float,
    bounds: Bounds,
    width: float,
    height: float,
    padding: float = 0.0,
) -> ProjectedPoint:
    """Project a single coordinate; north is up, so larger latitudes get smaller y.

    Use ``padding=0`` with display bounds (already padded) and a positive
    padding with raw bounding boxes for exports.
    """

    merc_max, lat_range, lon_range = _plane_scale(bounds)
    x = padding + (longitude - bounds.min_lon) / lon_range * (width - 2 * padding)
    y = padding + (merc_max - float(lat_to_mercator(latitude))) / lat_range * (height - 2 * padding)
    return ProjectedPoint(x=x, y=y)


def project_arrays(
    latitudes: np.ndarray,
    longitudes: np.ndarray,
    bounds: Bounds,
    width: float,
    height: float,
    padding: float = 0.0,
) -> np.ndarray:
    merc_max, lat_range, lon_range = _plane_scale(bounds)
    xs = padding + (np.asarray(longitudes, dtype=float) - bounds.min_lon) / lon_range * (width - 2 * padding)
    ys = padding + (merc_max - lat_to_mercator(np.asarray(latitudes, dtype=float))) / lat_range * (
        height - 2 * padding
    )
    return np.stack((xs, ys), axis=1)


class Projector(Protocol):
    def project(self, fix: Fix) -> Optional[ProjectedPoint]:
        ...

    def project_many(self, fixes: Sequence[Fix]) -> List[ProjectedPoint]:
        ...


class BoundsProjector:
    def __init__(self, bounds: Bounds, width: float, height: float, padding: float = 0.0) -> None:
        self.bounds = bounds
        self.width = width
        self.height = height
        self.padding = padding

    def project(self, fix: Fix) -> Optional[ProjectedPoint]:
        return lat_lon_to_plane(fix.latitude, fix.longitude, self.bounds, self.width, self.height, self.padding)

    def project_many(self, fixes: Sequence[Fix]) -> List[ProjectedPoint]:
        if not fixes:
            return []
        coords = np.array([fix.as_latlon for fix in fixes], dtype=float)
        plane = project_arrays(coords[:, 0], coords[:, 1], self.bounds, self.width, self.height, self.padding)
        return [ProjectedPoint(x=float(x), y=float(y)) for x, y in plane]


ScreenProjection = Callable[[float, float], Optional[Tuple[float, float]]]


class CallbackProjector:
    """Delegates to a host map component's ``(lat, lon) -> (x, y)`` function.

    Points the host cannot place (None or non-finite) are dropped.
    """

    def __init__(self, point_for_coordinate: ScreenProjection) -> None:
        self.point_for_coordinate = point_for_coordinate

    def project(self, fix: Fix) -> Optional[ProjectedPoint]:
        screen = self.point_for_coordinate(fix.latitude, fix.longitude)
        if screen is None:
            return None
        x, y = float(screen[0]), float(screen[1])
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        return ProjectedPoint(x=x, y=y)

    def project_many(self, fixes: Sequence[Fix]) -> List[ProjectedPoint]:
        projected: List[ProjectedPoint] = []
        for fix in fixes:
            point = self.project(fix)
            if point is None:
                logger.debug("Host projection could not place fix at %s", fix.as_latlon)
                continue
            projected.append(point)
        return projected
