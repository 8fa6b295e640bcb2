from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class Fix:
    latitude: float
    longitude: float
    timestamp_ms: int
    accuracy: Optional[float] = None
    session_id: str = ""

    @property
    def as_latlon(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    @property
    def as_lonlat(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.latitude) and math.isfinite(self.longitude)


@dataclass(frozen=True)
class Session:
    identifier: str
    fixes: Sequence[Fix]


@dataclass(frozen=True)
class Bounds:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def lat_span(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def lon_span(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2)

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.min_lat <= latitude <= self.max_lat and self.min_lon <= longitude <= self.max_lon


@dataclass(frozen=True)
class Region:
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float


@dataclass(frozen=True)
class ProjectedPoint:
    x: float
    y: float

    @property
    def as_xy(self) -> Tuple[float, float]:
        return (self.x, self.y)


Segment = Tuple[Fix, ...]


@dataclass(frozen=True)
class ReplayInterval:
    segment_index: int
    start_progress: float
    end_progress: float
    length: float

    @property
    def width(self) -> float:
        return self.end_progress - self.start_progress


@dataclass(frozen=True)
class TrackLayout:
    segments: Sequence[Segment]
    points: Sequence[Sequence[ProjectedPoint]]
    paths: Sequence[str]
    bounds: Optional[Bounds]
    last_point: Optional[ProjectedPoint] = None
    skipped: int = 0

    @property
    def visible_paths(self) -> Tuple[str, ...]:
        return tuple(path for path in self.paths if path)


@dataclass(frozen=True)
class ReplayFrame:
    progress: float
    dash_offsets: Sequence[float]
    indicator: Optional[ProjectedPoint]


@dataclass(frozen=True)
class TrackStats:
    point_count: int
    session_count: int
    segment_count: int
    visible_segment_count: int
    distance_km: float
    duration_ms: int
    skipped: int = 0
