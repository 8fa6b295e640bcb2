from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from .models import Segment, TrackLayout, TrackStats
from .preprocess import haversine_vectorized
from .time_utils import format_timespan


def compute_segment_distance_km(segment: Segment) -> float:
    if len(segment) < 2:
        return 0.0
    coords_array = np.array([fix.as_latlon for fix in segment])
    distances = haversine_vectorized(
        coords_array[:-1, 0],
        coords_array[:-1, 1],
        coords_array[1:, 0],
        coords_array[1:, 1],
    )
    return float(distances.sum())


def compute_total_distance_km(segments: Sequence[Segment]) -> float:
    """Distance along each segment; the jump across a time gap is not counted."""

    return sum(compute_segment_distance_km(segment) for segment in segments)


def compute_track_stats(layout: TrackLayout) -> TrackStats:
    fixes = [fix for segment in layout.segments for fix in segment]
    duration = fixes[-1].timestamp_ms - fixes[0].timestamp_ms if fixes else 0
    return TrackStats(
        point_count=len(fixes),
        session_count=len({fix.session_id for fix in fixes}),
        segment_count=len(layout.segments),
        visible_segment_count=len(layout.visible_paths),
        distance_km=compute_total_distance_km(layout.segments),
        duration_ms=duration,
        skipped=layout.skipped,
    )


def print_stats(stats: Optional[TrackStats]) -> None:
    if not stats:
        return

    print("\nTrack Stats")
    print("-----------")
    print(f"Points: {stats.point_count} across {stats.session_count} session(s)")
    print(f"Segments: {stats.segment_count} ({stats.visible_segment_count} drawn)")
    print(f"Distance: {stats.distance_km:.2f} km")
    print(f"Time span: {format_timespan(stats.duration_ms)}")
    if stats.skipped:
        print(f"Skipped {stats.skipped} point(s) with invalid coordinates")
