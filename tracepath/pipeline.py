from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .bounds import display_bounds
from .constants import DISPLAY_MIN_DELTA, DISPLAY_PADDING_RATIO, SIMPLIFY_THRESHOLD, SIMPLIFY_TOLERANCE
from .models import Bounds, Fix, ProjectedPoint, TrackLayout
from .path import build_segment_paths
from .preprocess import filter_invalid_fixes, sort_fixes, split_by_gap
from .projection import BoundsProjector, Projector
from .replay import ReplayTimeline
from .simplify import maybe_simplify

logger = logging.getLogger(__name__)


def build_track(
    fixes: Sequence[Fix],
    width: float,
    height: float,
    gap_threshold: Optional[float] = None,
    padding: float = 0.0,
    bounds: Optional[Bounds] = None,
    projector: Optional[Projector] = None,
    padding_ratio: float = DISPLAY_PADDING_RATIO,
    min_delta: float = DISPLAY_MIN_DELTA,
    simplify_tolerance: float = SIMPLIFY_TOLERANCE,
    simplify_threshold: int = SIMPLIFY_THRESHOLD,
    split_sessions: bool = False,
) -> TrackLayout:
    """Sort, segment, simplify and project ``fixes`` into one stroke per segment.

    ``bounds`` defaults to the padded display bounds of the fixes. Pass a
    ``projector`` to place points with a host map widget instead of the
    bounds-based Mercator projection. With ``split_sessions`` every recording
    session starts its own stroke even when no time gap separates them.
    """

    valid, skipped = filter_invalid_fixes(fixes)
    if not valid:
        return TrackLayout(segments=(), points=(), paths=(), bounds=None, last_point=None, skipped=skipped)

    ordered = sort_fixes(valid)
    segments = split_by_gap(ordered, gap_threshold, split_sessions)

    if bounds is None:
        bounds = display_bounds(ordered, padding_ratio, min_delta)
    if projector is None:
        projector = BoundsProjector(bounds, width, height, padding)

    segments_points: List[List[ProjectedPoint]] = []
    for segment in segments:
        reduced = maybe_simplify(segment, simplify_tolerance, simplify_threshold)
        segments_points.append(projector.project_many(reduced))

    paths = build_segment_paths(segments_points)
    last_point = projector.project(ordered[-1])

    logger.debug(
        "Built track: %d fixes, %d segment(s), %d visible path(s)",
        len(ordered),
        len(segments),
        sum(1 for path in paths if path),
    )

    return TrackLayout(
        segments=tuple(segments),
        points=tuple(tuple(points) for points in segments_points),
        paths=tuple(paths),
        bounds=bounds,
        last_point=last_point,
        skipped=skipped,
    )


def build_replay(layout: TrackLayout) -> ReplayTimeline:
    return ReplayTimeline(layout.points)
