from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .constants import EARTH_RADIUS_KM, GAP_FACTOR
from .models import Fix, Segment, Session
from .time_utils import within_range

logger = logging.getLogger(__name__)


def sort_fixes(fixes: Sequence[Fix]) -> List[Fix]:
    return sorted(fixes, key=lambda fix: fix.timestamp_ms)


def apply_time_window(
    fixes: Sequence[Fix],
    start_ms: Optional[int],
    end_ms: Optional[int],
) -> List[Fix]:
    if start_ms is None and end_ms is None:
        return list(fixes)
    return [fix for fix in fixes if within_range(fix.timestamp_ms, start_ms, end_ms)]


def filter_invalid_fixes(fixes: Sequence[Fix]) -> Tuple[List[Fix], int]:
    """Drop fixes with NaN or infinite coordinates and report how many were skipped."""

    valid: List[Fix] = []
    skipped = 0
    for fix in fixes:
        if not fix.is_finite:
            skipped += 1
            continue
        valid.append(fix)
    if skipped:
        logger.warning("Skipped %d fix(es) with non-finite coordinates", skipped)
    return valid, skipped


def group_sessions(fixes: Sequence[Fix]) -> List[Session]:
    """Group fixes by session id, ordered by each session's first fix."""

    grouped: Dict[str, List[Fix]] = {}
    for fix in sort_fixes(fixes):
        grouped.setdefault(fix.session_id, []).append(fix)
    return [Session(identifier=identifier, fixes=tuple(items)) for identifier, items in grouped.items()]


def gap_threshold_ms(interval_minutes: float, factor: float = GAP_FACTOR) -> Optional[int]:
    """Gap threshold derived from the recording interval; None disables splitting."""

    if interval_minutes <= 0 or factor <= 0:
        return None
    return int(interval_minutes * 60_000 * factor)


def split_by_gap(
    sorted_fixes: Sequence[Fix],
    gap_threshold: Optional[float],
    split_sessions: bool = False,
) -> List[Segment]:
    """Split chronologically sorted fixes wherever consecutive timestamps differ by more than the threshold.

    With ``split_sessions`` a change of session id also starts a new segment.
    Concatenating the returned segments gives back ``sorted_fixes`` unchanged.
    """

    fix_list = list(sorted_fixes)
    if not fix_list:
        return []
    use_gap = gap_threshold is not None and gap_threshold > 0
    if not use_gap and not split_sessions:
        return [tuple(fix_list)]

    keep = np.ones(len(fix_list) - 1, dtype=bool)
    if use_gap:
        timestamps = np.array([fix.timestamp_ms for fix in fix_list], dtype=np.int64)
        keep &= np.diff(timestamps) <= gap_threshold
    if split_sessions:
        keep &= np.array([a.session_id == b.session_id for a, b in zip(fix_list, fix_list[1:])], dtype=bool)
    mask = np.insert(keep, 0, True)

    segments: List[Segment] = []
    current_segment: List[Fix] = []
    for joined, fix in zip(mask, fix_list):
        if not joined and current_segment:
            segments.append(tuple(current_segment))
            current_segment = []
        current_segment.append(fix)
    segments.append(tuple(current_segment))

    logger.debug("Split %d fixes into %d segment(s)", len(fix_list), len(segments))
    return segments


def haversine_vectorized(
    lat1: np.ndarray,
    lon1: np.ndarray,
    lat2: np.ndarray,
    lon2: np.ndarray,
) -> np.ndarray:
    lat1_rad = np.radians(lat1)
    lon1_rad = np.radians(lon1)
    lat2_rad = np.radians(lat2)
    lon2_rad = np.radians(lon2)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
