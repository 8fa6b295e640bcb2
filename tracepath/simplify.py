"""Douglas-Peucker path simplification in lon/lat space.

The range splitting runs off an explicit stack of index pairs, so long
near-straight tracks cannot exhaust the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

from .constants import SIMPLIFY_THRESHOLD, SIMPLIFY_TOLERANCE
from .models import Fix

logger = logging.getLogger(__name__)


def chord_distances(points: np.ndarray, start: np.ndarray, end: np.ndarray) -> np.ndarray:
    """Distance from each ``(x, y)`` row to the segment ``start``-``end``.

    The foot of the perpendicular is clamped to the segment ends; a
    zero-length chord measures distance to ``start``.
    """

    chord = end - start
    offsets = points - start
    length_sq = float(np.dot(chord, chord))
    if length_sq == 0:
        param = np.full(len(points), -1.0)
    else:
        param = offsets @ chord / length_sq
    param = np.clip(param, 0.0, 1.0)
    nearest = start + param[:, None] * chord
    return np.hypot(points[:, 0] - nearest[:, 0], points[:, 1] - nearest[:, 1])


def simplify_indices(coords: np.ndarray, tolerance: float) -> np.ndarray:
    """Indices of the rows of ``coords`` that survive simplification, in order."""

    count = len(coords)
    if count <= 2:
        return np.arange(count)

    keep = np.zeros(count, dtype=bool)
    keep[0] = keep[-1] = True
    pending = [(0, count - 1)]

    while pending:
        first, last = pending.pop()
        if last - first < 2:
            continue
        distances = chord_distances(coords[first + 1 : last], coords[first], coords[last])
        offset = int(np.argmax(distances))
        if distances[offset] > tolerance:
            split = first + 1 + offset
            keep[split] = True
            pending.append((split, last))
            pending.append((first, split))

    return np.flatnonzero(keep)


def simplify_path(points: Sequence[Fix], tolerance: float = SIMPLIFY_TOLERANCE) -> List[Fix]:
    if len(points) <= 2:
        return list(points)
    coords = np.array([fix.as_lonlat for fix in points], dtype=float)
    return [points[index] for index in simplify_indices(coords, tolerance)]


def maybe_simplify(
    points: Sequence[Fix],
    tolerance: float = SIMPLIFY_TOLERANCE,
    threshold: int = SIMPLIFY_THRESHOLD,
) -> List[Fix]:
    """Simplify only runs longer than ``threshold`` points."""

    if len(points) <= threshold:
        return list(points)
    simplified = simplify_path(points, tolerance)
    logger.debug("Simplified segment from %d to %d points", len(points), len(simplified))
    return simplified
