"""Arc-length replay mapping.

Every table here is built from projected point arrays. Rendered path strings
are never parsed back into coordinates.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

import numpy as np

from .constants import REPLAY_DURATION_MS
from .models import ProjectedPoint, ReplayFrame, ReplayInterval


def clamp_progress(progress: float) -> float:
    if progress != progress:
        return 0.0
    return min(1.0, max(0.0, float(progress)))


def _as_array(points: Sequence[ProjectedPoint]) -> np.ndarray:
    if not points:
        return np.empty((0, 2), dtype=float)
    return np.array([point.as_xy for point in points], dtype=float)


def _step_lengths(coords: np.ndarray) -> np.ndarray:
    if len(coords) < 2:
        return np.empty(0, dtype=float)
    deltas = np.diff(coords, axis=0)
    return np.hypot(deltas[:, 0], deltas[:, 1])


def arc_length(points: Sequence[ProjectedPoint]) -> float:
    return float(_step_lengths(_as_array(points)).sum())


def replay_intervals(segments_points: Sequence[Sequence[ProjectedPoint]]) -> List[ReplayInterval]:
    """Give each segment a slice of [0, 1] proportional to its arc length.

    Slices are contiguous, start at 0 and end at exactly 1. When every segment
    has zero length the slices are equal so the partition still holds; this
    overrides the zero-width slice a zero-length segment gets otherwise, so in
    that case no interval has zero width.
    """

    lengths = [arc_length(points) for points in segments_points]
    count = len(lengths)
    if count == 0:
        return []

    total = sum(lengths)
    intervals: List[ReplayInterval] = []
    cumulative = 0.0
    for index, length in enumerate(lengths):
        if total > 0:
            start = cumulative / total
            cumulative += length
            end = cumulative / total
        else:
            start = index / count
            end = (index + 1) / count
        if index == count - 1:
            end = 1.0
        intervals.append(
            ReplayInterval(segment_index=index, start_progress=start, end_progress=end, length=length)
        )
    return intervals


def reveal_fraction(interval: ReplayInterval, progress: float) -> float:
    p = clamp_progress(progress)
    if interval.end_progress > interval.start_progress:
        return min(1.0, max(0.0, (p - interval.start_progress) / interval.width))
    return 1.0 if p >= interval.end_progress else 0.0


def dash_offset(interval: ReplayInterval, progress: float) -> float:
    """Stroke-dash offset: the full length hides the stroke, zero reveals it."""

    return (1.0 - reveal_fraction(interval, progress)) * interval.length


class ReplayTimeline:
    """Global arc-length parameterisation over all segments in recording order.

    Jumps between the end of one segment and the start of the next add no
    length, which keeps the indicator in step with :func:`replay_intervals`.
    """

    def __init__(self, segments_points: Sequence[Sequence[ProjectedPoint]]) -> None:
        self.intervals = replay_intervals(segments_points)
        arrays = [_as_array(points) for points in segments_points]
        arrays = [coords for coords in arrays if len(coords)]

        cumulative_parts: List[np.ndarray] = []
        running = 0.0
        for coords in arrays:
            steps = np.concatenate(([0.0], _step_lengths(coords)))
            part = running + np.cumsum(steps)
            cumulative_parts.append(part)
            running = float(part[-1])

        self.coords = np.concatenate(arrays) if arrays else np.empty((0, 2), dtype=float)
        self.cumulative = np.concatenate(cumulative_parts) if cumulative_parts else np.empty(0, dtype=float)
        self.total_length = running

    @property
    def fractions(self) -> np.ndarray:
        if self.total_length == 0:
            return np.zeros_like(self.cumulative)
        return self.cumulative / self.total_length

    def indicator_position(self, progress: float) -> Optional[ProjectedPoint]:
        if len(self.coords) == 0 or self.total_length == 0:
            return None

        p = clamp_progress(progress)
        fractions = self.fractions
        upper = int(np.searchsorted(fractions, p, side="left"))
        if upper == 0:
            x, y = self.coords[0]
            return ProjectedPoint(x=float(x), y=float(y))
        upper = min(upper, len(fractions) - 1)
        lower = upper - 1

        span = fractions[upper] - fractions[lower]
        t = 1.0 if span <= 0 else (p - fractions[lower]) / span
        t = min(1.0, max(0.0, t))
        x, y = self.coords[lower] + (self.coords[upper] - self.coords[lower]) * t
        return ProjectedPoint(x=float(x), y=float(y))

    def dash_offsets(self, progress: float) -> List[float]:
        return [dash_offset(interval, progress) for interval in self.intervals]

    def frame(self, progress: float) -> ReplayFrame:
        p = clamp_progress(progress)
        return ReplayFrame(progress=p, dash_offsets=tuple(self.dash_offsets(p)), indicator=self.indicator_position(p))


def cubic_bezier(x1: float, y1: float, x2: float, y2: float) -> Callable[[float], float]:
    """Timing function for a CSS-style cubic Bezier curve."""

    def sample(a: float, b: float, t: float) -> float:
        return 3 * a * (1 - t) ** 2 * t + 3 * b * (1 - t) * t**2 + t**3

    def timing(x: float) -> float:
        x = clamp_progress(x)
        low, high = 0.0, 1.0
        t = x
        for _ in range(40):
            t = (low + high) / 2
            if sample(x1, x2, t) < x:
                low = t
            else:
                high = t
        return sample(y1, y2, t)

    return timing


ease = cubic_bezier(0.42, 0.0, 1.0, 1.0)


def ease_in_out(t: float) -> float:
    t = clamp_progress(t)
    if t < 0.5:
        return ease(t * 2) / 2
    return 1 - ease((1 - t) * 2) / 2


class ReplayClock:
    """Maps elapsed time to replay progress; stopping means discarding the clock."""

    def __init__(
        self,
        duration_ms: float = REPLAY_DURATION_MS,
        easing: Callable[[float], float] = ease_in_out,
    ) -> None:
        if duration_ms <= 0:
            raise ValueError("Replay duration must be positive.")
        self.duration_ms = duration_ms
        self.easing = easing

    def progress_at(self, elapsed_ms: float) -> float:
        return clamp_progress(self.easing(clamp_progress(elapsed_ms / self.duration_ms)))

    def is_finished(self, elapsed_ms: float) -> bool:
        return elapsed_ms >= self.duration_ms

    def frames(self, frame_count: int) -> List[float]:
        if frame_count < 2:
            return [1.0]
        step = self.duration_ms / (frame_count - 1)
        return [self.progress_at(index * step) for index in range(frame_count)]

    def time_at(self, progress: float) -> float:
        """Elapsed milliseconds at which the clock first reaches ``progress``."""

        p = clamp_progress(progress)
        if p <= 0.0:
            return 0.0
        if p >= 1.0:
            return float(self.duration_ms)
        low, high = 0.0, float(self.duration_ms)
        for _ in range(60):
            mid = (low + high) / 2
            if self.progress_at(mid) < p:
                low = mid
            else:
                high = mid
        return high
