from __future__ import annotations

from string import Template
from typing import List, Optional, Sequence

import numpy as np
from xml.sax.saxutils import quoteattr

from ..constants import EXPORT_BACKGROUND, EXPORT_STROKE, EXPORT_STROKE_WIDTH, REPLAY_DURATION_MS
from ..models import Session
from ..path import format_number
from ..replay import ReplayClock, ReplayTimeline, dash_offset
from ..time_utils import isoformat_utc

SVG_TEMPLATE = Template(
    """<?xml version="1.0" encoding="UTF-8"?>
<svg width="$width" height="$height" xmlns="http://www.w3.org/2000/svg">
  <rect width="$width" height="$height" fill="$background"/>
$paths$indicator</svg>
"""
)

PATH_TEMPLATE = Template(
    '  <path d="$d" stroke="$stroke" stroke-width="$stroke_width" fill="none" '
    'stroke-linecap="round" stroke-linejoin="round"$extra>$children</path>\n'
)

GPX_TEMPLATE = Template(
    """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="Trace" xmlns="http://www.topografix.com/GPX/1/1">
  <metadata>
    <time>$exported_at</time>
  </metadata>
  <trk>
    <name>Trace Export</name>
$segments  </trk>
</gpx>
"""
)


REVEAL_SAMPLES = 9


def _join(values: Sequence[float]) -> str:
    return ";".join(f"{value:.6f}".rstrip("0").rstrip(".") or "0" for value in values)


def eased_key_times(clock: ReplayClock, progress: Sequence[float]) -> List[float]:
    """SMIL keyTimes at which ``clock`` reaches each progress value."""

    times = [clock.time_at(value) / clock.duration_ms for value in progress]
    if times:
        times[0] = 0.0
        times[-1] = 1.0
    return times


def render_svg(
    paths: Sequence[str],
    width: float,
    height: float,
    background: str = EXPORT_BACKGROUND,
    stroke: str = EXPORT_STROKE,
    stroke_width: float = EXPORT_STROKE_WIDTH,
    replay: Optional[ReplayTimeline] = None,
    duration_ms: int = REPLAY_DURATION_MS,
    indicator_color: str = EXPORT_STROKE,
    clock: Optional[ReplayClock] = None,
) -> str:
    """Static SVG, or a self-animating one when ``replay`` is supplied.

    The animated variant reveals each stroke through ``stroke-dashoffset`` over
    its replay interval and moves an indicator dot along the track. Progress
    values are placed in time with ``clock``, so the file plays back with the
    same easing as the live replay.
    """

    clock = clock or ReplayClock(duration_ms)
    duration = f"{clock.duration_ms / 1000:g}s"
    blocks: List[str] = []
    for index, d in enumerate(paths):
        if not d:
            continue
        extra = ""
        children = ""
        if replay is not None:
            interval = replay.intervals[index]
            if interval.length == 0:
                continue
            length = format_number(interval.length)
            extra = f' pathLength="{length}" stroke-dasharray="{length}" stroke-dashoffset="{length}"'
            samples = list(np.linspace(interval.start_progress, interval.end_progress, REVEAL_SAMPLES))
            offsets = [interval.length] + [dash_offset(interval, value) for value in samples] + [0.0]
            key_times = eased_key_times(clock, [0.0, *samples, 1.0])
            children = (
                f'<animate attributeName="stroke-dashoffset" dur="{duration}" fill="freeze" '
                f'values="{_join(offsets)}" keyTimes="{_join(key_times)}"/>'
            )
        blocks.append(
            PATH_TEMPLATE.substitute(
                d=d,
                stroke=stroke,
                stroke_width=format_number(stroke_width),
                extra=extra,
                children=children,
            )
        )

    indicator = ""
    if replay is not None and replay.total_length > 0:
        key_times = _join(eased_key_times(clock, replay.fractions))
        xs = _join(replay.coords[:, 0])
        ys = _join(replay.coords[:, 1])
        indicator = (
            f'  <circle r="6" fill="{indicator_color}" cx="{format_number(replay.coords[0, 0])}" '
            f'cy="{format_number(replay.coords[0, 1])}">'
            f'<animate attributeName="cx" dur="{duration}" fill="freeze" values="{xs}" keyTimes="{key_times}"/>'
            f'<animate attributeName="cy" dur="{duration}" fill="freeze" values="{ys}" keyTimes="{key_times}"/>'
            "</circle>\n"
        )

    return SVG_TEMPLATE.substitute(
        width=format_number(width),
        height=format_number(height),
        background=background,
        paths="".join(blocks),
        indicator=indicator,
    )


def render_gpx(sessions: Sequence[Session], exported_at: str) -> str:
    segments: List[str] = []
    for session in sessions:
        points = "".join(
            f"      <trkpt lat={quoteattr(repr(fix.latitude))} lon={quoteattr(repr(fix.longitude))}>\n"
            f"        <time>{isoformat_utc(fix.timestamp_ms)}</time>\n"
            "      </trkpt>\n"
            for fix in session.fixes
        )
        segments.append(f"    <trkseg>\n{points}    </trkseg>\n")
    return GPX_TEMPLATE.substitute(exported_at=exported_at, segments="".join(segments))
