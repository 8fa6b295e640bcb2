"""Static exports.

SVG goes through the same segmenting, simplifying and projection pipeline as
live rendering, with edge padding around a raw bounding box. GPX, GeoJSON and
the JSON backup carry raw coordinates and never touch the projector.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence

from shapely.geometry import LineString, Point, mapping

from .bounds import bounding_box
from .config import RenderConfig
from .constants import EXPORT_FORMATS
from .models import Fix, Session, TrackLayout
from .pipeline import build_replay, build_track
from .preprocess import filter_invalid_fixes, gap_threshold_ms
from .replay import ReplayClock
from .template.renderer import render_gpx, render_svg
from .time_utils import isoformat_utc, now_ms

logger = logging.getLogger(__name__)


def _accuracy(fix: Fix) -> Optional[float]:
    if fix.accuracy is None or not math.isfinite(fix.accuracy):
        return None
    return fix.accuracy


def _clean_sessions(sessions: Sequence[Session]) -> List[Session]:
    cleaned: List[Session] = []
    for session in sessions:
        valid, _ = filter_invalid_fixes(session.fixes)
        cleaned.append(Session(identifier=session.identifier, fixes=tuple(valid)))
    return cleaned


def build_export_layout(sessions: Sequence[Session], config: Optional[RenderConfig] = None) -> TrackLayout:
    """Gap-split, simplified strokes over the raw bounding box with edge padding.

    Each session starts its own stroke. The CLI reports replay intervals and
    stats from this same layout, so they describe the strokes in the SVG.
    """

    config = config or RenderConfig()
    all_fixes: List[Fix] = [
        replace(fix, session_id=session.identifier) for session in _clean_sessions(sessions) for fix in session.fixes
    ]
    if not all_fixes:
        return build_track((), config.width, config.height)
    return build_track(
        all_fixes,
        config.width,
        config.height,
        gap_threshold=gap_threshold_ms(config.tracking_interval, config.gap_factor),
        padding=config.padding,
        bounds=bounding_box(all_fixes),
        simplify_tolerance=config.simplify_tolerance,
        simplify_threshold=config.simplify_threshold,
        split_sessions=True,
    )


def export_svg(
    sessions: Sequence[Session],
    config: Optional[RenderConfig] = None,
    animate: bool = False,
) -> str:
    config = config or RenderConfig()
    layout = build_export_layout(sessions, config)
    if not layout.segments:
        raise ValueError("No data to export")

    replay = build_replay(layout) if animate else None
    return render_svg(
        layout.paths,
        config.width,
        config.height,
        background=config.background,
        stroke=config.stroke,
        stroke_width=config.stroke_width,
        replay=replay,
        clock=ReplayClock(config.replay_duration_ms),
    )


def export_gpx(sessions: Sequence[Session], exported_at_ms: Optional[int] = None) -> str:
    exported_at = isoformat_utc(exported_at_ms if exported_at_ms is not None else now_ms())
    return render_gpx(_clean_sessions(sessions), exported_at)


def session_feature(session: Session) -> Optional[dict]:
    fixes = session.fixes
    if not fixes:
        return None
    if len(fixes) == 1:
        geometry = Point(fixes[0].as_lonlat)
    else:
        geometry = LineString([fix.as_lonlat for fix in fixes])
    return {
        "type": "Feature",
        "geometry": mapping(geometry),
        "properties": {
            "sessionId": session.identifier,
            "timestamps": [fix.timestamp_ms for fix in fixes],
            "accuracy": [_accuracy(fix) for fix in fixes],
        },
    }


def build_geojson(sessions: Sequence[Session]) -> dict:
    features = [feature for feature in map(session_feature, _clean_sessions(sessions)) if feature]
    return {"type": "FeatureCollection", "features": features}


def export_geojson(sessions: Sequence[Session]) -> str:
    return json.dumps(build_geojson(sessions), indent=2)


def export_json(sessions: Sequence[Session], exported_at_ms: Optional[int] = None) -> str:
    data = {
        "exportedAt": isoformat_utc(exported_at_ms if exported_at_ms is not None else now_ms()),
        "sessions": [
            {
                "id": session.identifier,
                "points": [
                    {
                        "lat": fix.latitude,
                        "lon": fix.longitude,
                        "timestamp": fix.timestamp_ms,
                        "accuracy": _accuracy(fix),
                    }
                    for fix in session.fixes
                ],
            }
            for session in _clean_sessions(sessions)
        ],
    }
    return json.dumps(data, indent=2)


def export_filename(fmt: str, timestamp_ms: Optional[int] = None) -> str:
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format '{fmt}'. Choose one of: {', '.join(EXPORT_FORMATS)}.")
    stamp = timestamp_ms if timestamp_ms is not None else now_ms()
    return f"trace-export-{stamp}.{EXPORT_FORMATS[fmt]}"


def render_export(
    fmt: str,
    sessions: Sequence[Session],
    config: Optional[RenderConfig] = None,
    animate: bool = False,
) -> str:
    logger.info("Rendering %s export for %d session(s)", fmt, len(sessions))
    if fmt == "svg":
        return export_svg(sessions, config, animate=animate)
    if fmt == "gpx":
        return export_gpx(sessions)
    if fmt == "geojson":
        return export_geojson(sessions)
    if fmt == "json":
        return export_json(sessions)
    raise ValueError(f"Unknown export format '{fmt}'. Choose one of: {', '.join(EXPORT_FORMATS)}.")
