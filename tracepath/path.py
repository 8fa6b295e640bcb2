from __future__ import annotations

from typing import List, Sequence

from .models import ProjectedPoint


def format_number(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".") or "0"


def build_path(points: Sequence[ProjectedPoint]) -> str:
    """``M x y L x y ...`` for two or more points; an empty string otherwise.

    A lone fix has no visible stroke.
    """

    if len(points) < 2:
        return ""
    first = points[0]
    commands = [f"M {format_number(first.x)} {format_number(first.y)}"]
    commands.extend(f"L {format_number(point.x)} {format_number(point.y)}" for point in points[1:])
    return " ".join(commands)


def build_segment_paths(segments_points: Sequence[Sequence[ProjectedPoint]]) -> List[str]:
    return [build_path(points) for points in segments_points]
