from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from .config import RenderConfig, resolve_render_config
from .constants import (
    DEFAULT_INPUT_FILE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_TIME_RANGE,
    EXPORT_FORMATS,
    TIME_RANGE_MS,
    TRACKING_INTERVALS,
)
from .export import build_export_layout, export_filename, render_export
from .io import extract_fixes, load_payload, resolve_input_path
from .models import TrackLayout
from .pipeline import build_replay
from .preprocess import apply_time_window, group_sessions
from .stats import compute_track_stats, print_stats
from .time_utils import day_bounds_ms, now_ms, time_window


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render recorded GPS fixes as SVG, GPX, GeoJSON or JSON exports."
    )
    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        default=None,
        help="Path to the location JSON (app backup export or a flat list of fixes).",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output path (default: trace-export-<timestamp>.<ext> in the working directory).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=sorted(EXPORT_FORMATS),
        default="svg",
        help="Export format (default: svg).",
    )
    parser.add_argument(
        "--range",
        choices=list(TIME_RANGE_MS),
        default=None,
        help=f"Only keep fixes from the trailing time window (default: {DEFAULT_TIME_RANGE}).",
    )
    parser.add_argument(
        "--start-date",
        type=str,
        default=None,
        help="Keep fixes on or after this date (YYYY-MM-DD). Overrides --range.",
    )
    parser.add_argument(
        "--end-date",
        type=str,
        default=None,
        help="Keep fixes on or before this date (YYYY-MM-DD). Overrides --range.",
    )
    parser.add_argument(
        "--tracking-interval",
        type=int,
        choices=TRACKING_INTERVALS,
        default=None,
        help="Recording interval in minutes; the gap threshold is derived from it.",
    )
    parser.add_argument(
        "--gap-factor",
        type=float,
        default=None,
        help="Multiple of the tracking interval that starts a new stroke (0 disables splitting).",
    )
    parser.add_argument("--width", type=float, default=None, help="Viewport width in plane units.")
    parser.add_argument("--height", type=float, default=None, help="Viewport height in plane units.")
    parser.add_argument("--padding", type=float, default=None, help="SVG edge padding in plane units.")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=None,
        help="Douglas-Peucker tolerance in degrees (default: 0.0001).",
    )
    parser.add_argument(
        "--simplify-threshold",
        type=int,
        default=None,
        help="Only simplify segments with more points than this (default: 100).",
    )
    parser.add_argument(
        "--animate",
        action="store_true",
        help="Embed the replay animation in SVG exports.",
    )
    parser.add_argument(
        "--progress",
        type=float,
        action="append",
        default=None,
        help="Print replay intervals and the indicator position at this progress (repeatable).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with a 'render' section overriding the defaults.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (default: WARNING).",
    )
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Skip interactive prompts.",
    )
    return parser.parse_args(argv)


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")


def prompt_time_range(default: str) -> str:
    options = ", ".join(TIME_RANGE_MS)
    while True:
        answer = input(f"Time range ({options}) [press Enter for {default}]: ").strip().lower()
        if not answer:
            return default
        if answer in TIME_RANGE_MS:
            return answer
        print(f"Please choose one of: {options}.")


def prompt_input_path(default: Path) -> Path:
    hint = f" [press Enter for {default.name}]" if default.is_file() else ""
    while True:
        answer = input(f"Path to location JSON{hint}: ").strip()
        if not answer:
            if default.is_file():
                return default
            print("Please provide a path to the location JSON file.")
            continue
        proposed = Path(answer).expanduser()
        if proposed.is_file():
            return proposed
        print(f"File not found at {proposed}. Please try again.")


def resolve_window(args: argparse.Namespace, should_prompt: bool) -> Tuple[Optional[int], Optional[int]]:
    if args.start_date or args.end_date:
        try:
            start = day_bounds_ms(args.start_date)[0] if args.start_date else None
            end = day_bounds_ms(args.end_date)[1] if args.end_date else None
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        if start is not None and end is not None and start > end:
            raise SystemExit("Start date must be on or before the end date.")
        return start, end

    range_label = args.range
    if range_label is None:
        range_label = prompt_time_range(DEFAULT_TIME_RANGE) if should_prompt else DEFAULT_TIME_RANGE
    return time_window(range_label, now_ms())


def build_config(args: argparse.Namespace) -> RenderConfig:
    try:
        base = resolve_render_config(args.config)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Could not load configuration: {exc}") from exc
    return base.override(
        width=args.width,
        height=args.height,
        padding=args.padding,
        simplify_tolerance=args.tolerance,
        simplify_threshold=args.simplify_threshold,
        tracking_interval=args.tracking_interval,
        gap_factor=args.gap_factor,
    )


def print_replay(layout: TrackLayout, progress: Sequence[float]) -> None:
    timeline = build_replay(layout)
    print("\nReplay intervals")
    print("----------------")
    for interval in timeline.intervals:
        print(
            f"  Segment {interval.segment_index}: {interval.start_progress:.4f} -> {interval.end_progress:.4f} "
            f"(length {interval.length:.1f})"
        )
    for value in progress:
        frame = timeline.frame(value)
        if frame.indicator is None:
            print(f"  p={frame.progress:.3f}: indicator hidden")
        else:
            print(f"  p={frame.progress:.3f}: indicator at ({frame.indicator.x:.2f}, {frame.indicator.y:.2f})")


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)
    config = build_config(args)

    should_prompt = not args.no_prompt and sys.stdin.isatty()
    if args.input is None and should_prompt:
        input_path = prompt_input_path(DEFAULT_INPUT_FILE)
    else:
        input_path = resolve_input_path(args.input)
    try:
        all_fixes = extract_fixes(load_payload(input_path))
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    if not all_fixes:
        raise SystemExit("No location records could be parsed from the supplied file.")

    start, end = resolve_window(args, should_prompt)
    fixes = apply_time_window(all_fixes, start, end)
    if not fixes:
        raise SystemExit("No location records matched the specified time window.")

    sessions = group_sessions(fixes)
    layout = build_export_layout(sessions, config)
    if not layout.visible_paths:
        print("No segment has two or more fixes; the track has no visible strokes.")

    if args.progress:
        print_replay(layout, args.progress)

    try:
        document = render_export(args.format, sessions, config, animate=args.animate)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    output_path = args.output if args.output is not None else DEFAULT_OUTPUT_DIR / export_filename(args.format)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(document, encoding="utf-8")

    print_stats(compute_track_stats(layout))
    print(f"Saved {args.format.upper()} export to {output_path.resolve()}")
