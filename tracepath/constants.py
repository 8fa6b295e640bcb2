from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple

WORK_DIR = Path.cwd()
DEFAULT_INPUT_FILE = WORK_DIR / "trace-export.json"
DEFAULT_OUTPUT_DIR = WORK_DIR
DEFAULT_CONFIG_FILE = WORK_DIR / "tracepath.yaml"

MERCATOR_LAT_LIMIT = 85.0
RANGE_EPSILON = 0.001

DISPLAY_PADDING_RATIO = 0.2
DISPLAY_MIN_DELTA = 0.01

SIMPLIFY_TOLERANCE = 0.0001
SIMPLIFY_THRESHOLD = 100

EXPORT_WIDTH = 1000
EXPORT_HEIGHT = 1000
EXPORT_PADDING = 40.0
EXPORT_BACKGROUND = "#F5F2EB"
EXPORT_STROKE = "#2C2C2C"
EXPORT_STROKE_WIDTH = 2

REPLAY_DURATION_MS = 4000

TRACKING_INTERVALS: Tuple[int, ...] = (1, 5, 15, 30, 60)
DEFAULT_TRACKING_INTERVAL = 5
GAP_FACTOR = 3.0

TIME_RANGE_MS: Dict[str, Optional[int]] = {
    "1h": 60 * 60 * 1000,
    "6h": 6 * 60 * 60 * 1000,
    "24h": 24 * 60 * 60 * 1000,
    "7d": 7 * 24 * 60 * 60 * 1000,
    "30d": 30 * 24 * 60 * 60 * 1000,
    "all": None,
}
DEFAULT_TIME_RANGE = "all"

EXPORT_FORMATS: Dict[str, str] = {
    "svg": "svg",
    "gpx": "gpx",
    "geojson": "geojson",
    "json": "json",
}

EARTH_RADIUS_KM = 6371.0
