from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from .constants import DEFAULT_INPUT_FILE
from .models import Fix
from .time_utils import parse_timestamp


def load_payload(path: Path) -> Iterable[dict]:
    """Yield one record per fix from a JSON backup or a flat list of fixes."""

    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict) and "sessions" in payload:
        for session in payload["sessions"]:
            session_id = str(session.get("id", ""))
            for point in session.get("points", []):
                yield {"session_id": session_id, **point}
        return
    if isinstance(payload, dict) and "locations" in payload:
        yield from payload["locations"]
        return
    if isinstance(payload, list):
        yield from payload
        return
    raise ValueError(f"Unrecognised location payload structure in {path}")


def _first_present(entry: dict, *keys: str):
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def extract_fixes(payload: Iterable[dict]) -> List[Fix]:
    fixes: List[Fix] = []
    for entry in payload:
        latitude = _first_present(entry, "latitude", "lat")
        longitude = _first_present(entry, "longitude", "lon", "lng")
        raw_ts = _first_present(entry, "timestamp", "timestampMs", "time")
        if latitude is None or longitude is None or raw_ts is None:
            continue
        accuracy = entry.get("accuracy")
        fixes.append(
            Fix(
                latitude=float(latitude),
                longitude=float(longitude),
                timestamp_ms=parse_timestamp(raw_ts),
                accuracy=float(accuracy) if accuracy is not None else None,
                session_id=str(_first_present(entry, "session_id", "sessionId") or ""),
            )
        )
    return sorted(fixes, key=lambda fix: fix.timestamp_ms)


def resolve_input_path(candidate: Optional[Path], default: Path = DEFAULT_INPUT_FILE) -> Path:
    """The explicit input file, else ``default`` when it exists."""

    path = candidate.expanduser() if candidate else default
    if path.is_file():
        return path
    if candidate:
        raise SystemExit(f"Input file not found: {path}")
    raise SystemExit(f"No input file provided. Supply --input or place {default.name} in the working directory.")
