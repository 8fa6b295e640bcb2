from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from typing import List, Optional, Tuple, Union

from .constants import TIME_RANGE_MS

LOCAL_TZ = datetime.now().astimezone().tzinfo


def parse_timestamp(raw: Union[str, int, float]) -> int:
    """Epoch milliseconds from a number or an ISO-8601 / numeric string."""

    if isinstance(raw, bool):
        raise ValueError(f"Invalid timestamp {raw!r}")
    if isinstance(raw, (int, float)):
        return int(raw)
    cleaned = raw.strip()
    try:
        return int(float(cleaned))
    except (ValueError, OverflowError):
        pass
    try:
        parsed = datetime.fromisoformat(cleaned.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid timestamp {raw!r}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=LOCAL_TZ)
    return int(parsed.timestamp() * 1000)


def parse_date_string(date_str: str) -> datetime:
    cleaned = date_str.strip()
    for fmt in ("%Y-%m-%d", "%Y%m%d"):
        try:
            return datetime.strptime(cleaned, fmt).replace(tzinfo=LOCAL_TZ)
        except ValueError:
            continue
    raise ValueError(f"Invalid date format '{date_str}'. Use YYYYMMDD or YYYY-MM-DD.")


def day_bounds_ms(date_str: str) -> Tuple[int, int]:
    """First and last millisecond of a local calendar day.

    Both ends are resolved with the local zone rules for that date, so days with
    a daylight saving switch are 23 or 25 hours long.
    """

    day = parse_date_string(date_str).date()
    start = datetime.combine(day, time())
    next_start = datetime.combine(day + timedelta(days=1), time())
    return to_epoch_ms(start), to_epoch_ms(next_start) - 1


def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def now_ms() -> int:
    return to_epoch_ms(datetime.now(timezone.utc))


def within_range(ts_ms: int, start_ms: Optional[int], end_ms: Optional[int]) -> bool:
    if start_ms is not None and ts_ms < start_ms:
        return False
    if end_ms is not None and ts_ms > end_ms:
        return False
    return True


def time_window(range_label: str, reference_ms: int) -> Tuple[Optional[int], Optional[int]]:
    """``(start_ms, end_ms)`` ending at ``reference_ms``; ``(None, None)`` for "all"."""

    if range_label not in TIME_RANGE_MS:
        raise ValueError(
            f"Unknown time range '{range_label}'. Choose one of: {', '.join(TIME_RANGE_MS)}."
        )
    span = TIME_RANGE_MS[range_label]
    if span is None:
        return None, None
    return reference_ms - span, reference_ms


def format_timespan(milliseconds: float) -> str:
    seconds = milliseconds / 1000
    if seconds <= 0:
        return "0 minutes"
    total_minutes = int(seconds // 60)
    days, rem_minutes = divmod(total_minutes, 1440)
    hours, minutes = divmod(rem_minutes, 60)
    parts: List[str] = []
    if days:
        parts.append(f"{days} day{'s' if days != 1 else ''}")
    if hours:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes or not parts:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    return ", ".join(parts)


def isoformat_utc(ts_ms: int) -> str:
    dt = datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
