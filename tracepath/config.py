"""Render configuration.

Defaults come from :mod:`tracepath.constants`; an optional YAML file can
override them, and command line flags override both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from . import constants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderConfig:
    width: float = constants.EXPORT_WIDTH
    height: float = constants.EXPORT_HEIGHT
    padding: float = constants.EXPORT_PADDING
    padding_ratio: float = constants.DISPLAY_PADDING_RATIO
    min_delta: float = constants.DISPLAY_MIN_DELTA
    simplify_tolerance: float = constants.SIMPLIFY_TOLERANCE
    simplify_threshold: int = constants.SIMPLIFY_THRESHOLD
    tracking_interval: int = constants.DEFAULT_TRACKING_INTERVAL
    gap_factor: float = constants.GAP_FACTOR
    replay_duration_ms: int = constants.REPLAY_DURATION_MS
    stroke: str = constants.EXPORT_STROKE
    stroke_width: float = constants.EXPORT_STROKE_WIDTH
    background: str = constants.EXPORT_BACKGROUND

    def override(self, **values: Any) -> "RenderConfig":
        """Return a copy with every non-None value applied."""

        changes = {key: value for key, value in values.items() if value is not None}
        return replace(self, **changes) if changes else self


_COERCERS: Dict[str, Callable[[Any], Any]] = {"float": float, "int": int, "str": str}


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a YAML config file; malformed YAML or a non-mapping document raises ``ValueError``."""

    with Path(path).open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ValueError(f"{path} is not valid YAML: {exc}") from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping at the top level.")
    return raw


def _coerce(name: str, kind: str, value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Render setting '{name}' must be a {kind}, got {value!r}.")
    try:
        return _COERCERS[kind](value)
    except (TypeError, ValueError):
        raise ValueError(f"Render setting '{name}' must be a {kind}, got {value!r}.") from None


def build_render_config(raw: Optional[Dict[str, Any]] = None) -> RenderConfig:
    """Build a :class:`RenderConfig` from the ``render`` section of a config dict.

    Values are coerced to each field's declared type.
    """

    section = (raw or {}).get("render") or {}
    if not isinstance(section, dict):
        raise ValueError("The 'render' section of the configuration must be a mapping.")
    kinds = {item.name: str(item.type) for item in fields(RenderConfig)}
    unknown = sorted(set(section) - set(kinds))
    if unknown:
        logger.warning("Ignoring unknown render settings: %s", ", ".join(unknown))
    values = {key: _coerce(key, kinds[key], value) for key, value in section.items() if key in kinds}
    config = RenderConfig(**values)
    if config.tracking_interval not in constants.TRACKING_INTERVALS:
        raise ValueError(
            f"Unsupported tracking interval {config.tracking_interval}; "
            f"choose one of {', '.join(str(value) for value in constants.TRACKING_INTERVALS)} minutes."
        )
    return config


def resolve_render_config(path: Optional[Path]) -> RenderConfig:
    if path is None:
        if not constants.DEFAULT_CONFIG_FILE.exists():
            return RenderConfig()
        path = constants.DEFAULT_CONFIG_FILE
    logger.info("Loading render configuration from %s", path)
    return build_render_config(load_config(path))
