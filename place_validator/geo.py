"""Geospatial helpers: viewport parsing, radius from zoom, coordinate rounding."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from . import config

# ...@<lat>,<lng>,<zoom>z...
_ZOOM_RE = re.compile(r"@[-\d.]+,[-\d.]+,([\d.]+)z")
_FLOAT_PREFIX_RE = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


@dataclass(frozen=True)
class Viewport:
    lat: float
    lng: float
    zoom: Optional[float] = None


def _parse_float_prefix(text: str) -> Optional[float]:
    m = _FLOAT_PREFIX_RE.match(text)
    if not m:
        return None
    return float(m.group(0))


def parse_zoom(url: str) -> Optional[float]:
    m = _ZOOM_RE.search(url or "")
    if not m:
        return None
    return _parse_float_prefix(m.group(1))


def parse_viewport_url(url: str) -> Optional[Viewport]:
    """Extract the map centre (and zoom, when present) from a Maps URL.

    Returns None when no ``@lat,lng`` segment can be parsed.
    """
    if not url or "@" not in url:
        return None
    segment = url.split("@", 1)[1].split("/", 1)[0]
    parts = segment.split(",")
    if len(parts) < 2:
        return None
    lat = _parse_float_prefix(parts[0])
    lng = _parse_float_prefix(parts[1])
    if lat is None or lng is None:
        return None
    return Viewport(lat=lat, lng=lng, zoom=parse_zoom(url))


def _coerce_zoom(zoom: Any) -> Optional[float]:
    if zoom is None or isinstance(zoom, bool):
        return None
    try:
        value = float(zoom)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def round_half_up(value: float, decimals: int = 0) -> float:
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def radius_for_zoom(zoom: Any) -> int:
    """Search radius in meters for a map zoom level.

    Each zoom step above ``BASE_ZOOM`` halves ``BASE_RADIUS_M``; the result
    is clamped to [MIN_RADIUS_M, MAX_RADIUS_M]. Unknown zoom yields the base
    radius.
    """
    value = _coerce_zoom(zoom)
    if value is None:
        return config.BASE_RADIUS_M
    try:
        raw = config.BASE_RADIUS_M * (2.0 ** (config.BASE_ZOOM - value))
    except OverflowError:
        return config.MAX_RADIUS_M
    radius = int(round_half_up(raw))
    return min(config.MAX_RADIUS_M, max(config.MIN_RADIUS_M, radius))


def format_coord(value: float) -> str:
    """Shortest textual form of a coordinate: 52.0 -> "52", -0.0 -> "0"."""
    if value == 0:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
