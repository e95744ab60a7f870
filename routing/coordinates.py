"""
Purpose: Coordinate validation / normalization.
What it does:
Guards every route request before it reaches the network:
- validate_latlng: admission gate (finite numbers only)
- normalize_latlng: clamp to valid ranges so providers never see NaN or 91.0
- canonical_key: rounded (origin, destination) string for cache + in-flight lookups

Internal coordinate type is LatLng(lat, lng). Providers that want lng,lat
do their own reordering.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# 5 decimals ~ 1.1 m, enough to absorb GPS jitter between identical requests
KEY_PRECISION = 5

LAT_RANGE = (-90.0, 90.0)
LNG_RANGE = (-180.0, 180.0)


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


def _is_finite_number(value: Any) -> bool:
    # bool is a subclass of int, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def coerce_latlng(value: Any) -> Optional[LatLng]:
    """
    Accepts a LatLng, a (lat, lng) pair or a mapping with lat + lng/lon keys.
    Returns None for anything it can't read. Values are NOT validated here.
    """
    if isinstance(value, LatLng):
        return value
    if isinstance(value, Mapping):
        lat = value.get("lat")
        lng = value.get("lng", value.get("lon"))
        if lat is None or lng is None:
            return None
        return LatLng(lat=lat, lng=lng)
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return LatLng(lat=value[0], lng=value[1])
    return None


def validate_latlng(point: Optional[LatLng]) -> bool:
    """True iff both fields are finite numbers."""
    if point is None:
        return False
    return _is_finite_number(point.lat) and _is_finite_number(point.lng)


def _clamp(value: Any, low: float, high: float) -> float:
    if not _is_finite_number(value):
        return 0.0
    return float(max(low, min(high, value)))


def normalize_with_flag(point: LatLng) -> Tuple[LatLng, bool]:
    """
    Clamp lat to [-90, 90] and lng to [-180, 180]; non-finite values become 0.

    Returns (normalized point, changed) so callers can tell whether
    anything was clamped.
    """
    lat = _clamp(point.lat, *LAT_RANGE)
    lng = _clamp(point.lng, *LNG_RANGE)
    changed = lat != point.lat or lng != point.lng
    return LatLng(lat=lat, lng=lng), changed


def normalize_latlng(point: LatLng) -> LatLng:
    normalized, changed = normalize_with_flag(point)
    if changed:
        logger.debug("Clamped coordinate %r to %r", point, normalized)
    return normalized


def _fmt(value: float) -> str:
    rounded = round(value, KEY_PRECISION)
    if rounded == 0:
        rounded = 0.0  # avoid "-0.00000" splitting the cache
    return f"{rounded:.{KEY_PRECISION}f}"


def canonical_key(origin: LatLng, destination: LatLng) -> str:
    """
    Cache / in-flight key: "lat,lng;lat,lng", origin first, 5 decimals each.
    Direction matters: A->B and B->A are different keys.
    """
    a = normalize_latlng(origin)
    b = normalize_latlng(destination)
    return f"{_fmt(a.lat)},{_fmt(a.lng)};{_fmt(b.lat)},{_fmt(b.lng)}"
