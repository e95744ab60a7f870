#Purpose: one-line, human readable route summary ("2.35 km, 12 min via osrm").
#Used by the CLI and by map popups. A straight line has no provider totals,
#so its distance is the great-circle length and no ETA is given.

import math

from routing.coordinates import LatLng
from routing.models import RouteResult

EARTH_RADIUS_M = 6371000.0


def haversine_m(a: LatLng, b: LatLng) -> float:
    """Great circle distance in meters."""
    lat1, lon1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lng)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    x = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(x))


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.2f} km"


def format_duration(seconds: float) -> str:
    minutes = round(seconds / 60)
    if minutes < 1:
        return "< 1 min"
    return f"{minutes} min"


def describe_route(route: RouteResult) -> str:
    if route.is_fallback:
        start, end = route.coordinates[0], route.coordinates[-1]
        return f"straight line, {format_distance(haversine_m(start, end))} (no route found)"

    parts = []
    if route.distance_m is not None:
        parts.append(format_distance(route.distance_m))
    if route.duration_s is not None:
        parts.append(format_duration(route.duration_s))
    if not parts:
        parts.append(f"{len(route.coordinates)} points")
    return f"{', '.join(parts)} via {route.provider.value}"
