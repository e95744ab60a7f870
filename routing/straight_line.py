#Purpose: last-resort route with no network dependency.
#The resolver never calls this on its own: "no route found" stays None, and the
#caller decides whether to draw a straight line instead.

from routing.coordinates import LatLng, coerce_latlng, normalize_latlng
from routing.models import ProviderName, RouteResult


def as_straight_line(origin, destination) -> RouteResult:
    """Two normalized endpoints, no distance/duration, tagged FALLBACK."""
    #unreadable input normalizes like a non-finite value would: to 0,0
    a = normalize_latlng(coerce_latlng(origin) or LatLng(0.0, 0.0))
    b = normalize_latlng(coerce_latlng(destination) or LatLng(0.0, 0.0))
    return RouteResult(coordinates=(a, b), provider=ProviderName.FALLBACK)
