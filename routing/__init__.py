#Marks routing as a package.
#Re-exports the public API (RouteResolver, as_straight_line, the models) so callers
#import from routing without knowing internal file names.
#No business logic.

from .config import ProviderTimeouts, RoutingSettings
from .coordinates import LatLng, canonical_key, normalize_latlng, validate_latlng
from .models import ProviderName, RouteResult
from .route_service import RouteResolver, build_providers
from .straight_line import as_straight_line

__all__ = [
    "LatLng",
    "ProviderName",
    "ProviderTimeouts",
    "RouteResolver",
    "RouteResult",
    "RoutingSettings",
    "as_straight_line",
    "build_providers",
    "canonical_key",
    "normalize_latlng",
    "validate_latlng",
]
