"""
Purpose: Core data models for route resolution.
What it does:
Defines the common route shape every provider is normalized into, the
provenance tags, the cache entry, and the tagged outcome adapters produce
internally before collapsing it to RouteResult | None.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from routing.coordinates import LatLng


class ProviderName(str, Enum):
    """
    Provenance tag stamped on every RouteResult.
    FALLBACK is reserved for the synthetic straight line.
    """
    OSRM = "osrm"
    GRAPHHOPPER = "graphhopper"
    MAPBOX = "mapbox"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RouteResult:
    """
    An immutable path between two points.

    coordinates: ordered path, at least 2 points
    distance_m / duration_s: totals when the provider reports them
    """
    coordinates: Tuple[LatLng, ...]
    provider: ProviderName
    distance_m: Optional[float] = None
    duration_s: Optional[float] = None

    def __post_init__(self):
        if len(self.coordinates) < 2:
            raise ValueError("A route needs at least two coordinates.")

    @classmethod
    def new(
        cls,
        coordinates: Sequence[LatLng],
        provider: ProviderName | str,
        distance_m: Optional[float] = None,
        duration_s: Optional[float] = None,
    ) -> RouteResult:
        if isinstance(provider, str):
            provider = ProviderName(provider)
        return cls(
            coordinates=tuple(coordinates),
            provider=provider,
            distance_m=distance_m,
            duration_s=duration_s,
        )

    @property
    def is_fallback(self) -> bool:
        return self.provider is ProviderName.FALLBACK

    def as_latlon_list(self) -> List[Tuple[float, float]]:
        """[(lat, lng), ...] for polyline rendering."""
        return [point.as_tuple() for point in self.coordinates]


@dataclass(frozen=True)
class CacheEntry:
    """
    route is None means "every provider failed" (negative cache),
    which is different from having no entry at all.
    """
    route: Optional[RouteResult]
    created_at: float

    @property
    def is_negative(self) -> bool:
        return self.route is None


class FetchStatus(str, Enum):
    OK = "ok"
    NOT_CONFIGURED = "not_configured"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    BAD_RESPONSE = "bad_response"
    NO_PATH = "no_path"


@dataclass(frozen=True)
class FetchOutcome:
    """Tagged result of a single provider attempt."""
    provider: ProviderName
    status: FetchStatus
    route: Optional[RouteResult] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK and self.route is not None

    @classmethod
    def success(cls, route: RouteResult) -> FetchOutcome:
        return cls(provider=route.provider, status=FetchStatus.OK, route=route)

    @classmethod
    def failure(
        cls, provider: ProviderName, status: FetchStatus, detail: Optional[str] = None
    ) -> FetchOutcome:
        return cls(provider=provider, status=status, detail=detail)
