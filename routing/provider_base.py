"""
Purpose: Shared provider adapter contract.
What it does:

Every routing provider (OSRM, GraphHopper, Mapbox) is an adapter that:
- refuses to hit the network when its credential is missing
- normalizes both endpoints before building its request
- races the HTTP call against its own timeout and the caller's cancel event
- parses the first path into a RouteResult tagged with its ProviderName

attempt() returns a FetchOutcome (status + route) so failures stay explicit;
fetch_route() collapses that to RouteResult | None for the resolver.
Subclasses only implement build_request() and parse_payload().
"""

from __future__ import annotations

import asyncio
import logging
import math
from abc import ABC, abstractmethod
from numbers import Real
from typing import Any, Iterable, List, Optional, Sequence

import httpx

from routing.coordinates import LatLng, normalize_latlng, validate_latlng
from routing.errors import NoPathError, ProviderError
from routing.models import FetchOutcome, FetchStatus, ProviderName, RouteResult

logger = logging.getLogger(__name__)


def format_lnglat_path(points: Sequence[LatLng]) -> str:
    """Convert [LatLng, ...] to the 'lng,lat;lng,lat' path segment OSRM and Mapbox use."""
    return ";".join(f"{point.lng},{point.lat}" for point in points)


def parse_lnglat_line(raw: Any) -> List[LatLng]:
    """
    GeoJSON LineString coordinates ([[lng, lat], ...]) -> [LatLng, ...].
    Raises NoPathError when fewer than 2 points come back.
    """
    if not isinstance(raw, list):
        raise ProviderError("route geometry has no coordinate list")

    points = []
    for pair in raw:
        #indexing a non-list raises TypeError/IndexError, handled by attempt()
        point = LatLng(lat=float(pair[1]), lng=float(pair[0]))
        if not validate_latlng(point):
            raise ProviderError(f"non-finite coordinate in route geometry: {pair!r}")
        points.append(point)

    if len(points) < 2:
        raise NoPathError(f"route geometry has {len(points)} point(s)")
    return points


def optional_number(value: Any) -> Optional[float]:
    """Distances/durations are optional: anything that isn't a finite number becomes None."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def first_item(data: Any, key: str) -> Any:
    """data[key][0], or NoPathError when the list is missing/empty."""
    items = data.get(key)
    if not isinstance(items, list) or not items:
        raise NoPathError(f"response has no {key}")
    return items[0]


async def _settle_helpers(tasks: Iterable[asyncio.Future]) -> None:
    """Cancel whatever is still running and wait for it, so no waiter or timer outlives the call."""
    tasks = list(tasks)
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


class RouteProvider(ABC):
    """
    Base adapter.

    client: shared httpx.AsyncClient (owned by the resolver)
    timeout: seconds allowed for one attempt, request + parse
    credential: API key / access token for providers that need one
    """

    name: ProviderName
    requires_credential: bool = False

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str,
        profile: str,
        timeout: float,
        credential: Optional[str] = None,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout
        self.credential = credential

    def __repr__(self) -> str:
        return f"{type(self).__name__}(profile={self.profile!r}, timeout={self.timeout})"

    def is_configured(self) -> bool:
        return not self.requires_credential or bool(self.credential)

    #----------------
    # provider specifics
    #----------------
    @abstractmethod
    def build_request(self, origin: LatLng, destination: LatLng) -> httpx.Request:
        """Build the provider HTTP request from two normalized points."""

    @abstractmethod
    def parse_payload(self, data: dict) -> RouteResult:
        """Turn the decoded JSON body into a RouteResult or raise ProviderError/NoPathError."""

    #----------------
    # shared flow
    #----------------
    async def _request_route(self, origin: LatLng, destination: LatLng) -> RouteResult:
        request = self.build_request(origin, destination)
        # path only: query strings carry keys/tokens
        logger.debug("[%s] %s %s%s", self.name.value, request.method, request.url.host, request.url.path)

        response = await self.client.send(request)
        response.raise_for_status()

        data = response.json()
        if not isinstance(data, dict):
            raise ProviderError("response body is not a JSON object")
        return self.parse_payload(data)

    async def attempt(
        self,
        origin: LatLng,
        destination: LatLng,
        cancel: Optional[asyncio.Event] = None,
    ) -> FetchOutcome:
        """
        One time-boxed, cancellable attempt.

        Whichever comes first wins: the response, self.timeout, or cancel being set.
        Only CancelledError (the calling task itself being cancelled) escapes.
        """
        if not self.is_configured():
            return FetchOutcome.failure(self.name, FetchStatus.NOT_CONFIGURED)
        if cancel is not None and cancel.is_set():
            return FetchOutcome.failure(self.name, FetchStatus.CANCELLED)

        a = normalize_latlng(origin)
        b = normalize_latlng(destination)

        request_task = asyncio.ensure_future(self._request_route(a, b))
        waiters = [request_task]
        if cancel is not None:
            waiters.append(asyncio.ensure_future(cancel.wait()))

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=self.timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            await _settle_helpers(waiters)

        if request_task in done:
            outcome = self._outcome_from(request_task)
        elif cancel is not None and cancel.is_set():
            outcome = FetchOutcome.failure(self.name, FetchStatus.CANCELLED)
        else:
            outcome = FetchOutcome.failure(
                self.name, FetchStatus.TIMEOUT, f"no answer within {self.timeout}s"
            )

        if outcome.ok:
            logger.debug("[%s] route with %d points", self.name.value, len(outcome.route.coordinates))
        else:
            logger.info("[%s] no route: %s %s", self.name.value, outcome.status.value, outcome.detail or "")
        return outcome

    def _outcome_from(self, request_task: asyncio.Future) -> FetchOutcome:
        try:
            route = request_task.result()
        except NoPathError as e:
            return FetchOutcome.failure(self.name, FetchStatus.NO_PATH, str(e))
        except httpx.HTTPStatusError as e:
            return FetchOutcome.failure(
                self.name, FetchStatus.HTTP_ERROR, f"status {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            return FetchOutcome.failure(self.name, FetchStatus.HTTP_ERROR, type(e).__name__)
        except (ProviderError, ValueError, KeyError, TypeError, IndexError) as e:
            return FetchOutcome.failure(self.name, FetchStatus.BAD_RESPONSE, str(e))
        return FetchOutcome.success(route)

    async def fetch_route(
        self,
        origin: LatLng,
        destination: LatLng,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[RouteResult]:
        """RouteResult on success, None for every kind of failure."""
        outcome = await self.attempt(origin, destination, cancel)
        return outcome.route
