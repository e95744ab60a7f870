"""
Purpose: Route computation for downstream use (the fallback orchestrator).
What it does:

resolve_route(origin, destination, cancel=None) -> RouteResult | None

1. validate both endpoints (invalid -> None, no network)
2. fresh cache hit -> cached route or cached "no route"
3. same key already in flight -> wait on that resolution
4. otherwise try providers in priority order:
   credentialed ones (GraphHopper, Mapbox) first, keyless OSRM always last
5. cache the outcome (route or None) and hand it to every waiting caller

It never raises for provider or input problems. Drawing a straight line when
nothing is found is the caller's call (see straight_line.as_straight_line).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Type

import httpx

from routing.cache import InFlightRegistry, PendingResolution, RouteCache
from routing.config import RoutingSettings
from routing.coordinates import LatLng, canonical_key, coerce_latlng, validate_latlng
from routing.graphhopper_client import GraphHopperClient
from routing.mapbox_client import MapboxClient
from routing.models import ProviderName, RouteResult
from routing.osrm_client import OSRMClient
from routing.provider_base import RouteProvider
from routing.straight_line import as_straight_line

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: Dict[ProviderName, Type[RouteProvider]] = {
    ProviderName.OSRM: OSRMClient,
    ProviderName.GRAPHHOPPER: GraphHopperClient,
    ProviderName.MAPBOX: MapboxClient,
}


def _make_provider(name: ProviderName, settings: RoutingSettings, client: httpx.AsyncClient) -> RouteProvider:
    provider_class = PROVIDER_CLASSES[name]
    return provider_class(
        client,
        base_url=getattr(settings, f"{name.value}_base_url"),
        profile=getattr(settings, f"{name.value}_profile"),
        timeout=settings.timeouts.for_provider(name),
        credential=settings.credential_for(name),
    )


def build_providers(settings: RoutingSettings, client: httpx.AsyncClient) -> List[RouteProvider]:
    """
    Fallback chain for these settings.
    Providers without a credential are left out entirely; OSRM is always last.
    """
    chain = []
    for name in settings.provider_priority:
        if not settings.credential_for(name):
            logger.debug("%s disabled: no credential configured", name.value)
            continue
        chain.append(_make_provider(name, settings, client))

    chain.append(_make_provider(ProviderName.OSRM, settings, client))
    return chain


class RouteResolver:
    """
    Owns the cache, the in-flight registry and the provider chain.
    Create one per process (or per event loop) and share it.
    """

    def __init__(
        self,
        settings: Optional[RoutingSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        providers: Optional[Iterable[RouteProvider]] = None,
        cache: Optional[RouteCache] = None,
        in_flight: Optional[InFlightRegistry] = None,
    ):
        self.settings = settings if settings is not None else RoutingSettings.from_env()

        # only close a client we created ourselves
        self._owns_client = client is None
        self.client = client if client is not None else httpx.AsyncClient()

        if providers is None:
            providers = build_providers(self.settings, self.client)
        self.providers: List[RouteProvider] = list(providers)

        self.cache = cache if cache is not None else RouteCache(ttl_seconds=self.settings.cache_ttl_s)
        self.in_flight = in_flight if in_flight is not None else InFlightRegistry()

    async def __aenter__(self) -> RouteResolver:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    @property
    def provider_order(self) -> List[ProviderName]:
        return [provider.name for provider in self.providers]

    def clear_cache(self) -> None:
        self.cache.clear()

    #----------------
    # public entry points
    #----------------
    async def resolve_route(
        self,
        origin,
        destination,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[RouteResult]:
        """
        Best available route between two points, or None.

        origin / destination: LatLng, (lat, lng) or {"lat": .., "lng": ..}
        cancel: set it to stop waiting; this caller then gets None. Other callers
            waiting on the same key are unaffected unless this was the only one.
        """
        a = coerce_latlng(origin)
        b = coerce_latlng(destination)
        if not (validate_latlng(a) and validate_latlng(b)):
            logger.warning("Rejected route request with invalid coordinates: %r -> %r", origin, destination)
            return None
        if cancel is not None and cancel.is_set():
            return None

        key = canonical_key(a, b)

        entry = self.cache.lookup(key)
        if entry is not None:
            logger.debug("Cache hit for %s (%s)", key, "no route" if entry.is_negative else entry.route.provider.value)
            return entry.route

        pending = self.in_flight.get(key)
        if pending is None:
            abort = asyncio.Event()
            task = asyncio.ensure_future(self._resolve_uncached(key, a, b, abort))
            pending = self.in_flight.register(key, task, abort)
        else:
            logger.debug("Joining in-flight resolution for %s", key)

        return await self._wait_for(pending, cancel)

    async def resolve_route_or_straight_line(
        self,
        origin,
        destination,
        cancel: Optional[asyncio.Event] = None,
    ) -> Optional[RouteResult]:
        """
        resolve_route(), but a straight line instead of None when no provider
        found a route. Invalid input and cancellation still give None.
        """
        route = await self.resolve_route(origin, destination, cancel)
        if route is not None:
            return route
        if cancel is not None and cancel.is_set():
            return None

        a = coerce_latlng(origin)
        b = coerce_latlng(destination)
        if not (validate_latlng(a) and validate_latlng(b)):
            return None
        return as_straight_line(a, b)

    #----------------
    # internals
    #----------------
    async def _wait_for(self, pending: PendingResolution, cancel: Optional[asyncio.Event]) -> Optional[RouteResult]:
        pending.attach()

        cancel_waiter = asyncio.ensure_future(cancel.wait()) if cancel is not None else None
        waiters = [pending.task] if cancel_waiter is None else [pending.task, cancel_waiter]

        try:
            # asyncio.wait never cancels pending.task, other callers may still need it
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            self.in_flight.detach(pending)
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        settled = pending.task.done()
        self.in_flight.detach(pending)
        if settled:
            return self._result_of(pending.task)

        logger.debug("Caller cancelled while waiting on %s", pending.key)
        return None

    @staticmethod
    def _result_of(task: asyncio.Future) -> Optional[RouteResult]:
        if task.cancelled():
            return None
        return task.result()

    async def _resolve_uncached(
        self,
        key: str,
        origin: LatLng,
        destination: LatLng,
        abort: asyncio.Event,
    ) -> Optional[RouteResult]:
        try:
            route = await self._run_fallback_chain(origin, destination, abort)
        except Exception:
            # a bug, not a provider failure: don't cache it
            logger.exception("Route resolution for %s failed unexpectedly", key)
            return None

        if abort.is_set():
            logger.debug("Resolution for %s aborted, nothing cached", key)
            return None

        self.cache.store(key, route)
        return route

    async def _run_fallback_chain(
        self,
        origin: LatLng,
        destination: LatLng,
        abort: asyncio.Event,
    ) -> Optional[RouteResult]:
        attempted = []
        for provider in self.providers:
            if abort.is_set():
                return None

            outcome = await provider.attempt(origin, destination, abort)
            attempted.append(f"{provider.name.value}={outcome.status.value}")

            if outcome.ok and len(outcome.route.coordinates) >= 2:
                logger.info("Route found via %s", provider.name.value)
                return outcome.route

        if not abort.is_set():
            logger.warning("No route from any provider (%s)", ", ".join(attempted))
        return None
