"""
Purpose: Central configuration for route resolution (single source of truth).
What it does:

Reads provider credentials, profiles, base URLs and timeouts from the
environment (.env supported via python-dotenv) into a frozen RoutingSettings.

Example .env:
GRAPHHOPPER_KEY=...
MAPBOX_TOKEN=...
OSRM_BASE_URL=https://router.project-osrm.org

Rule: a missing/blank credential disables that provider. No logic beyond parsing.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from routing.errors import ConfigError
from routing.models import ProviderName

DEFAULT_OSRM_BASE_URL = "https://router.project-osrm.org"
DEFAULT_GRAPHHOPPER_BASE_URL = "https://graphhopper.com"
DEFAULT_MAPBOX_BASE_URL = "https://api.mapbox.com"

# providers that need a credential, tried before OSRM in this order by default
CREDENTIALED_PROVIDERS = (ProviderName.GRAPHHOPPER, ProviderName.MAPBOX)


@dataclass(frozen=True)
class ProviderTimeouts:
    """Per-provider time budget in seconds."""
    osrm: float = 4.5
    graphhopper: float = 4.0
    mapbox: float = 3.0

    def for_provider(self, provider: ProviderName) -> float:
        return getattr(self, provider.value)


@dataclass(frozen=True)
class RoutingSettings:
    """
    Everything the resolver needs, passed in at construction time.

    Notes:
    - graphhopper_key / mapbox_token: None means the provider is never attempted.
    - provider_priority only orders the credentialed providers; OSRM is
      always appended last as the keyless fallback.
    """

    # --- Credentials ---
    graphhopper_key: Optional[str] = None
    mapbox_token: Optional[str] = None

    # --- Travel mode per provider ---
    osrm_profile: str = "foot"
    graphhopper_profile: str = "foot"
    mapbox_profile: str = "walking"

    # --- Endpoints ---
    osrm_base_url: str = DEFAULT_OSRM_BASE_URL
    graphhopper_base_url: str = DEFAULT_GRAPHHOPPER_BASE_URL
    mapbox_base_url: str = DEFAULT_MAPBOX_BASE_URL

    timeouts: ProviderTimeouts = field(default_factory=ProviderTimeouts)
    provider_priority: Tuple[ProviderName, ...] = CREDENTIALED_PROVIDERS

    # --- Cache ---
    cache_ttl_s: float = 15.0

    log_level: str = "INFO"

    def credential_for(self, provider: ProviderName) -> Optional[str]:
        if provider is ProviderName.GRAPHHOPPER:
            return self.graphhopper_key
        if provider is ProviderName.MAPBOX:
            return self.mapbox_token
        return None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> RoutingSettings:
        """
        Build settings from environment variables.
        When environ is None, .env is loaded first and os.environ is used.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        timeouts = ProviderTimeouts(
            osrm=_float(environ, "OSRM_TIMEOUT_S", ProviderTimeouts.osrm),
            graphhopper=_float(environ, "GRAPHHOPPER_TIMEOUT_S", ProviderTimeouts.graphhopper),
            mapbox=_float(environ, "MAPBOX_TIMEOUT_S", ProviderTimeouts.mapbox),
        )
        return cls(
            graphhopper_key=_secret(environ, "GRAPHHOPPER_KEY"),
            mapbox_token=_secret(environ, "MAPBOX_TOKEN"),
            osrm_profile=_str(environ, "OSRM_PROFILE", cls.osrm_profile),
            graphhopper_profile=_str(environ, "GRAPHHOPPER_PROFILE", cls.graphhopper_profile),
            mapbox_profile=_str(environ, "MAPBOX_PROFILE", cls.mapbox_profile),
            osrm_base_url=_str(environ, "OSRM_BASE_URL", DEFAULT_OSRM_BASE_URL).rstrip("/"),
            graphhopper_base_url=_str(
                environ, "GRAPHHOPPER_BASE_URL", DEFAULT_GRAPHHOPPER_BASE_URL
            ).rstrip("/"),
            mapbox_base_url=_str(environ, "MAPBOX_BASE_URL", DEFAULT_MAPBOX_BASE_URL).rstrip("/"),
            timeouts=timeouts,
            provider_priority=parse_priority(environ.get("ROUTING_PROVIDER_PRIORITY")),
            cache_ttl_s=_float(environ, "ROUTE_CACHE_TTL_S", cls.cache_ttl_s),
            log_level=_str(environ, "ROUTING_LOG_LEVEL", cls.log_level).upper(),
        )


def parse_priority(raw: Optional[str]) -> Tuple[ProviderName, ...]:
    """
    "mapbox,graphhopper" -> (MAPBOX, GRAPHHOPPER), "mapbox" -> (MAPBOX, GRAPHHOPPER).
    osrm is accepted but dropped since it always goes last.
    """
    if raw is None or not raw.strip():
        return CREDENTIALED_PROVIDERS

    order = []
    for name in raw.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            provider = ProviderName(name)
        except ValueError:
            raise ConfigError(f"Unknown routing provider in priority list: {name!r}")
        if provider not in CREDENTIALED_PROVIDERS:
            continue
        if provider not in order:
            order.append(provider)

    #unlisted providers keep their default relative order, after the listed ones
    for provider in CREDENTIALED_PROVIDERS:
        if provider not in order:
            order.append(provider)
    return tuple(order)


def _secret(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = (environ.get(name) or "").strip()
    return value or None


def _str(environ: Mapping[str, str], name: str, default: str) -> str:
    value = (environ.get(name) or "").strip()
    return value or default


def _float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value
